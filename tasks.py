"""Invoke tasks for LeaseDesk development and administration."""

import sys

from invoke import task
from invoke.context import Context


@task
def start(ctx: Context, host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """Start the LeaseDesk API server in the foreground.

    Args:
        ctx: Invoke context
        host: Host to bind to (default: 127.0.0.1)
        port: Port to bind to (default: 8000)
        reload: Enable auto-reload for development
    """
    cmd = f"uv run uvicorn leasedesk.main:app --host {host} --port {port}"
    if reload:
        cmd += " --reload"

    try:
        ctx.run(cmd, pty=True)
    except KeyboardInterrupt:
        print("\nServer stopped")
        sys.exit(0)


@task
def test(ctx: Context, verbose: bool = False, coverage: bool = False) -> None:
    """Run the test suite.

    Args:
        ctx: Invoke context
        verbose: Enable verbose output
        coverage: Run with coverage report
    """
    cmd = "uv run pytest"
    if verbose:
        cmd += " -v"
    if coverage:
        cmd += " --cov=leasedesk --cov-report=term-missing"
    ctx.run(cmd, pty=True)


@task
def users(ctx: Context) -> None:
    """List user accounts."""
    ctx.run("uv run leasedesk-users list")


@task(name="add-admin")
def add_admin(ctx: Context, login: str, name: str = "") -> None:
    """Create an admin account (prompts for the password).

    Args:
        ctx: Invoke context
        login: Login of the new admin
        name: Optional display name
    """
    cmd = f"uv run leasedesk-users add {login} --role admin"
    if name:
        cmd += f" --name '{name}'"
    ctx.run(cmd, pty=True)


@task(name="purge-imports")
def purge_imports(ctx: Context, force: bool = False) -> None:
    """Delete all import batches, import errors and vehicle offers.

    User accounts and sessions are not affected.

    Args:
        ctx: Invoke context
        force: Skip confirmation prompt
    """
    if not force:
        response = input("Delete all imported data? [y/N]: ").strip().lower()
        if response not in ("y", "yes"):
            print("Purge cancelled.")
            return

    script = (
        "import asyncio\n"
        "from leasedesk.database import close_db, init_db\n"
        "from leasedesk.services.import_service import clear_imported_data\n"
        "async def main():\n"
        "    await init_db()\n"
        "    try:\n"
        "        print(await clear_imported_data())\n"
        "    finally:\n"
        "        await close_db()\n"
        "asyncio.run(main())\n"
    )
    ctx.run(f'uv run python -c "{script}"')


@task
def clean(ctx: Context) -> None:
    """Clean up caches and build artifacts."""
    for pattern in ["__pycache__", "*.pyc", "*.pyo", ".pytest_cache"]:
        ctx.run(f"find . -name '{pattern}' -exec rm -rf {{}} + 2>/dev/null || true", warn=True)

    for path in ["build", "dist", "*.egg-info", ".eggs"]:
        ctx.run(f"rm -rf {path} 2>/dev/null || true", warn=True)

    print("Cleanup complete")

"""User administration script for LeaseDesk.

Commands:
    add       Add a new user
    list      List all users
    disable   Disable a user account (ends its sessions)
    enable    Enable a user account
    remove    Remove a user account (ends its sessions)
    passwd    Change a user's password
    role      Change a user's role
"""

import argparse
import asyncio
import sys
from getpass import getpass
from typing import Any, Awaitable, Callable, Optional

from leasedesk.database import close_db, init_db
from leasedesk.models import User, UserRole
from leasedesk.services.auth import (
    create_user,
    delete_user_sessions,
    get_password_hash,
    get_user_by_login,
    validate_new_password,
)


async def _get_user_or_exit(login: str) -> User:
    user = await get_user_by_login(login)
    if not user:
        print(f"Error: User '{login}' not found.")
        sys.exit(1)
    return user


async def add_user(
    login: str,
    password: str,
    display_name: Optional[str] = None,
    role: UserRole = UserRole.MANAGER,
    company: Optional[str] = None,
    phone: Optional[str] = None,
) -> None:
    """Add a new user."""
    try:
        user = await create_user(
            login,
            password,
            display_name=display_name,
            role=role,
            company=company,
            phone=phone,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)
    print(f"User '{user.login}' created successfully as {user.role.value}.")


async def list_users() -> None:
    """List all users."""
    users = await User.find_all().sort("+login").to_list()
    if not users:
        print("No users found.")
        return

    print(f"{'Login':<20} {'Name':<24} {'Role':<12} {'Active':<6} {'Last Login':<20}")
    print("-" * 86)
    for user in users:
        last_login = user.last_login.strftime("%Y-%m-%d %H:%M") if user.last_login else "Never"
        active = "Yes" if user.is_active else "No"
        print(
            f"{user.login:<20} {user.display_name:<24} {user.role.value:<12} "
            f"{active:<6} {last_login:<20}"
        )


async def disable_user(login: str) -> None:
    """Disable a user account and end its sessions."""
    user = await _get_user_or_exit(login)
    if not user.is_active:
        print(f"User '{user.login}' is already disabled.")
        return

    user.is_active = False
    await user.save()
    removed = await delete_user_sessions(user)
    print(f"User '{user.login}' has been disabled ({removed} sessions ended).")


async def enable_user(login: str) -> None:
    """Enable a user account."""
    user = await _get_user_or_exit(login)
    if user.is_active:
        print(f"User '{user.login}' is already active.")
        return

    user.is_active = True
    await user.save()
    print(f"User '{user.login}' has been enabled.")


async def remove_user(login: str, force: bool = False) -> None:
    """Remove a user account."""
    user = await _get_user_or_exit(login)

    if not force:
        confirm = input(f"Are you sure you want to remove user '{user.login}'? [y/N]: ")
        if confirm.lower() != "y":
            print("Aborted.")
            return

    await delete_user_sessions(user)
    await user.delete()
    print(f"User '{user.login}' has been removed.")


async def change_password(login: str, password: str) -> None:
    """Change a user's password."""
    user = await _get_user_or_exit(login)
    try:
        user.hashed_password = get_password_hash(validate_new_password(password))
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)
    await user.save()
    print(f"Password for user '{user.login}' has been updated.")


async def change_role(login: str, role: UserRole) -> None:
    """Change a user's role."""
    user = await _get_user_or_exit(login)
    user.role = role
    await user.save()
    print(f"User '{user.login}' is now {role.value}.")


def get_password_interactive(confirm: bool = True) -> str:
    """Get password interactively from user."""
    password = getpass("Password: ")
    if not password:
        print("Error: Password cannot be empty.")
        sys.exit(1)

    if confirm:
        password2 = getpass("Confirm password: ")
        if password != password2:
            print("Error: Passwords do not match.")
            sys.exit(1)

    return password


async def _with_db(func: Callable[..., Awaitable[Any]], *args: Any) -> None:
    await init_db()
    try:
        await func(*args)
    finally:
        await close_db()


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="User administration for LeaseDesk",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")
    roles = [role.value for role in UserRole]

    add_parser = subparsers.add_parser("add", help="Add a new user")
    add_parser.add_argument("login", help="Login for the new user")
    add_parser.add_argument("--name", "-n", help="Display name")
    add_parser.add_argument("--role", "-r", choices=roles, default=UserRole.MANAGER.value)
    add_parser.add_argument("--company", help="Company name")
    add_parser.add_argument("--phone", help="Contact phone")
    add_parser.add_argument("--password", "-p", help="Password (will prompt if not provided)")

    subparsers.add_parser("list", help="List all users")

    disable_parser = subparsers.add_parser("disable", help="Disable a user account")
    disable_parser.add_argument("login", help="Login to disable")

    enable_parser = subparsers.add_parser("enable", help="Enable a user account")
    enable_parser.add_argument("login", help="Login to enable")

    remove_parser = subparsers.add_parser("remove", help="Remove a user account")
    remove_parser.add_argument("login", help="Login to remove")
    remove_parser.add_argument("--force", "-f", action="store_true", help="Skip confirmation")

    passwd_parser = subparsers.add_parser("passwd", help="Change a user's password")
    passwd_parser.add_argument("login", help="Login to change password for")
    passwd_parser.add_argument("--password", "-p", help="New password (will prompt if not provided)")

    role_parser = subparsers.add_parser("role", help="Change a user's role")
    role_parser.add_argument("login", help="Login to change")
    role_parser.add_argument("role", choices=roles)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "add":
            password = args.password if args.password else get_password_interactive()
            asyncio.run(
                _with_db(
                    add_user,
                    args.login,
                    password,
                    args.name,
                    UserRole(args.role),
                    args.company,
                    args.phone,
                )
            )

        elif args.command == "list":
            asyncio.run(_with_db(list_users))

        elif args.command == "disable":
            asyncio.run(_with_db(disable_user, args.login))

        elif args.command == "enable":
            asyncio.run(_with_db(enable_user, args.login))

        elif args.command == "remove":
            asyncio.run(_with_db(remove_user, args.login, args.force))

        elif args.command == "passwd":
            password = args.password if args.password else get_password_interactive()
            asyncio.run(_with_db(change_password, args.login, password))

        elif args.command == "role":
            asyncio.run(_with_db(change_role, args.login, UserRole(args.role)))

    except KeyboardInterrupt:
        print("\nAborted.")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Authentication service: password hashing, login sessions and route guards."""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from pwdlib import PasswordHash
from pwdlib.hashers.argon2 import Argon2Hasher

from leasedesk.config import settings
from leasedesk.models.auth_session import AuthSession
from leasedesk.models.timestamps import utc_now
from leasedesk.models.user import User, UserRole, normalize_login

# Security event logger
security_logger = logging.getLogger("leasedesk.security")

# Password hashing using pwdlib with Argon2
password_hash = PasswordHash((Argon2Hasher(),))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return password_hash.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return password_hash.hash(password)


def validate_new_password(password: str) -> str:
    """Trim and length-check a password before it is hashed.

    Raises:
        ValueError: If the password is shorter than the configured minimum.
    """
    normalized = password.strip()
    min_length = settings.min_password_length
    if len(normalized) < min_length:
        raise ValueError(f"Password must be at least {min_length} characters long")
    return normalized


def hash_session_token(token: str) -> str:
    """Sessions are looked up by the SHA-256 of the cookie token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


async def get_user_by_login(login: str) -> User | None:
    """Get a user by login (normalized before lookup)."""
    return await User.find_one(User.login == normalize_login(login))


async def authenticate_user(
    login: str,
    password: str,
    ip_address: str | None = None,
) -> User | None:
    """Authenticate a user with login and password.

    Args:
        login: Login as typed by the user.
        password: Plain text password.
        ip_address: Client IP address for logging.

    Returns:
        User if authentication successful, None otherwise.
    """
    user = await get_user_by_login(login)
    if not user:
        security_logger.warning(
            "Failed login - user not found: login=%s, ip=%s",
            normalize_login(login),
            ip_address or "unknown",
        )
        return None

    if not user.is_active:
        security_logger.warning(
            "Failed login - inactive account: user_id=%s, ip=%s",
            str(user.id),
            ip_address or "unknown",
        )
        return None

    if not verify_password(password, user.hashed_password):
        security_logger.warning(
            "Failed login - invalid password: user_id=%s, ip=%s",
            str(user.id),
            ip_address or "unknown",
        )
        return None

    security_logger.info(
        "Successful login: user_id=%s, ip=%s",
        str(user.id),
        ip_address or "unknown",
    )
    return user


async def delete_expired_sessions(now: datetime | None = None) -> int:
    """Drop sessions past their expiry. Returns the number removed."""
    now = now or utc_now()
    result = await AuthSession.find(AuthSession.expires_at <= now).delete()
    return result.deleted_count if result else 0


async def create_session(user: User) -> str:
    """Start a login session for ``user``.

    Returns:
        The raw session token to hand to the client. Only its hash is stored.
    """
    now = utc_now()
    await delete_expired_sessions(now)

    token = secrets.token_urlsafe(32)
    await AuthSession(
        user_id=user.id,
        token_hash=hash_session_token(token),
        expires_at=now + timedelta(seconds=settings.session_ttl_seconds),
        created_at=now,
        last_seen_at=now,
    ).insert()

    user.last_login = now
    await user.save()
    return token


async def resolve_session(token: str) -> User | None:
    """Look up the active user behind a session token.

    Expired sessions are deleted on sight. A live session has its
    ``last_seen_at`` refreshed.
    """
    session = await AuthSession.find_one(AuthSession.token_hash == hash_session_token(token))
    if session is None:
        return None

    now = utc_now()
    if session.expires_at <= now:
        await session.delete()
        return None

    user = await User.get(session.user_id)
    if user is None or not user.is_active:
        return None

    session.last_seen_at = now
    await session.save()
    return user


async def delete_session(token: str) -> None:
    """End the session behind ``token``, if any."""
    await AuthSession.find(AuthSession.token_hash == hash_session_token(token)).delete()


async def delete_user_sessions(user: User) -> int:
    """End every session of ``user``. Returns the number removed."""
    result = await AuthSession.find(AuthSession.user_id == user.id).delete()
    return result.deleted_count if result else 0


async def create_user(
    login: str,
    password: str,
    display_name: str | None = None,
    role: UserRole = UserRole.MANAGER,
    company: str | None = None,
    phone: str | None = None,
    notes: str | None = None,
) -> User:
    """Create a user account.

    Raises:
        ValueError: If the login is empty or taken, or the password is too short.
    """
    normalized_login = normalize_login(login)
    if not normalized_login:
        raise ValueError("Login must not be empty")
    if await User.find_one(User.login == normalized_login):
        raise ValueError(f"User '{normalized_login}' already exists")

    user = User(
        login=normalized_login,
        hashed_password=get_password_hash(validate_new_password(password)),
        display_name=(display_name or "").strip() or normalized_login,
        role=role,
        company=company,
        phone=phone,
        notes=notes,
    )
    await user.insert()
    security_logger.info("User created: login=%s, role=%s", normalized_login, role.value)
    return user


async def ensure_bootstrap_admin() -> User | None:
    """Create the configured bootstrap admin if it does not exist yet.

    Returns:
        The newly created admin, or None when nothing was created.
    """
    login = settings.config.auth.bootstrap_admin_login
    password = settings.secrets.bootstrap_admin_password
    if not login or not password:
        return None

    if await get_user_by_login(login):
        return None

    return await create_user(
        login,
        password,
        display_name=settings.config.auth.bootstrap_admin_display_name,
        role=UserRole.ADMIN,
    )


async def get_current_user(request: Request) -> User | None:
    """Get the current user from the session cookie."""
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    return await resolve_session(token)


async def require_auth(
    user: Annotated[User | None, Depends(get_current_user)],
) -> User:
    """Require authentication - raises 401 if not authenticated."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user


async def require_stock_access(
    user: Annotated[User, Depends(require_auth)],
) -> User:
    """Require a role that may upload and manage stock imports."""
    if not user.is_privileged:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden",
        )
    return user


async def require_admin(
    user: Annotated[User, Depends(require_auth)],
) -> User:
    """Require admin privileges."""
    if user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return user


# Type aliases for dependency injection
CurrentUser = Annotated[User | None, Depends(get_current_user)]
RequireAuth = Annotated[User, Depends(require_auth)]
RequireStockAccess = Annotated[User, Depends(require_stock_access)]
RequireAdmin = Annotated[User, Depends(require_admin)]

"""
AuthService

Credential checks, login lockout and session claim issuance, plus the
self-service profile and password operations of an authenticated user.

Login runs a fixed sequence of hard stops:

    1. supplied tenant must exist and be active
    2. user must exist (scoped to the supplied tenant, if any)
    3. the user's own tenant must exist and be active
    4. account must not be locked
    5. account must be active
    6. password must match; a mismatch counts towards the lockout threshold

Unknown usernames and wrong passwords fail with the same message.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tenant_iam.auth import access_token_lifetime, create_access_token, hash_password, verify_password
from tenant_iam.claims import Claims
from tenant_iam.constants.auth import LOCKOUT_MINUTES, MAX_LOGIN_ATTEMPTS
from tenant_iam.exceptions import (
    AccountDeactivatedError,
    AccountLockedError,
    AuthenticationError,
    DuplicateResourceError,
    ErrorCode,
    InvalidCredentialsError,
    InvalidTenantError,
    TenantDeactivatedError,
    UserNotFoundError,
    ValidationError,
)
from tenant_iam.models.user import User
from tenant_iam.services.tenant_service import get_tenant_by_id
from tenant_iam.utils.clock import ensure_utc, utcnow
from tenant_iam.utils.password_policy import PASSWORD_POLICY_MESSAGE, is_strong_password

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LockoutPolicy:
    max_attempts: int = MAX_LOGIN_ATTEMPTS
    duration: timedelta = field(default_factory=lambda: timedelta(minutes=LOCKOUT_MINUTES))


@dataclass
class LoginResult:
    access_token: str
    expires_in: int
    claims: Claims
    user: User


def build_claims(user: User) -> Claims:
    """Session claims for *user*: its roles and the union of their permissions."""
    return Claims.build(
        sub=user.id,
        username=user.username,
        tenant_id=user.tenant_id,
        roles=user.role_names,
        permissions=user.permission_keys,
    )


class AuthService:
    def __init__(
        self,
        db: AsyncSession,
        lockout: LockoutPolicy | None = None,
        clock: Callable[[], datetime] = utcnow,
        token_signer: Callable[[Claims], str] = create_access_token,
    ) -> None:
        self.db = db
        self.lockout = lockout or LockoutPolicy()
        self.clock = clock
        self.token_signer = token_signer

    # ── Login ────────────────────────────────────────────────────────────────

    async def login(self, username: str, password: str, tenant_id: str | None = None) -> LoginResult:
        if tenant_id:
            tenant = await get_tenant_by_id(tenant_id, self.db)
            if tenant is None:
                logger.warning("Login rejected: unknown tenant %s", tenant_id)
                raise InvalidTenantError()
            if not tenant.is_active:
                logger.warning("Login rejected: tenant %s is deactivated", tenant_id)
                raise TenantDeactivatedError()

        user = await self._find_user(username, tenant_id or None)
        if user is None:
            logger.warning("Login failed for username: %s", username)
            raise InvalidCredentialsError()

        if user.tenant_id is not None and (user.tenant is None or not user.tenant.is_active):
            logger.warning("Login rejected: tenant of user %s is deactivated", user.id)
            raise TenantDeactivatedError()

        now = self.clock()
        locked_until = ensure_utc(user.locked_until)
        if locked_until is not None:
            if locked_until > now:
                logger.warning("Login rejected: user %s locked until %s", user.id, locked_until.isoformat())
                raise AccountLockedError(locked_until)
            await self._clear_expired_lock(user)

        if not user.is_active:
            logger.warning("Login rejected: user %s is deactivated", user.id)
            raise AccountDeactivatedError()

        if not verify_password(password, user.password_hash):
            await self._record_failed_attempt(user, now)
            raise InvalidCredentialsError()

        user.login_attempts = 0
        user.locked_until = None
        user.last_login_at = now
        await self.db.commit()

        claims = build_claims(user)
        token = self.token_signer(claims)
        logger.info("User %s logged in (tenant=%s, roles=%s)", user.id, user.tenant_id, list(claims.roles))
        return LoginResult(
            access_token=token,
            expires_in=int(access_token_lifetime().total_seconds()),
            claims=claims,
            user=user,
        )

    # ── Password ─────────────────────────────────────────────────────────────

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        user = await self._get_user(user_id)

        if not verify_password(current_password, user.password_hash):
            logger.warning("Password change rejected for user %s: wrong current password", user_id)
            raise AuthenticationError("Current password is incorrect", error_code=ErrorCode.AUTH_INVALID_CREDENTIALS)

        if not is_strong_password(new_password):
            raise ValidationError(PASSWORD_POLICY_MESSAGE, field="new_password")

        user.password_hash = hash_password(new_password)
        user.password_changed_at = self.clock()
        user.updated_by = user_id
        await self.db.commit()
        logger.info("Password changed for user %s", user_id)

    # ── Profile ──────────────────────────────────────────────────────────────

    async def get_profile(self, user_id: str) -> User:
        return await self._get_user(user_id)

    async def update_profile(self, user_id: str, changes: dict[str, Any]) -> User:
        user = await self._get_user(user_id)

        new_username = changes.get("username")
        if new_username and new_username != user.username:
            existing = await self.db.execute(select(User.id).where(User.username == new_username))
            if existing.scalars().first() is not None:
                raise DuplicateResourceError("User", "username", new_username)
            user.username = new_username

        for field_name in ("first_name", "last_name", "email"):
            if field_name in changes:
                setattr(user, field_name, changes[field_name])

        user.updated_by = user_id
        await self.db.commit()
        return await self._get_user(user_id)

    # ── Private helpers ──────────────────────────────────────────────────────

    async def _find_user(self, username: str, tenant_id: str | None) -> User | None:
        statement = select(User).where(User.username == username)
        if tenant_id is not None:
            statement = statement.where(User.tenant_id == tenant_id)
        result = await self.db.execute(statement)
        return result.scalars().first()

    async def _get_user(self, user_id: str) -> User:
        result = await self.db.execute(
            select(User).where(User.id == user_id).execution_options(populate_existing=True)
        )
        user = result.scalars().first()
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def _clear_expired_lock(self, user: User) -> None:
        user.login_attempts = 0
        user.locked_until = None
        await self.db.flush()
        logger.info("Lock expired for user %s; attempt counter reset", user.id)

    async def _record_failed_attempt(self, user: User, now: datetime) -> None:
        # Single-statement increment so concurrent failures are not lost.
        result = await self.db.execute(
            update(User)
            .where(User.id == user.id)
            .values(login_attempts=User.login_attempts + 1)
            .returning(User.login_attempts)
        )
        attempts = result.scalar_one()

        if attempts >= self.lockout.max_attempts:
            user.locked_until = now + self.lockout.duration
            logger.warning(
                "User %s locked until %s after %d failed attempts",
                user.id,
                user.locked_until.isoformat(),
                attempts,
            )
        else:
            logger.warning("Invalid password for user %s (attempt %d)", user.id, attempts)

        await self.db.commit()

from datetime import timedelta
from typing import Optional
import logging

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from tenant_iam.claims import Claims
from tenant_iam.config import settings
from tenant_iam.constants import ALGORITHM
from tenant_iam.exceptions import InvalidTokenError, TokenExpiredError
from tenant_iam.utils.clock import utcnow

# Initialize logging
logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)

# OAuth2 scheme for token validation
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def access_token_lifetime() -> timedelta:
    return timedelta(minutes=settings.access_token_expire_minutes)


def create_access_token(claims: Claims, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a time-bound access token carrying the given claims.

    The payload holds ``sub``, ``username``, ``tenant_id``, ``roles`` and
    ``permissions`` plus the standard ``iat`` and ``exp`` fields.
    """
    if not claims.sub:
        raise ValueError("Missing 'sub' claim in token data.")

    issued_at = utcnow()
    to_encode = claims.to_payload()
    to_encode.update({"iat": issued_at, "exp": issued_at + (expires_delta or access_token_lifetime())})

    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Claims:
    """
    Verify a token's signature and expiry and return its claims.

    Raises:
        TokenExpiredError: the token is past its ``exp``
        InvalidTokenError: bad signature, malformed token or missing ``sub``
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError as err:
        logger.info("Rejected expired token")
        raise TokenExpiredError() from err
    except JWTError as err:
        logger.warning(f"JWT decoding failed: {str(err)}")
        raise InvalidTokenError() from err

    if not payload.get("sub"):
        logger.warning("Token is missing 'sub' claim")
        raise InvalidTokenError()

    return Claims.from_payload(payload)


async def get_current_claims(token: str = Depends(oauth2_scheme)) -> Claims:
    """FastAPI dependency resolving the bearer token into session claims."""
    claims = decode_access_token(token)
    logger.debug(f"Authenticated subject {claims.sub} (tenant={claims.tenant_id}, roles={list(claims.roles)})")
    return claims

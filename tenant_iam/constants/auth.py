"""
Authentication Constants

Configuration constants for token signing and login lockout.
"""

import logging

from decouple import config

logger = logging.getLogger(__name__)

# JWT Configuration
ALGORITHM = config("JWT_ALGORITHM", default="HS256")

# Lockout Configuration
MAX_LOGIN_ATTEMPTS = config("MAX_LOGIN_ATTEMPTS", default=5, cast=int)
LOCKOUT_MINUTES = config("LOCKOUT_MINUTES", default=15, cast=int)

logger.debug(f"Lockout policy: {MAX_LOGIN_ATTEMPTS} attempts, {LOCKOUT_MINUTES} minutes")

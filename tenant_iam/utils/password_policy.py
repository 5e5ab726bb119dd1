"""Password strength rules applied to newly chosen passwords."""

import re

MIN_PASSWORD_LENGTH = 8
SPECIAL_CHARACTERS = "@$!%*?&"

PASSWORD_POLICY_MESSAGE = (
    "Password must be at least 8 characters long, contain at least 1 uppercase letter, "
    "1 lowercase letter, 1 number, and 1 special character (@$!%*?&)"
)

_RULES = (
    re.compile(r"[A-Z]"),
    re.compile(r"[a-z]"),
    re.compile(r"\d"),
    re.compile(f"[{re.escape(SPECIAL_CHARACTERS)}]"),
)


def is_strong_password(password: str | None) -> bool:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        return False
    return all(rule.search(password) for rule in _RULES)

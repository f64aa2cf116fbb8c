"""
Password and token helpers.

Password hashing uses Werkzeug's salted PBKDF2/scrypt hashes; tokens are
random hex strings sent in e-mailed links.
"""

from __future__ import annotations

import re
import secrets
from datetime import datetime
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from thinky.core.database import as_utc, utc_now
from thinky.server.core import constant

WEAK = "weak"
MEDIUM = "medium"
STRONG = "strong"


def evaluate_password_strength(password) -> str:
    """Classify a password as ``weak``, ``medium`` or ``strong``.

    One point each for a lowercase letter, an uppercase letter, a digit and
    any other character. Strong needs 10+ characters and 3 points, medium
    8+ characters and 2 points.
    """
    if not password or not isinstance(password, str):
        return WEAK
    score = sum(
        1
        for pattern in (r"[a-z]", r"[A-Z]", r"\d", r"[^a-zA-Z\d]")
        if re.search(pattern, password)
    )
    if len(password) >= 10 and score >= 3:
        return STRONG
    if len(password) >= 8 and score >= 2:
        return MEDIUM
    return WEAK


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: Optional[str], password: str) -> bool:
    if not password_hash or password is None:
        return False
    return check_password_hash(password_hash, password)


def generate_token() -> str:
    """48 hex characters of randomness for verification and reset links."""
    return secrets.token_hex(24)


def is_active(until: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """Whether a moderation deadline is still in the future."""
    return until is not None and as_utc(until) > as_utc(now or utc_now())


def is_permanent(until: datetime, now: Optional[datetime] = None) -> bool:
    """Deadlines 50 or more calendar years away are shown as permanent."""
    now = as_utc(now or utc_now())
    return as_utc(until).year - now.year >= constant.PERMANENT_THRESHOLD_YEARS

"""
Helper utilities
"""

import math
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Optional

# Crockford base32, lexicographic order matches numeric order
CROCKFORD_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
BASE36_ALPHABET = string.digits + string.ascii_uppercase

EARTH_RADIUS_KM = 6371


def utcnow() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC

    Naive values are treated as UTC, which is how they are stored.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def calculate_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float
) -> float:
    """
    Calculate distance between two coordinates using Haversine formula

    Args:
        lat1, lon1: First coordinate
        lat2, lon2: Second coordinate

    Returns:
        Distance in kilometers
    """
    # Convert to radians
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    # Haversine formula
    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, a)))


def _encode_base32(value: int, length: int) -> str:
    chars = []
    for _ in range(length):
        value, remainder = divmod(value, 32)
        chars.append(CROCKFORD_ALPHABET[remainder])
    return "".join(reversed(chars))


def generate_sortable_id(random_length: int = 16) -> str:
    """
    Generate a time-ordered identifier

    10 characters of millisecond timestamp followed by random characters,
    both in Crockford base32, so identifiers sort by creation time.
    """
    timestamp = _encode_base32(int(time.time() * 1000), 10)
    randomness = ''.join(secrets.choice(CROCKFORD_ALPHABET) for _ in range(random_length))
    return f"{timestamp}{randomness}"


def generate_redemption_code() -> str:
    """Generate a redemption code like COUPON-01HZX3..."""
    return f"COUPON-{generate_sortable_id()}"


def generate_claim_code(coupon_name: str) -> str:
    """
    Generate the short code handed out by the mobile claim flow

    <first 3 letters of name>-<last 6 digits of ms timestamp>-<3 random chars>
    """
    prefix = coupon_name.strip()[:3].upper()
    stamp = str(int(time.time() * 1000))[-6:]
    suffix = ''.join(secrets.choice(BASE36_ALPHABET) for _ in range(3))
    return f"{prefix}-{stamp}-{suffix}"

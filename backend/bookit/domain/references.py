import re
import secrets
import string

REFERENCE_PREFIX = "BK"
REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_LENGTH = 8

REFERENCE_PATTERN = re.compile(rf"^{REFERENCE_PREFIX}[A-Z0-9]{{{REFERENCE_LENGTH}}}$")


def generate_booking_reference() -> str:
    """Return `BK` followed by 8 characters drawn uniformly from A-Z0-9."""
    return REFERENCE_PREFIX + "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(REFERENCE_LENGTH))


def is_booking_reference(value: str) -> bool:
    return REFERENCE_PATTERN.match(value) is not None

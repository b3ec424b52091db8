import secrets
import string

from spliced.core.config import settings

ALPHABET = string.ascii_uppercase + string.digits


def generate_access_code(length: int | None = None) -> str:
    """Random upper-case alphanumeric code used to join a group."""
    length = length or settings.ACCESS_CODE_LENGTH
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def normalize_access_code(code: str) -> str:
    return code.strip().upper()

import secrets
import string
import time

_ALPHABET = string.ascii_lowercase + string.digits


def generate_identifier(prefix: str) -> str:
    """``<prefix>_<epoch milliseconds>_<9 random characters>``"""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"{prefix}_{time.time_ns() // 1_000_000}_{suffix}"

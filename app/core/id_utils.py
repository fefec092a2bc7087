import time

import shortuuid


def generate_shortuuid() -> str:
    return shortuuid.uuid()


def generate_short_token(length: int = 12) -> str:
    return shortuuid.ShortUUID().random(length=length)


def generate_reference_number(prefix: str) -> str:
    """Time-based correlation token, e.g. ``TRF-1760780000000-X7KQ2M``."""
    return f"{prefix}-{int(time.time() * 1000)}-{generate_short_token(6).upper()}"

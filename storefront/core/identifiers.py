"""
식별자 검증 유틸리티
"""

import uuid
from typing import Any


def parse_id(value: Any) -> uuid.UUID | None:
    """
    값을 UUID로 해석합니다. 형식이 맞지 않으면 None을 반환합니다.

    Example:
        >>> parse_id("not-an-id") is None
        True
    """
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        return None

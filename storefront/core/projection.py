"""
응답 문서 정규화

중첩된 문서(dict/list)를 JSON 직렬화 가능한 안정적인 형태로 변환합니다.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


def format_datetime(value: datetime) -> str:
    """
    datetime을 고정 포맷 문자열로 변환합니다 (UTC, 밀리초, Z 접미사).

    타임존 정보가 없는 값은 UTC로 간주합니다.

    Example:
        >>> format_datetime(datetime(2024, 5, 1, 9, 30, 0, 123456))
        '2024-05-01T09:30:00.123Z'
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return f"{value.strftime(DATETIME_FORMAT)}.{value.microsecond // 1000:03d}Z"


def project(document: Any) -> Any:
    """
    문서를 재귀적으로 정규화합니다.

    - UUID 식별자 및 참조 ID -> 표준 문자열
    - datetime -> format_datetime() 포맷 문자열
    - "_id"가 있는 dict에서 중복 파생 필드 "id" 제거
    - 그 밖의 값은 그대로 유지

    입력을 변경하지 않고 새 구조를 반환하며, 두 번 적용해도 결과가 같습니다.
    """
    if isinstance(document, dict):
        projected = {}
        for key, value in document.items():
            if key == "id" and "_id" in document:
                continue
            projected[key] = project(value)
        return projected

    if isinstance(document, (list, tuple)):
        return [project(item) for item in document]

    if isinstance(document, uuid.UUID):
        return str(document)

    if isinstance(document, datetime):
        return format_datetime(document)

    return document

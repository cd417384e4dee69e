"""
모델 공통 컬럼 및 헬퍼
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Uuid


def utcnow() -> datetime:
    """타임존 정보 없는 현재 UTC 시각"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def uuid_pk() -> Column:
    return Column(Uuid, primary_key=True, default=uuid.uuid4)


class TimestampMixin:
    """created_at / updated_at 자동 관리"""

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

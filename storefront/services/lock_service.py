"""Redis 락 서비스."""

import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

from redis import Redis

from storefront.core.config import Settings
from storefront.core.exceptions import LockAcquisitionException


class LockService:
    """
    SET NX EX 기반 단기 락.

    같은 slug로 동시에 상품을 생성/수정하는 요청이 중복 검사를 동시에 통과하지 않도록
    slug 단위로 임계 영역을 만듭니다.
    """

    # GET + 비교 + DEL을 원자적으로 실행 (내가 획득한 락만 해제)
    RELEASE_SCRIPT = """
    if redis.call("GET", KEYS[1]) == ARGV[1] then
        return redis.call("DEL", KEYS[1])
    else
        return 0
    end
    """

    @staticmethod
    def get_lock_key(resource: str) -> str:
        """
        리소스의 락 키를 생성합니다.

        Example:
            >>> LockService.get_lock_key("product:slug:linen-shirt")
            'lock:product:slug:linen-shirt'
        """
        return f"lock:{resource}"

    @staticmethod
    def acquire(resource: str, redis: Redis, settings: Settings) -> Optional[str]:
        """
        TTL을 설정하여 SETNX로 락을 획득합니다.

        Returns:
            획득 성공 시 락 ID (UUID), 이미 락이 점유 중이면 None
        """
        lock_id = str(uuid.uuid4())

        # NX: 키가 없을 때만 설정, EX: 데드락 방지를 위한 만료 시간(TTL)
        acquired = redis.set(
            LockService.get_lock_key(resource),
            lock_id,
            nx=True,
            ex=settings.lock_timeout_seconds,
        )
        return lock_id if acquired else None

    @staticmethod
    def release(resource: str, lock_id: str, redis: Redis) -> bool:
        """락 ID가 일치하는 경우에만 락을 해제합니다."""
        result = redis.eval(
            LockService.RELEASE_SCRIPT, 1, LockService.get_lock_key(resource), lock_id
        )
        return bool(result)

    @staticmethod
    @contextmanager
    def hold(resource: str, redis: Redis, settings: Settings) -> Iterator[str]:
        """
        블록 실행 동안 락을 점유합니다.

        사용 예:
            with LockService.hold("product:slug:linen-shirt", redis, settings):
                ...  # 중복 검사 + 저장

        Raises:
            LockAcquisitionException: 다른 요청이 같은 리소스를 점유 중인 경우
        """
        lock_id = LockService.acquire(resource, redis, settings)
        if lock_id is None:
            raise LockAcquisitionException(
                LockService.get_lock_key(resource),
                "Another write is in progress. Please try again",
            )
        try:
            yield lock_id
        finally:
            LockService.release(resource, lock_id, redis)

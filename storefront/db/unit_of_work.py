"""
원자적 작업 단위 (Unit of Work)

하나의 SQLAlchemy 세션 트랜잭션 안에서 여러 테이블을 변경하고,
모두 커밋하거나 모두 롤백합니다. 롤백 시에는 데이터베이스 밖의 부수 효과
(예: 이미 업로드된 이미지)를 되돌리는 보상 작업을 역순으로 실행합니다.

사용 예:
    with UnitOfWork(db, "Product creation") as uow:
        uow.add_compensation(lambda: asset_store.delete(public_id), "delete asset")
        db.add(product)
        CounterService.apply(db, Category, delta)
    # 블록을 정상 종료하면 커밋, 예외가 나면 롤백 + 보상 작업

고유 제약 위반은 conflicts에 등록된 예외로 바꿔 올립니다:
    UnitOfWork(db, "Product creation", conflicts={"slug": ProductAlreadyExistsException(slug)})
"""

from dataclasses import dataclass
from typing import Callable, Mapping

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.core.exceptions import CatalogException, CatalogOperationException

logger = structlog.get_logger()


@dataclass
class Compensation:
    """롤백 시 실행할 보상 작업"""

    action: Callable[[], None]
    description: str


class UnitOfWork:
    """커밋/롤백과 보상 작업 목록을 관리하는 트랜잭션 경계"""

    def __init__(
        self,
        db: Session,
        operation: str,
        conflicts: Mapping[str, CatalogException] | None = None,
    ):
        self.db = db
        self.operation = operation
        # 제약 이름/컬럼에 포함된 키워드 -> IntegrityError 대신 올릴 예외
        self.conflicts = dict(conflicts or {})
        self.compensations: list[Compensation] = []
        self.committed = False

    def add_compensation(self, action: Callable[[], None], description: str) -> None:
        """롤백될 경우 실행할 보상 작업을 등록합니다."""
        self.compensations.append(Compensation(action=action, description=description))

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            try:
                self.db.commit()
                self.committed = True
                return False
            except Exception as commit_error:
                self._abort(commit_error)
                self._raise_conflict(commit_error)
                raise CatalogOperationException(self.operation, commit_error) from commit_error

        self._abort(exc)
        if not isinstance(exc, Exception) or isinstance(exc, CatalogException):
            return False
        self._raise_conflict(exc)
        raise CatalogOperationException(self.operation, exc) from exc

    def _raise_conflict(self, error: Exception) -> None:
        if not isinstance(error, IntegrityError):
            return
        detail = str(error.orig).lower()
        for keyword, conflict in self.conflicts.items():
            if keyword.lower() in detail:
                raise conflict from error

    def _abort(self, error: BaseException) -> None:
        """트랜잭션을 롤백하고 보상 작업을 역순으로 실행합니다."""
        self.db.rollback()
        logger.error(
            "Atomic unit aborted",
            operation=self.operation,
            error=str(error),
            compensations=len(self.compensations),
        )

        for compensation in reversed(self.compensations):
            try:
                compensation.action()
            except Exception as compensation_error:
                # 보상 작업 실패는 기록만 하고 나머지 보상 작업을 계속 진행
                logger.warning(
                    "Compensation failed",
                    operation=self.operation,
                    compensation=compensation.description,
                    error=str(compensation_error),
                )

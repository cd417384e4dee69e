"""참조 카운터(product_count) 조정 서비스."""

from dataclasses import dataclass, field
from typing import Iterable

from sqlalchemy import update
from sqlalchemy.orm import Session


@dataclass(frozen=True)
class CounterDelta:
    """증가/감소 대상 참조 ID 집합"""

    increment: frozenset = field(default_factory=frozenset)
    decrement: frozenset = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.increment and not self.decrement


def reconcile(old_ids: Iterable, new_ids: Iterable) -> CounterDelta:
    """
    이전/이후 참조 집합의 대칭차로 카운터 변경분을 계산합니다.

    새로 참조되는 ID는 +1, 더 이상 참조되지 않는 ID는 -1 대상입니다.
    None은 참조가 없는 것으로 취급합니다.

    Example:
        >>> delta = reconcile({"x", "y"}, {"x", "z"})
        >>> sorted(delta.increment), sorted(delta.decrement)
        (['z'], ['y'])
    """
    old = frozenset(ref for ref in old_ids if ref is not None)
    new = frozenset(ref for ref in new_ids if ref is not None)
    return CounterDelta(increment=new - old, decrement=old - new)


class CounterService:
    """비정규화된 product_count 컬럼을 원자적 UPDATE로 조정합니다."""

    @staticmethod
    def adjust(db: Session, model, ids: Iterable, amount: int) -> None:
        """
        ids에 해당하는 행의 product_count를 amount만큼 변경합니다.

        product_count = product_count + amount 형태의 단일 UPDATE 문이므로
        동시 요청 간 갱신 손실이 없습니다. 호출자의 트랜잭션 안에서 실행됩니다.
        """
        ids = list(ids)
        if not ids or amount == 0:
            return

        db.execute(
            update(model)
            .where(model.id.in_(ids))
            .values(product_count=model.product_count + amount)
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    def apply(db: Session, model, delta: CounterDelta) -> None:
        """reconcile() 결과를 적용합니다."""
        CounterService.adjust(db, model, delta.increment, 1)
        CounterService.adjust(db, model, delta.decrement, -1)

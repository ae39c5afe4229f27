"""
State Machines

분개, 자금 이체, 계산 세션(Cart)의 상태 전이 관리.
"""

import logging
from enum import Enum

from core.ledger.errors import LedgerValidationError
from core.ledger.types import EntryStatus, TransferStatus

logger = logging.getLogger(__name__)


class StateMachineError(LedgerValidationError):
    """상태 전이 오류"""
    pass


class CartState(str, Enum):
    """계산 세션 상태

    전이 규칙:
    - OPEN → CHECKED_OUT: 결제 완료 (매출 전기)
    - OPEN → ABANDONED: 세션 폐기
    """
    OPEN = "OPEN"
    CHECKED_OUT = "CHECKED_OUT"
    ABANDONED = "ABANDONED"


class StateMachine:
    """상태 머신 기본 클래스

    Args:
        initial_state: 초기 상태
        transitions: 허용된 전이 정의 {from_state: [to_states]}
        name: 머신 이름 (로깅용)
    """

    TRANSITIONS: dict[str, list[str]] = {}

    def __init__(
        self,
        initial_state: str | Enum,
        transitions: dict[str, list[str]] | None = None,
        name: str = "StateMachine",
    ):
        self._state = initial_state.value if isinstance(initial_state, Enum) else initial_state
        self._transitions = transitions if transitions is not None else self.TRANSITIONS
        self._name = name
        self._history: list[tuple[str, str]] = []

    @property
    def state(self) -> str:
        """현재 상태"""
        return self._state

    def can_transition(self, to_state: str | Enum) -> bool:
        """전이 가능 여부 확인"""
        target = to_state.value if isinstance(to_state, Enum) else to_state
        allowed = self._transitions.get(self._state, [])
        return target in allowed

    def transition(self, to_state: str | Enum) -> str:
        """상태 전이

        Args:
            to_state: 목표 상태

        Returns:
            새 상태

        Raises:
            StateMachineError: 허용되지 않은 전이
        """
        target = to_state.value if isinstance(to_state, Enum) else to_state

        if not self.can_transition(target):
            allowed = self._transitions.get(self._state, [])
            raise StateMachineError(
                f"{self._name}: Cannot transition from {self._state} to {target}. "
                f"Allowed: {allowed}",
                {"from": self._state, "to": target},
            )

        old_state = self._state
        self._state = target
        self._history.append((old_state, target))

        logger.debug(
            f"{self._name}: {old_state} → {target}",
        )

        return target

    @classmethod
    def validate_transition(cls, from_state: str | Enum, to_state: str | Enum) -> None:
        """저장된 상태 값에 대한 전이 검증 (인스턴스 없이)

        Raises:
            StateMachineError: 허용되지 않은 전이
        """
        cls(from_state).transition(to_state)

    @property
    def history(self) -> list[tuple[str, str]]:
        """상태 전이 이력"""
        return self._history.copy()


class EntryStateMachine(StateMachine):
    """분개 상태 머신"""

    TRANSITIONS: dict[str, list[str]] = {
        "pending": ["posted"],
        "posted": ["reversed"],
    }

    def __init__(self, initial_state: str | EntryStatus = EntryStatus.PENDING):
        super().__init__(
            initial_state=initial_state,
            transitions=self.TRANSITIONS,
            name="EntryStateMachine",
        )

    @property
    def affects_balances(self) -> bool:
        """잔액 반영 여부 (역분개된 분개도 원장에 남음)"""
        return self._state in ("posted", "reversed")


class TransferStateMachine(StateMachine):
    """자금 이체 상태 머신"""

    TRANSITIONS: dict[str, list[str]] = {
        "completed": ["reversed"],
    }

    def __init__(self, initial_state: str | TransferStatus = TransferStatus.COMPLETED):
        super().__init__(
            initial_state=initial_state,
            transitions=self.TRANSITIONS,
            name="TransferStateMachine",
        )


class CartStateMachine(StateMachine):
    """계산 세션 상태 머신"""

    TRANSITIONS: dict[str, list[str]] = {
        "OPEN": ["CHECKED_OUT", "ABANDONED"],
    }

    def __init__(self, initial_state: str | CartState = CartState.OPEN):
        super().__init__(
            initial_state=initial_state,
            transitions=self.TRANSITIONS,
            name="CartStateMachine",
        )

    @property
    def is_open(self) -> bool:
        """품목 추가/삭제 가능 여부"""
        return self._state == "OPEN"

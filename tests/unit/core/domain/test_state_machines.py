"""State Machine 테스트"""

import pytest

from core.domain.state_machines import (
    CartState,
    CartStateMachine,
    EntryStateMachine,
    StateMachineError,
    TransferStateMachine,
)
from core.ledger.errors import LedgerValidationError
from core.ledger.types import EntryStatus, TransferStatus


class TestEntryStateMachine:
    """분개 상태 머신 테스트"""

    def test_initial_state(self) -> None:
        machine = EntryStateMachine()

        assert machine.state == "pending"
        assert machine.affects_balances is False

    def test_post_then_reverse(self) -> None:
        machine = EntryStateMachine()

        machine.transition(EntryStatus.POSTED)
        assert machine.affects_balances is True

        machine.transition(EntryStatus.REVERSED)
        assert machine.state == "reversed"
        assert machine.affects_balances is True
        assert machine.history == [("pending", "posted"), ("posted", "reversed")]

    def test_pending_cannot_be_reversed(self) -> None:
        machine = EntryStateMachine()

        assert machine.can_transition(EntryStatus.REVERSED) is False
        with pytest.raises(StateMachineError):
            machine.transition(EntryStatus.REVERSED)

    def test_reversed_is_terminal(self) -> None:
        machine = EntryStateMachine(EntryStatus.REVERSED)

        for status in EntryStatus:
            assert machine.can_transition(status) is False

    def test_validate_transition(self) -> None:
        EntryStateMachine.validate_transition(EntryStatus.POSTED, EntryStatus.REVERSED)

        with pytest.raises(StateMachineError):
            EntryStateMachine.validate_transition(EntryStatus.REVERSED, EntryStatus.POSTED)

    def test_error_is_validation_error(self) -> None:
        """상태 전이 오류는 입력 검증 오류로 분류"""
        with pytest.raises(LedgerValidationError) as exc_info:
            EntryStateMachine(EntryStatus.POSTED).transition(EntryStatus.PENDING)

        assert exc_info.value.details == {"from": "posted", "to": "pending"}


class TestTransferStateMachine:
    def test_reverse(self) -> None:
        machine = TransferStateMachine()

        assert machine.transition(TransferStatus.REVERSED) == "reversed"

    def test_reverse_twice(self) -> None:
        machine = TransferStateMachine(TransferStatus.REVERSED)

        with pytest.raises(StateMachineError):
            machine.transition(TransferStatus.REVERSED)


class TestCartStateMachine:
    """계산 세션 상태 머신 테스트"""

    def test_checkout(self) -> None:
        machine = CartStateMachine()

        assert machine.is_open is True
        machine.transition(CartState.CHECKED_OUT)
        assert machine.is_open is False

    def test_abandon(self) -> None:
        machine = CartStateMachine()

        machine.transition(CartState.ABANDONED)
        assert machine.state == "ABANDONED"

    def test_no_transition_after_checkout(self) -> None:
        machine = CartStateMachine(CartState.CHECKED_OUT)

        with pytest.raises(StateMachineError):
            machine.transition(CartState.ABANDONED)

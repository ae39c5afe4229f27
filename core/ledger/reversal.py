"""
역분개 / 정정

전기된 분개는 수정/삭제하지 않고 반대 분개로 상쇄.
원 분개와 역분개는 모두 원장에 남음.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING

from core.domain.state_machines import EntryStateMachine
from core.ledger.entry_builder import JournalEntry
from core.ledger.errors import AlreadyReversedError, LedgerError, LedgerValidationError
from core.ledger.store import LedgerStore, persistence_guard
from core.ledger.types import EntryStatus, TransactionType, TransferStatus
from core.utils.references import make_reversal_reference

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


class ReversalHandler:
    """역분개/정정 처리기

    Args:
        db: SQLite 어댑터
        store: 분개 저장소 (없으면 생성)
    """

    def __init__(self, db: SQLiteAdapter, store: LedgerStore | None = None):
        self.db = db
        self.store = store or LedgerStore(db)

    async def reverse_entry(
        self,
        entry_id: int,
        reversal_date: date | None = None,
        description: str | None = None,
    ) -> JournalEntry:
        """분개 역분개

        Args:
            entry_id: 원 분개 ID
            reversal_date: 역분개 일자 (기본: 오늘과 원 분개 일자 중 늦은 날)
            description: 설명 (기본: "Reversal of {참조번호}")

        Returns:
            새로 전기된 역분개

        Raises:
            NotFoundError: 원 분개가 없는 경우
            AlreadyReversedError: 이미 역분개된 경우
            LedgerValidationError: 초안이거나 역분개 자체를 역분개하려는 경우
        """
        async with persistence_guard("reverse_entry"), self.db.transaction():
            reversal_id = await self.reverse_in_transaction(entry_id, reversal_date, description)

        reversal = await self.store.require_entry(reversal_id)
        logger.info(f"역분개: {reversal.reference_number} (원 분개 id={entry_id})")
        return reversal

    async def correct_entry(
        self,
        entry_id: int,
        replacement: JournalEntry,
        reversal_date: date | None = None,
    ) -> tuple[JournalEntry, JournalEntry]:
        """분개 정정 (역분개 + 대체 분개를 한 트랜잭션으로)

        Returns:
            (역분개, 대체 분개)

        Raises:
            역분개 오류 + 대체 분개 전기 오류 (둘 중 하나라도 실패하면 전체 롤백)
        """
        try:
            replacement.validate()
        except LedgerError as e:
            logger.warning(f"정정 분개 거부 ({e.kind.value}): {e.message}")
            raise

        async with persistence_guard("correct_entry"), self.db.transaction():
            reversal_id = await self.reverse_in_transaction(entry_id, reversal_date, None)
            replacement_id = await self.store.insert_posted_entry(replacement)

        reversal = await self.store.require_entry(reversal_id)
        corrected = await self.store.require_entry(replacement_id)
        logger.info(
            f"분개 정정: id={entry_id} → 역분개 {reversal.reference_number}, "
            f"대체 {corrected.reference_number}"
        )
        return reversal, corrected

    async def reverse_in_transaction(
        self,
        entry_id: int,
        reversal_date: date | None,
        description: str | None,
    ) -> int:
        """역분개 전기 (호출자가 트랜잭션을 열어야 함)

        Returns:
            역분개 entry_id
        """
        original = await self.store.require_entry(entry_id)

        if original.status == EntryStatus.REVERSED:
            raise AlreadyReversedError(
                f"journal entry {original.reference_number} is already reversed",
                {"entry_id": entry_id, "reversed_by_id": original.reversed_by_id},
            )
        if original.status == EntryStatus.PENDING:
            raise LedgerValidationError(
                f"journal entry {original.reference_number} is a draft and cannot be reversed",
                {"entry_id": entry_id},
            )
        if original.reversal_of_id is not None:
            raise LedgerValidationError(
                f"journal entry {original.reference_number} is itself a reversal",
                {"entry_id": entry_id, "reversal_of_id": original.reversal_of_id},
            )

        # 상태 전이 검증 (posted → reversed)
        EntryStateMachine.validate_transition(original.status, EntryStatus.REVERSED)

        if reversal_date is None:
            reversal_date = max(date.today(), original.entry_date)
        elif reversal_date < original.entry_date:
            raise LedgerValidationError(
                f"reversal date {reversal_date.isoformat()} is before "
                f"entry date {original.entry_date.isoformat()}"
            )

        reversal = JournalEntry(
            entry_date=reversal_date,
            lines=[line.mirrored() for line in original.lines],
            description=description or f"Reversal of {original.reference_number}",
            reference_number=make_reversal_reference(original.reference_number),
            transaction_type=TransactionType.REVERSAL,
            adjustment_type=original.adjustment_type,
            party_kind=original.party_kind,
            party_id=original.party_id,
            reversal_of_id=original.entry_id,
        )

        reversal_id = await self.store.insert_posted_entry(reversal)
        await self.store.mark_reversed(entry_id, reversal_id)

        # 이체 분개면 이체 기록도 같은 트랜잭션에서 취소 상태로
        if original.transaction_type == TransactionType.FUND_TRANSFER:
            await self.db.execute(
                """
                UPDATE fund_transfer
                SET status = ?, reversal_entry_id = ?, updated_at = datetime('now')
                WHERE journal_entry_id = ? AND status = ?
                """,
                (
                    TransferStatus.REVERSED.value,
                    reversal_id,
                    entry_id,
                    TransferStatus.COMPLETED.value,
                ),
            )
        return reversal_id

"""
자금 이체

계정 간 자금 이동 기록. 분개는 일반 전기 경로로, 취소는 역분개로 처리.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.constants import Defaults
from core.domain.events import FundTransferEvent
from core.domain.state_machines import TransferStateMachine
from core.ledger.entry_builder import JournalEntryBuilder
from core.ledger.errors import AlreadyReversedError, NotFoundError
from core.ledger.money import format_money
from core.ledger.reversal import ReversalHandler
from core.ledger.store import LedgerStore, persistence_guard
from core.ledger.types import TransferStatus

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_TRANSFER_COLUMNS = """
    id, from_account_id, to_account_id, amount, description, transfer_date,
    status, journal_entry_id, reversal_entry_id, created_at
"""


@dataclass
class FundTransfer:
    """자금 이체 기록"""

    id: int
    from_account_id: int
    to_account_id: int
    amount: Decimal
    transfer_date: date
    status: TransferStatus
    journal_entry_id: int
    reversal_entry_id: int | None = None
    description: str | None = None
    created_at: str | None = None


def _row_to_transfer(row: tuple[Any, ...]) -> FundTransfer:
    return FundTransfer(
        id=row[0],
        from_account_id=row[1],
        to_account_id=row[2],
        amount=Decimal(row[3]),
        description=row[4],
        transfer_date=date.fromisoformat(row[5]),
        status=TransferStatus(row[6]),
        journal_entry_id=row[7],
        reversal_entry_id=row[8],
        created_at=row[9],
    )


class FundTransferService:
    """자금 이체 서비스

    Args:
        db: SQLite 어댑터
        builder: 분개 생성기
        store: 분개 저장소
        reversal: 역분개 처리기
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        builder: JournalEntryBuilder,
        store: LedgerStore | None = None,
        reversal: ReversalHandler | None = None,
    ):
        self.db = db
        self.builder = builder
        self.store = store or LedgerStore(db)
        self.reversal = reversal or ReversalHandler(db, self.store)

    async def record_transfer(self, event: FundTransferEvent) -> FundTransfer:
        """이체 기록 + 분개 전기 (한 트랜잭션)"""
        entry = self.builder.build(event)

        async with persistence_guard("record_fund_transfer"), self.db.transaction():
            entry_id = await self.store.insert_posted_entry(entry)
            cursor = await self.db.execute(
                """
                INSERT INTO fund_transfer (
                    from_account_id, to_account_id, amount, description,
                    transfer_date, status, journal_entry_id
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    event.from_account_id,
                    event.to_account_id,
                    str(entry.total_debit),
                    entry.description,
                    event.transfer_date.isoformat(),
                    TransferStatus.COMPLETED.value,
                    entry_id,
                ),
            )
            transfer_id = cursor.lastrowid

        transfer = await self.require_transfer(transfer_id)
        logger.info(
            f"자금 이체: {transfer.from_account_id} → {transfer.to_account_id} "
            f"{format_money(transfer.amount)} (id={transfer_id})"
        )
        return transfer

    async def reverse_transfer(
        self,
        transfer_id: int,
        reversal_date: date | None = None,
    ) -> FundTransfer:
        """이체 취소 (completed → reversed)

        Raises:
            NotFoundError: 이체가 없는 경우
            AlreadyReversedError: 이미 취소된 경우
        """
        async with persistence_guard("reverse_fund_transfer"), self.db.transaction():
            transfer = await self.require_transfer(transfer_id)
            if transfer.status == TransferStatus.REVERSED:
                raise AlreadyReversedError(
                    f"fund transfer {transfer_id} is already reversed",
                    {"transfer_id": transfer_id, "reversal_entry_id": transfer.reversal_entry_id},
                )

            TransferStateMachine(transfer.status).transition(TransferStatus.REVERSED)

            # 역분개 전기 시 fund_transfer 행도 reversed로 갱신됨
            await self.reversal.reverse_in_transaction(
                transfer.journal_entry_id,
                reversal_date,
                f"Reversal of fund transfer {transfer_id}",
            )

        logger.info(f"자금 이체 취소: id={transfer_id}")
        return await self.require_transfer(transfer_id)

    async def get_transfer(self, transfer_id: int) -> FundTransfer | None:
        async with self.db.snapshot():
            row = await self.db.fetchone(
                f"SELECT {_TRANSFER_COLUMNS} FROM fund_transfer WHERE id = ?",
                (transfer_id,),
            )
        return _row_to_transfer(row) if row else None

    async def require_transfer(self, transfer_id: int) -> FundTransfer:
        """이체 조회

        Raises:
            NotFoundError: 이체가 없는 경우
        """
        transfer = await self.get_transfer(transfer_id)
        if transfer is None:
            raise NotFoundError(f"fund transfer {transfer_id} not found", {"transfer_id": transfer_id})
        return transfer

    async def list_transfers(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        status: TransferStatus | None = None,
        account_id: int | None = None,
        limit: int = Defaults.PAGE_LIMIT,
        offset: int = 0,
    ) -> list[FundTransfer]:
        """이체 목록 (최근 순)"""
        sql = f"SELECT {_TRANSFER_COLUMNS} FROM fund_transfer WHERE 1=1"
        params: list[Any] = []

        if start_date is not None:
            sql += " AND transfer_date >= ?"
            params.append(start_date.isoformat())
        if end_date is not None:
            sql += " AND transfer_date <= ?"
            params.append(end_date.isoformat())
        if status is not None:
            sql += " AND status = ?"
            params.append(status.value)
        if account_id is not None:
            sql += " AND (from_account_id = ? OR to_account_id = ?)"
            params.extend([account_id, account_id])

        sql += " ORDER BY transfer_date DESC, id DESC LIMIT ? OFFSET ?"
        params.extend([min(limit, Defaults.MAX_PAGE_LIMIT), offset])

        async with self.db.snapshot():
            rows = await self.db.fetchall(sql, tuple(params))
        return [_row_to_transfer(row) for row in rows]

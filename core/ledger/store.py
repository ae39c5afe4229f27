"""
Ledger 저장소 (분개 엔진)

복식부기 분개 전기/초안/조회.
모든 분개는 post_entry → insert_posted_entry 단일 경로로 전기됨.

전기 단위 (하나의 BEGIN IMMEDIATE 트랜잭션):
1. 계정 존재 확인
2. 참조번호 할당 또는 중복 확인
3. journal_entry + journal_line 저장
4. 계정별 잔액 1회 갱신
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any, AsyncIterator, Awaitable, Callable

import aiosqlite

from core.constants import Defaults, Money
from core.ledger.accounts import Account, ChartOfAccounts
from core.ledger.entry_builder import JournalEntry, JournalLine
from core.ledger.errors import (
    DuplicateReferenceError,
    LedgerError,
    LedgerValidationError,
    NotFoundError,
    PersistenceFailureError,
    UnknownAccountError,
)
from core.ledger.money import format_money, quantize
from core.ledger.types import (
    REFERENCE_PREFIXES,
    AdjustmentType,
    EntryStatus,
    TransactionType,
)
from core.types import PartyKind
from core.utils.references import make_reference, sequence_key

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_ENTRY_COLUMNS = """
    id, reference_number, entry_date, description, transaction_type,
    adjustment_type, status, party_kind, party_id,
    reversal_of_id, reversed_by_id, memo, created_at, posted_at
"""


@asynccontextmanager
async def persistence_guard(operation: str) -> AsyncIterator[None]:
    """aiosqlite 오류를 PersistenceFailureError로 변환

    LedgerError는 그대로 전파.
    DB 잠금/busy는 재시도 가능으로 표시.
    """
    try:
        yield
    except LedgerError:
        raise
    except aiosqlite.OperationalError as e:
        message = str(e).lower()
        retryable = "locked" in message or "busy" in message
        logger.error(f"{operation} 실패 (retryable={retryable}): {e}")
        raise PersistenceFailureError(
            f"{operation} failed: {e}",
            {"operation": operation},
            retryable=retryable,
        ) from e
    except aiosqlite.Error as e:
        logger.error(f"{operation} 실패: {e}")
        raise PersistenceFailureError(f"{operation} failed: {e}", {"operation": operation}) from e


def _row_to_entry(row: tuple[Any, ...], lines: list[JournalLine]) -> JournalEntry:
    """journal_entry 행 → JournalEntry (_ENTRY_COLUMNS 순서)"""
    return JournalEntry(
        entry_id=row[0],
        reference_number=row[1],
        entry_date=date.fromisoformat(row[2]),
        description=row[3],
        transaction_type=TransactionType(row[4]),
        adjustment_type=AdjustmentType(row[5]),
        status=EntryStatus(row[6]),
        party_kind=PartyKind(row[7]) if row[7] else None,
        party_id=row[8],
        reversal_of_id=row[9],
        reversed_by_id=row[10],
        memo=row[11],
        created_at=row[12],
        posted_at=row[13],
        lines=lines,
    )


class LedgerStore:
    """Ledger 저장소

    복식부기 분개를 검증/저장하고 조회하는 클래스.
    account.balance는 전기 시 같은 트랜잭션에서 갱신됨.

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self.chart = ChartOfAccounts(db)

    # -------------------------------------------------------------------------
    # 전기
    # -------------------------------------------------------------------------

    async def post_entry(
        self,
        entry: JournalEntry,
        precheck: Callable[[], Awaitable[None]] | None = None,
    ) -> JournalEntry:
        """분개 전기

        Args:
            entry: 전기할 분개 초안
            precheck: 쓰기 트랜잭션 안에서 저장 직전에 실행할 검사 (잔액 확인 등)

        Returns:
            저장된 분개 (entry_id, reference_number, status=posted)

        Raises:
            UnbalancedEntryError, EmptyEntryError, LedgerValidationError,
            UnknownAccountError, DuplicateReferenceError, PersistenceFailureError
        """
        try:
            entry.validate()
        except LedgerError as e:
            logger.warning(f"분개 전기 거부 ({e.kind.value}): {e.message}")
            raise

        async with persistence_guard("post_entry"), self.db.transaction():
            if precheck is not None:
                await precheck()
            entry_id = await self.insert_posted_entry(entry)

        posted = await self.require_entry(entry_id)
        logger.info(
            f"분개 전기: {posted.reference_number} ({posted.transaction_type.value}) "
            f"{format_money(posted.total_debit)}"
        )
        return posted

    async def insert_posted_entry(self, entry: JournalEntry) -> int:
        """분개 저장 + 잔액 갱신 (호출자가 트랜잭션을 열어야 함)

        역분개/정정/이체도 이 메서드를 거침.

        Returns:
            새 entry_id
        """
        entry.validate()
        accounts = await self._require_accounts(entry)
        reference = await self._allocate_reference(entry)

        entry_id = await self._insert_entry_row(entry, reference, EntryStatus.POSTED)
        await self._insert_lines(entry_id, entry.lines)
        await self._apply_balances(entry.lines, accounts)
        return entry_id

    async def mark_reversed(self, entry_id: int, reversal_id: int) -> None:
        """원 분개를 reversed로 전환 (호출자가 트랜잭션을 열어야 함)

        Raises:
            LedgerValidationError: posted 상태가 아닌 경우
        """
        cursor = await self.db.execute(
            """
            UPDATE journal_entry
            SET status = 'reversed', reversed_by_id = ?
            WHERE id = ? AND status = 'posted'
            """,
            (reversal_id, entry_id),
        )
        if cursor.rowcount != 1:
            raise LedgerValidationError(
                f"entry {entry_id} is not in posted state",
                {"entry_id": entry_id},
            )

    # -------------------------------------------------------------------------
    # 초안 (pending)
    # -------------------------------------------------------------------------

    async def save_draft(self, entry: JournalEntry) -> JournalEntry:
        """분개 초안 저장 (잔액 영향 없음)

        라인 구조와 계정만 검증하고 균형은 요구하지 않음.
        참조번호는 저장 시 할당.
        """
        entry.validate_structure()

        async with persistence_guard("save_draft"), self.db.transaction():
            await self._require_accounts(entry)
            reference = await self._allocate_reference(entry)
            entry_id = await self._insert_entry_row(entry, reference, EntryStatus.PENDING)
            await self._insert_lines(entry_id, entry.lines)

        logger.info(f"분개 초안 저장: {reference}")
        return await self.require_entry(entry_id)

    async def post_draft(self, entry_id: int) -> JournalEntry:
        """초안 전기 (pending → posted)

        Raises:
            NotFoundError: 분개가 없는 경우
            LedgerValidationError: 초안이 아닌 경우
            UnbalancedEntryError: 균형이 맞지 않는 경우
        """
        async with persistence_guard("post_draft"), self.db.transaction():
            draft = await self._require_pending(entry_id)
            try:
                draft.validate()
            except LedgerError as e:
                logger.warning(f"초안 전기 거부 ({e.kind.value}): {draft.reference_number} {e.message}")
                raise

            accounts = await self._require_accounts(draft)
            await self._apply_balances(draft.lines, accounts)
            await self.db.execute(
                """
                UPDATE journal_entry
                SET status = 'posted', posted_at = datetime('now')
                WHERE id = ? AND status = 'pending'
                """,
                (entry_id,),
            )

        posted = await self.require_entry(entry_id)
        logger.info(f"초안 전기: {posted.reference_number}")
        return posted

    async def discard_draft(self, entry_id: int) -> None:
        """초안 삭제

        Raises:
            NotFoundError: 분개가 없는 경우
            LedgerValidationError: 이미 전기된 분개인 경우
        """
        async with persistence_guard("discard_draft"), self.db.transaction():
            draft = await self._require_pending(entry_id)
            await self.db.execute("DELETE FROM journal_line WHERE entry_id = ?", (entry_id,))
            await self.db.execute("DELETE FROM journal_entry WHERE id = ?", (entry_id,))

        logger.info(f"분개 초안 삭제: {draft.reference_number}")

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get_entry(self, entry_id: int) -> JournalEntry | None:
        """분개 단건 조회 (라인 포함)"""
        async with self.db.snapshot():
            row = await self.db.fetchone(
                f"SELECT {_ENTRY_COLUMNS} FROM journal_entry WHERE id = ?",
                (entry_id,),
            )
            if not row:
                return None
            lines = await self._load_lines([entry_id])

        return _row_to_entry(row, lines.get(entry_id, []))

    async def require_entry(self, entry_id: int) -> JournalEntry:
        """분개 조회

        Raises:
            NotFoundError: 분개가 없는 경우
        """
        entry = await self.get_entry(entry_id)
        if entry is None:
            raise NotFoundError(f"journal entry {entry_id} not found", {"entry_id": entry_id})
        return entry

    async def get_entry_by_reference(self, reference_number: str) -> JournalEntry | None:
        """참조번호로 분개 조회"""
        async with self.db.snapshot():
            row = await self.db.fetchone(
                "SELECT id FROM journal_entry WHERE reference_number = ?",
                (reference_number,),
            )
        return await self.get_entry(row[0]) if row else None

    async def list_entries(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        status: EntryStatus | None = None,
        transaction_type: TransactionType | None = None,
        account_id: int | None = None,
        party_kind: PartyKind | None = None,
        party_id: str | None = None,
        limit: int = Defaults.PAGE_LIMIT,
        offset: int = 0,
    ) -> list[JournalEntry]:
        """분개 목록 (날짜, 입력 순)"""
        sql = f"SELECT {_ENTRY_COLUMNS} FROM journal_entry je WHERE 1=1"
        params: list[Any] = []

        if start_date is not None:
            sql += " AND je.entry_date >= ?"
            params.append(start_date.isoformat())
        if end_date is not None:
            sql += " AND je.entry_date <= ?"
            params.append(end_date.isoformat())
        if status is not None:
            sql += " AND je.status = ?"
            params.append(status.value)
        if transaction_type is not None:
            sql += " AND je.transaction_type = ?"
            params.append(transaction_type.value)
        if account_id is not None:
            sql += " AND EXISTS (SELECT 1 FROM journal_line jl WHERE jl.entry_id = je.id AND jl.account_id = ?)"
            params.append(account_id)
        if party_kind is not None:
            sql += " AND je.party_kind = ?"
            params.append(party_kind.value)
        if party_id is not None:
            sql += " AND je.party_id = ?"
            params.append(party_id)

        sql += " ORDER BY je.entry_date, je.id LIMIT ? OFFSET ?"
        params.extend([min(limit, Defaults.MAX_PAGE_LIMIT), offset])

        async with self.db.snapshot():
            rows = await self.db.fetchall(sql, tuple(params))
            lines = await self._load_lines([row[0] for row in rows])

        return [_row_to_entry(row, lines.get(row[0], [])) for row in rows]

    # -------------------------------------------------------------------------
    # 내부 헬퍼
    # -------------------------------------------------------------------------

    async def _require_pending(self, entry_id: int) -> JournalEntry:
        entry = await self.require_entry(entry_id)
        if entry.status != EntryStatus.PENDING:
            raise LedgerValidationError(
                f"journal entry {entry.reference_number} is {entry.status.value}, not a draft",
                {"entry_id": entry_id, "status": entry.status.value},
            )
        return entry

    async def _require_accounts(self, entry: JournalEntry) -> dict[int, Account]:
        """라인이 참조하는 모든 계정 확인

        Raises:
            UnknownAccountError: 없는 계정이 있는 경우 (모두 나열)
        """
        account_ids = entry.account_ids
        accounts = await self.chart.accounts_by_ids(account_ids)

        missing = [account_id for account_id in account_ids if account_id not in accounts]
        if missing:
            lines = [
                index
                for index, line in enumerate(entry.lines, start=1)
                if line.account_id in missing
            ]
            raise UnknownAccountError(
                f"unknown account id(s) {missing} on line(s) {lines}",
                {"account_ids": missing, "lines": lines},
            )
        return accounts

    async def _allocate_reference(self, entry: JournalEntry) -> str:
        """참조번호 할당 (트랜잭션 안에서 호출)

        명시된 참조번호가 이미 있으면 DuplicateReferenceError.
        없거나 공백뿐이면 접두사·연도별 시퀀스에서 다음 번호를 할당.
        """
        reference = (entry.reference_number or "").strip()
        if reference:
            if await self._reference_exists(reference):
                raise DuplicateReferenceError(
                    f"reference number '{reference}' already exists",
                    {"reference_number": reference},
                )
            return reference

        prefix = REFERENCE_PREFIXES[entry.transaction_type]
        year = entry.entry_date.year
        key = sequence_key(prefix, year)

        while True:
            await self.db.execute(
                """
                INSERT INTO reference_sequence (prefix, last_value) VALUES (?, 1)
                ON CONFLICT(prefix) DO UPDATE SET last_value = last_value + 1
                """,
                (key,),
            )
            row = await self.db.fetchone(
                "SELECT last_value FROM reference_sequence WHERE prefix = ?",
                (key,),
            )
            reference = make_reference(prefix, year, row[0])
            # 수동 입력된 같은 형식의 번호는 건너뜀
            if not await self._reference_exists(reference):
                return reference

    async def _reference_exists(self, reference: str) -> bool:
        row = await self.db.fetchone(
            "SELECT 1 FROM journal_entry WHERE reference_number = ?",
            (reference,),
        )
        return row is not None

    async def _insert_entry_row(
        self,
        entry: JournalEntry,
        reference: str,
        status: EntryStatus,
    ) -> int:
        try:
            cursor = await self.db.execute(
                f"""
                INSERT INTO journal_entry (
                    reference_number, entry_date, description, transaction_type,
                    adjustment_type, status, party_kind, party_id,
                    reversal_of_id, memo, posted_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?,
                          {"datetime('now')" if status == EntryStatus.POSTED else "NULL"})
                """,
                (
                    reference,
                    entry.entry_date.isoformat(),
                    entry.description,
                    entry.transaction_type.value,
                    entry.adjustment_type.value,
                    status.value,
                    entry.party_kind.value if entry.party_kind else None,
                    entry.party_id,
                    entry.reversal_of_id,
                    entry.memo,
                ),
            )
        except aiosqlite.IntegrityError as e:
            if "reference_number" in str(e):
                raise DuplicateReferenceError(
                    f"reference number '{reference}' already exists",
                    {"reference_number": reference},
                ) from e
            raise
        return cursor.lastrowid

    async def _insert_lines(self, entry_id: int, lines: list[JournalLine]) -> None:
        await self.db.executemany(
            """
            INSERT INTO journal_line (entry_id, account_id, debit, credit, memo, line_order)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                (entry_id, line.account_id, str(line.debit), str(line.credit), line.memo, order)
                for order, line in enumerate(lines)
            ],
        )

    async def _apply_balances(
        self,
        lines: list[JournalLine],
        accounts: dict[int, Account],
    ) -> None:
        """계정 잔액 갱신 (계정당 1회)

        ASSET/EXPENSE: 차변 - 대변 만큼 증가
        LIABILITY/EQUITY/REVENUE: 대변 - 차변 만큼 증가
        """
        deltas: dict[int, Decimal] = {}
        for line in lines:
            account = accounts[line.account_id]
            deltas[line.account_id] = deltas.get(line.account_id, Money.ZERO) + account.signed_amount(
                line.debit, line.credit
            )

        for account_id, delta in deltas.items():
            row = await self.db.fetchone("SELECT balance FROM account WHERE id = ?", (account_id,))
            new_balance = quantize(Decimal(row[0]) + delta)
            await self.db.execute(
                "UPDATE account SET balance = ?, updated_at = datetime('now') WHERE id = ?",
                (str(new_balance), account_id),
            )

    async def _load_lines(self, entry_ids: list[int]) -> dict[int, list[JournalLine]]:
        """분개별 라인 조회 (line_order 순)"""
        if not entry_ids:
            return {}

        placeholders = ", ".join("?" for _ in entry_ids)
        rows = await self.db.fetchall(
            f"""
            SELECT entry_id, account_id, debit, credit, memo
            FROM journal_line
            WHERE entry_id IN ({placeholders})
            ORDER BY entry_id, line_order
            """,
            tuple(entry_ids),
        )

        result: dict[int, list[JournalLine]] = {}
        for row in rows:
            result.setdefault(row[0], []).append(
                JournalLine(
                    account_id=row[1],
                    debit=Decimal(row[2]),
                    credit=Decimal(row[3]),
                    memo=row[4],
                )
            )
        return result

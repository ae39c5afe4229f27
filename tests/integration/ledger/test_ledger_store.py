"""LedgerStore 통합 테스트"""

import asyncio
from datetime import date
from decimal import Decimal

import aiosqlite
import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.entry_builder import JournalEntry, JournalLine
from core.ledger.errors import (
    DuplicateReferenceError,
    EmptyEntryError,
    ErrorKind,
    LedgerValidationError,
    NotFoundError,
    PersistenceFailureError,
    UnbalancedEntryError,
    UnknownAccountError,
)
from core.ledger.store import LedgerStore
from core.ledger.types import EntryStatus, TransactionType
from core.types import PartyKind

ENTRY_DATE = date(2026, 3, 2)


def _entry(
    debit_account: int,
    credit_account: int,
    amount: str = "100.00",
    reference_number: str | None = None,
    entry_date: date = ENTRY_DATE,
    credit_amount: str | None = None,
) -> JournalEntry:
    return JournalEntry(
        entry_date=entry_date,
        lines=[
            JournalLine.debit_line(debit_account, Decimal(amount)),
            JournalLine.credit_line(credit_account, Decimal(credit_amount or amount)),
        ],
        description="Test entry",
        reference_number=reference_number,
    )


async def _balance(db: SQLiteAdapter, account_id: int) -> Decimal:
    row = await db.fetchone("SELECT balance FROM account WHERE id = ?", (account_id,))
    return Decimal(row[0])


async def _count_entries(db: SQLiteAdapter) -> int:
    row = await db.fetchone("SELECT COUNT(*) FROM journal_entry")
    return row[0]


class TestPostEntry:
    """분개 전기 테스트"""

    @pytest.mark.asyncio
    async def test_post_balanced_entry(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        """균형 분개 전기 → posted, 참조번호 할당, 잔액 반영"""
        store = LedgerStore(db)

        posted = await store.post_entry(_entry(accounts["1000"], accounts["3000"]))

        assert posted.entry_id is not None
        assert posted.status == EntryStatus.POSTED
        assert posted.reference_number == "JE-2026-000001"
        assert posted.posted_at is not None
        assert len(posted.lines) == 2

        assert await _balance(db, accounts["1000"]) == Decimal("100.00")
        assert await _balance(db, accounts["3000"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_reference_sequence_increments(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)

        first = await store.post_entry(_entry(accounts["1000"], accounts["3000"]))
        second = await store.post_entry(_entry(accounts["1000"], accounts["3000"]))
        other_year = await store.post_entry(
            _entry(accounts["1000"], accounts["3000"], entry_date=date(2027, 1, 5))
        )

        assert first.reference_number == "JE-2026-000001"
        assert second.reference_number == "JE-2026-000002"
        assert other_year.reference_number == "JE-2027-000001"

    @pytest.mark.asyncio
    async def test_generated_reference_skips_existing(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        """수동으로 입력된 같은 형식의 번호는 건너뜀"""
        store = LedgerStore(db)
        await store.post_entry(
            _entry(accounts["1000"], accounts["3000"], reference_number="JE-2026-000001")
        )

        generated = await store.post_entry(_entry(accounts["1000"], accounts["3000"]))

        assert generated.reference_number == "JE-2026-000002"

    @pytest.mark.asyncio
    async def test_unbalanced_rejected(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        """차변 100 / 대변 90 → Unbalanced, 아무것도 저장되지 않음"""
        store = LedgerStore(db)

        with pytest.raises(UnbalancedEntryError):
            await store.post_entry(
                _entry(accounts["1000"], accounts["4000"], amount="100.00", credit_amount="90.00")
            )

        assert await _count_entries(db) == 0
        assert await _balance(db, accounts["1000"]) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_tolerance_below_one_cent(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        """반올림 후 1센트 미만 차이는 허용"""
        store = LedgerStore(db)

        posted = await store.post_entry(
            _entry(accounts["1000"], accounts["4000"], amount="10.004", credit_amount="10.001")
        )

        assert posted.total_debit == posted.total_credit == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_empty_entry_rejected(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)
        entry = JournalEntry(
            entry_date=ENTRY_DATE,
            lines=[JournalLine.debit_line(accounts["1000"], Decimal("5"))],
        )

        with pytest.raises(EmptyEntryError):
            await store.post_entry(entry)

    @pytest.mark.asyncio
    async def test_unknown_account(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        """없는 계정 → UnknownAccount, 라인 위치 포함"""
        store = LedgerStore(db)

        with pytest.raises(UnknownAccountError) as exc_info:
            await store.post_entry(_entry(accounts["1000"], 9999))

        assert exc_info.value.details["account_ids"] == [9999]
        assert exc_info.value.details["lines"] == [2]
        assert await _count_entries(db) == 0

    @pytest.mark.asyncio
    async def test_duplicate_reference(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)
        await store.post_entry(_entry(accounts["1000"], accounts["3000"], reference_number="MANUAL-1"))

        with pytest.raises(DuplicateReferenceError):
            await store.post_entry(
                _entry(accounts["1000"], accounts["3000"], reference_number="MANUAL-1")
            )

        assert await _count_entries(db) == 1
        assert await _balance(db, accounts["1000"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_precheck_failure_rolls_back(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)

        async def reject() -> None:
            raise LedgerValidationError("rejected by precheck")

        with pytest.raises(LedgerValidationError, match="precheck"):
            await store.post_entry(_entry(accounts["1000"], accounts["3000"]), precheck=reject)

        assert await _count_entries(db) == 0

    @pytest.mark.asyncio
    async def test_balances_match_ledger(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        """저장 잔액 = 전기된 라인 합계 (부호 규칙)"""
        store = LedgerStore(db)
        await store.post_entry(_entry(accounts["1000"], accounts["3000"], amount="500.00"))
        await store.post_entry(_entry(accounts["6400"], accounts["1000"], amount="120.00"))
        await store.post_entry(_entry(accounts["1000"], accounts["4000"], amount="80.00"))

        assert await _balance(db, accounts["1000"]) == Decimal("460.00")
        assert await _balance(db, accounts["6400"]) == Decimal("120.00")
        assert await _balance(db, accounts["4000"]) == Decimal("80.00")
        assert await _balance(db, accounts["3000"]) == Decimal("500.00")


class TestDrafts:
    """분개 초안 테스트"""

    @pytest.mark.asyncio
    async def test_draft_does_not_affect_balances(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)

        draft = await store.save_draft(_entry(accounts["1000"], accounts["3000"]))

        assert draft.status == EntryStatus.PENDING
        assert draft.posted_at is None
        assert await _balance(db, accounts["1000"]) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_unbalanced_draft_allowed_but_not_postable(
        self, db: SQLiteAdapter, accounts: dict[str, int]
    ) -> None:
        store = LedgerStore(db)
        draft = await store.save_draft(
            _entry(accounts["1000"], accounts["3000"], amount="100.00", credit_amount="90.00")
        )

        with pytest.raises(UnbalancedEntryError):
            await store.post_draft(draft.entry_id)

        reloaded = await store.require_entry(draft.entry_id)
        assert reloaded.status == EntryStatus.PENDING

    @pytest.mark.asyncio
    async def test_post_draft(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)
        draft = await store.save_draft(_entry(accounts["1000"], accounts["3000"]))

        posted = await store.post_draft(draft.entry_id)

        assert posted.status == EntryStatus.POSTED
        assert posted.reference_number == draft.reference_number
        assert await _balance(db, accounts["1000"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_post_draft_twice(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)
        draft = await store.save_draft(_entry(accounts["1000"], accounts["3000"]))
        await store.post_draft(draft.entry_id)

        with pytest.raises(LedgerValidationError, match="not a draft"):
            await store.post_draft(draft.entry_id)

        assert await _balance(db, accounts["1000"]) == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_discard_draft(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)
        draft = await store.save_draft(_entry(accounts["1000"], accounts["3000"]))

        await store.discard_draft(draft.entry_id)

        assert await store.get_entry(draft.entry_id) is None

    @pytest.mark.asyncio
    async def test_posted_entry_cannot_be_discarded(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)
        posted = await store.post_entry(_entry(accounts["1000"], accounts["3000"]))

        with pytest.raises(LedgerValidationError):
            await store.discard_draft(posted.entry_id)

    @pytest.mark.asyncio
    async def test_missing_draft(self, db: SQLiteAdapter) -> None:
        with pytest.raises(NotFoundError):
            await LedgerStore(db).post_draft(12345)


class TestImmutability:
    """전기된 분개 불변성 (DB 트리거)"""

    @pytest.mark.asyncio
    async def test_delete_posted_entry_blocked(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        posted = await LedgerStore(db).post_entry(_entry(accounts["1000"], accounts["3000"]))

        with pytest.raises(aiosqlite.IntegrityError):
            await db.execute("DELETE FROM journal_entry WHERE id = ?", (posted.entry_id,))
        await db.rollback()

    @pytest.mark.asyncio
    async def test_update_posted_line_blocked(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        posted = await LedgerStore(db).post_entry(_entry(accounts["1000"], accounts["3000"]))

        with pytest.raises(aiosqlite.IntegrityError):
            await db.execute(
                "UPDATE journal_line SET debit = '1.00' WHERE entry_id = ?",
                (posted.entry_id,),
            )
        await db.rollback()

    @pytest.mark.asyncio
    async def test_update_posted_description_blocked(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        posted = await LedgerStore(db).post_entry(_entry(accounts["1000"], accounts["3000"]))

        with pytest.raises(aiosqlite.IntegrityError):
            await db.execute(
                "UPDATE journal_entry SET description = 'edited' WHERE id = ?",
                (posted.entry_id,),
            )
        await db.rollback()


class TestQueries:
    """분개 조회 테스트"""

    @pytest.mark.asyncio
    async def test_get_entry_by_reference(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)
        posted = await store.post_entry(_entry(accounts["1000"], accounts["3000"], reference_number="R-1"))

        found = await store.get_entry_by_reference("R-1")

        assert found is not None
        assert found.entry_id == posted.entry_id
        assert await store.get_entry_by_reference("missing") is None

    @pytest.mark.asyncio
    async def test_require_missing_entry(self, db: SQLiteAdapter) -> None:
        with pytest.raises(NotFoundError):
            await LedgerStore(db).require_entry(999)

    @pytest.mark.asyncio
    async def test_list_entries_filters(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)
        await store.post_entry(_entry(accounts["1000"], accounts["3000"], entry_date=date(2026, 1, 10)))
        await store.post_entry(_entry(accounts["6400"], accounts["1015"], entry_date=date(2026, 2, 10)))
        await store.save_draft(_entry(accounts["1000"], accounts["4000"], entry_date=date(2026, 3, 10)))
        party_entry = _entry(accounts["1010"], accounts["4000"], entry_date=date(2026, 3, 11))
        party_entry.party_kind = PartyKind.CUSTOMER
        party_entry.party_id = "C-1"
        await store.post_entry(party_entry)

        all_entries = await store.list_entries()
        assert [e.entry_date for e in all_entries] == sorted(e.entry_date for e in all_entries)
        assert len(all_entries) == 4

        february = await store.list_entries(start_date=date(2026, 2, 1), end_date=date(2026, 2, 28))
        assert len(february) == 1

        pending = await store.list_entries(status=EntryStatus.PENDING)
        assert len(pending) == 1

        cash = await store.list_entries(account_id=accounts["1000"])
        assert len(cash) == 2

        customer = await store.list_entries(party_kind=PartyKind.CUSTOMER, party_id="C-1")
        assert len(customer) == 1

        manual = await store.list_entries(transaction_type=TransactionType.MANUAL, limit=2, offset=1)
        assert len(manual) == 2


class TestBlankReference:
    """공백 참조번호 처리"""

    @pytest.mark.asyncio
    async def test_blank_reference_is_allocated(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)

        first = await store.post_entry(_entry(accounts["1000"], accounts["3000"], reference_number="   "))
        second = await store.post_entry(_entry(accounts["1000"], accounts["3000"], reference_number=""))

        assert first.reference_number == "JE-2026-000001"
        assert second.reference_number == "JE-2026-000002"

    @pytest.mark.asyncio
    async def test_manual_reference_is_stripped(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)

        posted = await store.post_entry(
            _entry(accounts["1000"], accounts["3000"], reference_number="  MANUAL-9  ")
        )

        assert posted.reference_number == "MANUAL-9"


class TestPersistenceFailure:
    """DB 오류 → PersistenceFailureError 변환 + 전체 롤백"""

    @pytest.mark.asyncio
    async def test_locked_database_is_retryable(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)

        async def write_then_lock() -> None:
            # 같은 트랜잭션 안에서 다른 분개를 먼저 저장한 뒤 실패
            await store.insert_posted_entry(_entry(accounts["1000"], accounts["3000"], amount="40.00"))
            raise aiosqlite.OperationalError("database is locked")

        with pytest.raises(PersistenceFailureError) as exc_info:
            await store.post_entry(_entry(accounts["1000"], accounts["3000"]), precheck=write_then_lock)

        assert exc_info.value.retryable is True
        assert exc_info.value.kind == ErrorKind.PERSISTENCE_FAILURE
        assert exc_info.value.details["operation"] == "post_entry"
        assert await _count_entries(db) == 0
        assert await _balance(db, accounts["1000"]) == Decimal("0.00")
        assert await _balance(db, accounts["3000"]) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_busy_database_is_retryable(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)

        async def busy() -> None:
            raise aiosqlite.OperationalError("database is busy")

        with pytest.raises(PersistenceFailureError) as exc_info:
            await store.post_entry(_entry(accounts["1000"], accounts["3000"]), precheck=busy)

        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_other_database_error_is_fatal(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        store = LedgerStore(db)

        async def write_then_corrupt() -> None:
            await store.insert_posted_entry(_entry(accounts["6400"], accounts["1000"], amount="15.00"))
            raise aiosqlite.DatabaseError("database disk image is malformed")

        with pytest.raises(PersistenceFailureError) as exc_info:
            await store.post_entry(_entry(accounts["1000"], accounts["3000"]), precheck=write_then_corrupt)

        assert exc_info.value.retryable is False
        assert await _count_entries(db) == 0
        assert await _balance(db, accounts["1000"]) == Decimal("0.00")
        assert await _balance(db, accounts["6400"]) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_non_lock_operational_error_is_fatal(
        self, db: SQLiteAdapter, accounts: dict[str, int]
    ) -> None:
        store = LedgerStore(db)

        async def missing_table() -> None:
            await db.execute("SELECT * FROM no_such_table")

        with pytest.raises(PersistenceFailureError) as exc_info:
            await store.post_entry(_entry(accounts["1000"], accounts["3000"]), precheck=missing_table)

        assert exc_info.value.retryable is False
        assert await _count_entries(db) == 0

    @pytest.mark.asyncio
    async def test_store_usable_after_failure(self, db: SQLiteAdapter, accounts: dict[str, int]) -> None:
        """실패 후 같은 연결로 다시 전기 가능"""
        store = LedgerStore(db)

        async def locked() -> None:
            raise aiosqlite.OperationalError("database is locked")

        with pytest.raises(PersistenceFailureError):
            await store.post_entry(_entry(accounts["1000"], accounts["3000"]), precheck=locked)

        posted = await store.post_entry(_entry(accounts["1000"], accounts["3000"]))

        assert posted.reference_number == "JE-2026-000001"
        assert await _balance(db, accounts["1000"]) == Decimal("100.00")


class TestConcurrentPosting:
    """서로 다른 연결에서 같은 계정으로 동시 전기"""

    @pytest.mark.asyncio
    async def test_two_connections_no_lost_updates(
        self, db: SQLiteAdapter, accounts: dict[str, int]
    ) -> None:
        other = SQLiteAdapter(db.db_path)
        await other.connect()
        try:
            stores = [LedgerStore(db), LedgerStore(other)]
            await asyncio.gather(
                *(
                    stores[i % 2].post_entry(_entry(accounts["1000"], accounts["4000"], amount="1.00"))
                    for i in range(40)
                )
            )
        finally:
            await other.close()

        assert await _count_entries(db) == 40
        assert await _balance(db, accounts["1000"]) == Decimal("40.00")
        assert await _balance(db, accounts["4000"]) == Decimal("40.00")

        row = await db.fetchone("SELECT COUNT(DISTINCT reference_number) FROM journal_entry")
        assert row[0] == 40

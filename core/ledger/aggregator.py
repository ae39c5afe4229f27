"""
원장 집계

전기된 분개 라인(v_account_ledger)에서 계정별 거래 내역과 누적 잔액을 계산.
대기(pending) 분개는 보이지 않고, 역분개된 분개는 역분개와 함께 남음.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, AsyncIterator, Iterator

from core.constants import Money
from core.ledger.accounts import Account, ChartOfAccounts
from core.ledger.types import AccountType, EntryStatus, TransactionType
from core.types import PartyKind

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


@dataclass
class LedgerLine:
    """원장 한 줄 (분개 라인 1개)"""

    entry_id: int
    reference_number: str
    entry_date: date
    description: str | None
    debit: Decimal
    credit: Decimal
    balance: Decimal  # 이 라인까지의 누적 잔액
    status: EntryStatus
    transaction_type: TransactionType
    memo: str | None = None


@dataclass
class AccountLedger:
    """계정별 원장 (기간)"""

    account: Account
    start_date: date | None
    end_date: date | None
    opening_balance: Decimal
    lines: list[LedgerLine] = field(default_factory=list)

    @property
    def closing_balance(self) -> Decimal:
        return self.lines[-1].balance if self.lines else self.opening_balance

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), Money.ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), Money.ZERO)

    def __iter__(self) -> Iterator[LedgerLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)


@dataclass
class AccountActivity:
    """기간 내 계정 차변/대변 합계"""

    account_id: int
    account_type: AccountType
    debit: Decimal = Money.ZERO
    credit: Decimal = Money.ZERO

    @property
    def net(self) -> Decimal:
        """정상잔액 방향 기준 순증감"""
        if self.account_type.is_debit_normal:
            return self.debit - self.credit
        return self.credit - self.debit


class LedgerAggregator:
    """원장 집계기

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self.chart = ChartOfAccounts(db)

    # -------------------------------------------------------------------------
    # 계정별 원장
    # -------------------------------------------------------------------------

    async def iter_ledger(
        self,
        account_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> AsyncIterator[LedgerLine]:
        """계정별 원장 라인 (날짜 → 분개 입력 순 → 라인 순)

        호출할 때마다 처음부터 다시 계산.
        행은 스냅샷 안에서 읽고, 소비 중에는 연결을 잡고 있지 않음.

        Raises:
            NotFoundError: 계정이 없는 경우
        """
        account = await self.chart.require_account(account_id)

        async with self.db.snapshot():
            opening = await self._balance_before(account, start_date)
            rows = await self._ledger_rows(account_id, start_date, end_date)

        running = opening
        for row in rows:
            debit = Decimal(row[4])
            credit = Decimal(row[5])
            running += account.signed_amount(debit, credit)
            yield LedgerLine(
                entry_id=row[0],
                reference_number=row[1],
                entry_date=date.fromisoformat(row[2]),
                description=row[3],
                debit=debit,
                credit=credit,
                balance=running,
                status=EntryStatus(row[6]),
                transaction_type=TransactionType(row[7]),
                memo=row[8],
            )

    async def get_ledger(
        self,
        account_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> AccountLedger:
        """계정별 원장 (기초 잔액 + 라인 목록)"""
        account = await self.chart.require_account(account_id)

        async with self.db.snapshot():
            opening = await self._balance_before(account, start_date)
            lines = [line async for line in self.iter_ledger(account_id, start_date, end_date)]

        return AccountLedger(
            account=account,
            start_date=start_date,
            end_date=end_date,
            opening_balance=opening,
            lines=lines,
        )

    # -------------------------------------------------------------------------
    # 잔액
    # -------------------------------------------------------------------------

    async def balance_as_of(self, account_id: int, as_of: date | None = None) -> Decimal:
        """기준일까지 전기된 라인 합계로 계산한 잔액

        as_of가 None이면 전체 기간.
        """
        account = await self.chart.require_account(account_id)
        async with self.db.snapshot():
            if as_of is None:
                rows = await self.db.fetchall(
                    "SELECT debit, credit FROM v_account_ledger WHERE account_id = ?",
                    (account_id,),
                )
            else:
                rows = await self.db.fetchall(
                    "SELECT debit, credit FROM v_account_ledger WHERE account_id = ? AND entry_date <= ?",
                    (account_id, as_of.isoformat()),
                )
        return sum(
            (account.signed_amount(Decimal(row[0]), Decimal(row[1])) for row in rows),
            Money.ZERO,
        )

    async def balances_as_of(self, as_of: date | None = None) -> dict[int, Decimal]:
        """기준일 기준 전체 계정 잔액 (라인이 있는 계정만)"""
        activity = await self.activity_between(None, as_of)
        return {account_id: item.net for account_id, item in activity.items()}

    async def activity_between(
        self,
        start_date: date | None,
        end_date: date | None,
    ) -> dict[int, AccountActivity]:
        """기간 내 계정별 차변/대변 합계 (양 끝 포함)"""
        sql = "SELECT account_id, account_type, debit, credit FROM v_account_ledger WHERE 1=1"
        params: list[str] = []
        if start_date is not None:
            sql += " AND entry_date >= ?"
            params.append(start_date.isoformat())
        if end_date is not None:
            sql += " AND entry_date <= ?"
            params.append(end_date.isoformat())

        async with self.db.snapshot():
            rows = await self.db.fetchall(sql, tuple(params))

        result: dict[int, AccountActivity] = {}
        for account_id, account_type, debit, credit in rows:
            item = result.get(account_id)
            if item is None:
                item = AccountActivity(account_id=account_id, account_type=AccountType(account_type))
                result[account_id] = item
            item.debit += Decimal(debit)
            item.credit += Decimal(credit)
        return result

    async def party_balance(
        self,
        account_id: int,
        party_kind: PartyKind,
        party_id: str,
        as_of: date | None = None,
    ) -> Decimal:
        """거래처 보조원장 잔액 (매출채권/매입채무)

        해당 계정 라인 중 거래처가 지정된 분개만 합산.
        """
        account = await self.chart.require_account(account_id)

        sql = """
            SELECT debit, credit FROM v_account_ledger
            WHERE account_id = ? AND party_kind = ? AND party_id = ?
        """
        params: list[str | int] = [account_id, party_kind.value, party_id]
        if as_of is not None:
            sql += " AND entry_date <= ?"
            params.append(as_of.isoformat())

        async with self.db.snapshot():
            rows = await self.db.fetchall(sql, tuple(params))

        return sum(
            (account.signed_amount(Decimal(row[0]), Decimal(row[1])) for row in rows),
            Money.ZERO,
        )

    # -------------------------------------------------------------------------
    # 내부 헬퍼
    # -------------------------------------------------------------------------

    async def _balance_before(self, account: Account, start_date: date | None) -> Decimal:
        """시작일 전날까지의 잔액"""
        if start_date is None:
            return Money.ZERO
        return await self.balance_as_of(account.id, start_date - timedelta(days=1))

    async def _ledger_rows(
        self,
        account_id: int,
        start_date: date | None,
        end_date: date | None,
    ) -> list[tuple]:
        sql = """
            SELECT entry_id, reference_number, entry_date, description,
                   debit, credit, status, transaction_type, memo
            FROM v_account_ledger
            WHERE account_id = ?
        """
        params: list[str | int] = [account_id]
        if start_date is not None:
            sql += " AND entry_date >= ?"
            params.append(start_date.isoformat())
        if end_date is not None:
            sql += " AND entry_date <= ?"
            params.append(end_date.isoformat())
        sql += " ORDER BY entry_date, entry_id, line_order"

        return await self.db.fetchall(sql, tuple(params))

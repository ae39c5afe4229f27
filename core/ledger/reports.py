"""
재무 보고서

시산표, 재무상태표, 손익계산서, 현금흐름표.
모든 보고서는 하나의 읽기 스냅샷 안에서 원장 집계 결과로 계산됨.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from core.constants import Money
from core.ledger.accounts import Account, ChartOfAccounts
from core.ledger.aggregator import LedgerAggregator
from core.ledger.errors import LedgerValidationError, UnbalancedEntryError
from core.ledger.money import format_money
from core.ledger.types import AccountType, CashFlowActivity

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

CURRENT_EARNINGS_LABEL = "Current Earnings"


# =============================================================================
# 보고서 데이터
# =============================================================================


@dataclass
class TrialBalanceRow:
    account_id: int
    account_code: str
    account_name: str
    account_type: AccountType
    debit: Decimal
    credit: Decimal


@dataclass
class TrialBalance:
    """시산표"""

    as_of: date
    rows: list[TrialBalanceRow] = field(default_factory=list)

    @property
    def total_debit(self) -> Decimal:
        return sum((row.debit for row in self.rows), Money.ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((row.credit for row in self.rows), Money.ZERO)

    @property
    def is_balanced(self) -> bool:
        return abs(self.total_debit - self.total_credit) < Money.BALANCE_TOLERANCE


@dataclass
class ReportRow:
    """보고서 한 줄 (계정 또는 계산 항목)

    계산 항목(당기순이익 등)은 account_id가 None.
    """

    account_name: str
    amount: Decimal
    account_id: int | None = None
    account_code: str | None = None


@dataclass
class ReportSection:
    title: str
    rows: list[ReportRow] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((row.amount for row in self.rows), Money.ZERO)


@dataclass
class BalanceSheet:
    """재무상태표

    자산 = 부채 + 자본 (자본에 당기 손익 포함)
    """

    as_of: date
    current_assets: ReportSection
    non_current_assets: ReportSection
    current_liabilities: ReportSection
    non_current_liabilities: ReportSection
    equity: ReportSection
    current_earnings: Decimal

    @property
    def total_assets(self) -> Decimal:
        return self.current_assets.total + self.non_current_assets.total

    @property
    def total_liabilities(self) -> Decimal:
        return self.current_liabilities.total + self.non_current_liabilities.total

    @property
    def total_equity(self) -> Decimal:
        return self.equity.total

    @property
    def is_balanced(self) -> bool:
        difference = self.total_assets - (self.total_liabilities + self.total_equity)
        return abs(difference) < Money.BALANCE_TOLERANCE


@dataclass
class IncomeStatement:
    """손익계산서 (기간 증감 기준)"""

    start_date: date | None
    end_date: date
    revenue: ReportSection
    expenses: ReportSection

    @property
    def total_revenue(self) -> Decimal:
        return self.revenue.total

    @property
    def total_expenses(self) -> Decimal:
        return self.expenses.total

    @property
    def net_income(self) -> Decimal:
        return self.total_revenue - self.total_expenses


@dataclass
class CashFlowStatement:
    """현금흐름표 (직접 집계)

    현금 계정을 건드린 분개의 비현금 라인을 활동별로 분류.
    """

    start_date: date | None
    end_date: date
    operating: ReportSection
    investing: ReportSection
    financing: ReportSection
    opening_cash: Decimal
    closing_cash: Decimal

    @property
    def net_cash_flow(self) -> Decimal:
        return self.operating.total + self.investing.total + self.financing.total

    @property
    def is_consistent(self) -> bool:
        """순현금흐름 = 기말 현금 - 기초 현금"""
        return abs(self.net_cash_flow - (self.closing_cash - self.opening_cash)) < Money.BALANCE_TOLERANCE


# =============================================================================
# 보고서 계산
# =============================================================================


class ReportCompiler:
    """재무 보고서 계산기

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db
        self.chart = ChartOfAccounts(db)
        self.aggregator = LedgerAggregator(db)

    async def trial_balance(self, as_of: date | None = None) -> TrialBalance:
        """시산표

        계정 잔액을 정상잔액 방향에 맞춰 차변/대변 열에 배치.
        잔액이 0인 계정은 제외.
        """
        as_of = as_of or date.today()

        async with self.db.snapshot():
            accounts = await self.chart.list_accounts()
            balances = await self.aggregator.balances_as_of(as_of)

        report = TrialBalance(as_of=as_of)
        for account in accounts:
            balance = balances.get(account.id, Money.ZERO)
            if balance == 0:
                continue

            # 정상잔액 방향이면 양수, 반대 방향이면 음수
            debit_side = (balance > 0) == account.account_type.is_debit_normal
            report.rows.append(
                TrialBalanceRow(
                    account_id=account.id,
                    account_code=account.account_code,
                    account_name=account.account_name,
                    account_type=account.account_type,
                    debit=abs(balance) if debit_side else Money.ZERO,
                    credit=Money.ZERO if debit_side else abs(balance),
                )
            )

        if not report.is_balanced:
            logger.error(
                f"시산표 불균형: 차변 {format_money(report.total_debit)} / "
                f"대변 {format_money(report.total_credit)}"
            )
        return report

    async def balance_sheet(self, as_of: date | None = None) -> BalanceSheet:
        """재무상태표

        Raises:
            UnbalancedEntryError: 자산 ≠ 부채 + 자본 (허용 오차 초과)
        """
        as_of = as_of or date.today()

        async with self.db.snapshot():
            accounts = await self.chart.list_accounts()
            balances = await self.aggregator.balances_as_of(as_of)

        sheet = BalanceSheet(
            as_of=as_of,
            current_assets=ReportSection("Current Assets"),
            non_current_assets=ReportSection("Non-current Assets"),
            current_liabilities=ReportSection("Current Liabilities"),
            non_current_liabilities=ReportSection("Non-current Liabilities"),
            equity=ReportSection("Equity"),
            current_earnings=Money.ZERO,
        )

        revenue = Money.ZERO
        expenses = Money.ZERO
        for account in accounts:
            balance = balances.get(account.id, Money.ZERO)
            account_type = account.account_type

            if account_type == AccountType.REVENUE:
                revenue += balance
                continue
            if account_type == AccountType.EXPENSE:
                expenses += balance
                continue
            if balance == 0:
                continue

            row = _account_row(account, balance)
            if account_type == AccountType.ASSET:
                section = sheet.current_assets if account.is_current else sheet.non_current_assets
            elif account_type == AccountType.LIABILITY:
                section = sheet.current_liabilities if account.is_current else sheet.non_current_liabilities
            else:
                section = sheet.equity
            section.rows.append(row)

        sheet.current_earnings = revenue - expenses
        sheet.equity.rows.append(ReportRow(CURRENT_EARNINGS_LABEL, sheet.current_earnings))

        if not sheet.is_balanced:
            total_assets = sheet.total_assets
            liabilities_and_equity = sheet.total_liabilities + sheet.total_equity
            logger.error(
                f"재무상태표 불균형: 자산 {format_money(total_assets)} / "
                f"부채+자본 {format_money(liabilities_and_equity)}"
            )
            raise UnbalancedEntryError(
                f"assets {format_money(total_assets)} ≠ "
                f"liabilities + equity {format_money(liabilities_and_equity)}",
                {
                    "total_assets": str(total_assets),
                    "total_liabilities": str(sheet.total_liabilities),
                    "total_equity": str(sheet.total_equity),
                },
            )

        return sheet

    async def income_statement(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> IncomeStatement:
        """손익계산서

        기간 내 수익(대변 - 차변)과 비용(차변 - 대변) 증감만 사용.
        """
        end_date = end_date or date.today()
        _check_range(start_date, end_date)

        async with self.db.snapshot():
            accounts = await self.chart.list_accounts()
            activity = await self.aggregator.activity_between(start_date, end_date)

        statement = IncomeStatement(
            start_date=start_date,
            end_date=end_date,
            revenue=ReportSection("Revenue"),
            expenses=ReportSection("Expenses"),
        )

        for account in accounts:
            item = activity.get(account.id)
            if item is None:
                continue
            if account.account_type == AccountType.REVENUE:
                statement.revenue.rows.append(_account_row(account, item.net))
            elif account.account_type == AccountType.EXPENSE:
                statement.expenses.rows.append(_account_row(account, item.net))

        return statement

    async def cash_flow(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> CashFlowStatement:
        """현금흐름표

        기간 내 현금 계정을 건드린 분개마다
        비현금 라인이 -(차변 - 대변)을 해당 계정의 활동 구분에 더함.
        """
        end_date = end_date or date.today()
        _check_range(start_date, end_date)

        params: list[str] = []
        date_filter = " AND entry_date <= ?"
        params.append(end_date.isoformat())
        if start_date is not None:
            date_filter += " AND entry_date >= ?"
            params.append(start_date.isoformat())

        async with self.db.snapshot():
            accounts = {account.id: account for account in await self.chart.list_accounts()}
            rows = await self.db.fetchall(
                f"""
                SELECT account_id, debit, credit
                FROM v_account_ledger
                WHERE entry_id IN (
                    SELECT l.entry_id
                    FROM v_account_ledger l
                    JOIN account a ON a.id = l.account_id
                    WHERE a.is_cash = 1 {date_filter}
                ){date_filter}
                ORDER BY entry_date, entry_id, line_order
                """,
                tuple(params + params),
            )
            cash_ids = [account.id for account in accounts.values() if account.is_cash]
            opening_cash = Money.ZERO
            if start_date is not None:
                opening_cash = await self._cash_balance(cash_ids, start_date - timedelta(days=1))
            closing_cash = await self._cash_balance(cash_ids, end_date)

        buckets: dict[CashFlowActivity, dict[int, Decimal]] = {
            activity: {} for activity in CashFlowActivity
        }
        for account_id, debit, credit in rows:
            account = accounts[account_id]
            if account.is_cash:
                continue
            contribution = -(Decimal(debit) - Decimal(credit))
            bucket = buckets[account.activity]
            bucket[account_id] = bucket.get(account_id, Money.ZERO) + contribution

        def section(title: str, activity: CashFlowActivity) -> ReportSection:
            return ReportSection(
                title,
                [_account_row(accounts[account_id], amount) for account_id, amount in buckets[activity].items()],
            )

        statement = CashFlowStatement(
            start_date=start_date,
            end_date=end_date,
            operating=section("Operating Activities", CashFlowActivity.OPERATING),
            investing=section("Investing Activities", CashFlowActivity.INVESTING),
            financing=section("Financing Activities", CashFlowActivity.FINANCING),
            opening_cash=opening_cash,
            closing_cash=closing_cash,
        )

        if not statement.is_consistent:
            logger.error(
                f"현금흐름표 불일치: 순현금흐름 {format_money(statement.net_cash_flow)} / "
                f"현금 증감 {format_money(closing_cash - opening_cash)}"
            )
        return statement

    async def _cash_balance(self, cash_ids: list[int], as_of: date) -> Decimal:
        total = Money.ZERO
        for account_id in cash_ids:
            total += await self.aggregator.balance_as_of(account_id, as_of)
        return total


def _account_row(account: Account, amount: Decimal) -> ReportRow:
    return ReportRow(
        account_name=account.account_name,
        amount=amount,
        account_id=account.id,
        account_code=account.account_code,
    )


def _check_range(start_date: date | None, end_date: date) -> None:
    if start_date is not None and start_date > end_date:
        raise LedgerValidationError(
            f"start date {start_date.isoformat()} is after end date {end_date.isoformat()}"
        )

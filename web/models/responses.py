"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화.
Decimal 금액은 JSON에서 문자열로 직렬화됨 (예: "165.00").
"""

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from core.ledger.accounts import Account
from core.ledger.aggregator import AccountLedger, LedgerLine
from core.ledger.entry_builder import JournalEntry, JournalLine
from core.ledger.reports import (
    BalanceSheet,
    CashFlowStatement,
    IncomeStatement,
    ReportRow,
    ReportSection,
    TrialBalance,
    TrialBalanceRow,
)
from core.ledger.transfers import FundTransfer


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    mode: str = Field(..., description="장부 모드 (production/sandbox)")
    version: str = Field(..., description="버전")


class ErrorResponse(BaseModel):
    """오류 응답"""

    error: str = Field(..., description="오류 종류 (Unbalanced, NotFound ...)")
    message: str = Field(..., description="오류 메시지")
    details: dict[str, Any] = Field(default_factory=dict, description="추가 정보")
    retryable: bool = Field(default=False, description="재시도 가능 여부")


# =========================================================================
# 계정
# =========================================================================


class AccountResponse(BaseModel):
    """계정 응답"""

    id: int
    account_code: str
    account_name: str
    account_type: str
    balance: Decimal = Field(..., description="정상잔액 방향 기준 잔액")
    is_current: bool
    is_cash: bool
    cash_flow_activity: str | None = Field(default=None, description="명시된 활동 구분")
    activity: str = Field(..., description="현금흐름표에 적용되는 활동 구분")
    is_active: bool
    description: str | None = None

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            account_code=account.account_code,
            account_name=account.account_name,
            account_type=account.account_type.value,
            balance=account.balance,
            is_current=account.is_current,
            is_cash=account.is_cash,
            cash_flow_activity=account.cash_flow_activity.value if account.cash_flow_activity else None,
            activity=account.activity.value,
            is_active=account.is_active,
            description=account.description,
        )


class AccountListResponse(BaseModel):
    accounts: list[AccountResponse] = Field(default_factory=list)
    total: int = 0


class BalanceResponse(BaseModel):
    """계정 잔액 응답"""

    account_id: int
    as_of: date | None = Field(default=None, description="기준일 (없으면 현재 저장 잔액)")
    balance: Decimal


class PartyBalanceResponse(BaseModel):
    """거래처 잔액 응답"""

    party_kind: str
    party_id: str
    as_of: date | None = None
    balance: Decimal


# =========================================================================
# 분개
# =========================================================================


class JournalLineResponse(BaseModel):
    account_id: int
    debit: Decimal
    credit: Decimal
    memo: str | None = None

    @classmethod
    def from_line(cls, line: JournalLine) -> "JournalLineResponse":
        return cls(account_id=line.account_id, debit=line.debit, credit=line.credit, memo=line.memo)


class JournalEntryResponse(BaseModel):
    """분개 응답"""

    id: int
    reference_number: str
    entry_date: date
    description: str | None = None
    transaction_type: str
    adjustment_type: str
    status: str
    party_kind: str | None = None
    party_id: str | None = None
    reversal_of_id: int | None = None
    reversed_by_id: int | None = None
    memo: str | None = None
    created_at: str | None = None
    posted_at: str | None = None
    total_debit: Decimal
    total_credit: Decimal
    lines: list[JournalLineResponse] = Field(default_factory=list)

    @classmethod
    def from_entry(cls, entry: JournalEntry) -> "JournalEntryResponse":
        assert entry.entry_id is not None and entry.reference_number is not None
        return cls(
            id=entry.entry_id,
            reference_number=entry.reference_number,
            entry_date=entry.entry_date,
            description=entry.description,
            transaction_type=entry.transaction_type.value,
            adjustment_type=entry.adjustment_type.value,
            status=entry.status.value,
            party_kind=entry.party_kind.value if entry.party_kind else None,
            party_id=entry.party_id,
            reversal_of_id=entry.reversal_of_id,
            reversed_by_id=entry.reversed_by_id,
            memo=entry.memo,
            created_at=entry.created_at,
            posted_at=entry.posted_at,
            total_debit=entry.total_debit,
            total_credit=entry.total_credit,
            lines=[JournalLineResponse.from_line(line) for line in entry.lines],
        )


class JournalEntryListResponse(BaseModel):
    entries: list[JournalEntryResponse] = Field(default_factory=list)
    count: int = Field(default=0, description="이번 페이지 분개 수")
    limit: int = 100
    offset: int = 0


class CorrectionResponse(BaseModel):
    """정정 응답"""

    reversal: JournalEntryResponse
    replacement: JournalEntryResponse


# =========================================================================
# 원장
# =========================================================================


class LedgerLineResponse(BaseModel):
    entry_id: int
    reference_number: str
    entry_date: date
    description: str | None = None
    debit: Decimal
    credit: Decimal
    balance: Decimal = Field(..., description="누적 잔액")
    status: str
    transaction_type: str
    memo: str | None = None

    @classmethod
    def from_line(cls, line: LedgerLine) -> "LedgerLineResponse":
        return cls(
            entry_id=line.entry_id,
            reference_number=line.reference_number,
            entry_date=line.entry_date,
            description=line.description,
            debit=line.debit,
            credit=line.credit,
            balance=line.balance,
            status=line.status.value,
            transaction_type=line.transaction_type.value,
            memo=line.memo,
        )


class LedgerResponse(BaseModel):
    """계정별 원장 응답"""

    account: AccountResponse
    start_date: date | None = None
    end_date: date | None = None
    opening_balance: Decimal
    closing_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal
    lines: list[LedgerLineResponse] = Field(default_factory=list)

    @classmethod
    def from_ledger(cls, ledger: AccountLedger) -> "LedgerResponse":
        return cls(
            account=AccountResponse.from_account(ledger.account),
            start_date=ledger.start_date,
            end_date=ledger.end_date,
            opening_balance=ledger.opening_balance,
            closing_balance=ledger.closing_balance,
            total_debit=ledger.total_debit,
            total_credit=ledger.total_credit,
            lines=[LedgerLineResponse.from_line(line) for line in ledger.lines],
        )


# =========================================================================
# 보고서
# =========================================================================


class TrialBalanceRowResponse(BaseModel):
    account_id: int
    account_code: str
    account_name: str
    account_type: str
    debit: Decimal
    credit: Decimal

    @classmethod
    def from_row(cls, row: TrialBalanceRow) -> "TrialBalanceRowResponse":
        return cls(
            account_id=row.account_id,
            account_code=row.account_code,
            account_name=row.account_name,
            account_type=row.account_type.value,
            debit=row.debit,
            credit=row.credit,
        )


class TrialBalanceResponse(BaseModel):
    """시산표 응답"""

    as_of: date
    rows: list[TrialBalanceRowResponse] = Field(default_factory=list)
    total_debit: Decimal
    total_credit: Decimal
    is_balanced: bool

    @classmethod
    def from_report(cls, report: TrialBalance) -> "TrialBalanceResponse":
        return cls(
            as_of=report.as_of,
            rows=[TrialBalanceRowResponse.from_row(row) for row in report.rows],
            total_debit=report.total_debit,
            total_credit=report.total_credit,
            is_balanced=report.is_balanced,
        )


class ReportRowResponse(BaseModel):
    account_id: int | None = None
    account_code: str | None = None
    account_name: str
    amount: Decimal

    @classmethod
    def from_row(cls, row: ReportRow) -> "ReportRowResponse":
        return cls(
            account_id=row.account_id,
            account_code=row.account_code,
            account_name=row.account_name,
            amount=row.amount,
        )


class ReportSectionResponse(BaseModel):
    title: str
    rows: list[ReportRowResponse] = Field(default_factory=list)
    total: Decimal

    @classmethod
    def from_section(cls, section: ReportSection) -> "ReportSectionResponse":
        return cls(
            title=section.title,
            rows=[ReportRowResponse.from_row(row) for row in section.rows],
            total=section.total,
        )


class BalanceSheetResponse(BaseModel):
    """재무상태표 응답"""

    as_of: date
    current_assets: ReportSectionResponse
    non_current_assets: ReportSectionResponse
    current_liabilities: ReportSectionResponse
    non_current_liabilities: ReportSectionResponse
    equity: ReportSectionResponse
    current_earnings: Decimal
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    is_balanced: bool

    @classmethod
    def from_report(cls, sheet: BalanceSheet) -> "BalanceSheetResponse":
        return cls(
            as_of=sheet.as_of,
            current_assets=ReportSectionResponse.from_section(sheet.current_assets),
            non_current_assets=ReportSectionResponse.from_section(sheet.non_current_assets),
            current_liabilities=ReportSectionResponse.from_section(sheet.current_liabilities),
            non_current_liabilities=ReportSectionResponse.from_section(sheet.non_current_liabilities),
            equity=ReportSectionResponse.from_section(sheet.equity),
            current_earnings=sheet.current_earnings,
            total_assets=sheet.total_assets,
            total_liabilities=sheet.total_liabilities,
            total_equity=sheet.total_equity,
            is_balanced=sheet.is_balanced,
        )


class IncomeStatementResponse(BaseModel):
    """손익계산서 응답"""

    start_date: date | None = None
    end_date: date
    revenue: ReportSectionResponse
    expenses: ReportSectionResponse
    total_revenue: Decimal
    total_expenses: Decimal
    net_income: Decimal

    @classmethod
    def from_report(cls, statement: IncomeStatement) -> "IncomeStatementResponse":
        return cls(
            start_date=statement.start_date,
            end_date=statement.end_date,
            revenue=ReportSectionResponse.from_section(statement.revenue),
            expenses=ReportSectionResponse.from_section(statement.expenses),
            total_revenue=statement.total_revenue,
            total_expenses=statement.total_expenses,
            net_income=statement.net_income,
        )


class CashFlowResponse(BaseModel):
    """현금흐름표 응답"""

    start_date: date | None = None
    end_date: date
    operating: ReportSectionResponse
    investing: ReportSectionResponse
    financing: ReportSectionResponse
    net_cash_flow: Decimal
    opening_cash: Decimal
    closing_cash: Decimal
    is_consistent: bool

    @classmethod
    def from_report(cls, statement: CashFlowStatement) -> "CashFlowResponse":
        return cls(
            start_date=statement.start_date,
            end_date=statement.end_date,
            operating=ReportSectionResponse.from_section(statement.operating),
            investing=ReportSectionResponse.from_section(statement.investing),
            financing=ReportSectionResponse.from_section(statement.financing),
            net_cash_flow=statement.net_cash_flow,
            opening_cash=statement.opening_cash,
            closing_cash=statement.closing_cash,
            is_consistent=statement.is_consistent,
        )


# =========================================================================
# 자금 이체
# =========================================================================


class FundTransferResponse(BaseModel):
    """자금 이체 응답"""

    id: int
    from_account_id: int
    to_account_id: int
    amount: Decimal
    transfer_date: date
    status: str
    journal_entry_id: int
    reversal_entry_id: int | None = None
    description: str | None = None
    created_at: str | None = None

    @classmethod
    def from_transfer(cls, transfer: FundTransfer) -> "FundTransferResponse":
        return cls(
            id=transfer.id,
            from_account_id=transfer.from_account_id,
            to_account_id=transfer.to_account_id,
            amount=transfer.amount,
            transfer_date=transfer.transfer_date,
            status=transfer.status.value,
            journal_entry_id=transfer.journal_entry_id,
            reversal_entry_id=transfer.reversal_entry_id,
            description=transfer.description,
            created_at=transfer.created_at,
        )


class FundTransferListResponse(BaseModel):
    transfers: list[FundTransferResponse] = Field(default_factory=list)
    count: int = 0
    limit: int = 100
    offset: int = 0

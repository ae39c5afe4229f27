"""
회계 서비스

계정과목표, 분개 엔진, 분개 생성기, 원장 집계, 보고서, 역분개, 자금 이체를
하나의 진입점으로 묶음. Web 라우트와 스크립트는 이 클래스만 사용.

사용 예시:
```python
service = await AccountingService.create(db, settings.config)

entry = await service.record_sale(
    SaleEvent(sale_date=date.today(), items=[...], payment_method="cash")
)
balance_sheet = await service.get_balance_sheet()
```
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any, AsyncIterator

from core.domain.cart import Cart
from core.domain.events import (
    AdjustmentEvent,
    CustomerPaymentEvent,
    ExpenseEvent,
    FundTransferEvent,
    OpeningBalanceEvent,
    SaleEvent,
    SalesReturnEvent,
    SimpleTransaction,
    SupplierPaymentEvent,
    SupplierPurchaseEvent,
)
from core.ledger.accounts import Account, ChartOfAccounts
from core.ledger.aggregator import AccountLedger, LedgerAggregator, LedgerLine
from core.ledger.entry_builder import AccountMapping, JournalEntry, JournalEntryBuilder
from core.ledger.errors import LedgerValidationError
from core.ledger.money import format_money, to_money
from core.ledger.reports import (
    BalanceSheet,
    CashFlowStatement,
    IncomeStatement,
    ReportCompiler,
    TrialBalance,
)
from core.ledger.reversal import ReversalHandler
from core.ledger.store import LedgerStore, persistence_guard
from core.ledger.transfers import FundTransfer, FundTransferService
from core.ledger.types import (
    AccountRole,
    AccountType,
    CashFlowActivity,
    TransferStatus,
)
from core.types import PartyKind

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter
    from core.config.loader import BooksConfig

logger = logging.getLogger(__name__)


class AccountingService:
    """회계 서비스 (Facade)

    Args:
        db: SQLite 어댑터
        mapping: 계정 역할 매핑 (계정 ID로 해석된 결과)
        enforce_sufficient_funds: 공급업체 대금 지급 시 잔액 부족 거부 여부
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        mapping: AccountMapping,
        enforce_sufficient_funds: bool = True,
    ):
        self.db = db
        self.mapping = mapping
        self.enforce_sufficient_funds = enforce_sufficient_funds

        self.chart = ChartOfAccounts(db)
        self.store = LedgerStore(db)
        self.builder = JournalEntryBuilder(mapping)
        self.aggregator = LedgerAggregator(db)
        self.reports = ReportCompiler(db)
        self.reversal = ReversalHandler(db, self.store)
        self.transfers = FundTransferService(db, self.builder, self.store, self.reversal)

    @classmethod
    async def create(cls, db: SQLiteAdapter, config: BooksConfig) -> AccountingService:
        """설정의 계정 코드를 해석해 서비스 생성

        Raises:
            UnknownAccountError: 설정에 계정과목표에 없는 코드가 있는 경우
        """
        mapping = await ChartOfAccounts(db).resolve_mapping(
            config.account_roles,
            config.payment_methods,
            config.adjustment_accounts,
        )
        return cls(db, mapping, config.enforce_sufficient_funds)

    # -------------------------------------------------------------------------
    # 분개
    # -------------------------------------------------------------------------

    async def post_entry(self, entry: JournalEntry) -> JournalEntry:
        return await self.store.post_entry(entry)

    async def save_draft(self, entry: JournalEntry) -> JournalEntry:
        return await self.store.save_draft(entry)

    async def post_draft(self, entry_id: int) -> JournalEntry:
        return await self.store.post_draft(entry_id)

    async def discard_draft(self, entry_id: int) -> None:
        await self.store.discard_draft(entry_id)

    async def get_entry(self, entry_id: int) -> JournalEntry:
        return await self.store.require_entry(entry_id)

    async def list_entries(self, **filters: Any) -> list[JournalEntry]:
        """분개 목록 (LedgerStore.list_entries 필터 그대로)"""
        return await self.store.list_entries(**filters)

    async def reverse_entry(
        self,
        entry_id: int,
        reversal_date: date | None = None,
        description: str | None = None,
    ) -> JournalEntry:
        return await self.reversal.reverse_entry(entry_id, reversal_date, description)

    async def correct_entry(
        self,
        entry_id: int,
        replacement: JournalEntry,
        reversal_date: date | None = None,
    ) -> tuple[JournalEntry, JournalEntry]:
        return await self.reversal.correct_entry(entry_id, replacement, reversal_date)

    # -------------------------------------------------------------------------
    # 원장 / 보고서
    # -------------------------------------------------------------------------

    async def get_ledger(
        self,
        account_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> AccountLedger:
        return await self.aggregator.get_ledger(account_id, start_date, end_date)

    def iter_ledger(
        self,
        account_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> AsyncIterator[LedgerLine]:
        return self.aggregator.iter_ledger(account_id, start_date, end_date)

    async def get_trial_balance(self, as_of: date | None = None) -> TrialBalance:
        return await self.reports.trial_balance(as_of)

    async def get_balance_sheet(self, as_of: date | None = None) -> BalanceSheet:
        return await self.reports.balance_sheet(as_of)

    async def get_income_statement(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> IncomeStatement:
        return await self.reports.income_statement(start_date, end_date)

    async def get_cash_flow(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> CashFlowStatement:
        return await self.reports.cash_flow(start_date, end_date)

    # -------------------------------------------------------------------------
    # 업무 거래
    # -------------------------------------------------------------------------

    async def record_sale(self, event: SaleEvent) -> JournalEntry:
        """매출 기록 (현금/외상)"""
        return await self.store.post_entry(self.builder.build(event))

    async def checkout(
        self,
        cart: Cart,
        sale_date: date | None = None,
        reference_number: str | None = None,
        description: str | None = None,
    ) -> JournalEntry:
        """계산 세션 결제 → 매출 전기

        전기 성공 후에만 세션이 CHECKED_OUT으로 전환됨.
        """
        event = cart.to_sale_event(sale_date, reference_number, description)
        entry = await self.record_sale(event)
        cart.mark_checked_out()
        logger.info(f"계산 완료: cart={cart.session_id} → {entry.reference_number}")
        return entry

    async def record_sales_return(self, event: SalesReturnEvent) -> JournalEntry:
        return await self.store.post_entry(self.builder.build(event))

    async def record_payment(self, event: CustomerPaymentEvent) -> JournalEntry:
        """고객 대금 수령"""
        return await self.store.post_entry(self.builder.build(event))

    async def record_supplier_purchase(self, event: SupplierPurchaseEvent) -> JournalEntry:
        return await self.store.post_entry(self.builder.build(event))

    async def record_supplier_payment(self, event: SupplierPaymentEvent) -> JournalEntry:
        """공급업체 대금 지급

        enforce_sufficient_funds가 켜져 있으면 지급 계정 잔액이 부족할 때 거부.
        잔액 확인은 전기와 같은 쓰기 트랜잭션 안에서 수행.
        """
        entry = self.builder.build(event)
        if not self.enforce_sufficient_funds:
            return await self.store.post_entry(entry)

        paying_account_id = self.mapping.payment_account(event.payment_method)
        amount = to_money(event.amount)

        async def check_funds() -> None:
            account = await self.chart.require_account(paying_account_id)
            if account.balance < amount:
                raise LedgerValidationError(
                    f"insufficient funds in {account.account_code} {account.account_name}: "
                    f"balance {format_money(account.balance)} < payment {format_money(amount)}",
                    {
                        "account_id": account.id,
                        "balance": str(account.balance),
                        "amount": str(amount),
                    },
                )

        return await self.store.post_entry(entry, precheck=check_funds)

    async def record_expense(self, event: ExpenseEvent) -> JournalEntry:
        return await self.store.post_entry(self.builder.build(event))

    async def record_adjustment(self, event: AdjustmentEvent) -> JournalEntry:
        return await self.store.post_entry(self.builder.build(event))

    async def record_transaction(self, event: SimpleTransaction) -> JournalEntry:
        """단순 거래 (차변 1줄 / 대변 1줄)"""
        return await self.store.post_entry(self.builder.build(event))

    async def record_opening_balance(self, event: OpeningBalanceEvent) -> JournalEntry:
        return await self.store.post_entry(self.builder.build(event))

    # -------------------------------------------------------------------------
    # 자금 이체
    # -------------------------------------------------------------------------

    async def record_fund_transfer(self, event: FundTransferEvent) -> FundTransfer:
        return await self.transfers.record_transfer(event)

    async def reverse_fund_transfer(
        self,
        transfer_id: int,
        reversal_date: date | None = None,
    ) -> FundTransfer:
        return await self.transfers.reverse_transfer(transfer_id, reversal_date)

    async def get_fund_transfer(self, transfer_id: int) -> FundTransfer:
        return await self.transfers.require_transfer(transfer_id)

    async def list_fund_transfers(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        status: TransferStatus | None = None,
        account_id: int | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[FundTransfer]:
        return await self.transfers.list_transfers(
            start_date=start_date,
            end_date=end_date,
            status=status,
            account_id=account_id,
            limit=limit,
            offset=offset,
        )

    # -------------------------------------------------------------------------
    # 계정
    # -------------------------------------------------------------------------

    async def create_account(
        self,
        account_name: str,
        account_type: AccountType,
        account_code: str | None = None,
        is_current: bool = True,
        is_cash: bool = False,
        cash_flow_activity: CashFlowActivity | None = None,
        description: str | None = None,
        opening_balance: Decimal | None = None,
        opening_date: date | None = None,
    ) -> Account:
        """계정 생성 (+ 기초 잔액 분개)

        기초 잔액은 기초잔액 조정 계정을 상대로 균형 분개로 전기.
        계정 생성과 기초 잔액 전기는 한 트랜잭션.
        """
        async with persistence_guard("create_account"), self.db.transaction():
            account = await self.chart.create_account(
                account_name=account_name,
                account_type=account_type,
                account_code=account_code,
                is_current=is_current,
                is_cash=is_cash,
                cash_flow_activity=cash_flow_activity,
                description=description,
            )

            if opening_balance is not None and to_money(opening_balance, "opening balance") != 0:
                entry = self.builder.build(
                    OpeningBalanceEvent(
                        account_id=account.id,
                        account_is_debit_normal=account_type.is_debit_normal,
                        amount=opening_balance,
                        balance_date=opening_date or date.today(),
                        description=f"Opening balance for {account.account_code} {account.account_name}",
                    )
                )
                await self.store.insert_posted_entry(entry)

        return await self.chart.require_account(account.id)

    async def update_account(self, account_id: int, **changes: Any) -> Account:
        return await self.chart.update_account(account_id, **changes)

    async def get_account(self, account_id: int) -> Account:
        return await self.chart.require_account(account_id)

    async def list_accounts(
        self,
        account_type: AccountType | None = None,
        include_inactive: bool = True,
    ) -> list[Account]:
        return await self.chart.list_accounts(account_type, include_inactive)

    async def get_account_balance(self, account_id: int, as_of: date | None = None) -> Decimal:
        """계정 잔액

        as_of가 없으면 저장된 잔액, 있으면 기준일까지의 원장 합계.
        """
        if as_of is None:
            account = await self.chart.require_account(account_id)
            return account.balance
        return await self.aggregator.balance_as_of(account_id, as_of)

    async def get_party_balance(
        self,
        party_kind: PartyKind,
        party_id: str,
        as_of: date | None = None,
    ) -> Decimal:
        """거래처 잔액 (고객: 매출채권, 공급업체: 매입채무)"""
        if party_kind == PartyKind.CUSTOMER:
            account_id = self.mapping.role(AccountRole.ACCOUNTS_RECEIVABLE)
        else:
            account_id = self.mapping.role(AccountRole.ACCOUNTS_PAYABLE)
        return await self.aggregator.party_balance(account_id, party_kind, party_id, as_of)

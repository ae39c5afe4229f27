"""
분개 생성기

업무 이벤트(매출, 대금 수령/지급, 비용, 이체, 조정)를 복식부기 분개로 변환.
각 생성기는 DB에 접근하지 않는 순수 함수이며,
계정 역할 매핑(AccountMapping)은 외부에서 주입됨.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Callable

from core.constants import Money
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
from core.ledger.errors import (
    EmptyEntryError,
    LedgerValidationError,
    UnbalancedEntryError,
)
from core.ledger.money import format_money, to_decimal, to_money
from core.ledger.pricing import price_items, split_tax_exclusive
from core.ledger.types import (
    AccountRole,
    AdjustmentType,
    EntryStatus,
    JournalSide,
    TransactionType,
)
from core.types import PartyKind

logger = logging.getLogger(__name__)


@dataclass
class JournalLine:
    """분개 항목

    debit, credit 중 정확히 하나만 0보다 큼.
    금액은 생성 시 센트 단위로 반올림.
    """

    account_id: int
    debit: Decimal = Money.ZERO
    credit: Decimal = Money.ZERO
    memo: str | None = None

    def __post_init__(self) -> None:
        self.debit = to_money(self.debit, "debit")
        self.credit = to_money(self.credit, "credit")

    @classmethod
    def debit_line(cls, account_id: int, amount: Decimal, memo: str | None = None) -> JournalLine:
        return cls(account_id=account_id, debit=amount, memo=memo)

    @classmethod
    def credit_line(cls, account_id: int, amount: Decimal, memo: str | None = None) -> JournalLine:
        return cls(account_id=account_id, credit=amount, memo=memo)

    @property
    def side(self) -> JournalSide:
        return JournalSide.DEBIT if self.debit > 0 else JournalSide.CREDIT

    @property
    def amount(self) -> Decimal:
        return self.debit if self.debit > 0 else self.credit

    def mirrored(self) -> JournalLine:
        """차변/대변을 뒤바꾼 라인 (역분개용)"""
        return JournalLine(
            account_id=self.account_id,
            debit=self.credit,
            credit=self.debit,
            memo=self.memo,
        )


@dataclass
class JournalEntry:
    """분개

    하나의 금융 이벤트에 대한 복식부기 기록.
    차변 합계 = 대변 합계 (균형).
    entry_id가 None이면 아직 저장되지 않은 초안.
    """

    entry_date: date
    lines: list[JournalLine]
    description: str | None = None
    reference_number: str | None = None
    transaction_type: TransactionType = TransactionType.MANUAL
    adjustment_type: AdjustmentType = AdjustmentType.NON_ADJUSTMENT
    status: EntryStatus = EntryStatus.PENDING

    # 거래 상대방 (매출채권/매입채무 보조원장)
    party_kind: PartyKind | None = None
    party_id: str | None = None

    # 역분개 연결
    reversal_of_id: int | None = None
    reversed_by_id: int | None = None

    # 저장 후 할당
    entry_id: int | None = None
    created_at: str | None = None
    posted_at: str | None = None

    memo: str | None = None

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), Money.ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), Money.ZERO)

    @property
    def account_ids(self) -> list[int]:
        """참조하는 계정 ID (중복 제거, 등장 순서 유지)"""
        return list(dict.fromkeys(line.account_id for line in self.lines))

    def is_balanced(self) -> bool:
        """차변 합계 ≈ 대변 합계 (1센트 미만 차이)"""
        return abs(self.total_debit - self.total_credit) < Money.BALANCE_TOLERANCE

    def validate_structure(self) -> None:
        """라인 구조 검증 (균형 제외)

        Raises:
            EmptyEntryError: 라인 2개 미만 또는 모든 금액이 0
            LedgerValidationError: 음수, 차변/대변 동시 기재, 금액 없는 라인
        """
        if len(self.lines) < 2:
            raise EmptyEntryError(
                f"journal entry needs at least 2 lines, got {len(self.lines)}",
                {"line_count": len(self.lines)},
            )

        if all(line.debit == 0 and line.credit == 0 for line in self.lines):
            raise EmptyEntryError("all line amounts are zero")

        for index, line in enumerate(self.lines, start=1):
            if not isinstance(line.account_id, int) or line.account_id <= 0:
                raise LedgerValidationError(
                    f"line {index}: invalid account id {line.account_id!r}",
                    {"line": index},
                )
            if line.debit < 0 or line.credit < 0:
                raise LedgerValidationError(
                    f"line {index}: amounts must not be negative",
                    {"line": index},
                )
            if line.debit > 0 and line.credit > 0:
                raise LedgerValidationError(
                    f"line {index}: has both debit {format_money(line.debit)} "
                    f"and credit {format_money(line.credit)}",
                    {"line": index},
                )
            if line.debit == 0 and line.credit == 0:
                raise LedgerValidationError(
                    f"line {index}: has neither debit nor credit",
                    {"line": index},
                )

    def validate(self) -> None:
        """전기 전 전체 검증 (구조 + 균형)

        Raises:
            EmptyEntryError, LedgerValidationError, UnbalancedEntryError
        """
        self.validate_structure()

        if not self.is_balanced():
            total_debit = self.total_debit
            total_credit = self.total_credit
            raise UnbalancedEntryError(
                f"debits {format_money(total_debit)} ≠ credits {format_money(total_credit)}",
                {
                    "total_debit": str(total_debit),
                    "total_credit": str(total_credit),
                    "difference": str(total_debit - total_credit),
                },
            )


@dataclass(frozen=True)
class AccountMapping:
    """계정 역할 → 계정 ID 매핑 (계정과목표에서 해석된 결과)

    settings.yaml의 계정 코드를 ChartOfAccounts.resolve_mapping()이 ID로 변환.
    """

    roles: dict[AccountRole, int]
    payment_methods: dict[str, int] = field(default_factory=dict)
    adjustment_accounts: dict[AdjustmentType, int] = field(default_factory=dict)

    def role(self, role: AccountRole) -> int:
        try:
            return self.roles[role]
        except KeyError as e:
            raise LedgerValidationError(f"account role '{role.value}' is not configured") from e

    def payment_account(self, method: str | None) -> int:
        """결제수단 계정 ID

        Raises:
            LedgerValidationError: 알 수 없는 결제수단
        """
        if not method:
            raise LedgerValidationError("payment method is required")
        try:
            return self.payment_methods[method.lower()]
        except KeyError as e:
            raise LedgerValidationError(
                f"unknown payment method '{method}'. "
                f"Configured: {sorted(self.payment_methods)}"
            ) from e

    def adjustment_account(self, adjustment_type: AdjustmentType) -> int:
        try:
            return self.adjustment_accounts[adjustment_type]
        except KeyError as e:
            raise LedgerValidationError(
                f"no contra account configured for adjustment type '{adjustment_type.value}'"
            ) from e


def _positive(value: Any, field_name: str = "amount") -> Decimal:
    """0보다 큰 금액 검증"""
    amount = to_money(value, field_name)
    if amount <= 0:
        raise LedgerValidationError(f"{field_name} must be positive, got {format_money(amount)}")
    return amount


class JournalEntryBuilder:
    """업무 이벤트를 분개로 변환

    이벤트 타입별 핸들러를 호출하여 분개 초안(status=pending)을 생성.
    생성된 초안은 항상 균형을 만족해야 하며 전기는 LedgerStore가 담당.

    Args:
        mapping: 계정 역할 매핑
    """

    def __init__(self, mapping: AccountMapping):
        self.mapping = mapping

    def build(self, event: Any) -> JournalEntry:
        """이벤트에서 분개 초안 생성

        Raises:
            LedgerValidationError: 지원하지 않는 이벤트 또는 잘못된 입력
        """
        handlers: dict[type, Callable[[Any], JournalEntry]] = {
            SaleEvent: self.from_sale,
            SalesReturnEvent: self.from_sales_return,
            CustomerPaymentEvent: self.from_customer_payment,
            SupplierPurchaseEvent: self.from_supplier_purchase,
            SupplierPaymentEvent: self.from_supplier_payment,
            ExpenseEvent: self.from_expense,
            FundTransferEvent: self.from_fund_transfer,
            AdjustmentEvent: self.from_adjustment,
            OpeningBalanceEvent: self.from_opening_balance,
            SimpleTransaction: self.from_simple_transaction,
        }

        handler = handlers.get(type(event))
        if handler is None:
            raise LedgerValidationError(f"Unsupported event: {type(event).__name__}")

        entry = handler(event)
        # 생성기 결함은 전기 전에 드러나야 함
        entry.validate()
        return entry

    # -------------------------------------------------------------------------
    # 매출
    # -------------------------------------------------------------------------

    def from_sale(self, event: SaleEvent) -> JournalEntry:
        """매출 → 분개

        현금: 현금/예금 (Debit) / 매출 + 부가세예수금 (Credit)
        외상: 매출채권 (Debit) / 매출 + 부가세예수금 (Credit)
        원가 정보가 있으면: 매출원가 (Debit) / 재고 (Credit)
        """
        totals = price_items(event.items)
        if totals.total <= 0:
            raise EmptyEntryError("sale total is zero")

        if event.on_credit:
            debit_account = self.mapping.role(AccountRole.ACCOUNTS_RECEIVABLE)
        else:
            debit_account = self.mapping.payment_account(event.payment_method)

        lines = [
            JournalLine.debit_line(debit_account, totals.total),
            JournalLine.credit_line(
                self.mapping.role(AccountRole.SALES_REVENUE), totals.base, "Sales revenue"
            ),
        ]
        if totals.tax > 0:
            lines.append(
                JournalLine.credit_line(
                    self.mapping.role(AccountRole.SALES_TAX_PAYABLE), totals.tax, "Sales tax"
                )
            )
        if totals.cost > 0:
            lines.append(
                JournalLine.debit_line(
                    self.mapping.role(AccountRole.COST_OF_GOODS_SOLD), totals.cost, "Cost of goods sold"
                )
            )
            lines.append(
                JournalLine.credit_line(
                    self.mapping.role(AccountRole.INVENTORY), totals.cost, "Inventory issued"
                )
            )

        kind = "Credit sale" if event.on_credit else "Cash sale"
        return JournalEntry(
            entry_date=event.sale_date,
            lines=lines,
            description=event.description or f"{kind} ({len(event.items)} items)",
            reference_number=event.reference_number,
            transaction_type=TransactionType.SALE,
            party_kind=PartyKind.CUSTOMER if event.customer_id else None,
            party_id=event.customer_id,
        )

    def from_sales_return(self, event: SalesReturnEvent) -> JournalEntry:
        """매출 반품 → 분개

        매출 + 부가세예수금 (Debit) / 현금/예금 또는 매출채권 (Credit)
        재입고 시: 재고 (Debit) / 매출원가 (Credit)
        """
        totals = price_items(event.items)
        if totals.total <= 0:
            raise EmptyEntryError("return total is zero")

        if event.on_credit:
            credit_account = self.mapping.role(AccountRole.ACCOUNTS_RECEIVABLE)
        else:
            credit_account = self.mapping.payment_account(event.refund_method)

        lines = [
            JournalLine.debit_line(
                self.mapping.role(AccountRole.SALES_REVENUE), totals.base, "Sales returned"
            ),
        ]
        if totals.tax > 0:
            lines.append(
                JournalLine.debit_line(
                    self.mapping.role(AccountRole.SALES_TAX_PAYABLE), totals.tax, "Sales tax refunded"
                )
            )
        lines.append(JournalLine.credit_line(credit_account, totals.total, "Refund"))

        if event.restock and totals.cost > 0:
            lines.append(
                JournalLine.debit_line(
                    self.mapping.role(AccountRole.INVENTORY), totals.cost, "Returned to stock"
                )
            )
            lines.append(
                JournalLine.credit_line(
                    self.mapping.role(AccountRole.COST_OF_GOODS_SOLD), totals.cost, "Cost reversed"
                )
            )

        description = event.description or "Sales return"
        if event.original_reference and not event.description:
            description = f"Sales return for {event.original_reference}"

        return JournalEntry(
            entry_date=event.return_date,
            lines=lines,
            description=description,
            reference_number=event.reference_number,
            transaction_type=TransactionType.SALES_RETURN,
            party_kind=PartyKind.CUSTOMER if event.customer_id else None,
            party_id=event.customer_id,
        )

    # -------------------------------------------------------------------------
    # 대금 수령/지급
    # -------------------------------------------------------------------------

    def from_customer_payment(self, event: CustomerPaymentEvent) -> JournalEntry:
        """고객 대금 수령 → 분개

        결제수단 계정 (Debit) / 매출채권 (Credit)
        """
        amount = _positive(event.amount)
        description = event.description or "Customer payment received"
        if event.invoice_reference and not event.description:
            description = f"Payment for {event.invoice_reference}"

        return JournalEntry(
            entry_date=event.payment_date,
            lines=[
                JournalLine.debit_line(self.mapping.payment_account(event.payment_method), amount),
                JournalLine.credit_line(self.mapping.role(AccountRole.ACCOUNTS_RECEIVABLE), amount),
            ],
            description=description,
            reference_number=event.reference_number,
            transaction_type=TransactionType.CUSTOMER_PAYMENT,
            party_kind=PartyKind.CUSTOMER if event.customer_id else None,
            party_id=event.customer_id,
        )

    def from_supplier_purchase(self, event: SupplierPurchaseEvent) -> JournalEntry:
        """외상 매입 → 분개

        재고/비용 + 매입세액 (Debit) / 매입채무 (Credit)
        """
        base = _positive(event.amount)
        debit_account = event.debit_account_id or self.mapping.role(AccountRole.INVENTORY)

        tax = Money.ZERO
        total = base
        if event.tax_rate:
            rate = to_decimal(event.tax_rate, "tax rate")
            if rate < 0:
                raise LedgerValidationError("tax rate must not be negative")
            tax, total = split_tax_exclusive(base, rate)

        lines = [JournalLine.debit_line(debit_account, base, "Purchase")]
        if tax > 0:
            lines.append(
                JournalLine.debit_line(
                    self.mapping.role(AccountRole.PURCHASE_TAX_RECOVERABLE), tax, "Input tax"
                )
            )
        lines.append(JournalLine.credit_line(self.mapping.role(AccountRole.ACCOUNTS_PAYABLE), total))

        return JournalEntry(
            entry_date=event.purchase_date,
            lines=lines,
            description=event.description or "Supplier purchase on credit",
            reference_number=event.reference_number,
            transaction_type=TransactionType.SUPPLIER_PURCHASE,
            party_kind=PartyKind.SUPPLIER if event.supplier_id else None,
            party_id=event.supplier_id,
        )

    def from_supplier_payment(self, event: SupplierPaymentEvent) -> JournalEntry:
        """공급업체 대금 지급 → 분개

        매입채무 (Debit) / 결제수단 계정 (Credit)
        """
        amount = _positive(event.amount)
        description = event.description or "Supplier payment"
        if event.purchase_reference and not event.description:
            description = f"Payment for {event.purchase_reference}"

        return JournalEntry(
            entry_date=event.payment_date,
            lines=[
                JournalLine.debit_line(self.mapping.role(AccountRole.ACCOUNTS_PAYABLE), amount),
                JournalLine.credit_line(self.mapping.payment_account(event.payment_method), amount),
            ],
            description=description,
            reference_number=event.reference_number,
            transaction_type=TransactionType.SUPPLIER_PAYMENT,
            party_kind=PartyKind.SUPPLIER if event.supplier_id else None,
            party_id=event.supplier_id,
        )

    # -------------------------------------------------------------------------
    # 비용 / 이체 / 조정
    # -------------------------------------------------------------------------

    def from_expense(self, event: ExpenseEvent) -> JournalEntry:
        """비용 → 분개

        현금: 비용 (Debit) / 결제수단 계정 (Credit)
        외상: 비용 (Debit) / 매입채무 (Credit)
        """
        amount = _positive(event.amount)

        if event.on_credit:
            credit_account = self.mapping.role(AccountRole.ACCOUNTS_PAYABLE)
        else:
            credit_account = self.mapping.payment_account(event.payment_method)

        return JournalEntry(
            entry_date=event.expense_date,
            lines=[
                JournalLine.debit_line(event.expense_account_id, amount),
                JournalLine.credit_line(credit_account, amount),
            ],
            description=event.description or "Expense",
            reference_number=event.reference_number,
            transaction_type=TransactionType.EXPENSE,
            party_kind=PartyKind.SUPPLIER if event.supplier_id else None,
            party_id=event.supplier_id,
        )

    def from_fund_transfer(self, event: FundTransferEvent) -> JournalEntry:
        """자금 이체 → 분개

        입금 계정 (Debit) / 출금 계정 (Credit)
        """
        amount = _positive(event.amount)
        if event.from_account_id == event.to_account_id:
            raise LedgerValidationError("source and destination accounts must differ")

        return JournalEntry(
            entry_date=event.transfer_date,
            lines=[
                JournalLine.debit_line(event.to_account_id, amount, "Transfer in"),
                JournalLine.credit_line(event.from_account_id, amount, "Transfer out"),
            ],
            description=event.description or "Fund transfer",
            reference_number=event.reference_number,
            transaction_type=TransactionType.FUND_TRANSFER,
        )

    def from_adjustment(self, event: AdjustmentEvent) -> JournalEntry:
        """조정 → 분개

        entry_side=debit: 지정 계정 (Debit) / 상대 계정 (Credit)
        entry_side=credit: 상대 계정 (Debit) / 지정 계정 (Credit)
        """
        amount = _positive(event.amount)
        contra_account = event.contra_account_id or self.mapping.adjustment_account(
            event.adjustment_type
        )
        if contra_account == event.account_id:
            raise LedgerValidationError("adjustment account and contra account must differ")

        if event.entry_side == JournalSide.DEBIT:
            lines = [
                JournalLine.debit_line(event.account_id, amount),
                JournalLine.credit_line(contra_account, amount),
            ]
        else:
            lines = [
                JournalLine.debit_line(contra_account, amount),
                JournalLine.credit_line(event.account_id, amount),
            ]

        return JournalEntry(
            entry_date=event.adjustment_date,
            lines=lines,
            description=event.description or f"Adjustment ({event.adjustment_type.value})",
            reference_number=event.reference_number,
            transaction_type=TransactionType.ADJUSTMENT,
            adjustment_type=event.adjustment_type,
        )

    def from_opening_balance(self, event: OpeningBalanceEvent) -> JournalEntry:
        """기초 잔액 → 분개

        차변 정상 계정의 양수 잔액: 계정 (Debit) / 기초잔액 조정 (Credit)
        대변 정상 계정의 양수 잔액: 기초잔액 조정 (Debit) / 계정 (Credit)
        음수 잔액은 방향이 반대.
        """
        amount = to_money(event.amount)
        if amount == 0:
            raise EmptyEntryError("opening balance is zero")

        equity_account = self.mapping.role(AccountRole.OPENING_BALANCE_EQUITY)
        if event.account_id == equity_account:
            raise LedgerValidationError("opening balance cannot be posted to its own contra account")

        debit_account = (amount > 0) == event.account_is_debit_normal
        magnitude = abs(amount)
        if debit_account:
            lines = [
                JournalLine.debit_line(event.account_id, magnitude),
                JournalLine.credit_line(equity_account, magnitude),
            ]
        else:
            lines = [
                JournalLine.debit_line(equity_account, magnitude),
                JournalLine.credit_line(event.account_id, magnitude),
            ]

        return JournalEntry(
            entry_date=event.balance_date,
            lines=lines,
            description=event.description or "Opening balance",
            reference_number=event.reference_number,
            transaction_type=TransactionType.OPENING_BALANCE,
        )

    def from_simple_transaction(self, event: SimpleTransaction) -> JournalEntry:
        """단순 거래 → 분개 (차변 1줄 / 대변 1줄)"""
        amount = _positive(event.amount)
        if event.debit_account_id == event.credit_account_id:
            raise LedgerValidationError("debit and credit accounts must differ")

        return JournalEntry(
            entry_date=event.transaction_date,
            lines=[
                JournalLine.debit_line(event.debit_account_id, amount),
                JournalLine.credit_line(event.credit_account_id, amount),
            ],
            description=event.description,
            reference_number=event.reference_number,
            transaction_type=TransactionType.SIMPLE,
        )

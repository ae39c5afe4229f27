"""JournalEntryBuilder 테스트"""

from datetime import date
from decimal import Decimal

import pytest

from core.domain.events import (
    AdjustmentEvent,
    CustomerPaymentEvent,
    ExpenseEvent,
    FundTransferEvent,
    OpeningBalanceEvent,
    SaleEvent,
    SaleItem,
    SalesReturnEvent,
    SimpleTransaction,
    SupplierPaymentEvent,
    SupplierPurchaseEvent,
)
from core.ledger.entry_builder import (
    AccountMapping,
    JournalEntry,
    JournalEntryBuilder,
    JournalLine,
)
from core.ledger.errors import (
    EmptyEntryError,
    LedgerValidationError,
    UnbalancedEntryError,
)
from core.ledger.money import Price
from core.ledger.types import (
    AccountRole,
    AdjustmentType,
    EntryStatus,
    JournalSide,
    TransactionType,
)
from core.types import PartyKind

CASH = 1
BANK = 5
AR = 2
INVENTORY = 6
INPUT_TAX = 10
AP = 13
SALES_TAX = 14
OPENING_EQUITY = 23
CORRECTION = 24
REVENUE = 27
COGS = 29
GENERAL_EXPENSE = 34

TODAY = date(2026, 3, 15)


@pytest.fixture
def mapping() -> AccountMapping:
    return AccountMapping(
        roles={
            AccountRole.CASH: CASH,
            AccountRole.BANK: BANK,
            AccountRole.ACCOUNTS_RECEIVABLE: AR,
            AccountRole.INVENTORY: INVENTORY,
            AccountRole.PURCHASE_TAX_RECOVERABLE: INPUT_TAX,
            AccountRole.ACCOUNTS_PAYABLE: AP,
            AccountRole.SALES_TAX_PAYABLE: SALES_TAX,
            AccountRole.OPENING_BALANCE_EQUITY: OPENING_EQUITY,
            AccountRole.SALES_REVENUE: REVENUE,
            AccountRole.COST_OF_GOODS_SOLD: COGS,
        },
        payment_methods={"cash": CASH, "bank": BANK},
        adjustment_accounts={AdjustmentType.CORRECTION: CORRECTION},
    )


@pytest.fixture
def builder(mapping: AccountMapping) -> JournalEntryBuilder:
    return JournalEntryBuilder(mapping)


def _amounts(entry: JournalEntry) -> list[tuple[int, Decimal, Decimal]]:
    return [(line.account_id, line.debit, line.credit) for line in entry.lines]


class TestJournalLine:
    """JournalLine 테스트"""

    def test_amounts_quantized(self) -> None:
        line = JournalLine(account_id=1, debit=Decimal("10.005"))

        assert line.debit == Decimal("10.01")
        assert line.credit == Decimal("0.00")

    def test_side(self) -> None:
        assert JournalLine.debit_line(1, Decimal("5")).side == JournalSide.DEBIT
        assert JournalLine.credit_line(1, Decimal("5")).side == JournalSide.CREDIT

    def test_mirrored(self) -> None:
        line = JournalLine.debit_line(3, Decimal("12.50"), "memo").mirrored()

        assert line.debit == Decimal("0.00")
        assert line.credit == Decimal("12.50")
        assert line.memo == "memo"


class TestJournalEntry:
    """JournalEntry 검증 테스트"""

    def test_balanced(self) -> None:
        entry = JournalEntry(
            entry_date=TODAY,
            lines=[
                JournalLine.debit_line(CASH, Decimal("100")),
                JournalLine.credit_line(REVENUE, Decimal("100")),
            ],
        )

        entry.validate()
        assert entry.is_balanced() is True
        assert entry.status == EntryStatus.PENDING
        assert entry.total_debit == Decimal("100.00")

    def test_unbalanced(self) -> None:
        """차변 100 / 대변 90 → Unbalanced"""
        entry = JournalEntry(
            entry_date=TODAY,
            lines=[
                JournalLine.debit_line(CASH, Decimal("100")),
                JournalLine.credit_line(REVENUE, Decimal("90")),
            ],
        )

        with pytest.raises(UnbalancedEntryError) as exc_info:
            entry.validate()

        assert "100.00" in str(exc_info.value)
        assert "90.00" in str(exc_info.value)
        assert exc_info.value.details["difference"] == "10.00"

    def test_single_line(self) -> None:
        entry = JournalEntry(entry_date=TODAY, lines=[JournalLine.debit_line(CASH, Decimal("1"))])

        with pytest.raises(EmptyEntryError):
            entry.validate()

    def test_all_zero(self) -> None:
        entry = JournalEntry(
            entry_date=TODAY,
            lines=[JournalLine(account_id=CASH), JournalLine(account_id=REVENUE)],
        )

        with pytest.raises(EmptyEntryError):
            entry.validate()

    def test_both_sides_on_one_line(self) -> None:
        entry = JournalEntry(
            entry_date=TODAY,
            lines=[
                JournalLine(account_id=CASH, debit=Decimal("10"), credit=Decimal("10")),
                JournalLine.credit_line(REVENUE, Decimal("0.01")),
            ],
        )

        with pytest.raises(LedgerValidationError, match="line 1"):
            entry.validate()

    def test_negative_amount(self) -> None:
        entry = JournalEntry(
            entry_date=TODAY,
            lines=[
                JournalLine(account_id=CASH, debit=Decimal("-10")),
                JournalLine.credit_line(REVENUE, Decimal("10")),
            ],
        )

        with pytest.raises(LedgerValidationError, match="negative"):
            entry.validate()

    def test_account_ids_deduplicated(self) -> None:
        entry = JournalEntry(
            entry_date=TODAY,
            lines=[
                JournalLine.debit_line(CASH, Decimal("5")),
                JournalLine.debit_line(CASH, Decimal("5")),
                JournalLine.credit_line(REVENUE, Decimal("10")),
            ],
        )

        assert entry.account_ids == [CASH, REVENUE]


class TestAccountMapping:
    def test_unknown_payment_method(self, mapping: AccountMapping) -> None:
        with pytest.raises(LedgerValidationError, match="unknown payment method"):
            mapping.payment_account("crypto")

    def test_payment_method_case_insensitive(self, mapping: AccountMapping) -> None:
        assert mapping.payment_account("BANK") == BANK

    def test_missing_adjustment_contra(self, mapping: AccountMapping) -> None:
        with pytest.raises(LedgerValidationError):
            mapping.adjustment_account(AdjustmentType.DEPRECIATION)


class TestSale:
    """매출 분개 테스트"""

    def test_cash_sale_with_tax(self, builder: JournalEntryBuilder) -> None:
        """3 × 50.00, 세율 10% → 현금 165 / 매출 150 + 부가세 15"""
        event = SaleEvent(
            sale_date=TODAY,
            items=[SaleItem("Widget", Decimal("3"), Price.known("50.00"), tax_rate=Decimal("10"))],
        )

        entry = builder.build(event)

        assert entry.transaction_type == TransactionType.SALE
        assert _amounts(entry) == [
            (CASH, Decimal("165.00"), Decimal("0.00")),
            (REVENUE, Decimal("0.00"), Decimal("150.00")),
            (SALES_TAX, Decimal("0.00"), Decimal("15.00")),
        ]
        assert entry.party_kind is None

    def test_credit_sale(self, builder: JournalEntryBuilder) -> None:
        event = SaleEvent(
            sale_date=TODAY,
            items=[SaleItem("Widget", Decimal("1"), Price.known("40.00"))],
            on_credit=True,
            customer_id="C-001",
        )

        entry = builder.build(event)

        assert _amounts(entry) == [
            (AR, Decimal("40.00"), Decimal("0.00")),
            (REVENUE, Decimal("0.00"), Decimal("40.00")),
        ]
        assert entry.party_kind == PartyKind.CUSTOMER
        assert entry.party_id == "C-001"

    def test_sale_with_cost(self, builder: JournalEntryBuilder) -> None:
        """원가가 있으면 매출원가 / 재고 라인 추가"""
        event = SaleEvent(
            sale_date=TODAY,
            items=[
                SaleItem("Widget", Decimal("2"), Price.known("30.00"), unit_cost=Decimal("12.00")),
            ],
            payment_method="bank",
        )

        entry = builder.build(event)

        assert (BANK, Decimal("60.00"), Decimal("0.00")) in _amounts(entry)
        assert (COGS, Decimal("24.00"), Decimal("0.00")) in _amounts(entry)
        assert (INVENTORY, Decimal("0.00"), Decimal("24.00")) in _amounts(entry)
        assert entry.is_balanced()

    def test_unknown_price_rejected(self, builder: JournalEntryBuilder) -> None:
        event = SaleEvent(
            sale_date=TODAY,
            items=[SaleItem("Mystery box", Decimal("1"), Price.unknown())],
        )

        with pytest.raises(LedgerValidationError, match="unknown"):
            builder.build(event)

    def test_zero_total_rejected(self, builder: JournalEntryBuilder) -> None:
        event = SaleEvent(
            sale_date=TODAY,
            items=[SaleItem("Free sample", Decimal("1"), Price.known("0"))],
        )

        with pytest.raises(EmptyEntryError):
            builder.build(event)

    def test_sales_return_restock(self, builder: JournalEntryBuilder) -> None:
        event = SalesReturnEvent(
            return_date=TODAY,
            items=[
                SaleItem(
                    "Widget",
                    Decimal("1"),
                    Price.known("50.00"),
                    tax_rate=Decimal("10"),
                    unit_cost=Decimal("20.00"),
                )
            ],
            restock=True,
            original_reference="INV-2026-000001",
        )

        entry = builder.build(event)

        assert entry.transaction_type == TransactionType.SALES_RETURN
        assert entry.description == "Sales return for INV-2026-000001"
        assert _amounts(entry) == [
            (REVENUE, Decimal("50.00"), Decimal("0.00")),
            (SALES_TAX, Decimal("5.00"), Decimal("0.00")),
            (CASH, Decimal("0.00"), Decimal("55.00")),
            (INVENTORY, Decimal("20.00"), Decimal("0.00")),
            (COGS, Decimal("0.00"), Decimal("20.00")),
        ]


class TestPayments:
    """대금 수령/지급 분개 테스트"""

    def test_customer_payment(self, builder: JournalEntryBuilder) -> None:
        event = CustomerPaymentEvent(
            payment_date=TODAY,
            amount=Decimal("40"),
            payment_method="bank",
            customer_id="C-001",
        )

        entry = builder.build(event)

        assert _amounts(entry) == [
            (BANK, Decimal("40.00"), Decimal("0.00")),
            (AR, Decimal("0.00"), Decimal("40.00")),
        ]
        assert entry.party_id == "C-001"

    def test_supplier_purchase_with_tax(self, builder: JournalEntryBuilder) -> None:
        event = SupplierPurchaseEvent(
            purchase_date=TODAY,
            amount=Decimal("200"),
            supplier_id="S-9",
            tax_rate=Decimal("10"),
        )

        entry = builder.build(event)

        assert _amounts(entry) == [
            (INVENTORY, Decimal("200.00"), Decimal("0.00")),
            (INPUT_TAX, Decimal("20.00"), Decimal("0.00")),
            (AP, Decimal("0.00"), Decimal("220.00")),
        ]
        assert entry.party_kind == PartyKind.SUPPLIER

    def test_supplier_payment(self, builder: JournalEntryBuilder) -> None:
        event = SupplierPaymentEvent(payment_date=TODAY, amount=Decimal("120"))

        entry = builder.build(event)

        assert _amounts(entry) == [
            (AP, Decimal("120.00"), Decimal("0.00")),
            (BANK, Decimal("0.00"), Decimal("120.00")),
        ]

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5")])
    def test_non_positive_amount(self, builder: JournalEntryBuilder, amount: Decimal) -> None:
        with pytest.raises(LedgerValidationError, match="positive"):
            builder.build(CustomerPaymentEvent(payment_date=TODAY, amount=amount))


class TestOtherEntries:
    """비용/이체/조정/기초잔액/단순 거래"""

    def test_expense_on_credit(self, builder: JournalEntryBuilder) -> None:
        event = ExpenseEvent(
            expense_date=TODAY,
            amount=Decimal("75"),
            expense_account_id=GENERAL_EXPENSE,
            on_credit=True,
        )

        entry = builder.build(event)

        assert _amounts(entry) == [
            (GENERAL_EXPENSE, Decimal("75.00"), Decimal("0.00")),
            (AP, Decimal("0.00"), Decimal("75.00")),
        ]

    def test_fund_transfer(self, builder: JournalEntryBuilder) -> None:
        event = FundTransferEvent(
            transfer_date=TODAY,
            from_account_id=CASH,
            to_account_id=BANK,
            amount=Decimal("300"),
        )

        entry = builder.build(event)

        assert _amounts(entry) == [
            (BANK, Decimal("300.00"), Decimal("0.00")),
            (CASH, Decimal("0.00"), Decimal("300.00")),
        ]

    def test_fund_transfer_same_account(self, builder: JournalEntryBuilder) -> None:
        event = FundTransferEvent(
            transfer_date=TODAY,
            from_account_id=CASH,
            to_account_id=CASH,
            amount=Decimal("1"),
        )

        with pytest.raises(LedgerValidationError, match="differ"):
            builder.build(event)

    def test_adjustment_credit_side(self, builder: JournalEntryBuilder) -> None:
        event = AdjustmentEvent(
            adjustment_date=TODAY,
            account_id=CASH,
            amount=Decimal("2.50"),
            entry_side=JournalSide.CREDIT,
        )

        entry = builder.build(event)

        assert entry.adjustment_type == AdjustmentType.CORRECTION
        assert _amounts(entry) == [
            (CORRECTION, Decimal("2.50"), Decimal("0.00")),
            (CASH, Decimal("0.00"), Decimal("2.50")),
        ]

    def test_opening_balance_asset(self, builder: JournalEntryBuilder) -> None:
        event = OpeningBalanceEvent(
            account_id=BANK,
            account_is_debit_normal=True,
            amount=Decimal("1000"),
            balance_date=TODAY,
        )

        entry = builder.build(event)

        assert _amounts(entry) == [
            (BANK, Decimal("1000.00"), Decimal("0.00")),
            (OPENING_EQUITY, Decimal("0.00"), Decimal("1000.00")),
        ]

    def test_opening_balance_liability(self, builder: JournalEntryBuilder) -> None:
        event = OpeningBalanceEvent(
            account_id=AP,
            account_is_debit_normal=False,
            amount=Decimal("400"),
            balance_date=TODAY,
        )

        entry = builder.build(event)

        assert _amounts(entry) == [
            (OPENING_EQUITY, Decimal("400.00"), Decimal("0.00")),
            (AP, Decimal("0.00"), Decimal("400.00")),
        ]

    def test_simple_transaction(self, builder: JournalEntryBuilder) -> None:
        event = SimpleTransaction(
            transaction_date=TODAY,
            amount=Decimal("10"),
            debit_account_id=GENERAL_EXPENSE,
            credit_account_id=CASH,
            reference_number="TX-MANUAL-1",
        )

        entry = builder.build(event)

        assert entry.transaction_type == TransactionType.SIMPLE
        assert entry.reference_number == "TX-MANUAL-1"

    def test_unsupported_event(self, builder: JournalEntryBuilder) -> None:
        with pytest.raises(LedgerValidationError, match="Unsupported"):
            builder.build(object())

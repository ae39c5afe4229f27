"""
업무 이벤트 도메인 모델

매출, 대금 수령/지급, 비용, 자금 이체, 조정 등 금융 이벤트.
JournalEntryBuilder가 각 이벤트를 균형 잡힌 분개로 변환함.
금액은 모두 Decimal.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from core.ledger.money import Price
from core.ledger.types import AdjustmentType, DiscountType, JournalSide


@dataclass
class SaleItem:
    """판매 품목

    단가가 Unknown(품절, 가격 미정)이면 분개 생성 시 거부됨.
    """

    description: str
    quantity: Decimal
    unit_price: Price
    tax_rate: Decimal | None = None
    tax_inclusive: bool = False
    discount_type: DiscountType | None = None
    discount_value: Decimal | None = None
    unit_cost: Decimal | None = None  # 있으면 매출원가/재고 분개 추가
    product_id: str | None = None


@dataclass
class SaleEvent:
    """매출 (현금 또는 외상)

    on_credit=True면 매출채권, 아니면 payment_method 계정으로 입금.
    """

    sale_date: date
    items: list[SaleItem]
    payment_method: str | None = "cash"
    on_credit: bool = False
    customer_id: str | None = None
    reference_number: str | None = None
    description: str | None = None


@dataclass
class SalesReturnEvent:
    """매출 반품

    환불은 refund_method 계정에서 지급하거나 on_credit=True면 매출채권 차감.
    restock=True면 원가만큼 재고 복원.
    """

    return_date: date
    items: list[SaleItem]
    refund_method: str | None = "cash"
    on_credit: bool = False
    restock: bool = False
    customer_id: str | None = None
    original_reference: str | None = None
    reference_number: str | None = None
    description: str | None = None


@dataclass
class CustomerPaymentEvent:
    """고객 대금 수령 (매출채권 회수)"""

    payment_date: date
    amount: Decimal
    payment_method: str = "cash"
    customer_id: str | None = None
    invoice_reference: str | None = None
    reference_number: str | None = None
    description: str | None = None


@dataclass
class SupplierPurchaseEvent:
    """외상 매입

    debit_account_id가 없으면 재고 계정으로 매입.
    tax_rate가 있으면 매입세액을 별도 라인으로 분리.
    """

    purchase_date: date
    amount: Decimal
    supplier_id: str | None = None
    debit_account_id: int | None = None
    tax_rate: Decimal | None = None
    reference_number: str | None = None
    description: str | None = None


@dataclass
class SupplierPaymentEvent:
    """공급업체 대금 지급 (매입채무 상환)"""

    payment_date: date
    amount: Decimal
    payment_method: str = "bank"
    supplier_id: str | None = None
    purchase_reference: str | None = None
    reference_number: str | None = None
    description: str | None = None


@dataclass
class ExpenseEvent:
    """비용 (현금 또는 외상)"""

    expense_date: date
    amount: Decimal
    expense_account_id: int
    payment_method: str | None = "cash"
    on_credit: bool = False
    supplier_id: str | None = None
    reference_number: str | None = None
    description: str | None = None


@dataclass
class FundTransferEvent:
    """자금 이체 (출금 계정 → 입금 계정)"""

    transfer_date: date
    from_account_id: int
    to_account_id: int
    amount: Decimal
    reference_number: str | None = None
    description: str | None = None


@dataclass
class AdjustmentEvent:
    """조정 분개

    entry_side는 사용자 지정 계정이 차변/대변 중 어디에 오는지.
    반대편은 조정 유형별 상대 계정 (contra_account_id로 직접 지정 가능).
    """

    adjustment_date: date
    account_id: int
    amount: Decimal
    adjustment_type: AdjustmentType = AdjustmentType.CORRECTION
    entry_side: JournalSide = JournalSide.DEBIT
    contra_account_id: int | None = None
    reference_number: str | None = None
    description: str | None = None


@dataclass
class OpeningBalanceEvent:
    """기초 잔액

    amount는 계정의 정상잔액 방향 기준 부호 있는 금액.
    상대 계정은 기초잔액 조정(자본) 계정.
    """

    account_id: int
    account_is_debit_normal: bool
    amount: Decimal
    balance_date: date
    reference_number: str | None = None
    description: str | None = None


@dataclass
class SimpleTransaction:
    """단순 거래 (차변 1줄, 대변 1줄)"""

    transaction_date: date
    amount: Decimal
    debit_account_id: int
    credit_account_id: int
    reference_number: str | None = None
    description: str | None = None

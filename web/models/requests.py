"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증.
금액은 Decimal (JSON 문자열 또는 숫자), 날짜는 ISO-8601.
각 요청은 to_event()/to_entry()로 도메인 객체로 변환됨.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from core.domain.cart import Cart
from core.domain.events import (
    AdjustmentEvent,
    CustomerPaymentEvent,
    ExpenseEvent,
    FundTransferEvent,
    SaleEvent,
    SaleItem,
    SalesReturnEvent,
    SimpleTransaction,
    SupplierPaymentEvent,
    SupplierPurchaseEvent,
)
from core.ledger.entry_builder import JournalEntry, JournalLine
from core.ledger.money import Price
from core.ledger.types import (
    AccountType,
    AdjustmentType,
    CashFlowActivity,
    DiscountType,
    JournalSide,
)
from core.types import PartyKind


# =========================================================================
# 분개
# =========================================================================


class JournalLineRequest(BaseModel):
    """분개 라인 (차변 또는 대변 중 하나만)"""

    account_id: int = Field(..., gt=0, description="계정 ID")
    debit: Decimal = Field(default=Decimal("0"), ge=0, description="차변 금액")
    credit: Decimal = Field(default=Decimal("0"), ge=0, description="대변 금액")
    memo: str | None = Field(default=None, description="라인 메모")

    def to_line(self) -> JournalLine:
        return JournalLine(
            account_id=self.account_id,
            debit=self.debit,
            credit=self.credit,
            memo=self.memo,
        )


class JournalEntryRequest(BaseModel):
    """수동 분개 (전기 또는 초안 저장)

    균형/라인 구조 검증은 분개 엔진이 수행하여 오류 종류를 구분함.
    """

    entry_date: date = Field(..., description="분개 일자")
    lines: list[JournalLineRequest] = Field(..., description="분개 라인")
    description: str | None = Field(default=None, description="설명")
    reference_number: str | None = Field(default=None, description="참조번호 (없으면 자동 할당)")
    adjustment_type: AdjustmentType = Field(
        default=AdjustmentType.NON_ADJUSTMENT, description="조정 유형"
    )
    party_kind: PartyKind | None = Field(default=None, description="거래처 유형")
    party_id: str | None = Field(default=None, description="거래처 ID")
    memo: str | None = Field(default=None, description="메모")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "entry_date": "2026-03-01",
                    "description": "Owner capital contribution",
                    "lines": [
                        {"account_id": 5, "debit": "1000.00"},
                        {"account_id": 23, "credit": "1000.00"},
                    ],
                }
            ]
        }
    }

    def to_entry(self) -> JournalEntry:
        return JournalEntry(
            entry_date=self.entry_date,
            lines=[line.to_line() for line in self.lines],
            description=self.description,
            reference_number=self.reference_number,
            adjustment_type=self.adjustment_type,
            party_kind=self.party_kind,
            party_id=self.party_id,
            memo=self.memo,
        )


class ReverseEntryRequest(BaseModel):
    """역분개 요청"""

    reversal_date: date | None = Field(default=None, description="역분개 일자 (기본: 오늘)")
    description: str | None = Field(default=None, description="설명")


class CorrectEntryRequest(BaseModel):
    """정정 요청 (역분개 + 대체 분개)"""

    replacement: JournalEntryRequest = Field(..., description="대체 분개")
    reversal_date: date | None = Field(default=None, description="역분개 일자")


# =========================================================================
# 계정
# =========================================================================


class AccountCreateRequest(BaseModel):
    """계정 생성 요청"""

    account_name: str = Field(..., min_length=1, description="계정 이름")
    account_type: AccountType = Field(..., description="계정 유형")
    account_code: str | None = Field(default=None, description="계정 코드 (없으면 자동 생성)")
    is_current: bool = Field(default=True, description="유동 여부")
    is_cash: bool = Field(default=False, description="현금성 계정 여부")
    cash_flow_activity: CashFlowActivity | None = Field(default=None, description="현금흐름 활동 구분")
    description: str | None = Field(default=None, description="설명")
    opening_balance: Decimal | None = Field(default=None, description="기초 잔액 (정상잔액 방향 기준)")
    opening_date: date | None = Field(default=None, description="기초 잔액 일자")


class AccountUpdateRequest(BaseModel):
    """계정 메타데이터 수정 요청 (잔액은 수정 불가)"""

    account_name: str | None = Field(default=None, description="계정 이름")
    is_current: bool | None = Field(default=None, description="유동 여부")
    is_cash: bool | None = Field(default=None, description="현금성 계정 여부")
    cash_flow_activity: CashFlowActivity | None = Field(default=None, description="현금흐름 활동 구분")
    is_active: bool | None = Field(default=None, description="사용 여부")
    description: str | None = Field(default=None, description="설명")


# =========================================================================
# 업무 거래
# =========================================================================


class SaleItemRequest(BaseModel):
    """판매 품목

    unit_price가 null이면 가격 미정(Unknown)으로 결제 불가.
    """

    description: str = Field(..., min_length=1, description="품목 이름")
    quantity: Decimal = Field(..., gt=0, description="수량")
    unit_price: Decimal | None = Field(..., ge=0, description="단가 (null이면 가격 미정)")
    tax_rate: Decimal | None = Field(default=None, ge=0, description="세율 (%)")
    tax_inclusive: bool = Field(default=False, description="단가 세금 포함 여부")
    discount_type: DiscountType | None = Field(default=None, description="할인 방식")
    discount_value: Decimal | None = Field(default=None, ge=0, description="할인 값 (% 또는 금액)")
    unit_cost: Decimal | None = Field(default=None, ge=0, description="단위 원가")
    product_id: str | None = Field(default=None, description="상품 ID")

    @property
    def price(self) -> Price:
        return Price.unknown() if self.unit_price is None else Price.known(self.unit_price)

    def to_item(self) -> SaleItem:
        return SaleItem(
            description=self.description,
            quantity=self.quantity,
            unit_price=self.price,
            tax_rate=self.tax_rate,
            tax_inclusive=self.tax_inclusive,
            discount_type=self.discount_type,
            discount_value=self.discount_value,
            unit_cost=self.unit_cost,
            product_id=self.product_id,
        )


class SaleRequest(BaseModel):
    """매출 요청 (현금/외상)"""

    sale_date: date = Field(..., description="매출 일자")
    items: list[SaleItemRequest] = Field(..., min_length=1, description="판매 품목")
    payment_method: str | None = Field(default="cash", description="결제수단")
    on_credit: bool = Field(default=False, description="외상 여부")
    customer_id: str | None = Field(default=None, description="고객 ID")
    reference_number: str | None = Field(default=None, description="참조번호")
    description: str | None = Field(default=None, description="설명")

    @model_validator(mode="after")
    def _check_payment(self) -> "SaleRequest":
        if not self.on_credit and not self.payment_method:
            raise ValueError("payment_method is required unless on_credit is true")
        if self.on_credit and not self.customer_id:
            raise ValueError("customer_id is required for credit sales")
        return self

    def to_event(self) -> SaleEvent:
        return SaleEvent(
            sale_date=self.sale_date,
            items=[item.to_item() for item in self.items],
            payment_method=self.payment_method,
            on_credit=self.on_credit,
            customer_id=self.customer_id,
            reference_number=self.reference_number,
            description=self.description,
        )


class CheckoutRequest(BaseModel):
    """계산 요청 (요청마다 새 계산 세션을 만들어 결제)"""

    items: list[SaleItemRequest] = Field(..., min_length=1, description="장바구니 품목")
    sale_date: date | None = Field(default=None, description="매출 일자 (기본: 오늘)")
    payment_method: str | None = Field(default="cash", description="결제수단")
    on_credit: bool = Field(default=False, description="외상 여부")
    customer_id: str | None = Field(default=None, description="고객 ID")
    session_id: str | None = Field(default=None, description="계산 세션 ID")
    reference_number: str | None = Field(default=None, description="참조번호")
    description: str | None = Field(default=None, description="설명")

    def to_cart(self) -> Cart:
        cart = Cart(
            session_id=self.session_id,
            customer_id=self.customer_id,
            payment_method=self.payment_method,
            on_credit=self.on_credit,
        )
        for item in self.items:
            cart.add_item(
                description=item.description,
                quantity=item.quantity,
                unit_price=item.price,
                tax_rate=item.tax_rate,
                tax_inclusive=item.tax_inclusive,
                discount_type=item.discount_type,
                discount_value=item.discount_value,
                unit_cost=item.unit_cost,
                product_id=item.product_id,
            )
        return cart


class SalesReturnRequest(BaseModel):
    """매출 반품 요청"""

    return_date: date = Field(..., description="반품 일자")
    items: list[SaleItemRequest] = Field(..., min_length=1, description="반품 품목")
    refund_method: str | None = Field(default="cash", description="환불 결제수단")
    on_credit: bool = Field(default=False, description="매출채권 차감 여부")
    restock: bool = Field(default=False, description="재입고 여부")
    customer_id: str | None = Field(default=None, description="고객 ID")
    original_reference: str | None = Field(default=None, description="원 매출 참조번호")
    reference_number: str | None = Field(default=None, description="참조번호")
    description: str | None = Field(default=None, description="설명")

    def to_event(self) -> SalesReturnEvent:
        return SalesReturnEvent(
            return_date=self.return_date,
            items=[item.to_item() for item in self.items],
            refund_method=self.refund_method,
            on_credit=self.on_credit,
            restock=self.restock,
            customer_id=self.customer_id,
            original_reference=self.original_reference,
            reference_number=self.reference_number,
            description=self.description,
        )


class CustomerPaymentRequest(BaseModel):
    """고객 대금 수령 요청"""

    payment_date: date = Field(..., description="수령 일자")
    amount: Decimal = Field(..., gt=0, description="수령 금액")
    payment_method: str = Field(default="cash", description="결제수단")
    customer_id: str | None = Field(default=None, description="고객 ID")
    invoice_reference: str | None = Field(default=None, description="청구서 참조번호")
    reference_number: str | None = Field(default=None, description="참조번호")
    description: str | None = Field(default=None, description="설명")

    def to_event(self) -> CustomerPaymentEvent:
        return CustomerPaymentEvent(
            payment_date=self.payment_date,
            amount=self.amount,
            payment_method=self.payment_method,
            customer_id=self.customer_id,
            invoice_reference=self.invoice_reference,
            reference_number=self.reference_number,
            description=self.description,
        )


class SupplierPurchaseRequest(BaseModel):
    """외상 매입 요청"""

    purchase_date: date = Field(..., description="매입 일자")
    amount: Decimal = Field(..., gt=0, description="매입 금액 (세전)")
    supplier_id: str | None = Field(default=None, description="공급업체 ID")
    debit_account_id: int | None = Field(default=None, gt=0, description="차변 계정 (기본: 재고)")
    tax_rate: Decimal | None = Field(default=None, ge=0, description="매입 세율 (%)")
    reference_number: str | None = Field(default=None, description="참조번호")
    description: str | None = Field(default=None, description="설명")

    def to_event(self) -> SupplierPurchaseEvent:
        return SupplierPurchaseEvent(
            purchase_date=self.purchase_date,
            amount=self.amount,
            supplier_id=self.supplier_id,
            debit_account_id=self.debit_account_id,
            tax_rate=self.tax_rate,
            reference_number=self.reference_number,
            description=self.description,
        )


class SupplierPaymentRequest(BaseModel):
    """공급업체 대금 지급 요청"""

    payment_date: date = Field(..., description="지급 일자")
    amount: Decimal = Field(..., gt=0, description="지급 금액")
    payment_method: str = Field(default="bank", description="결제수단")
    supplier_id: str | None = Field(default=None, description="공급업체 ID")
    purchase_reference: str | None = Field(default=None, description="매입 참조번호")
    reference_number: str | None = Field(default=None, description="참조번호")
    description: str | None = Field(default=None, description="설명")

    def to_event(self) -> SupplierPaymentEvent:
        return SupplierPaymentEvent(
            payment_date=self.payment_date,
            amount=self.amount,
            payment_method=self.payment_method,
            supplier_id=self.supplier_id,
            purchase_reference=self.purchase_reference,
            reference_number=self.reference_number,
            description=self.description,
        )


class ExpenseRequest(BaseModel):
    """비용 요청"""

    expense_date: date = Field(..., description="비용 일자")
    amount: Decimal = Field(..., gt=0, description="금액")
    expense_account_id: int = Field(..., gt=0, description="비용 계정 ID")
    payment_method: str | None = Field(default="cash", description="결제수단")
    on_credit: bool = Field(default=False, description="외상 여부 (매입채무)")
    supplier_id: str | None = Field(default=None, description="공급업체 ID")
    reference_number: str | None = Field(default=None, description="참조번호")
    description: str | None = Field(default=None, description="설명")

    def to_event(self) -> ExpenseEvent:
        return ExpenseEvent(
            expense_date=self.expense_date,
            amount=self.amount,
            expense_account_id=self.expense_account_id,
            payment_method=self.payment_method,
            on_credit=self.on_credit,
            supplier_id=self.supplier_id,
            reference_number=self.reference_number,
            description=self.description,
        )


class AdjustmentRequest(BaseModel):
    """조정 분개 요청"""

    adjustment_date: date = Field(..., description="조정 일자")
    account_id: int = Field(..., gt=0, description="조정 대상 계정 ID")
    amount: Decimal = Field(..., gt=0, description="금액")
    adjustment_type: AdjustmentType = Field(default=AdjustmentType.CORRECTION, description="조정 유형")
    entry_side: JournalSide = Field(default=JournalSide.DEBIT, description="대상 계정 방향")
    contra_account_id: int | None = Field(default=None, gt=0, description="상대 계정 (기본: 유형별 설정)")
    reference_number: str | None = Field(default=None, description="참조번호")
    description: str | None = Field(default=None, description="설명")

    def to_event(self) -> AdjustmentEvent:
        return AdjustmentEvent(
            adjustment_date=self.adjustment_date,
            account_id=self.account_id,
            amount=self.amount,
            adjustment_type=self.adjustment_type,
            entry_side=self.entry_side,
            contra_account_id=self.contra_account_id,
            reference_number=self.reference_number,
            description=self.description,
        )


class SimpleTransactionRequest(BaseModel):
    """단순 거래 요청 (차변 1줄 / 대변 1줄)"""

    transaction_date: date = Field(..., description="거래 일자")
    amount: Decimal = Field(..., gt=0, description="금액")
    debit_account_id: int = Field(..., gt=0, description="차변 계정 ID")
    credit_account_id: int = Field(..., gt=0, description="대변 계정 ID")
    reference_number: str | None = Field(default=None, description="참조번호")
    description: str | None = Field(default=None, description="설명")

    def to_event(self) -> SimpleTransaction:
        return SimpleTransaction(
            transaction_date=self.transaction_date,
            amount=self.amount,
            debit_account_id=self.debit_account_id,
            credit_account_id=self.credit_account_id,
            reference_number=self.reference_number,
            description=self.description,
        )


# =========================================================================
# 자금 이체
# =========================================================================


class FundTransferRequest(BaseModel):
    """자금 이체 요청"""

    transfer_date: date = Field(..., description="이체 일자")
    from_account_id: int = Field(..., gt=0, description="출금 계정 ID")
    to_account_id: int = Field(..., gt=0, description="입금 계정 ID")
    amount: Decimal = Field(..., gt=0, description="금액")
    reference_number: str | None = Field(default=None, description="참조번호")
    description: str | None = Field(default=None, description="설명")

    def to_event(self) -> FundTransferEvent:
        return FundTransferEvent(
            transfer_date=self.transfer_date,
            from_account_id=self.from_account_id,
            to_account_id=self.to_account_id,
            amount=self.amount,
            reference_number=self.reference_number,
            description=self.description,
        )


class FundTransferReverseRequest(BaseModel):
    """자금 이체 취소 요청"""

    reversal_date: date | None = Field(default=None, description="취소 일자 (기본: 오늘)")

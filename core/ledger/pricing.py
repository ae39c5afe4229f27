"""
판매 품목 금액 계산

수량 × 단가 → 할인 → 세금 분리(별도/포함).
분개 생성기와 장바구니가 같은 계산을 사용.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from core.constants import Money
from core.ledger.errors import LedgerValidationError
from core.ledger.money import quantize, to_decimal
from core.ledger.types import DiscountType

if TYPE_CHECKING:
    from core.domain.events import SaleItem

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class ItemAmounts:
    """품목 금액 분해 결과

    base + tax == total 이 항상 성립.
    """

    gross: Decimal  # 수량 × 단가
    discount: Decimal  # 할인액
    base: Decimal  # 세전 금액 (매출 계상액)
    tax: Decimal  # 세액
    total: Decimal  # 고객 청구액
    cost: Decimal  # 원가 (수량 × 단위원가, 없으면 0)


def split_tax_exclusive(base: Decimal, rate: Decimal) -> tuple[Decimal, Decimal]:
    """별도 세금: tax = round(base × rate / 100)

    Returns:
        (tax, total)
    """
    tax = quantize(base * rate / HUNDRED)
    return tax, base + tax


def split_tax_inclusive(total: Decimal, rate: Decimal) -> tuple[Decimal, Decimal]:
    """포함 세금: tax = round(total − total / (1 + rate / 100))

    Returns:
        (base, tax)
    """
    if rate == 0:
        return total, Money.ZERO
    tax = quantize(total - total / (1 + rate / HUNDRED))
    return total - tax, tax


def compute_item_amounts(
    quantity: Decimal | int,
    unit_price: Decimal,
    discount_type: DiscountType | None = None,
    discount_value: Decimal | None = None,
    tax_rate: Decimal | None = None,
    tax_inclusive: bool = False,
    unit_cost: Decimal | None = None,
    label: str = "item",
) -> ItemAmounts:
    """품목 1개의 금액 계산

    Args:
        quantity: 수량 (> 0)
        unit_price: 단가 (>= 0)
        discount_type: 할인 방식 (None이면 할인 없음)
        discount_value: 정률이면 %, 정액이면 금액
        tax_rate: 세율 % (None이면 0)
        tax_inclusive: 단가에 세금 포함 여부
        unit_cost: 단위 원가 (재고 원가 분개용)
        label: 오류 메시지용 품목 이름

    Raises:
        LedgerValidationError: 수량/단가/할인/세율이 잘못된 경우
    """
    qty = to_decimal(quantity, f"{label} quantity")
    if qty <= 0:
        raise LedgerValidationError(f"{label}: quantity must be positive, got {qty}")
    if unit_price < 0:
        raise LedgerValidationError(f"{label}: unit price must not be negative")

    gross = quantize(qty * unit_price)

    # 할인
    discount = Money.ZERO
    if discount_type is not None and discount_value:
        value = to_decimal(discount_value, f"{label} discount")
        if value < 0:
            raise LedgerValidationError(f"{label}: discount must not be negative")
        if discount_type == DiscountType.PERCENTAGE:
            if value > HUNDRED:
                raise LedgerValidationError(f"{label}: discount exceeds 100%")
            discount = quantize(gross * value / HUNDRED)
        else:
            discount = quantize(value)
        if discount > gross:
            raise LedgerValidationError(
                f"{label}: discount {discount} exceeds line amount {gross}"
            )

    net = gross - discount

    # 세금 분리
    rate = to_decimal(tax_rate, f"{label} tax rate") if tax_rate is not None else Decimal("0")
    if rate < 0:
        raise LedgerValidationError(f"{label}: tax rate must not be negative")

    if tax_inclusive:
        base, tax = split_tax_inclusive(net, rate)
        total = net
    else:
        base = net
        tax, total = split_tax_exclusive(net, rate)

    cost = Money.ZERO
    if unit_cost is not None:
        if unit_cost < 0:
            raise LedgerValidationError(f"{label}: unit cost must not be negative")
        cost = quantize(qty * unit_cost)

    return ItemAmounts(
        gross=gross,
        discount=discount,
        base=base,
        tax=tax,
        total=total,
        cost=cost,
    )


@dataclass(frozen=True)
class SaleTotals:
    """판매 품목 합계"""

    base: Decimal
    tax: Decimal
    total: Decimal
    cost: Decimal


def price_items(items: list[SaleItem]) -> SaleTotals:
    """품목별 금액 계산 후 합산

    Raises:
        LedgerValidationError: 품목이 없거나 단가가 Unknown인 경우
    """
    if not items:
        raise LedgerValidationError("at least one item is required")

    base = tax = total = cost = Money.ZERO
    for index, item in enumerate(items, start=1):
        label = item.description or f"item {index}"
        amounts = compute_item_amounts(
            quantity=item.quantity,
            unit_price=item.unit_price.require(label),
            discount_type=item.discount_type,
            discount_value=item.discount_value,
            tax_rate=item.tax_rate,
            tax_inclusive=item.tax_inclusive,
            unit_cost=item.unit_cost,
            label=label,
        )
        base += amounts.base
        tax += amounts.tax
        total += amounts.total
        cost += amounts.cost

    return SaleTotals(base=base, tax=tax, total=total, cost=cost)

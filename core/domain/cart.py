"""
계산 세션 (장바구니)

세션 단위로 소유되는 품목 목록. 전역 상태를 두지 않음.
결제 시 SaleEvent로 변환되어 매출 분개 생성기로 전달됨.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any

from core.domain.events import SaleEvent, SaleItem
from core.domain.state_machines import CartState, CartStateMachine, StateMachineError
from core.ledger.errors import LedgerValidationError
from core.ledger.money import Price, to_decimal
from core.ledger.pricing import SaleTotals, compute_item_amounts, price_items
from core.ledger.types import DiscountType

logger = logging.getLogger(__name__)


class Cart:
    """계산 세션

    Args:
        session_id: 세션 ID (없으면 생성)
        customer_id: 고객 ID (외상 매출 시 보조원장 키)
        payment_method: 결제수단 (cash, bank, card ...)
        on_credit: 외상 여부

    사용 예시:
    ```python
    cart = Cart(customer_id="C-001")
    cart.add_item("Coffee beans", 2, Price.known("12.50"), tax_rate=Decimal("10"))
    sale = await service.checkout(cart)
    ```
    """

    def __init__(
        self,
        session_id: str | None = None,
        customer_id: str | None = None,
        payment_method: str | None = "cash",
        on_credit: bool = False,
    ):
        self.session_id = session_id or uuid.uuid4().hex
        self.customer_id = customer_id
        self.payment_method = payment_method
        self.on_credit = on_credit
        self._items: list[SaleItem] = []
        self._machine = CartStateMachine()

    # -------------------------------------------------------------------------
    # 상태
    # -------------------------------------------------------------------------

    @property
    def state(self) -> CartState:
        return CartState(self._machine.state)

    @property
    def items(self) -> list[SaleItem]:
        return list(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def has_unknown_prices(self) -> bool:
        return any(not item.unit_price.is_known for item in self._items)

    def _require_open(self) -> None:
        if not self._machine.is_open:
            raise StateMachineError(
                f"cart {self.session_id} is {self._machine.state.lower()}",
                {"session_id": self.session_id, "state": self._machine.state},
            )

    # -------------------------------------------------------------------------
    # 품목
    # -------------------------------------------------------------------------

    def add_item(
        self,
        description: str,
        quantity: Any,
        unit_price: Price | Any,
        tax_rate: Any = None,
        tax_inclusive: bool = False,
        discount_type: DiscountType | None = None,
        discount_value: Any = None,
        unit_cost: Any = None,
        product_id: str | None = None,
    ) -> SaleItem:
        """품목 추가

        단가는 Price 또는 숫자. Unknown 가격은 담을 수 있지만 결제는 불가.

        Raises:
            LedgerValidationError: 수량/할인/세율이 잘못된 경우
        """
        self._require_open()

        price = unit_price if isinstance(unit_price, Price) else Price.known(unit_price)
        item = SaleItem(
            description=description,
            quantity=to_decimal(quantity, "quantity"),
            unit_price=price,
            tax_rate=to_decimal(tax_rate, "tax rate") if tax_rate is not None else None,
            tax_inclusive=tax_inclusive,
            discount_type=discount_type,
            discount_value=(
                to_decimal(discount_value, "discount") if discount_value is not None else None
            ),
            unit_cost=to_decimal(unit_cost, "unit cost") if unit_cost is not None else None,
            product_id=product_id,
        )

        if item.quantity <= 0:
            raise LedgerValidationError(f"{description}: quantity must be positive, got {item.quantity}")

        # 가격이 알려진 품목은 담을 때 금액 검증
        if price.is_known:
            compute_item_amounts(
                quantity=item.quantity,
                unit_price=price.require(description),
                discount_type=item.discount_type,
                discount_value=item.discount_value,
                tax_rate=item.tax_rate,
                tax_inclusive=item.tax_inclusive,
                unit_cost=item.unit_cost,
                label=description,
            )

        self._items.append(item)
        return item

    def remove_item(self, index: int) -> SaleItem:
        """품목 삭제 (0부터 시작하는 위치)

        Raises:
            LedgerValidationError: 위치가 범위를 벗어난 경우
        """
        self._require_open()
        if not 0 <= index < len(self._items):
            raise LedgerValidationError(
                f"cart has no item at position {index}",
                {"index": index, "item_count": len(self._items)},
            )
        return self._items.pop(index)

    def remove_product(self, product_id: str) -> int:
        """상품 ID로 품목 삭제

        Returns:
            삭제된 품목 수
        """
        self._require_open()
        before = len(self._items)
        self._items = [item for item in self._items if item.product_id != product_id]
        return before - len(self._items)

    def clear(self) -> None:
        self._require_open()
        self._items.clear()

    # -------------------------------------------------------------------------
    # 금액 / 결제
    # -------------------------------------------------------------------------

    def totals(self) -> SaleTotals:
        """합계 (세전, 세액, 청구액, 원가)

        Raises:
            LedgerValidationError: 비어 있거나 가격이 Unknown인 품목이 있는 경우
        """
        return price_items(self._items)

    @property
    def total(self) -> Decimal:
        return self.totals().total

    def to_sale_event(
        self,
        sale_date: date | None = None,
        reference_number: str | None = None,
        description: str | None = None,
    ) -> SaleEvent:
        """매출 이벤트로 변환

        Raises:
            LedgerValidationError: 비어 있거나 가격이 Unknown인 품목이 있는 경우
        """
        self._require_open()

        if self.is_empty:
            raise LedgerValidationError(f"cart {self.session_id} is empty")

        unknown = [item.description for item in self._items if not item.unit_price.is_known]
        if unknown:
            raise LedgerValidationError(
                f"cannot check out items with unknown price: {', '.join(unknown)}",
                {"items": unknown},
            )

        if not self.on_credit and not self.payment_method:
            raise LedgerValidationError("payment method is required unless the sale is on credit")

        return SaleEvent(
            sale_date=sale_date or date.today(),
            items=list(self._items),
            payment_method=self.payment_method,
            on_credit=self.on_credit,
            customer_id=self.customer_id,
            reference_number=reference_number,
            description=description,
        )

    def mark_checked_out(self) -> None:
        """결제 완료 (OPEN → CHECKED_OUT)"""
        self._machine.transition(CartState.CHECKED_OUT)
        logger.debug(f"계산 완료: cart={self.session_id}")

    def abandon(self) -> None:
        """세션 폐기 (OPEN → ABANDONED)"""
        self._machine.transition(CartState.ABANDONED)

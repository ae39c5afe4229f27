"""
금액 유틸리티

모든 금액은 Decimal로 다루고 센트 단위로 반올림(ROUND_HALF_UP).
가격은 Known(금액) / Unknown(품절, 가격 미정) 태그로 구분.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from core.constants import Money
from core.ledger.errors import LedgerValidationError


def to_decimal(value: Any, field_name: str = "amount") -> Decimal:
    """임의 값을 Decimal로 변환 (반올림 없음)

    float은 repr 문자열을 거쳐 변환해 이진 오차를 옮기지 않음.

    Raises:
        LedgerValidationError: 숫자로 해석할 수 없는 경우
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise LedgerValidationError(f"{field_name} must be a number, got {value!r}")
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise LedgerValidationError(
                f"{field_name} must be a number, got {value!r}"
            ) from e
    else:
        raise LedgerValidationError(f"{field_name} must be a number, got {value!r}")

    if not result.is_finite():
        raise LedgerValidationError(f"{field_name} must be finite, got {value!r}")
    return result


def quantize(value: Decimal) -> Decimal:
    """센트 단위 반올림"""
    return value.quantize(Money.CENT, rounding=ROUND_HALF_UP)


def to_money(value: Any, field_name: str = "amount") -> Decimal:
    """금액으로 변환 (센트 단위 반올림)"""
    return quantize(to_decimal(value, field_name))


def format_money(value: Decimal) -> str:
    """메시지용 금액 문자열 (예: 120.00)"""
    return f"{quantize(value):.2f}"


@dataclass(frozen=True)
class Price:
    """상품 단가

    amount가 None이면 Unknown (품절, 가격 미정).
    문자열 센티넬("out of stock", "N/A") 대신 이 타입을 사용.
    """

    amount: Decimal | None = None

    @classmethod
    def known(cls, amount: Any) -> Price:
        value = to_money(amount, "price")
        if value < 0:
            raise LedgerValidationError(f"price must not be negative, got {value}")
        return cls(value)

    @classmethod
    def unknown(cls) -> Price:
        return cls(None)

    @property
    def is_known(self) -> bool:
        return self.amount is not None

    def require(self, label: str = "item") -> Decimal:
        """알려진 가격 반환

        Raises:
            LedgerValidationError: 가격이 Unknown인 경우
        """
        if self.amount is None:
            raise LedgerValidationError(f"price of {label} is unknown")
        return self.amount

    def __str__(self) -> str:
        return format_money(self.amount) if self.amount is not None else "unknown"

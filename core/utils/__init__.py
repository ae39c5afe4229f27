"""
유틸리티 패키지

참조번호 생성/파싱 등 공통 유틸리티
"""

from core.utils.references import (
    REVERSAL_SUFFIX,
    is_reversal_reference,
    make_reference,
    make_reversal_reference,
    parse_reference,
    sequence_key,
)

__all__ = [
    "REVERSAL_SUFFIX",
    "is_reversal_reference",
    "make_reference",
    "make_reversal_reference",
    "parse_reference",
    "sequence_key",
]

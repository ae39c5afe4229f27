"""
참조번호 유틸리티

분개 참조번호 생성 및 파싱 기능 제공
규칙: {PREFIX}-{YYYY}-{NNNNNN} (예: INV-2026-000042)
역분개: {원본 참조번호}-REV
"""

import re

# 역분개 참조번호 접미사
REVERSAL_SUFFIX: str = "REV"

# 일련번호 자릿수
SEQUENCE_WIDTH: int = 6

_REFERENCE_PATTERN = re.compile(r"^(?P<prefix>[A-Z]+)-(?P<year>\d{4})-(?P<seq>\d+)$")


def make_reference(prefix: str, year: int, sequence: int) -> str:
    """결정적 참조번호 생성

    Args:
        prefix: 거래 유형 접두사 (INV, PAY, EXP ...)
        year: 분개 연도
        sequence: 접두사·연도별 일련번호 (1부터)

    Returns:
        {PREFIX}-{YYYY}-{NNNNNN} 형식

    Example:
        >>> make_reference("INV", 2026, 42)
        'INV-2026-000042'
    """
    if not prefix:
        raise ValueError("prefix는 비어 있을 수 없습니다")
    if sequence < 1:
        raise ValueError(f"sequence는 1 이상이어야 합니다: {sequence}")

    return f"{prefix.upper()}-{year:04d}-{sequence:0{SEQUENCE_WIDTH}d}"


def sequence_key(prefix: str, year: int) -> str:
    """reference_sequence 테이블 키 (접두사·연도별)"""
    return f"{prefix.upper()}-{year:04d}"


def parse_reference(reference: str) -> tuple[str, int, int] | None:
    """참조번호에서 (접두사, 연도, 일련번호) 추출

    Returns:
        (prefix, year, sequence) 또는 None (형식 불일치 시)

    Example:
        >>> parse_reference("PAY-2026-000007")
        ('PAY', 2026, 7)
        >>> parse_reference("manual-ref")
        None
    """
    if not reference:
        return None

    match = _REFERENCE_PATTERN.match(reference)
    if match is None:
        return None

    return match.group("prefix"), int(match.group("year")), int(match.group("seq"))


def make_reversal_reference(original_reference: str) -> str:
    """역분개 참조번호 생성

    Example:
        >>> make_reversal_reference("INV-2026-000042")
        'INV-2026-000042-REV'
    """
    if not original_reference:
        raise ValueError("original_reference는 비어 있을 수 없습니다")

    return f"{original_reference}-{REVERSAL_SUFFIX}"


def is_reversal_reference(reference: str) -> bool:
    """역분개 참조번호인지 확인"""
    if not reference:
        return False

    return reference.endswith(f"-{REVERSAL_SUFFIX}")

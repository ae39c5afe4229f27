"""
Ledger 오류 정의

분개 전기/조회/역분개 실패를 종류별로 구분.
모든 오류는 LedgerError를 상속하며 kind와 retryable 정보를 가짐.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """오류 종류"""

    UNBALANCED = "Unbalanced"
    UNKNOWN_ACCOUNT = "UnknownAccount"
    EMPTY_ENTRY = "EmptyEntry"
    DUPLICATE_REFERENCE = "DuplicateReference"
    ALREADY_REVERSED = "AlreadyReversed"
    NOT_FOUND = "NotFound"
    VALIDATION_ERROR = "ValidationError"
    PERSISTENCE_FAILURE = "PersistenceFailure"


class LedgerError(Exception):
    """Ledger 오류 기본 클래스

    Args:
        message: 사용자에게 보여줄 메시지 (어느 라인/불변식이 실패했는지)
        details: 추가 정보 (라인 번호, 합계 등)
    """

    kind: ErrorKind = ErrorKind.VALIDATION_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def retryable(self) -> bool:
        """재시도로 해결될 수 있는 오류인지 여부"""
        return False

    def to_dict(self) -> dict[str, Any]:
        """JSON 응답용 딕셔너리"""
        return {
            "error": self.kind.value,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
        }


class UnbalancedEntryError(LedgerError):
    """차변 합계 ≠ 대변 합계"""

    kind = ErrorKind.UNBALANCED


class UnknownAccountError(LedgerError):
    """존재하지 않는 계정 참조"""

    kind = ErrorKind.UNKNOWN_ACCOUNT


class EmptyEntryError(LedgerError):
    """라인이 2개 미만이거나 모든 금액이 0"""

    kind = ErrorKind.EMPTY_ENTRY


class DuplicateReferenceError(LedgerError):
    """참조번호 중복"""

    kind = ErrorKind.DUPLICATE_REFERENCE


class AlreadyReversedError(LedgerError):
    """이미 역분개된 분개"""

    kind = ErrorKind.ALREADY_REVERSED


class NotFoundError(LedgerError):
    """대상이 존재하지 않음"""

    kind = ErrorKind.NOT_FOUND


class LedgerValidationError(LedgerError):
    """입력 형식 오류"""

    kind = ErrorKind.VALIDATION_ERROR


class PersistenceFailureError(LedgerError):
    """저장소 오류

    DB 잠금/busy는 재시도 가능, 그 외는 치명적 오류.
    """

    kind = ErrorKind.PERSISTENCE_FAILURE

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ):
        super().__init__(message, details)
        self._retryable = retryable

    @property
    def retryable(self) -> bool:
        return self._retryable

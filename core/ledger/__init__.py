"""
복식부기 (Double-Entry Bookkeeping) 시스템

모든 금융 이벤트를 균형 잡힌 분개로 기록하고
원장, 시산표, 재무제표로 집계하는 회계 코어.

패키지 초기화 시에는 의존성 없는 타입/오류/금액 모듈만 불러옴.
(core.domain.events가 core.ledger.money를 사용하므로 순환 import 방지)

사용 예시:
```python
from core.ledger.schema import init_ledger_schema
from core.ledger.service import AccountingService

await init_ledger_schema(db)
service = await AccountingService.create(db, settings.config)

# 매출 기록
entry = await service.record_sale(sale_event)

# 시산표 조회
trial_balance = await service.get_trial_balance()
```
"""

from core.ledger.errors import (
    AlreadyReversedError,
    DuplicateReferenceError,
    EmptyEntryError,
    ErrorKind,
    LedgerError,
    LedgerValidationError,
    NotFoundError,
    PersistenceFailureError,
    UnbalancedEntryError,
    UnknownAccountError,
)
from core.ledger.money import Price
from core.ledger.types import (
    AccountRole,
    AccountType,
    AdjustmentType,
    CashFlowActivity,
    EntryStatus,
    JournalSide,
    TransactionType,
    TransferStatus,
)

__all__ = [
    "Price",
    # Enum
    "AccountRole",
    "AccountType",
    "AdjustmentType",
    "CashFlowActivity",
    "EntryStatus",
    "JournalSide",
    "TransactionType",
    "TransferStatus",
    # 오류
    "ErrorKind",
    "LedgerError",
    "UnbalancedEntryError",
    "UnknownAccountError",
    "EmptyEntryError",
    "DuplicateReferenceError",
    "AlreadyReversedError",
    "NotFoundError",
    "LedgerValidationError",
    "PersistenceFailureError",
]

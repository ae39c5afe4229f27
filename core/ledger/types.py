"""
복식부기 타입 정의

계정 유형, 분개 상태, 조정 유형 등 Ledger 시스템에서 사용하는 Enum 정의
"""

from enum import Enum


class AccountType(str, Enum):
    """계정 유형

    복식부기의 5대 계정 유형.
    ASSET/EXPENSE는 차변이 정상잔액, 나머지는 대변이 정상잔액.
    """

    ASSET = "asset"  # 자산 (현금, 예금, 매출채권, 재고)
    LIABILITY = "liability"  # 부채 (매입채무, 부가세예수금)
    EQUITY = "equity"  # 자본 (자본금, 기초잔액 조정)
    REVENUE = "revenue"  # 수익 (매출)
    EXPENSE = "expense"  # 비용 (매출원가, 판관비)

    @property
    def is_debit_normal(self) -> bool:
        """차변 정상잔액 계정 여부"""
        return self in (AccountType.ASSET, AccountType.EXPENSE)


class JournalSide(str, Enum):
    """분개 방향 (차변/대변)"""

    DEBIT = "debit"  # 차변 (자산 증가, 비용 증가)
    CREDIT = "credit"  # 대변 (자산 감소, 수익 증가)


class EntryStatus(str, Enum):
    """분개 상태

    전이 규칙:
    - pending → posted: 전기
    - posted → reversed: 역분개
    """

    PENDING = "pending"
    POSTED = "posted"
    REVERSED = "reversed"


class AdjustmentType(str, Enum):
    """조정 분개 유형"""

    NON_ADJUSTMENT = "NON_ADJUSTMENT"
    CORRECTION = "correction"  # 오류 수정
    RECONCILIATION = "reconciliation"  # 대사 조정
    DEPRECIATION = "depreciation"  # 감가상각
    ACCRUAL = "accrual"  # 미지급/미수 계상
    PREPAID = "prepaid"  # 선급비용
    DEFERRAL = "deferral"  # 이연수익
    WRITE_OFF = "write-off"  # 대손상각
    TAX = "tax"  # 세금 조정


class TransactionType(str, Enum):
    """분개 거래 유형

    어떤 생성기가 분개를 만들었는지 기록.
    """

    MANUAL = "MANUAL"  # 사용자 직접 입력
    SIMPLE = "SIMPLE"  # 차변/대변 1:1 단순 거래
    SALE = "SALE"  # 매출 (현금/외상)
    SALES_RETURN = "SALES_RETURN"  # 매출 반품
    CUSTOMER_PAYMENT = "CUSTOMER_PAYMENT"  # 고객 대금 수령
    SUPPLIER_PURCHASE = "SUPPLIER_PURCHASE"  # 외상 매입
    SUPPLIER_PAYMENT = "SUPPLIER_PAYMENT"  # 공급업체 대금 지급
    EXPENSE = "EXPENSE"  # 비용
    FUND_TRANSFER = "FUND_TRANSFER"  # 자금 이체
    ADJUSTMENT = "ADJUSTMENT"  # 조정
    OPENING_BALANCE = "OPENING_BALANCE"  # 기초 잔액
    REVERSAL = "REVERSAL"  # 역분개


# 거래 유형별 참조번호 접두사
REFERENCE_PREFIXES: dict[TransactionType, str] = {
    TransactionType.MANUAL: "JE",
    TransactionType.SIMPLE: "TX",
    TransactionType.SALE: "INV",
    TransactionType.SALES_RETURN: "RET",
    TransactionType.CUSTOMER_PAYMENT: "PAY",
    TransactionType.SUPPLIER_PURCHASE: "PUR",
    TransactionType.SUPPLIER_PAYMENT: "SPAY",
    TransactionType.EXPENSE: "EXP",
    TransactionType.FUND_TRANSFER: "FT",
    TransactionType.ADJUSTMENT: "ADJ",
    TransactionType.OPENING_BALANCE: "OB",
    TransactionType.REVERSAL: "REV",
}


class CashFlowActivity(str, Enum):
    """현금흐름표 활동 구분"""

    OPERATING = "operating"  # 영업활동
    INVESTING = "investing"  # 투자활동
    FINANCING = "financing"  # 재무활동


class TransferStatus(str, Enum):
    """자금 이체 상태

    전이 규칙:
    - completed → reversed: 이체 취소 (역분개)
    """

    COMPLETED = "completed"
    REVERSED = "reversed"


class DiscountType(str, Enum):
    """판매 품목 할인 방식"""

    PERCENTAGE = "percentage"  # 정률 (총액의 %)
    FIXED = "fixed"  # 정액


class AccountRole(str, Enum):
    """거래 생성기가 사용하는 계정 역할

    실제 계정은 settings.yaml의 account_roles로 주입.
    """

    CASH = "cash"
    BANK = "bank"
    ACCOUNTS_RECEIVABLE = "accounts_receivable"
    INVENTORY = "inventory"
    PURCHASE_TAX_RECOVERABLE = "purchase_tax_recoverable"
    ACCOUNTS_PAYABLE = "accounts_payable"
    SALES_TAX_PAYABLE = "sales_tax_payable"
    OPENING_BALANCE_EQUITY = "opening_balance_equity"
    SALES_REVENUE = "sales_revenue"
    COST_OF_GOODS_SOLD = "cost_of_goods_sold"


# 계정 유형별 코드 시작값 (코드 자동 생성용)
ACCOUNT_CODE_BASE: dict[AccountType, int] = {
    AccountType.ASSET: 1000,
    AccountType.LIABILITY: 2000,
    AccountType.EQUITY: 3000,
    AccountType.REVENUE: 4000,
    AccountType.EXPENSE: 5000,
}


# 기본 계정과목표 (스키마 초기화 시 생성)
DEFAULT_ACCOUNTS: list[tuple[str, str, str, int, int, str | None]] = [
    # (account_code, account_name, account_type, is_current, is_cash, cash_flow_activity)

    # 자산 - 유동
    ("1000", "Cash In Hand", "asset", 1, 1, None),
    ("1010", "Trade Accounts Receivable", "asset", 1, 0, None),
    ("1011", "Notes Receivable", "asset", 1, 0, None),
    ("1012", "Interest Receivable", "asset", 1, 0, None),
    ("1015", "Bank Account", "asset", 1, 1, None),
    ("1020", "Inventory", "asset", 1, 0, None),
    ("1030", "Unbilled Purchases", "asset", 1, 0, None),
    ("1040", "Prepaid Expenses", "asset", 1, 0, None),
    ("1050", "Advances", "asset", 1, 0, None),
    ("1060", "Purchase Tax Recoverable", "asset", 1, 0, None),

    # 자산 - 비유동
    ("1500", "Fixed Assets", "asset", 0, 0, "investing"),
    ("1510", "Accumulated Depreciation", "asset", 0, 0, "investing"),

    # 부채 - 유동
    ("2000", "Accounts Payable", "liability", 1, 0, None),
    ("2010", "Sales Tax Payable", "liability", 1, 0, None),
    ("2030", "VAT Payable", "liability", 1, 0, None),
    ("2050", "Income Tax Payable", "liability", 1, 0, None),
    ("2060", "Tax Adjustments", "liability", 1, 0, None),
    ("2100", "Accrued Liabilities", "liability", 1, 0, None),
    ("2110", "Deferred Revenue", "liability", 1, 0, None),
    ("2120", "Customer Prepayments", "liability", 1, 0, None),

    # 부채 - 비유동
    ("2500", "Long-term Loans", "liability", 0, 0, "financing"),

    # 자본
    ("3000", "Owner's Equity", "equity", 0, 0, "financing"),
    ("3050", "Opening Balance Equity", "equity", 0, 0, "financing"),
    ("3100", "Correction Adjustments", "equity", 0, 0, "operating"),
    ("3110", "Reconciliation Adjustments", "equity", 0, 0, "operating"),
    ("3900", "Suspense Account", "equity", 0, 0, "operating"),  # 미결 계정

    # 수익
    ("4000", "Sales Revenue", "revenue", 1, 0, None),
    ("4100", "Other Income", "revenue", 1, 0, None),

    # 비용
    ("5000", "Cost of Goods Sold", "expense", 1, 0, None),
    ("6000", "Discounts", "expense", 1, 0, None),
    ("6100", "Loss from Disposal", "expense", 1, 0, None),
    ("6200", "Write-off Expense", "expense", 1, 0, None),
    ("6300", "Depreciation Expense", "expense", 1, 0, None),
    ("6400", "General Expenses", "expense", 1, 0, None),
]


# 계정 역할 기본값 (settings.yaml에서 덮어쓰기 가능)
DEFAULT_ACCOUNT_ROLES: dict[AccountRole, str] = {
    AccountRole.CASH: "1000",
    AccountRole.BANK: "1015",
    AccountRole.ACCOUNTS_RECEIVABLE: "1010",
    AccountRole.INVENTORY: "1020",
    AccountRole.PURCHASE_TAX_RECOVERABLE: "1060",
    AccountRole.ACCOUNTS_PAYABLE: "2000",
    AccountRole.SALES_TAX_PAYABLE: "2010",
    AccountRole.OPENING_BALANCE_EQUITY: "3050",
    AccountRole.SALES_REVENUE: "4000",
    AccountRole.COST_OF_GOODS_SOLD: "5000",
}

# 결제수단 기본값 (이름 → 계정 코드)
DEFAULT_PAYMENT_METHODS: dict[str, str] = {
    "cash": "1000",
    "bank": "1015",
}

# 조정 유형별 상대 계정 기본값
DEFAULT_ADJUSTMENT_ACCOUNTS: dict[AdjustmentType, str] = {
    AdjustmentType.NON_ADJUSTMENT: "3900",
    AdjustmentType.CORRECTION: "3100",
    AdjustmentType.RECONCILIATION: "3110",
    AdjustmentType.DEPRECIATION: "1510",
    AdjustmentType.ACCRUAL: "2100",
    AdjustmentType.PREPAID: "1040",
    AdjustmentType.DEFERRAL: "2110",
    AdjustmentType.WRITE_OFF: "6200",
    AdjustmentType.TAX: "2060",
}

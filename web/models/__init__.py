"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    AccountCreateRequest,
    AccountUpdateRequest,
    AdjustmentRequest,
    CheckoutRequest,
    CorrectEntryRequest,
    CustomerPaymentRequest,
    ExpenseRequest,
    FundTransferRequest,
    FundTransferReverseRequest,
    JournalEntryRequest,
    JournalLineRequest,
    ReverseEntryRequest,
    SaleItemRequest,
    SaleRequest,
    SalesReturnRequest,
    SimpleTransactionRequest,
    SupplierPaymentRequest,
    SupplierPurchaseRequest,
)
from web.models.responses import (
    AccountListResponse,
    AccountResponse,
    BalanceResponse,
    BalanceSheetResponse,
    CashFlowResponse,
    CorrectionResponse,
    ErrorResponse,
    FundTransferListResponse,
    FundTransferResponse,
    HealthResponse,
    IncomeStatementResponse,
    JournalEntryListResponse,
    JournalEntryResponse,
    LedgerResponse,
    PartyBalanceResponse,
    TrialBalanceResponse,
)

__all__ = [
    # Requests
    "AccountCreateRequest",
    "AccountUpdateRequest",
    "AdjustmentRequest",
    "CheckoutRequest",
    "CorrectEntryRequest",
    "CustomerPaymentRequest",
    "ExpenseRequest",
    "FundTransferRequest",
    "FundTransferReverseRequest",
    "JournalEntryRequest",
    "JournalLineRequest",
    "ReverseEntryRequest",
    "SaleItemRequest",
    "SaleRequest",
    "SalesReturnRequest",
    "SimpleTransactionRequest",
    "SupplierPaymentRequest",
    "SupplierPurchaseRequest",
    # Responses
    "AccountListResponse",
    "AccountResponse",
    "BalanceResponse",
    "BalanceSheetResponse",
    "CashFlowResponse",
    "CorrectionResponse",
    "ErrorResponse",
    "FundTransferListResponse",
    "FundTransferResponse",
    "HealthResponse",
    "IncomeStatementResponse",
    "JournalEntryListResponse",
    "JournalEntryResponse",
    "LedgerResponse",
    "PartyBalanceResponse",
    "TrialBalanceResponse",
]

"""
업무 거래 API 라우트

각 거래는 분개 엔진을 거쳐 균형 분개로 전기되고, 전기된 분개를 반환.
"""

from fastapi import APIRouter, Depends

from core.ledger.service import AccountingService
from web.dependencies import get_service
from web.models.requests import (
    AdjustmentRequest,
    CheckoutRequest,
    CustomerPaymentRequest,
    ExpenseRequest,
    SaleRequest,
    SalesReturnRequest,
    SimpleTransactionRequest,
    SupplierPaymentRequest,
    SupplierPurchaseRequest,
)
from web.models.responses import JournalEntryResponse

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])


@router.post("/sales", response_model=JournalEntryResponse, status_code=201)
async def record_sale(
    request: SaleRequest,
    service: AccountingService = Depends(get_service),
):
    """매출 (현금/외상)

    가격 미정 품목이 있으면 400.
    """
    entry = await service.record_sale(request.to_event())
    return JournalEntryResponse.from_entry(entry)


@router.post("/checkout", response_model=JournalEntryResponse, status_code=201)
async def checkout(
    request: CheckoutRequest,
    service: AccountingService = Depends(get_service),
):
    """계산 (요청 단위 계산 세션 → 매출 전기)"""
    cart = request.to_cart()
    entry = await service.checkout(
        cart,
        sale_date=request.sale_date,
        reference_number=request.reference_number,
        description=request.description,
    )
    return JournalEntryResponse.from_entry(entry)


@router.post("/sales-returns", response_model=JournalEntryResponse, status_code=201)
async def record_sales_return(
    request: SalesReturnRequest,
    service: AccountingService = Depends(get_service),
):
    """매출 반품"""
    entry = await service.record_sales_return(request.to_event())
    return JournalEntryResponse.from_entry(entry)


@router.post("/customer-payments", response_model=JournalEntryResponse, status_code=201)
async def record_customer_payment(
    request: CustomerPaymentRequest,
    service: AccountingService = Depends(get_service),
):
    """고객 대금 수령 (매출채권 감소)"""
    entry = await service.record_payment(request.to_event())
    return JournalEntryResponse.from_entry(entry)


@router.post("/supplier-purchases", response_model=JournalEntryResponse, status_code=201)
async def record_supplier_purchase(
    request: SupplierPurchaseRequest,
    service: AccountingService = Depends(get_service),
):
    """외상 매입 (매입채무 증가)"""
    entry = await service.record_supplier_purchase(request.to_event())
    return JournalEntryResponse.from_entry(entry)


@router.post("/supplier-payments", response_model=JournalEntryResponse, status_code=201)
async def record_supplier_payment(
    request: SupplierPaymentRequest,
    service: AccountingService = Depends(get_service),
):
    """공급업체 대금 지급 (잔액 부족 시 400)"""
    entry = await service.record_supplier_payment(request.to_event())
    return JournalEntryResponse.from_entry(entry)


@router.post("/expenses", response_model=JournalEntryResponse, status_code=201)
async def record_expense(
    request: ExpenseRequest,
    service: AccountingService = Depends(get_service),
):
    """비용"""
    entry = await service.record_expense(request.to_event())
    return JournalEntryResponse.from_entry(entry)


@router.post("/adjustments", response_model=JournalEntryResponse, status_code=201)
async def record_adjustment(
    request: AdjustmentRequest,
    service: AccountingService = Depends(get_service),
):
    """조정 분개 (발생/이연/감가상각/정정)"""
    entry = await service.record_adjustment(request.to_event())
    return JournalEntryResponse.from_entry(entry)


@router.post("/simple", response_model=JournalEntryResponse, status_code=201)
async def record_simple_transaction(
    request: SimpleTransactionRequest,
    service: AccountingService = Depends(get_service),
):
    """단순 거래 (차변 1줄 / 대변 1줄)"""
    entry = await service.record_transaction(request.to_event())
    return JournalEntryResponse.from_entry(entry)

"""
원장 API 라우트

계정별 원장 (기초 잔액 + 기간 내 라인 + 누적 잔액)
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from core.ledger.service import AccountingService
from web.dependencies import get_service
from web.models.responses import LedgerResponse

router = APIRouter(prefix="/api/ledger", tags=["Ledger"])


@router.get("/{account_id}", response_model=LedgerResponse)
async def get_ledger(
    account_id: int,
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    service: AccountingService = Depends(get_service),
):
    """계정 원장 조회 (일자, 분개 순)"""
    ledger = await service.get_ledger(account_id, start_date, end_date)
    return LedgerResponse.from_ledger(ledger)

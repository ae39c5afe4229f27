"""
자금 이체 API 라우트

현금성 계정 간 이체 기록/조회/취소
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from core.constants import Defaults
from core.ledger.service import AccountingService
from core.ledger.types import TransferStatus
from web.dependencies import get_service
from web.models.requests import FundTransferRequest, FundTransferReverseRequest
from web.models.responses import FundTransferListResponse, FundTransferResponse

router = APIRouter(prefix="/api/transfers", tags=["Transfers"])


@router.post("", response_model=FundTransferResponse, status_code=201)
async def record_transfer(
    request: FundTransferRequest,
    service: AccountingService = Depends(get_service),
):
    """자금 이체 기록 (분개 + 이체 기록을 한 트랜잭션으로)"""
    transfer = await service.record_fund_transfer(request.to_event())
    return FundTransferResponse.from_transfer(transfer)


@router.get("", response_model=FundTransferListResponse)
async def list_transfers(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    status: TransferStatus | None = Query(default=None),
    account_id: int | None = Query(default=None, gt=0),
    limit: int = Query(default=Defaults.PAGE_LIMIT, ge=1, le=Defaults.MAX_PAGE_LIMIT),
    offset: int = Query(default=0, ge=0),
    service: AccountingService = Depends(get_service),
):
    """이체 목록"""
    transfers = await service.list_fund_transfers(
        start_date=start_date,
        end_date=end_date,
        status=status,
        account_id=account_id,
        limit=limit,
        offset=offset,
    )
    return FundTransferListResponse(
        transfers=[FundTransferResponse.from_transfer(transfer) for transfer in transfers],
        count=len(transfers),
        limit=limit,
        offset=offset,
    )


@router.get("/{transfer_id}", response_model=FundTransferResponse)
async def get_transfer(
    transfer_id: int,
    service: AccountingService = Depends(get_service),
):
    """이체 단건 조회"""
    return FundTransferResponse.from_transfer(await service.get_fund_transfer(transfer_id))


@router.post("/{transfer_id}/reverse", response_model=FundTransferResponse)
async def reverse_transfer(
    transfer_id: int,
    request: FundTransferReverseRequest | None = None,
    service: AccountingService = Depends(get_service),
):
    """이체 취소 (역분개 후 reversed 상태)"""
    reversal_date = request.reversal_date if request else None
    transfer = await service.reverse_fund_transfer(transfer_id, reversal_date)
    return FundTransferResponse.from_transfer(transfer)

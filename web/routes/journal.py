"""
분개 API 라우트

분개 전기/초안/조회, 역분개 및 정정
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Response

from core.constants import Defaults
from core.ledger.service import AccountingService
from core.ledger.types import EntryStatus, TransactionType
from core.types import PartyKind
from web.dependencies import get_service
from web.models.requests import (
    CorrectEntryRequest,
    JournalEntryRequest,
    ReverseEntryRequest,
)
from web.models.responses import (
    CorrectionResponse,
    JournalEntryListResponse,
    JournalEntryResponse,
)

router = APIRouter(prefix="/api/journal", tags=["Journal"])


@router.get("", response_model=JournalEntryListResponse)
async def list_entries(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    status: EntryStatus | None = Query(default=None),
    transaction_type: TransactionType | None = Query(default=None),
    account_id: int | None = Query(default=None, gt=0),
    party_kind: PartyKind | None = Query(default=None),
    party_id: str | None = Query(default=None),
    limit: int = Query(default=Defaults.PAGE_LIMIT, ge=1, le=Defaults.MAX_PAGE_LIMIT),
    offset: int = Query(default=0, ge=0),
    service: AccountingService = Depends(get_service),
):
    """분개 목록 (날짜, 입력 순)"""
    entries = await service.list_entries(
        start_date=start_date,
        end_date=end_date,
        status=status,
        transaction_type=transaction_type,
        account_id=account_id,
        party_kind=party_kind,
        party_id=party_id,
        limit=limit,
        offset=offset,
    )
    return JournalEntryListResponse(
        entries=[JournalEntryResponse.from_entry(entry) for entry in entries],
        count=len(entries),
        limit=limit,
        offset=offset,
    )


@router.post("", response_model=JournalEntryResponse, status_code=201)
async def post_entry(
    request: JournalEntryRequest,
    service: AccountingService = Depends(get_service),
):
    """수동 분개 전기"""
    entry = await service.post_entry(request.to_entry())
    return JournalEntryResponse.from_entry(entry)


@router.post("/drafts", response_model=JournalEntryResponse, status_code=201)
async def save_draft(
    request: JournalEntryRequest,
    service: AccountingService = Depends(get_service),
):
    """분개 초안 저장 (잔액 반영 없음)"""
    entry = await service.save_draft(request.to_entry())
    return JournalEntryResponse.from_entry(entry)


@router.get("/{entry_id}", response_model=JournalEntryResponse)
async def get_entry(
    entry_id: int,
    service: AccountingService = Depends(get_service),
):
    """분개 단건 조회 (라인 포함)"""
    return JournalEntryResponse.from_entry(await service.get_entry(entry_id))


@router.post("/{entry_id}/post", response_model=JournalEntryResponse)
async def post_draft(
    entry_id: int,
    service: AccountingService = Depends(get_service),
):
    """초안 전기"""
    return JournalEntryResponse.from_entry(await service.post_draft(entry_id))


@router.delete("/{entry_id}", status_code=204)
async def discard_draft(
    entry_id: int,
    service: AccountingService = Depends(get_service),
):
    """초안 삭제 (전기된 분개는 삭제 불가)"""
    await service.discard_draft(entry_id)
    return Response(status_code=204)


@router.post("/{entry_id}/reverse", response_model=JournalEntryResponse, status_code=201)
async def reverse_entry(
    entry_id: int,
    request: ReverseEntryRequest | None = None,
    service: AccountingService = Depends(get_service),
):
    """역분개 (원 분개는 reversed 상태로 전환)"""
    request = request or ReverseEntryRequest()
    reversal = await service.reverse_entry(entry_id, request.reversal_date, request.description)
    return JournalEntryResponse.from_entry(reversal)


@router.post("/{entry_id}/correct", response_model=CorrectionResponse, status_code=201)
async def correct_entry(
    entry_id: int,
    request: CorrectEntryRequest,
    service: AccountingService = Depends(get_service),
):
    """정정 (역분개 + 대체 분개를 한 트랜잭션으로)"""
    reversal, replacement = await service.correct_entry(
        entry_id,
        request.replacement.to_entry(),
        request.reversal_date,
    )
    return CorrectionResponse(
        reversal=JournalEntryResponse.from_entry(reversal),
        replacement=JournalEntryResponse.from_entry(replacement),
    )

"""
계정과목표 API 라우트

계정 생성/조회/수정, 계정 잔액, 거래처 잔액
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from core.ledger.service import AccountingService
from core.ledger.types import AccountType
from core.types import PartyKind
from web.dependencies import get_service
from web.models.requests import AccountCreateRequest, AccountUpdateRequest
from web.models.responses import (
    AccountListResponse,
    AccountResponse,
    BalanceResponse,
    PartyBalanceResponse,
)

router = APIRouter(prefix="/api/accounts", tags=["Accounts"])


@router.get("", response_model=AccountListResponse)
async def list_accounts(
    account_type: AccountType | None = Query(default=None),
    include_inactive: bool = Query(default=True),
    service: AccountingService = Depends(get_service),
):
    """계정 목록 (계정 코드 순)"""
    accounts = await service.list_accounts(account_type, include_inactive)
    return AccountListResponse(
        accounts=[AccountResponse.from_account(account) for account in accounts],
        total=len(accounts),
    )


@router.post("", response_model=AccountResponse, status_code=201)
async def create_account(
    request: AccountCreateRequest,
    service: AccountingService = Depends(get_service),
):
    """계정 생성

    opening_balance가 있으면 기초잔액 조정 계정을 상대로 분개 전기.
    """
    account = await service.create_account(
        account_name=request.account_name,
        account_type=request.account_type,
        account_code=request.account_code,
        is_current=request.is_current,
        is_cash=request.is_cash,
        cash_flow_activity=request.cash_flow_activity,
        description=request.description,
        opening_balance=request.opening_balance,
        opening_date=request.opening_date,
    )
    return AccountResponse.from_account(account)


@router.get("/parties/{party_kind}/{party_id}/balance", response_model=PartyBalanceResponse)
async def get_party_balance(
    party_kind: PartyKind,
    party_id: str,
    as_of: date | None = Query(default=None),
    service: AccountingService = Depends(get_service),
):
    """거래처 잔액 (고객: 매출채권, 공급업체: 매입채무)"""
    balance = await service.get_party_balance(party_kind, party_id, as_of)
    return PartyBalanceResponse(
        party_kind=party_kind.value,
        party_id=party_id,
        as_of=as_of,
        balance=balance,
    )


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: int,
    service: AccountingService = Depends(get_service),
):
    """계정 단건 조회"""
    return AccountResponse.from_account(await service.get_account(account_id))


@router.patch("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: int,
    request: AccountUpdateRequest,
    service: AccountingService = Depends(get_service),
):
    """계정 메타데이터 수정"""
    account = await service.update_account(account_id, **request.model_dump(exclude_none=True))
    return AccountResponse.from_account(account)


@router.get("/{account_id}/balance", response_model=BalanceResponse)
async def get_account_balance(
    account_id: int,
    as_of: date | None = Query(default=None),
    service: AccountingService = Depends(get_service),
):
    """계정 잔액 (as_of가 있으면 기준일까지의 원장 합계)"""
    balance = await service.get_account_balance(account_id, as_of)
    return BalanceResponse(account_id=account_id, as_of=as_of, balance=balance)

"""
재무 보고서 API 라우트

- 시산표 / 재무상태표: 기준일(as_of) 잔액
- 손익계산서 / 현금흐름표: 기간(start_date ~ end_date) 집계
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from core.ledger.service import AccountingService
from web.dependencies import get_service
from web.models.responses import (
    BalanceSheetResponse,
    CashFlowResponse,
    IncomeStatementResponse,
    TrialBalanceResponse,
)

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get("/trial-balance", response_model=TrialBalanceResponse)
async def get_trial_balance(
    as_of: date | None = Query(default=None),
    service: AccountingService = Depends(get_service),
):
    """시산표"""
    return TrialBalanceResponse.from_report(await service.get_trial_balance(as_of))


@router.get("/balance-sheet", response_model=BalanceSheetResponse)
async def get_balance_sheet(
    as_of: date | None = Query(default=None),
    service: AccountingService = Depends(get_service),
):
    """재무상태표 (당기순이익은 자본에 Current Earnings로 포함)"""
    return BalanceSheetResponse.from_report(await service.get_balance_sheet(as_of))


@router.get("/income-statement", response_model=IncomeStatementResponse)
async def get_income_statement(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    service: AccountingService = Depends(get_service),
):
    """손익계산서"""
    statement = await service.get_income_statement(start_date, end_date)
    return IncomeStatementResponse.from_report(statement)


@router.get("/cash-flow", response_model=CashFlowResponse)
async def get_cash_flow(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    service: AccountingService = Depends(get_service),
):
    """현금흐름표 (영업/투자/재무 활동)"""
    statement = await service.get_cash_flow(start_date, end_date)
    return CashFlowResponse.from_report(statement)

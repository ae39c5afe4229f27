"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
요청마다 DB 연결을 열고 회계 서비스를 구성.
"""

from typing import AsyncGenerator

from fastapi import Depends

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings, get_settings
from core.ledger.service import AccountingService


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


async def get_db(
    settings: Settings = Depends(get_app_settings),
) -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환

    조회는 스냅샷, 쓰기는 BEGIN IMMEDIATE 트랜잭션으로 처리되므로
    읽기/쓰기 연결을 구분하지 않음.
    """
    async with SQLiteAdapter(settings.db_path) as db:
        yield db


async def get_service(
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> AccountingService:
    """회계 서비스 반환 (계정 역할 매핑 해석 포함)"""
    return await AccountingService.create(db, settings.config)

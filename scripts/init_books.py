"""
장부 초기화 스크립트

스키마와 기본 계정과목표를 만들고, settings.yaml의 계정 매핑을 검증한 뒤
현재 시산표를 출력.

사용법:
    python -m scripts.init_books
    python -m scripts.init_books --settings config/settings.yaml --as-of 2026-12-31
"""

import argparse
import asyncio
import logging
from datetime import date
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
import sys
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import load_settings
from core.ledger.money import format_money
from core.ledger.schema import init_ledger_schema
from core.ledger.service import AccountingService
from core.logging import setup_logging

logger = logging.getLogger(__name__)


async def main(settings_path: Path | None, as_of: date | None) -> None:
    """장부 초기화 실행

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로)
        as_of: 시산표 기준일 (None이면 오늘)
    """
    config = load_settings(settings_path)
    logger.info(f"장부 초기화 시작: mode={config.mode.value}, db={config.db_path}")

    async with SQLiteAdapter(config.db_path) as db:
        await init_ledger_schema(db)

        # 설정된 계정 코드가 모두 계정과목표에 있는지 확인
        service = await AccountingService.create(db, config)
        trial = await service.get_trial_balance(as_of)

    print(f"\nTrial balance as of {trial.as_of.isoformat()}")
    print(f"{'Code':<6} {'Account':<32} {'Debit':>14} {'Credit':>14}")
    for row in trial.rows:
        print(
            f"{row.account_code:<6} {row.account_name:<32} "
            f"{format_money(row.debit):>14} {format_money(row.credit):>14}"
        )
    print(f"{'':<6} {'Total':<32} {format_money(trial.total_debit):>14} {format_money(trial.total_credit):>14}")

    if trial.is_balanced:
        logger.info("장부 초기화 완료 ✓")
    else:
        logger.error("시산표 불균형!")
        raise RuntimeError("시산표 검증 실패")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="장부 초기화 및 시산표 출력")
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="settings.yaml 경로 (기본: config/settings.yaml)",
    )
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="시산표 기준일 YYYY-MM-DD (기본: 오늘)",
    )
    args = parser.parse_args()

    setup_logging("scripts")
    asyncio.run(main(args.settings, args.as_of))

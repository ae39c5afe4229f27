"""
pytest 공통 fixture 정의

임시 settings.yaml, 스키마가 초기화된 임시 DB, 회계 서비스
"""

import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import load_settings
from core.ledger.schema import init_ledger_schema
from core.ledger.service import AccountingService


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성 (DB는 같은 임시 디렉토리)"""
    settings_content = """# 테스트용 settings.yaml
mode: sandbox

database:
  path: test_books.db

payment_methods:
  card: "1015"

enforce_sufficient_funds: true

web:
  host: "127.0.0.1"
  port: 8123
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_production(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성 (production 모드, 기본 DB 경로)"""
    settings_content = """mode: production
"""
    settings_path = temp_dir / "settings_prod.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def temp_settings_file_invalid_mode(temp_dir: Path) -> Path:
    """잘못된 모드의 settings.yaml 파일 생성"""
    settings_content = """mode: invalid_mode
"""
    settings_path = temp_dir / "settings_invalid.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest_asyncio.fixture
async def db(temp_dir: Path) -> SQLiteAdapter:
    """스키마와 기본 계정과목표가 준비된 임시 DB"""
    adapter = SQLiteAdapter(temp_dir / "test_books.db")
    await adapter.connect()
    await init_ledger_schema(adapter)
    yield adapter
    await adapter.close()


@pytest_asyncio.fixture
async def service(db: SQLiteAdapter, temp_settings_file: Path) -> AccountingService:
    """기본 계정 역할 매핑으로 구성한 회계 서비스"""
    return await AccountingService.create(db, load_settings(temp_settings_file))


@pytest_asyncio.fixture
async def accounts(db: SQLiteAdapter) -> dict[str, int]:
    """계정 코드 → 계정 ID"""
    rows = await db.fetchall("SELECT account_code, id FROM account")
    return {code: account_id for code, account_id in rows}

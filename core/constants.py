"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from decimal import Decimal
from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → storebooks/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent

VERSION: str = "0.1.0"


class Defaults:
    """기본값 상수"""

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # 조회 페이지 크기
    PAGE_LIMIT: int = 100
    MAX_PAGE_LIMIT: int = 1000


class Money:
    """금액 관련 상수

    모든 금액은 Decimal, 소수점 2자리(센트)로 반올림.
    """

    CENT: Decimal = Decimal("0.01")
    ZERO: Decimal = Decimal("0.00")

    # 차변/대변 합계 허용 오차 (1센트 미만)
    BALANCE_TOLERANCE: Decimal = Decimal("0.01")


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    PROD_DB: Path = DATA_DIR / "storebooks_prod.db"
    SANDBOX_DB: Path = DATA_DIR / "storebooks_sandbox.db"

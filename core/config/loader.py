"""
설정 로더

settings.yaml 로드 및 장부 설정 생성
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, Paths
from core.ledger.types import (
    DEFAULT_ACCOUNT_ROLES,
    DEFAULT_ADJUSTMENT_ACCOUNTS,
    DEFAULT_PAYMENT_METHODS,
    AccountRole,
    AdjustmentType,
)
from core.types import BooksMode


@dataclass(frozen=True)
class BooksConfig:
    """장부 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지.
    계정 역할은 계정 코드로 지정하고, 실행 시 계정과목표에서 ID로 해석됨.
    """

    mode: BooksMode
    db_path: Path
    account_roles: dict[AccountRole, str] = field(default_factory=dict)
    payment_methods: dict[str, str] = field(default_factory=dict)
    adjustment_accounts: dict[AdjustmentType, str] = field(default_factory=dict)
    enforce_sufficient_funds: bool = True
    web_host: str = Defaults.WEB_HOST
    web_port: int = Defaults.WEB_PORT


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def get_db_path(mode: BooksMode) -> Path:
    """모드에 따른 DB 경로 반환

    Args:
        mode: 장부 모드

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if mode == BooksMode.PRODUCTION:
        return Paths.PROD_DB
    return Paths.SANDBOX_DB


def _parse_account_roles(data: dict[str, Any] | None) -> dict[AccountRole, str]:
    """account_roles 섹션 파싱 (기본값 위에 덮어쓰기)"""
    roles = dict(DEFAULT_ACCOUNT_ROLES)
    if not data:
        return roles

    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml의 'account_roles'는 매핑이어야 합니다")

    for key, code in data.items():
        try:
            role = AccountRole(key)
        except ValueError as e:
            valid_roles = [r.value for r in AccountRole]
            raise SettingsLoadError(
                f"알 수 없는 계정 역할입니다: '{key}'. 유효한 값: {valid_roles}"
            ) from e
        if code is None or str(code).strip() == "":
            raise SettingsLoadError(f"계정 역할 '{key}'의 계정 코드가 비어 있습니다")
        roles[role] = str(code)

    return roles


def _parse_payment_methods(data: dict[str, Any] | None) -> dict[str, str]:
    """payment_methods 섹션 파싱 (결제수단 이름 → 계정 코드)"""
    methods = dict(DEFAULT_PAYMENT_METHODS)
    if not data:
        return methods

    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml의 'payment_methods'는 매핑이어야 합니다")

    for name, code in data.items():
        if code is None or str(code).strip() == "":
            raise SettingsLoadError(f"결제수단 '{name}'의 계정 코드가 비어 있습니다")
        methods[str(name).lower()] = str(code)

    return methods


def _parse_adjustment_accounts(data: dict[str, Any] | None) -> dict[AdjustmentType, str]:
    """adjustment_accounts 섹션 파싱 (조정 유형 → 상대 계정 코드)"""
    accounts = dict(DEFAULT_ADJUSTMENT_ACCOUNTS)
    if not data:
        return accounts

    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml의 'adjustment_accounts'는 매핑이어야 합니다")

    for key, code in data.items():
        try:
            adjustment_type = AdjustmentType(key)
        except ValueError as e:
            valid_types = [t.value for t in AdjustmentType]
            raise SettingsLoadError(
                f"알 수 없는 조정 유형입니다: '{key}'. 유효한 값: {valid_types}"
            ) from e
        accounts[adjustment_type] = str(code)

    return accounts


def load_settings(path: Path | None = None) -> BooksConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        BooksConfig 인스턴스

    Raises:
        SettingsLoadError: 파일이 없거나 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SettingsLoadError("settings.yaml이 비어 있습니다")

    # mode 검증
    mode_str = data.get("mode")
    if mode_str is None:
        raise SettingsLoadError("settings.yaml에 'mode' 필드가 없습니다")

    try:
        mode = BooksMode(mode_str)
    except ValueError as e:
        valid_modes = [m.value for m in BooksMode]
        raise SettingsLoadError(
            f"유효하지 않은 mode입니다: '{mode_str}'. "
            f"유효한 값: {valid_modes}"
        ) from e

    # DB 경로 (명시하지 않으면 모드별 기본 경로)
    database = data.get("database") or {}
    db_path_str = database.get("path")
    if db_path_str:
        db_path = Path(db_path_str)
        if not db_path.is_absolute():
            db_path = path.parent / db_path
    else:
        db_path = get_db_path(mode)

    web_config = data.get("web") or {}

    return BooksConfig(
        mode=mode,
        db_path=db_path,
        account_roles=_parse_account_roles(data.get("account_roles")),
        payment_methods=_parse_payment_methods(data.get("payment_methods")),
        adjustment_accounts=_parse_adjustment_accounts(data.get("adjustment_accounts")),
        enforce_sufficient_funds=bool(data.get("enforce_sufficient_funds", True)),
        web_host=web_config.get("host", Defaults.WEB_HOST),
        web_port=int(web_config.get("port", Defaults.WEB_PORT)),
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: BooksConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            self._config = load_settings(settings_path)

    @property
    def config(self) -> BooksConfig:
        """로드된 설정 원본"""
        assert self._config is not None
        return self._config

    @property
    def mode(self) -> BooksMode:
        """현재 장부 모드"""
        return self.config.mode

    @property
    def db_path(self) -> Path:
        """현재 모드의 DB 경로"""
        return self.config.db_path

    @property
    def account_roles(self) -> dict[AccountRole, str]:
        """계정 역할 → 계정 코드"""
        return self.config.account_roles

    @property
    def payment_methods(self) -> dict[str, str]:
        """결제수단 → 계정 코드"""
        return self.config.payment_methods

    @property
    def adjustment_accounts(self) -> dict[AdjustmentType, str]:
        """조정 유형 → 상대 계정 코드"""
        return self.config.adjustment_accounts

    @property
    def enforce_sufficient_funds(self) -> bool:
        """지급 시 잔액 부족 검사 여부"""
        return self.config.enforce_sufficient_funds

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)

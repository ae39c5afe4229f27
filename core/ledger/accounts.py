"""
계정과목표

계정 등록/조회, 계정 코드 자동 생성, 계정 역할 매핑 해석.
계정 잔액(balance)은 분개 전기/역분개로만 변경되며 여기서는 직접 수정하지 않음.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import aiosqlite

from core.ledger.entry_builder import AccountMapping
from core.ledger.errors import LedgerValidationError, NotFoundError, UnknownAccountError
from core.ledger.types import (
    ACCOUNT_CODE_BASE,
    AccountRole,
    AccountType,
    AdjustmentType,
    CashFlowActivity,
)

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


_ACCOUNT_COLUMNS = """
    id, account_code, account_name, account_type, balance,
    is_current, is_cash, cash_flow_activity, is_active, description
"""


@dataclass
class Account:
    """계정

    balance는 정상잔액 방향 기준 부호 있는 금액.
    ASSET/EXPENSE: 차변 - 대변, 나머지: 대변 - 차변
    """

    id: int
    account_code: str
    account_name: str
    account_type: AccountType
    balance: Decimal = Decimal("0.00")
    is_current: bool = True
    is_cash: bool = False
    cash_flow_activity: CashFlowActivity | None = None
    is_active: bool = True
    description: str | None = None

    def signed_amount(self, debit: Decimal, credit: Decimal) -> Decimal:
        """라인 1개가 이 계정 잔액에 기여하는 값"""
        if self.account_type.is_debit_normal:
            return debit - credit
        return credit - debit

    @property
    def activity(self) -> CashFlowActivity:
        """현금흐름표 활동 구분

        명시 태그가 없으면 유형으로 결정:
        비유동 자산 → 투자, 자본/비유동 부채 → 재무, 나머지 → 영업
        """
        if self.cash_flow_activity is not None:
            return self.cash_flow_activity
        if self.account_type == AccountType.ASSET and not self.is_current:
            return CashFlowActivity.INVESTING
        if self.account_type == AccountType.EQUITY:
            return CashFlowActivity.FINANCING
        if self.account_type == AccountType.LIABILITY and not self.is_current:
            return CashFlowActivity.FINANCING
        return CashFlowActivity.OPERATING


def row_to_account(row: tuple[Any, ...]) -> Account:
    """account 행 → Account (_ACCOUNT_COLUMNS 순서)"""
    return Account(
        id=row[0],
        account_code=row[1],
        account_name=row[2],
        account_type=AccountType(row[3]),
        balance=Decimal(row[4]),
        is_current=bool(row[5]),
        is_cash=bool(row[6]),
        cash_flow_activity=CashFlowActivity(row[7]) if row[7] else None,
        is_active=bool(row[8]),
        description=row[9],
    )


class ChartOfAccounts:
    """계정과목표

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get_account(self, account_id: int) -> Account | None:
        """계정 조회 (없으면 None)"""
        async with self.db.snapshot():
            row = await self.db.fetchone(
                f"SELECT {_ACCOUNT_COLUMNS} FROM account WHERE id = ?",
                (account_id,),
            )
        return row_to_account(row) if row else None

    async def require_account(self, account_id: int) -> Account:
        """계정 조회

        Raises:
            NotFoundError: 계정이 없는 경우
        """
        account = await self.get_account(account_id)
        if account is None:
            raise NotFoundError(f"account {account_id} not found", {"account_id": account_id})
        return account

    async def get_by_code(self, account_code: str) -> Account | None:
        """계정 코드로 조회"""
        async with self.db.snapshot():
            row = await self.db.fetchone(
                f"SELECT {_ACCOUNT_COLUMNS} FROM account WHERE account_code = ?",
                (account_code,),
            )
        return row_to_account(row) if row else None

    async def list_accounts(
        self,
        account_type: AccountType | None = None,
        include_inactive: bool = True,
    ) -> list[Account]:
        """계정 목록 (계정 코드 순)"""
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM account WHERE 1=1"
        params: list[Any] = []

        if account_type is not None:
            sql += " AND account_type = ?"
            params.append(account_type.value)

        if not include_inactive:
            sql += " AND is_active = 1"

        sql += " ORDER BY account_code"

        async with self.db.snapshot():
            rows = await self.db.fetchall(sql, tuple(params))
        return [row_to_account(row) for row in rows]

    async def accounts_by_ids(self, account_ids: list[int]) -> dict[int, Account]:
        """여러 계정을 한 번에 조회 (없는 ID는 결과에서 빠짐)"""
        if not account_ids:
            return {}

        placeholders = ", ".join("?" for _ in account_ids)
        async with self.db.snapshot():
            rows = await self.db.fetchall(
                f"SELECT {_ACCOUNT_COLUMNS} FROM account WHERE id IN ({placeholders})",
                tuple(account_ids),
            )
        return {row[0]: row_to_account(row) for row in rows}

    # -------------------------------------------------------------------------
    # 등록/수정
    # -------------------------------------------------------------------------

    async def next_account_code(self, account_type: AccountType) -> str:
        """유형별 다음 계정 코드 (최대 코드 + 1)

        숫자가 아닌 코드는 무시하고, 없으면 유형별 시작값.
        """
        async with self.db.snapshot():
            rows = await self.db.fetchall(
                "SELECT account_code FROM account WHERE account_type = ?",
                (account_type.value,),
            )
            existing = {row[0] for row in (await self.db.fetchall("SELECT account_code FROM account"))}

        numeric_codes = [int(row[0]) for row in rows if str(row[0]).isdigit()]
        candidate = max(numeric_codes) + 1 if numeric_codes else ACCOUNT_CODE_BASE[account_type]

        # 다른 유형이 이미 쓰는 코드는 건너뜀
        while str(candidate) in existing:
            candidate += 1
        return str(candidate)

    async def create_account(
        self,
        account_name: str,
        account_type: AccountType,
        account_code: str | None = None,
        is_current: bool = True,
        is_cash: bool = False,
        cash_flow_activity: CashFlowActivity | None = None,
        description: str | None = None,
    ) -> Account:
        """계정 생성 (잔액 0)

        기초 잔액은 AccountingService.create_account가 분개로 전기.

        Raises:
            LedgerValidationError: 이름이 비었거나 계정 코드가 중복인 경우
        """
        if not account_name or not account_name.strip():
            raise LedgerValidationError("account name is required")

        async with self.db.transaction():
            if account_code is None:
                account_code = await self.next_account_code(account_type)
            elif await self.get_by_code(account_code) is not None:
                raise LedgerValidationError(
                    f"account code '{account_code}' already exists",
                    {"account_code": account_code},
                )

            try:
                cursor = await self.db.execute(
                    """
                    INSERT INTO account (
                        account_code, account_name, account_type,
                        is_current, is_cash, cash_flow_activity, description
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        account_code,
                        account_name.strip(),
                        account_type.value,
                        int(is_current),
                        int(is_cash),
                        cash_flow_activity.value if cash_flow_activity else None,
                        description,
                    ),
                )
            except aiosqlite.IntegrityError as e:
                raise LedgerValidationError(
                    f"account code '{account_code}' already exists",
                    {"account_code": account_code},
                ) from e
            account_id = cursor.lastrowid

        logger.info(f"계정 생성: {account_code} {account_name} ({account_type.value})")
        return await self.require_account(account_id)

    async def update_account(
        self,
        account_id: int,
        account_name: str | None = None,
        is_current: bool | None = None,
        is_cash: bool | None = None,
        cash_flow_activity: CashFlowActivity | None = None,
        is_active: bool | None = None,
        description: str | None = None,
    ) -> Account:
        """계정 메타데이터 수정 (잔액/유형/코드는 수정 불가)

        Raises:
            NotFoundError: 계정이 없는 경우
        """
        updates: list[str] = []
        params: list[Any] = []

        if account_name is not None:
            if not account_name.strip():
                raise LedgerValidationError("account name must not be empty")
            updates.append("account_name = ?")
            params.append(account_name.strip())
        if is_current is not None:
            updates.append("is_current = ?")
            params.append(int(is_current))
        if is_cash is not None:
            updates.append("is_cash = ?")
            params.append(int(is_cash))
        if cash_flow_activity is not None:
            updates.append("cash_flow_activity = ?")
            params.append(cash_flow_activity.value)
        if is_active is not None:
            updates.append("is_active = ?")
            params.append(int(is_active))
        if description is not None:
            updates.append("description = ?")
            params.append(description)

        async with self.db.transaction():
            await self.require_account(account_id)
            if updates:
                updates.append("updated_at = datetime('now')")
                params.append(account_id)
                await self.db.execute(
                    f"UPDATE account SET {', '.join(updates)} WHERE id = ?",
                    tuple(params),
                )

        return await self.require_account(account_id)

    # -------------------------------------------------------------------------
    # 계정 역할 매핑
    # -------------------------------------------------------------------------

    async def resolve_mapping(
        self,
        account_roles: dict[AccountRole, str],
        payment_methods: dict[str, str],
        adjustment_accounts: dict[AdjustmentType, str],
    ) -> AccountMapping:
        """설정의 계정 코드를 계정 ID로 해석

        Raises:
            UnknownAccountError: 계정과목표에 없는 코드가 하나라도 있는 경우
        """
        async with self.db.snapshot():
            rows = await self.db.fetchall("SELECT account_code, id FROM account")
        code_to_id = {row[0]: row[1] for row in rows}

        missing: list[str] = []

        def resolve(label: str, code: str) -> int:
            account_id = code_to_id.get(code)
            if account_id is None:
                missing.append(f"{label} → '{code}'")
                return 0
            return account_id

        roles = {role: resolve(f"role {role.value}", code) for role, code in account_roles.items()}
        methods = {
            name: resolve(f"payment method {name}", code) for name, code in payment_methods.items()
        }
        adjustments = {
            adjustment_type: resolve(f"adjustment {adjustment_type.value}", code)
            for adjustment_type, code in adjustment_accounts.items()
        }

        if missing:
            raise UnknownAccountError(
                f"account mapping refers to unknown account codes: {', '.join(missing)}",
                {"missing": missing},
            )

        return AccountMapping(
            roles=roles,
            payment_methods=methods,
            adjustment_accounts=adjustments,
        )

"""
Web API 라우트 통합 테스트

httpx ASGITransport로 FastAPI 앱을 직접 호출.
lifespan이 실행되지 않으므로 db fixture가 스키마를 초기화.
"""

from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings
from core.ledger.errors import LedgerValidationError, PersistenceFailureError, UnknownAccountError
from web.app import app, status_for_error
from web.dependencies import get_app_settings, get_service


@pytest_asyncio.fixture
async def client(db: SQLiteAdapter, temp_settings_file: Path) -> AsyncClient:
    """임시 장부를 사용하는 API 클라이언트"""
    Settings.reset()
    settings = Settings(temp_settings_file)
    app.dependency_overrides[get_app_settings] = lambda: settings

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    Settings.reset()


SALE_PAYLOAD = {
    "sale_date": "2026-03-01",
    "items": [
        {"description": "Widget", "quantity": "3", "unit_price": "50.00", "tax_rate": "10"},
    ],
}


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["mode"] == "sandbox"
        assert body["version"]


class TestTransactionRoutes:
    """업무 거래 API"""

    @pytest.mark.asyncio
    async def test_record_sale(self, client: AsyncClient) -> None:
        response = await client.post("/api/transactions/sales", json=SALE_PAYLOAD)

        assert response.status_code == 201
        body = response.json()
        assert body["reference_number"] == "INV-2026-000001"
        assert body["status"] == "posted"
        assert body["total_debit"] == "165.00"
        assert body["total_credit"] == "165.00"
        assert len(body["lines"]) == 3

    @pytest.mark.asyncio
    async def test_credit_sale_requires_customer(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/transactions/sales",
            json={**SALE_PAYLOAD, "on_credit": True},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_checkout(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/transactions/checkout",
            json={
                "sale_date": "2026-03-02",
                "payment_method": "card",
                "items": [
                    {"description": "Mug", "quantity": "2", "unit_price": "12.50"},
                    {"description": "Tea", "quantity": "1", "unit_price": "5.00"},
                ],
            },
        )

        assert response.status_code == 201
        assert response.json()["total_debit"] == "30.00"

    @pytest.mark.asyncio
    async def test_checkout_unknown_price(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/transactions/checkout",
            json={"items": [{"description": "Special", "quantity": "1", "unit_price": None}]},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    @pytest.mark.asyncio
    async def test_supplier_payment_insufficient_funds(self, client: AsyncClient) -> None:
        await client.post(
            "/api/transactions/supplier-purchases",
            json={"purchase_date": "2026-03-01", "amount": "80.00", "supplier_id": "S-1"},
        )

        response = await client.post(
            "/api/transactions/supplier-payments",
            json={"payment_date": "2026-03-02", "amount": "80.00", "supplier_id": "S-1"},
        )

        assert response.status_code == 400
        assert "insufficient funds" in response.json()["message"]


class TestJournalRoutes:
    """분개 API"""

    @pytest.mark.asyncio
    async def test_unbalanced_entry(self, client: AsyncClient, accounts: dict[str, int]) -> None:
        response = await client.post(
            "/api/journal",
            json={
                "entry_date": "2026-03-01",
                "lines": [
                    {"account_id": accounts["1000"], "debit": "100.00"},
                    {"account_id": accounts["4000"], "credit": "90.00"},
                ],
            },
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Unbalanced"
        assert body["retryable"] is False
        assert body["details"]["total_debit"] == "100.00"

    @pytest.mark.asyncio
    async def test_unknown_account(self, client: AsyncClient, accounts: dict[str, int]) -> None:
        response = await client.post(
            "/api/journal",
            json={
                "entry_date": "2026-03-01",
                "lines": [
                    {"account_id": accounts["1000"], "debit": "10.00"},
                    {"account_id": 9999, "credit": "10.00"},
                ],
            },
        )

        assert response.status_code == 422
        assert response.json()["error"] == "UnknownAccount"

    @pytest.mark.asyncio
    async def test_duplicate_reference(self, client: AsyncClient) -> None:
        payload = {**SALE_PAYLOAD, "reference_number": "INV-MANUAL-1"}
        first = await client.post("/api/transactions/sales", json=payload)
        second = await client.post("/api/transactions/sales", json=payload)

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error"] == "DuplicateReference"

    @pytest.mark.asyncio
    async def test_entry_not_found(self, client: AsyncClient) -> None:
        response = await client.get("/api/journal/4040")

        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"

    @pytest.mark.asyncio
    async def test_draft_lifecycle(self, client: AsyncClient, accounts: dict[str, int]) -> None:
        draft = await client.post(
            "/api/journal/drafts",
            json={
                "entry_date": "2026-03-01",
                "lines": [
                    {"account_id": accounts["1000"], "debit": "10.00"},
                    {"account_id": accounts["3000"], "credit": "10.00"},
                ],
            },
        )
        assert draft.status_code == 201
        assert draft.json()["status"] == "pending"

        entry_id = draft.json()["id"]
        posted = await client.post(f"/api/journal/{entry_id}/post")
        assert posted.status_code == 200
        assert posted.json()["status"] == "posted"

        deleted = await client.delete(f"/api/journal/{entry_id}")
        assert deleted.status_code == 400

    @pytest.mark.asyncio
    async def test_reverse_entry(self, client: AsyncClient) -> None:
        sale = (await client.post("/api/transactions/sales", json=SALE_PAYLOAD)).json()

        response = await client.post(
            f"/api/journal/{sale['id']}/reverse",
            json={"reversal_date": "2026-03-01"},
        )
        again = await client.post(f"/api/journal/{sale['id']}/reverse", json={"reversal_date": "2026-03-01"})

        assert response.status_code == 201
        assert response.json()["reference_number"] == f"{sale['reference_number']}-REV"
        assert again.status_code == 409
        assert again.json()["error"] == "AlreadyReversed"

    @pytest.mark.asyncio
    async def test_list_entries(self, client: AsyncClient) -> None:
        await client.post("/api/transactions/sales", json=SALE_PAYLOAD)

        response = await client.get("/api/journal", params={"transaction_type": "SALE"})

        assert response.status_code == 200
        assert response.json()["count"] == 1


class TestReportRoutes:
    """보고서 / 원장 API"""

    @pytest.mark.asyncio
    async def test_trial_balance(self, client: AsyncClient) -> None:
        await client.post("/api/transactions/sales", json=SALE_PAYLOAD)

        response = await client.get("/api/reports/trial-balance", params={"as_of": "2026-03-31"})

        assert response.status_code == 200
        body = response.json()
        assert body["is_balanced"] is True
        assert body["total_debit"] == "165.00"

    @pytest.mark.asyncio
    async def test_balance_sheet(self, client: AsyncClient) -> None:
        await client.post("/api/transactions/sales", json=SALE_PAYLOAD)

        response = await client.get("/api/reports/balance-sheet", params={"as_of": "2026-03-31"})

        body = response.json()
        assert body["is_balanced"] is True
        assert body["total_assets"] == "165.00"
        assert body["current_earnings"] == "150.00"

    @pytest.mark.asyncio
    async def test_income_statement(self, client: AsyncClient) -> None:
        await client.post("/api/transactions/sales", json=SALE_PAYLOAD)

        response = await client.get(
            "/api/reports/income-statement",
            params={"start_date": "2026-03-01", "end_date": "2026-03-31"},
        )

        assert response.status_code == 200
        assert response.json()["net_income"] == "150.00"

    @pytest.mark.asyncio
    async def test_cash_flow(self, client: AsyncClient) -> None:
        await client.post("/api/transactions/sales", json=SALE_PAYLOAD)

        response = await client.get(
            "/api/reports/cash-flow",
            params={"start_date": "2026-03-01", "end_date": "2026-03-31"},
        )

        body = response.json()
        assert body["is_consistent"] is True
        assert body["closing_cash"] == "165.00"

    @pytest.mark.asyncio
    async def test_account_ledger(self, client: AsyncClient, accounts: dict[str, int]) -> None:
        await client.post("/api/transactions/sales", json=SALE_PAYLOAD)

        response = await client.get(f"/api/ledger/{accounts['1000']}")

        body = response.json()
        assert body["closing_balance"] == "165.00"
        assert [line["balance"] for line in body["lines"]] == ["165.00"]


class TestAccountRoutes:
    """계정 API"""

    @pytest.mark.asyncio
    async def test_create_and_fetch(self, client: AsyncClient) -> None:
        created = await client.post(
            "/api/accounts",
            json={
                "account_name": "Petty Cash",
                "account_type": "asset",
                "is_cash": True,
                "opening_balance": "50.00",
                "opening_date": "2026-01-01",
            },
        )

        assert created.status_code == 201
        account = created.json()
        assert account["balance"] == "50.00"

        balance = await client.get(
            f"/api/accounts/{account['id']}/balance",
            params={"as_of": "2026-01-01"},
        )
        assert balance.json()["balance"] == "50.00"

    @pytest.mark.asyncio
    async def test_invalid_account_type(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/accounts",
            json={"account_name": "Odd", "account_type": "bogus"},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_party_balance(self, client: AsyncClient) -> None:
        await client.post(
            "/api/transactions/sales",
            json={**SALE_PAYLOAD, "on_credit": True, "customer_id": "C-5"},
        )

        response = await client.get("/api/accounts/parties/customer/C-5/balance")

        assert response.status_code == 200
        assert response.json()["balance"] == "165.00"


class TestTransferRoutes:
    @pytest.mark.asyncio
    async def test_transfer_and_reverse(self, client: AsyncClient, accounts: dict[str, int]) -> None:
        await client.post("/api/transactions/sales", json=SALE_PAYLOAD)

        created = await client.post(
            "/api/transfers",
            json={
                "transfer_date": "2026-03-02",
                "from_account_id": accounts["1000"],
                "to_account_id": accounts["1015"],
                "amount": "100.00",
            },
        )
        assert created.status_code == 201
        transfer_id = created.json()["id"]

        reversed_response = await client.post(
            f"/api/transfers/{transfer_id}/reverse",
            json={"reversal_date": "2026-03-02"},
        )
        assert reversed_response.json()["status"] == "reversed"

        again = await client.post(f"/api/transfers/{transfer_id}/reverse")
        assert again.status_code == 409


class _FailingService:
    """시산표 조회 시 DB 오류를 내는 서비스 대역"""

    def __init__(self, retryable: bool):
        self.retryable = retryable

    async def get_trial_balance(self, as_of=None):
        raise PersistenceFailureError(
            "get_trial_balance failed: database is locked",
            {"operation": "get_trial_balance"},
            retryable=self.retryable,
        )


class TestPersistenceErrorStatus:
    """DB 오류 → 503 (재시도 가능) / 500 (치명)"""

    def test_status_mapping(self) -> None:
        assert status_for_error(PersistenceFailureError("locked", retryable=True)) == 503
        assert status_for_error(PersistenceFailureError("corrupt")) == 500
        assert status_for_error(LedgerValidationError("bad input")) == 400
        assert status_for_error(UnknownAccountError("no such account")) == 422

    @pytest.mark.asyncio
    async def test_retryable_failure_returns_503(self, client: AsyncClient) -> None:
        app.dependency_overrides[get_service] = lambda: _FailingService(retryable=True)

        response = await client.get("/api/reports/trial-balance")

        assert response.status_code == 503
        body = response.json()
        assert body["error"] == "PersistenceFailure"
        assert body["retryable"] is True
        assert body["details"]["operation"] == "get_trial_balance"

    @pytest.mark.asyncio
    async def test_fatal_failure_returns_500(self, client: AsyncClient) -> None:
        app.dependency_overrides[get_service] = lambda: _FailingService(retryable=False)

        response = await client.get("/api/reports/trial-balance")

        assert response.status_code == 500
        assert response.json()["retryable"] is False

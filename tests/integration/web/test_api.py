"""
Web API 통합 테스트

인메모리 DB를 주입한 FastAPI 앱에 httpx로 요청
"""

from typing import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from adapters.db.sqlite_adapter import SQLiteAdapter
from web.app import app
from web.dependencies import get_db


@pytest_asyncio.fixture
async def client(db: SQLiteAdapter) -> AsyncIterator[AsyncClient]:
    """테스트 DB를 사용하는 HTTP 클라이언트"""

    async def override_get_db() -> AsyncIterator[SQLiteAdapter]:
        yield db

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def _default_book_id(client: AsyncClient) -> str:
    response = await client.get("/api/books")
    assert response.status_code == 200
    return response.json()[0]["id"]


async def _create_account(
    client: AsyncClient,
    book_id: str,
    name: str,
    category_id: str,
    opening_balance: str | None = None,
) -> dict:
    payload = {"name": name, "category_id": category_id}
    if opening_balance is not None:
        payload["opening_balance"] = opening_balance
    response = await client.post(f"/api/books/{book_id}/accounts", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestBooksApi:
    """장부 API 테스트"""

    @pytest.mark.asyncio
    async def test_default_book_seeded(self, client: AsyncClient) -> None:
        response = await client.get("/api/books")

        assert response.status_code == 200
        assert [b["id"] for b in response.json()] == ["book_default"]

    @pytest.mark.asyncio
    async def test_default_book_usable_before_listing(self, client: AsyncClient) -> None:
        """빈 DB에서 장부 목록 조회 없이 기본 장부 하위 경로 사용"""
        response = await client.get("/api/books/book_default/categories")

        assert response.status_code == 200
        assert "Cash" in [c["name"] for c in response.json()]

    @pytest.mark.asyncio
    async def test_create_conflict(self, client: AsyncClient) -> None:
        await _default_book_id(client)
        created = await client.post("/api/books", json={"name": "Side"})
        duplicate = await client.post("/api/books", json={"name": "side"})

        assert created.status_code == 201
        assert duplicate.status_code == 409
        assert duplicate.json() == {
            "success": False,
            "error": "conflict_error",
            "message": "A book with this name already exists",
        }

    @pytest.mark.asyncio
    async def test_delete_default_forbidden(self, client: AsyncClient) -> None:
        book_id = await _default_book_id(client)

        response = await client.delete(f"/api/books/{book_id}")

        assert response.status_code == 403
        assert response.json()["error"] == "protected_entity_error"

    @pytest.mark.asyncio
    async def test_unknown_book_is_404(self, client: AsyncClient) -> None:
        response = await client.get("/api/books/book_missing/accounts")

        assert response.status_code == 404


class TestTransactionsApi:
    """거래 API 테스트"""

    @pytest.mark.asyncio
    async def test_create_list_and_ledger(self, client: AsyncClient) -> None:
        book_id = await _default_book_id(client)
        bank = await _create_account(client, book_id, "Bank", "cat_cash_default", "1000")
        rent = await _create_account(client, book_id, "Rent", "cat_expense_default")

        response = await client.post(
            f"/api/books/{book_id}/transactions",
            json={
                "date": "2026-01-05T09:00:00Z",
                "description": "Office rent",
                "entries": [
                    {"account_id": rent["id"], "amount": "300", "type": "debit"},
                    {"account_id": bank["id"], "amount": "300", "type": "credit"},
                ],
            },
        )
        assert response.status_code == 201, response.text

        listed = await client.get(f"/api/books/{book_id}/transactions")
        assert len(listed.json()) == 2

        ledger = await client.get(f"/api/books/{book_id}/ledger/accounts/{bank['id']}")
        body = ledger.json()
        assert body["opening_balance"] == "1000"
        assert body["closing_balance"] == "700"
        assert body["closing_side"] == "Dr"
        assert [r["description"] for r in body["rows"]] == ["Office rent"]

        totals = await client.get(f"/api/books/{book_id}/ledger/totals")
        assert totals.json()["difference"] == "0"

    @pytest.mark.asyncio
    async def test_unbalanced_is_422(self, client: AsyncClient) -> None:
        book_id = await _default_book_id(client)
        bank = await _create_account(client, book_id, "Bank", "cat_cash_default")
        rent = await _create_account(client, book_id, "Rent", "cat_expense_default")

        response = await client.post(
            f"/api/books/{book_id}/transactions",
            json={
                "date": "2026-01-05T09:00:00Z",
                "description": "Office rent",
                "entries": [
                    {"account_id": rent["id"], "amount": "300", "type": "debit"},
                    {"account_id": bank["id"], "amount": "200", "type": "credit"},
                ],
            },
        )

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_account_with_transactions_cannot_be_deleted(
        self, client: AsyncClient
    ) -> None:
        book_id = await _default_book_id(client)
        bank = await _create_account(client, book_id, "Bank", "cat_cash_default")
        rent = await _create_account(client, book_id, "Rent", "cat_expense_default")
        await client.post(
            f"/api/books/{book_id}/transactions",
            json={
                "date": "2026-01-05T09:00:00Z",
                "description": "Office rent",
                "entries": [
                    {"account_id": rent["id"], "amount": "5", "type": "debit"},
                    {"account_id": bank["id"], "amount": "5", "type": "credit"},
                ],
            },
        )

        response = await client.delete(f"/api/books/{book_id}/accounts/{bank['id']}")

        assert response.status_code == 409
        assert response.json()["error"] == "invariant_error"


class TestRecycleBinApi:
    """휴지통 API 테스트"""

    @pytest.mark.asyncio
    async def test_delete_and_restore_category(self, client: AsyncClient) -> None:
        book_id = await _default_book_id(client)

        deleted = await client.delete(f"/api/books/{book_id}/categories/cat_expense_default")
        assert deleted.status_code == 200

        items = (await client.get("/api/recycle-bin")).json()
        assert [i["type"] for i in items] == ["category"]

        restored = await client.post(f"/api/recycle-bin/{items[0]['bin_id']}/restore")
        assert restored.status_code == 200

        categories = (await client.get(f"/api/books/{book_id}/categories")).json()
        assert "cat_expense_default" in [c["id"] for c in categories]
        assert (await client.get("/api/recycle-bin")).json() == []

    @pytest.mark.asyncio
    async def test_purge_missing_is_404(self, client: AsyncClient) -> None:
        response = await client.delete("/api/recycle-bin/bin_missing")

        assert response.status_code == 404


class TestTransferApi:
    """장부 간 이체 API 테스트"""

    @pytest.mark.asyncio
    async def test_balance_transfer(self, client: AsyncClient) -> None:
        default_id = await _default_book_id(client)
        side = (await client.post("/api/books", json={"name": "Side"})).json()
        bank = await _create_account(client, default_id, "Bank", "cat_cash_default", "500")

        response = await client.post(
            "/api/transfers/balance",
            json={
                "source_book_id": default_id,
                "target_book_id": side["id"],
                "source_account_id": bank["id"],
                "amount": "200",
                "balance_type": "debit",
            },
        )

        assert response.status_code == 201, response.text
        body = response.json()
        assert body["target_account"]["book_id"] == side["id"]
        assert body["source_transaction"]["description"] == "Balance transfer to Side"

        balances = (await client.get(f"/api/books/{default_id}/ledger/balances")).json()
        assert next(b for b in balances if b["id"] == bank["id"])["balance"] == "300"

    @pytest.mark.asyncio
    async def test_same_book_is_422(self, client: AsyncClient) -> None:
        default_id = await _default_book_id(client)

        response = await client.post(
            "/api/transfers/opening-balance",
            json={
                "source_book_id": default_id,
                "target_book_id": default_id,
                "account_name": "Bank",
                "category_id": "cat_cash_default",
                "amount": "10",
                "balance_type": "debit",
            },
        )

        assert response.status_code == 422


class TestNotesAndExportApi:
    """메모/내보내기 API 테스트"""

    @pytest.mark.asyncio
    async def test_notes_and_export(self, client: AsyncClient) -> None:
        book_id = await _default_book_id(client)

        created = await client.post(f"/api/books/{book_id}/notes", json={"text": "Pay rent"})
        assert created.status_code == 201
        note_id = created.json()["id"]

        updated = await client.patch(
            f"/api/books/{book_id}/notes/{note_id}", json={"is_completed": True}
        )
        assert updated.json()["is_completed"] is True

        export = (await client.get("/api/export")).json()
        assert [n["text"] for n in export["notes"]] == ["Pay rent"]
        assert [b["id"] for b in export["books"]] == [book_id]

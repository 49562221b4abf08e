"""외부 금고 HTTP API 통합 테스트

FastAPI TestClient + 임시 settings.yaml/DB
"""

import sqlite3
from pathlib import Path

import jwt
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from core.config.loader import Settings, get_settings
from web.app import create_app
from web.dependencies import get_db_write


@pytest.fixture
def client(temp_settings_file: Path) -> TestClient:
    """임시 설정으로 앱 실행"""
    Settings.reset()
    get_settings(temp_settings_file)

    with TestClient(create_app()) as test_client:
        yield test_client

    Settings.reset()


@pytest.fixture
def auth_headers(secret_key: str) -> dict[str, str]:
    token = jwt.encode(
        {"userId": 1, "username": "alice", "role": "admin"},
        secret_key,
        algorithm="HS256",
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def raw_db(temp_dir: Path):
    """재고 손상 시뮬레이션용 직접 연결"""
    conn = sqlite3.connect(temp_dir / "vault.db")
    yield conn
    conn.close()


def _create(client: TestClient, headers: dict, **body) -> dict:
    response = client.post("/api/external-vault/transactions", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def _stock(client: TestClient, headers: dict) -> dict[int, str]:
    response = client.get("/api/external-vault/stock", headers=headers)
    assert response.status_code == 200
    return {row["karat"]: row["amount"] for row in response.json()["stock"]}


class TestHealth:
    """헬스 체크"""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["database"] == "ok"


class TestAuth:
    """인증 테스트"""

    def test_missing_token(self, client: TestClient) -> None:
        """토큰 없음 → 401"""
        response = client.get("/api/external-vault/stock")

        assert response.status_code == 401
        assert response.json()["error"]["kind"] == "AuthError"

    def test_invalid_token(self, client: TestClient) -> None:
        """다른 키로 서명된 토큰 → 401"""
        token = jwt.encode(
            {"username": "mallory"},
            "wrong_secret_key_for_signature_check_0123",
            algorithm="HS256",
        )

        response = client.get(
            "/api/external-vault/stock",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        assert response.json()["error"]["kind"] == "AuthError"

    def test_malformed_claims(self, client: TestClient, secret_key: str) -> None:
        """정상 서명 + 숫자 아닌 userId → 401"""
        token = jwt.encode({"userId": "abc", "username": "eve"}, secret_key, algorithm="HS256")

        response = client.get(
            "/api/external-vault/stock",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        assert response.json()["error"]["kind"] == "AuthError"


class TestTransactions:
    """거래 API 테스트"""

    def test_create_and_list(self, client: TestClient, auth_headers: dict) -> None:
        """생성 후 목록/재고"""
        created = _create(client, auth_headers, type="deposit", amount="10.5", karat=22, company_id=3)

        assert created["id"] >= 1
        assert created["message"]

        response = client.get("/api/external-vault/transactions", headers=auth_headers)
        body = response.json()

        assert response.status_code == 200
        assert body["total"] == 1
        txn = body["transactions"][0]
        assert txn["type"] == "deposit"
        assert txn["amount"] == "10.5"
        assert txn["user_name"] == "alice"
        assert txn["company_id"] == 3
        assert _stock(client, auth_headers) == {22: "10.5"}

    def test_list_newest_first(self, client: TestClient, auth_headers: dict) -> None:
        """최신순"""
        first = _create(client, auth_headers, type="deposit", amount=1, karat=22)
        second = _create(client, auth_headers, type="deposit", amount=2, karat=22)

        response = client.get("/api/external-vault/transactions", headers=auth_headers)

        assert [t["id"] for t in response.json()["transactions"]] == [second["id"], first["id"]]

    @pytest.mark.parametrize(
        "body",
        [
            {"type": "deposit", "amount": 0, "karat": 22},
            {"type": "deposit", "amount": -5, "karat": 22},
            {"type": "deposit", "amount": "abc", "karat": 22},
            {"type": "deposit", "amount": "1.0001", "karat": 22},
            {"type": "transfer", "amount": 1, "karat": 22},
            {"type": "deposit", "amount": 1, "karat": 30},
            {"type": "deposit", "amount": 1},
        ],
    )
    def test_invalid_create(self, client: TestClient, auth_headers: dict, body: dict) -> None:
        """잘못된 입력 → 400 ValidationError, 변경 없음"""
        response = client.post("/api/external-vault/transactions", json=body, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"]["kind"] == "ValidationError"
        assert _stock(client, auth_headers) == {}

    def test_exponent_amount_normalized(self, client: TestClient, auth_headers: dict) -> None:
        """지수 표기 수량은 고정 소수점으로 저장/응답"""
        _create(client, auth_headers, type="deposit", amount="1e1", karat=22)

        response = client.get("/api/external-vault/transactions", headers=auth_headers)

        assert response.json()["transactions"][0]["amount"] == "10"
        assert _stock(client, auth_headers) == {22: "10"}

    def test_withdrawal_overdraw_allowed(self, client: TestClient, auth_headers: dict) -> None:
        """재고 초과 출고 허용 (음수 재고)"""
        _create(client, auth_headers, type="withdrawal", amount=5, karat=18)

        assert _stock(client, auth_headers) == {18: "-5"}

    def test_delete(self, client: TestClient, auth_headers: dict) -> None:
        """삭제 → 재고 원복"""
        _create(client, auth_headers, type="deposit", amount=10, karat=22)
        withdrawal = _create(client, auth_headers, type="withdrawal", amount=3, karat=22)
        assert _stock(client, auth_headers) == {22: "7"}

        response = client.delete(
            f"/api/external-vault/transactions/{withdrawal['id']}",
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert _stock(client, auth_headers) == {22: "10"}

    def test_delete_missing(self, client: TestClient, auth_headers: dict) -> None:
        """없는 거래 → 404"""
        response = client.delete("/api/external-vault/transactions/999", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"]["kind"] == "NotFoundError"


class TestStockSync:
    """재고 동기화 API 테스트"""

    def test_sync_repairs_drift(
        self, client: TestClient, auth_headers: dict, raw_db: sqlite3.Connection
    ) -> None:
        """손상 → drift 감지 → sync → 복구"""
        _create(client, auth_headers, type="deposit", amount=10, karat=22)
        _create(client, auth_headers, type="withdrawal", amount=3, karat=22)
        raw_db.execute("UPDATE external_vault_stock SET amount_mg = 999000 WHERE karat = 22")
        raw_db.commit()

        drift = client.get("/api/external-vault/stock/drift", headers=auth_headers).json()
        assert drift["in_sync"] is False
        assert drift["drifts"][0]["karat"] == 22
        assert drift["drifts"][0]["actual"] == "999"

        response = client.post("/api/external-vault/stock/sync", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["processed_count"] == 2
        assert _stock(client, auth_headers) == {22: "7"}
        drift = client.get("/api/external-vault/stock/drift", headers=auth_headers).json()
        assert drift == {"in_sync": True, "drifts": []}

    def test_sync_empty_ledger(self, client: TestClient, auth_headers: dict) -> None:
        """빈 원장 sync"""
        response = client.post("/api/external-vault/stock/sync", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["processed_count"] == 0

    def test_scoped_sync(self, client: TestClient, auth_headers: dict) -> None:
        """karat 지정 sync"""
        _create(client, auth_headers, type="deposit", amount=1, karat=22)
        _create(client, auth_headers, type="deposit", amount=1, karat=18)

        response = client.post("/api/external-vault/stock/sync?karat=18", headers=auth_headers)

        assert response.json()["processed_count"] == 1
        assert response.json()["karat"] == 18

    def test_sync_invalid_karat(self, client: TestClient, auth_headers: dict) -> None:
        """범위 밖 karat → 400"""
        response = client.post("/api/external-vault/stock/sync?karat=0", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["error"]["kind"] == "ValidationError"


class TestReadOnlyQueries:
    """조회 API는 읽기 전용 연결 사용"""

    def test_queries_without_write_connection(self, client: TestClient, auth_headers: dict) -> None:
        """쓰기 연결 없이 목록/재고/drift 조회"""
        _create(client, auth_headers, type="deposit", amount=4, karat=22)

        async def _no_write_db():
            raise AssertionError("write connection opened for a query")
            yield

        client.app.dependency_overrides[get_db_write] = _no_write_db
        try:
            for path in ("/transactions", "/stock", "/stock/drift"):
                response = client.get(f"/api/external-vault{path}", headers=auth_headers)
                assert response.status_code == 200, path
        finally:
            client.app.dependency_overrides.clear()

        assert _stock(client, auth_headers) == {22: "4"}


class TestLogs:
    """감사 로그 API 테스트"""

    def test_mutations_are_logged(self, client: TestClient, auth_headers: dict) -> None:
        """생성/삭제/sync가 감사 로그에 기록"""
        created = _create(client, auth_headers, type="deposit", amount=10, karat=22)
        client.delete(f"/api/external-vault/transactions/{created['id']}", headers=auth_headers)
        client.post("/api/external-vault/stock/sync", headers=auth_headers)

        response = client.get("/api/logs", headers=auth_headers)
        body = response.json()

        assert response.status_code == 200
        assert body["pagination"]["total"] == 3
        assert [log["action"] for log in body["logs"]] == [
            "External Vault Stock Sync",
            "External Vault Transaction Deleted",
            "External Vault Transaction",
        ]
        assert body["logs"][-1]["details"] == "deposit: 10g (22k)"
        assert body["logs"][-1]["username"] == "alice"

    def test_search_and_get(self, client: TestClient, auth_headers: dict) -> None:
        """검색 + 단건 조회"""
        _create(client, auth_headers, type="deposit", amount=1, karat=22)
        _create(client, auth_headers, type="withdrawal", amount=1, karat=18)

        result = client.get("/api/logs?search=withdrawal", headers=auth_headers).json()
        assert result["pagination"]["total"] == 1

        log_id = result["logs"][0]["id"]
        single = client.get(f"/api/logs/{log_id}", headers=auth_headers)
        assert single.status_code == 200
        assert single.json()["details"] == "withdrawal: 1g (18k)"

        missing = client.get("/api/logs/9999", headers=auth_headers)
        assert missing.status_code == 404


class TestRealtime:
    """WebSocket 이벤트 테스트"""

    def test_events_after_create(self, client: TestClient, auth_headers: dict) -> None:
        """생성 시 거래/재고 이벤트 수신"""
        with client.websocket_connect("/ws") as ws:
            created = _create(client, auth_headers, type="deposit", amount=2, karat=22)

            first = ws.receive_json()
            second = ws.receive_json()

        assert first["event"] == "vault.transaction.created"
        assert first["data"]["id"] == created["id"]
        assert second["event"] == "vault.stock.updated"
        assert second["data"] == [
            {"karat": 22, "amount": "2", "updated_at": second["data"][0]["updated_at"]}
        ]

    def test_ping(self, client: TestClient) -> None:
        """ping → pong"""
        with client.websocket_connect("/ws") as ws:
            ws.send_text("ping")
            message = ws.receive_json()

        assert message["event"] == "pong"

    def test_invalid_token_rejected(self, client: TestClient) -> None:
        """잘못된 토큰은 연결 거부"""
        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect("/ws?token=not-a-jwt") as ws:
                ws.receive_json()

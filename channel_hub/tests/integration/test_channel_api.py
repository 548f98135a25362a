"""채널 API 통합 테스트"""
import pytest
from fastapi.testclient import TestClient

from channel_hub.adapters.channels.coupang_adapter import SELLER_INFO_PATH, VENDOR_ITEMS_PATH, ORDERS_PATH
from channel_hub.app.main import create_app

COUPANG_KEYS = {"access_key": "ak", "secret_key": "sk", "vendor_id": "A00012345"}


@pytest.fixture
def test_client(test_settings, marketplace, fixed_clock):
    """테스트용 HTTP 클라이언트 (메모리 DB, 마켓 API 대역)"""
    app = create_app(settings=test_settings, http_transport=marketplace.transport, clock=fixed_clock)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def connected_coupang(test_client, marketplace):
    marketplace.add("GET", SELLER_INFO_PATH, json={"code": "SUCCESS"})
    test_client.put("/api/v1/channels/coupang/config", json=COUPANG_KEYS)
    response = test_client.post("/api/v1/channels/coupang/test")
    assert response.json()["success"] is True
    return test_client


class TestHealthAPI:
    """헬스체크 API 테스트"""

    def test_health_check(self, test_client):
        response = test_client.get("/api/v1/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["channels"] == 8
        assert data["registered_adapters"] == 2

    def test_root(self, test_client):
        assert test_client.get("/").json()["health"] == "/api/v1/health"


class TestChannelsAPI:
    """채널 조회/설정 API 테스트"""

    def test_list_channels(self, test_client):
        response = test_client.get("/api/v1/channels")

        assert response.status_code == 200
        ids = [channel["id"] for channel in response.json()]
        assert ids[:2] == ["naver", "coupang"]
        assert len(ids) == 8

    def test_get_unknown_channel(self, test_client):
        response = test_client.get("/api/v1/channels/amazon")

        assert response.status_code == 404

    def test_update_config_hides_secret(self, test_client):
        """응답에 비밀 값이 포함되지 않음"""
        response = test_client.put("/api/v1/channels/coupang/config", json=COUPANG_KEYS)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "pending"
        assert data["configured"] is True
        assert data["access_key"] == "ak"
        assert "secret_key" not in data

    def test_update_config_of_unknown_channel(self, test_client):
        response = test_client.put("/api/v1/channels/amazon/config", json={"access_key": "x"})

        assert response.status_code == 404

    def test_update_config_with_field_of_other_type(self, test_client):
        response = test_client.put("/api/v1/channels/coupang/config", json={"client_id": "x"})

        assert response.status_code == 400

    def test_update_config_with_null_name(self, test_client):
        """비울 수 없는 필드에 null 을 보내면 400, 기존 값 유지"""
        response = test_client.put("/api/v1/channels/coupang/config", json={"name": None})

        assert response.status_code == 400
        assert test_client.get("/api/v1/channels/coupang").json()["name"] == "쿠팡"


class TestConnectionAPI:
    """연결/인증 API 테스트"""

    def test_incomplete_config(self, test_client, marketplace):
        response = test_client.post("/api/v1/channels/coupang/test")

        assert response.status_code == 400
        assert marketplace.requests == []

    def test_unsupported_channel(self, test_client):
        test_client.put("/api/v1/channels/toss/config", json={"access_key": "ak", "secret_key": "sk"})

        response = test_client.post("/api/v1/channels/toss/test")

        assert response.status_code == 400

    def test_connection_success(self, connected_coupang):
        channel = connected_coupang.get("/api/v1/channels/coupang").json()

        assert channel["status"] == "connected"
        assert channel["last_sync"] is not None

    def test_oauth_url(self, test_client):
        test_client.put("/api/v1/channels/naver/config", json={"client_id": "cid", "client_secret": "secret"})

        response = test_client.get("/api/v1/channels/naver/oauth-url", params={"state": "s1"})

        assert response.status_code == 200
        url = response.json()["authorization_url"]
        assert url.startswith("https://nid.naver.com/oauth2.0/authorize?")
        assert "state=s1" in url

    def test_oauth_callback_exchanges_code(self, test_client, marketplace):
        marketplace.add("POST", "/oauth2.0/token", json={"access_token": "AT", "refresh_token": "RT"})
        marketplace.add("GET", "/external/v1/seller-info", json={})
        test_client.put("/api/v1/channels/naver/config", json={"client_id": "cid", "client_secret": "secret"})

        response = test_client.get("/api/v1/channels/naver/oauth/callback", params={"code": "CODE", "state": "s1"})

        assert response.status_code == 200
        assert response.json()["status"] == "connected"
        assert "access_token" not in test_client.get("/api/v1/channels/naver").json()

    def test_authenticate_without_code(self, test_client):
        test_client.put("/api/v1/channels/naver/config", json={"client_id": "cid", "client_secret": "secret"})

        response = test_client.post("/api/v1/channels/naver/authenticate", json={})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["status"] == "pending"
        assert data["authorization_url"]

    def test_test_all(self, test_client):
        response = test_client.post("/api/v1/channels/test-all")

        assert response.status_code == 200
        assert response.json() == {"naver": False, "coupang": False}


class TestSyncAPI:
    """동기화 API 테스트"""

    def test_sync_requires_connection(self, test_client):
        response = test_client.post("/api/v1/channels/coupang/sync")

        assert response.status_code == 409

    def test_sync_orders_and_history(self, connected_coupang, marketplace):
        marketplace.add("GET", ORDERS_PATH, json={"code": "SUCCESS", "data": {"content": [{"orderId": 1}, {"orderId": 2}]}})

        response = connected_coupang.post("/api/v1/channels/coupang/sync")

        assert response.status_code == 200
        assert response.json()["processed_count"] == 2

        history = connected_coupang.get("/api/v1/channels/coupang/history").json()
        assert len(history) == 1
        assert history[0]["sync_type"] == "orders"

    def test_sync_products_and_stats(self, connected_coupang, marketplace):
        marketplace.add("GET", VENDOR_ITEMS_PATH, json={"code": "SUCCESS", "data": {"content": [
            {"vendorItemId": 1, "saleStatus": "ONSALE"},
            {"vendorItemId": 2, "saleStatus": "SUSPENDED"},
        ]}})

        response = connected_coupang.post("/api/v1/channels/coupang/sync/products")
        assert response.json()["processed_count"] == 2

        stats = connected_coupang.get("/api/v1/channels/stats").json()
        assert stats["coupang"]["total_products"] == 2
        assert stats["coupang"]["active_products"] == 1

    def test_sync_all_reports_per_channel(self, connected_coupang, marketplace):
        marketplace.add("GET", VENDOR_ITEMS_PATH, json={"code": "SUCCESS", "data": {"content": []}})

        data = connected_coupang.post("/api/v1/channels/sync-all/products").json()

        assert set(data["results"]) == {"naver", "coupang"}
        assert data["success_count"] == 1
        assert data["failure_count"] == 1
        assert data["results"]["naver"]["error_count"] == 1

    def test_sync_all_channels_only_connected(self, connected_coupang, marketplace):
        marketplace.add("GET", ORDERS_PATH, json={"code": "SUCCESS", "data": {"content": []}})

        data = connected_coupang.post("/api/v1/channels/sync-all").json()

        assert list(data["results"]) == ["coupang"]

    def test_inventory_update(self, connected_coupang, marketplace):
        marketplace.add("PUT", f"{VENDOR_ITEMS_PATH}/SKU-1/prices/quantity", json={"code": "SUCCESS"})

        response = connected_coupang.put("/api/v1/channels/inventory/SKU-1", json={"stock": 3})

        assert response.status_code == 200
        assert response.json()["results"] == {"naver": False, "coupang": True}

    def test_inventory_rejects_negative_stock(self, test_client):
        response = test_client.put("/api/v1/channels/inventory/SKU-1", json={"stock": -1})

        assert response.status_code == 422

    def test_history_of_unknown_channel(self, test_client):
        assert test_client.get("/api/v1/channels/amazon/history").status_code == 404

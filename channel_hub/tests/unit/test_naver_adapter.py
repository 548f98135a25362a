"""네이버 어댑터 단위 테스트"""
import json
from datetime import timedelta
from urllib.parse import urlparse, parse_qs

import httpx
import pytest
import pytest_asyncio

from channel_hub.adapters.channels.naver_adapter import (
    NaverAdapter, SELLER_INFO_PATH, PRODUCTS_PATH, ORDERS_PATH
)
from channel_hub.core.entities.channel_config import OAuthChannelConfig, ChannelStatus
from channel_hub.core.entities.channel_data import OrderStatus, PaymentStatus

TOKEN_PATH = "/oauth2.0/token"


def form_of(request: httpx.Request) -> dict:
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


@pytest_asyncio.fixture
async def adapter(naver_config, http_client, fixed_clock, test_settings):
    async with NaverAdapter(
        naver_config, client=http_client, clock=fixed_clock, settings=test_settings
    ) as naver:
        yield naver


class TestNaverAuthorizationUrl:
    """동의 URL 테스트"""

    def test_build_authorization_url(self, naver_config, test_settings):
        adapter = NaverAdapter(naver_config, client=httpx.AsyncClient(), settings=test_settings)
        url = adapter.build_authorization_url(state="xyz")

        parsed = urlparse(url)
        params = {key: values[0] for key, values in parse_qs(parsed.query).items()}
        assert parsed.netloc == "nid.naver.com"
        assert params == {
            "response_type": "code",
            "client_id": "naver-client",
            "redirect_uri": test_settings.naver_redirect_uri,
            "scope": "commerce.read,commerce.write",
            "state": "xyz",
        }

    def test_state_is_generated(self, naver_config, test_settings):
        adapter = NaverAdapter(naver_config, client=httpx.AsyncClient(), settings=test_settings)
        first = parse_qs(urlparse(adapter.build_authorization_url()).query)["state"][0]
        second = parse_qs(urlparse(adapter.build_authorization_url()).query)["state"][0]

        assert first and first != second


class TestNaverAuthenticate:
    """인증 흐름 테스트"""

    @pytest.mark.asyncio
    async def test_empty_client_credentials(self, http_client, marketplace, fixed_clock, test_settings):
        """클라이언트 ID/시크릿이 비면 호출 없이 실패"""
        config = OAuthChannelConfig(id="naver", name="네이버 스마트스토어")
        adapter = NaverAdapter(config, client=http_client, clock=fixed_clock, settings=test_settings)

        assert await adapter.authenticate() is False
        assert config.status == ChannelStatus.ERROR
        assert marketplace.requests == []

    @pytest.mark.asyncio
    async def test_code_exchange(self, adapter, marketplace, naver_config, fixed_clock):
        """인가 코드를 토큰으로 교환 후 연결 확인"""
        marketplace.add("POST", TOKEN_PATH, json={
            "access_token": "AT-1",
            "refresh_token": "RT-1",
            "token_type": "bearer",
            "expires_in": "3600",
        })
        marketplace.add("GET", SELLER_INFO_PATH, json={"sellerId": "s-1"})

        assert await adapter.authenticate(authorization_code="CODE", state="xyz") is True

        form = form_of(marketplace.requests_to(TOKEN_PATH)[0])
        assert form == {
            "grant_type": "authorization_code",
            "client_id": "naver-client",
            "client_secret": "naver-secret",
            "code": "CODE",
            "state": "xyz",
        }
        assert naver_config.access_token == "AT-1"
        assert naver_config.refresh_token == "RT-1"
        assert naver_config.token_expires_at == fixed_clock.now() + timedelta(seconds=3600)
        assert naver_config.status == ChannelStatus.CONNECTED

        seller_request = marketplace.requests_to(SELLER_INFO_PATH)[0]
        assert seller_request.headers["Authorization"] == "Bearer AT-1"

    @pytest.mark.asyncio
    async def test_code_exchange_error_payload(self, adapter, marketplace, naver_config):
        """토큰 엔드포인트의 200 + error 응답은 실패"""
        marketplace.add("POST", TOKEN_PATH, json={
            "error": "invalid_request",
            "error_description": "no valid data in session",
        })

        assert await adapter.authenticate(authorization_code="BAD") is False
        assert naver_config.status == ChannelStatus.ERROR
        assert "no valid data in session" in naver_config.last_error
        assert naver_config.access_token is None
        assert marketplace.requests_to(SELLER_INFO_PATH) == []

    @pytest.mark.asyncio
    async def test_without_tokens_stays_pending(self, adapter, marketplace, naver_config):
        """코드도 토큰도 없으면 판매자 동의 대기"""
        assert await adapter.authenticate() is False
        assert naver_config.status == ChannelStatus.PENDING
        assert naver_config.access_token is None
        assert marketplace.requests == []

    @pytest.mark.asyncio
    async def test_existing_access_token_is_validated(self, adapter, marketplace, naver_config):
        naver_config.access_token = "AT-0"
        marketplace.add("GET", SELLER_INFO_PATH, json={}, status_code=401)

        assert await adapter.authenticate() is False
        assert naver_config.status == ChannelStatus.ERROR
        assert naver_config.last_error.startswith("HTTP 401")

    @pytest.mark.asyncio
    async def test_refresh_token_when_no_access_token(self, adapter, marketplace, naver_config):
        naver_config.refresh_token = "RT-0"
        marketplace.add("POST", TOKEN_PATH, json={"access_token": "AT-2", "refresh_token": "RT-2"})
        marketplace.add("GET", SELLER_INFO_PATH, json={})

        assert await adapter.authenticate() is True

        assert form_of(marketplace.requests_to(TOKEN_PATH)[0])["grant_type"] == "refresh_token"
        assert naver_config.access_token == "AT-2"


class TestNaverRefreshToken:
    """토큰 갱신 테스트"""

    @pytest.mark.asyncio
    async def test_refresh_replaces_tokens(self, adapter, marketplace, naver_config):
        naver_config.access_token = "AT-OLD"
        naver_config.refresh_token = "RT-OLD"
        marketplace.add("POST", TOKEN_PATH, json={"access_token": "AT-NEW", "refresh_token": "RT-NEW", "expires_in": 3600})

        assert await adapter.refresh_token() is True

        form = form_of(marketplace.requests[0])
        assert form["refresh_token"] == "RT-OLD"
        assert naver_config.access_token == "AT-NEW"
        assert naver_config.refresh_token == "RT-NEW"

    @pytest.mark.asyncio
    async def test_refresh_keeps_refresh_token_when_not_rotated(self, adapter, marketplace, naver_config):
        naver_config.refresh_token = "RT-OLD"
        marketplace.add("POST", TOKEN_PATH, json={"access_token": "AT-NEW"})

        assert await adapter.refresh_token() is True
        assert naver_config.refresh_token == "RT-OLD"

    @pytest.mark.asyncio
    async def test_refresh_without_refresh_token(self, adapter, marketplace):
        assert await adapter.refresh_token() is False
        assert marketplace.requests == []

    @pytest.mark.asyncio
    async def test_refresh_failure_marks_error(self, adapter, marketplace, naver_config):
        naver_config.refresh_token = "RT-OLD"
        marketplace.add("POST", TOKEN_PATH, json={"error": "invalid_grant"})

        assert await adapter.refresh_token() is False
        assert naver_config.status == ChannelStatus.ERROR


class TestNaverSync:
    """상품/주문/재고 테스트"""

    @pytest.fixture(autouse=True)
    def connected(self, naver_config):
        naver_config.access_token = "AT-1"

    @pytest.mark.asyncio
    async def test_sync_products(self, adapter, marketplace):
        marketplace.add("GET", PRODUCTS_PATH, json={"data": [
            {"channelProductNo": 11, "name": "상품A", "salePrice": 12000, "stockQuantity": 4, "statusType": "SALE"},
            {"channelProductNo": 12, "name": "상품B", "salePrice": 8000, "stockQuantity": 0, "statusType": "OUTOFSTOCK"},
        ]})

        result = await adapter.sync_products()

        assert result.success
        assert result.processed_count == 2
        assert adapter.last_products[0].channel_product_id == "11"
        assert not adapter.last_products[1].is_active()

    @pytest.mark.asyncio
    async def test_sync_orders(self, adapter, marketplace):
        marketplace.add("GET", ORDERS_PATH, json={"data": {"orders": [{
            "orderId": "2024051500001",
            "orderDate": "2024-05-15T09:00:00+09:00",
            "ordererName": "김철수",
            "productOrderStatus": "PAYED",
            "totalPaymentAmount": 25000,
            "shippingAddress": {"baseAddress": "부산시", "detailedAddress": "101호", "zipCode": "48000"},
            "productOrders": [{"productId": "11", "productName": "상품A", "quantity": 1, "totalPaymentAmount": 25000}],
        }]}})

        result = await adapter.sync_orders()

        request = marketplace.requests_to(ORDERS_PATH)[0]
        assert request.headers["Authorization"] == "Bearer AT-1"
        assert request.url.params["limit"] == "100"
        assert result.processed_count == 1

        order = adapter.last_orders[0]
        assert order.status == OrderStatus.CONFIRMED
        assert order.payment_status == PaymentStatus.PAID
        assert order.payment_amount == 25000
        assert order.shipping_address == "부산시 101호"

    @pytest.mark.asyncio
    async def test_sync_without_access_token_fails(self, adapter, marketplace, naver_config):
        naver_config.access_token = None

        result = await adapter.sync_orders()

        assert not result.success
        assert result.error_count == 1
        assert marketplace.requests == []

    @pytest.mark.asyncio
    async def test_update_inventory(self, adapter, marketplace):
        path = f"{PRODUCTS_PATH}/11/stock"
        marketplace.add("PUT", path, json={})

        assert await adapter.update_inventory("11", 5) is True
        assert json.loads(marketplace.requests_to(path)[0].content) == {"stock": 5}

    @pytest.mark.asyncio
    async def test_update_inventory_failure(self, adapter, marketplace):
        marketplace.add("PUT", f"{PRODUCTS_PATH}/11/stock", json={}, status_code=400)

        assert await adapter.update_inventory("11", 5) is False

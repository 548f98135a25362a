"""공용 테스트 픽스처"""
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio

from channel_hub.core.entities.channel_config import ApiKeyChannelConfig, OAuthChannelConfig
from channel_hub.core.entities.channel_data import KST
from channel_hub.core.ports.clock_port import ClockPort
from channel_hub.shared.config import Settings

FIXED_NOW = datetime(2024, 5, 15, 12, 0, 0, tzinfo=KST)


class FixedClock(ClockPort):
    """고정 시각 시계"""

    def __init__(self, now: datetime = FIXED_NOW):
        self._now = now

    def now(self) -> datetime:
        return self._now


class MockMarketplace:
    """마켓 API 대역 (메서드 + 경로로 응답 지정, 요청 기록)"""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        json: Any = None,
        status_code: int = 200,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None
    ) -> None:
        self.routes[(method.upper(), path)] = handler or (
            lambda request: httpx.Response(status_code, json=json)
        )

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "not found"})
        return route(request)

    def requests_to(self, path: str) -> List[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def fixed_clock():
    return FixedClock()


@pytest.fixture
def test_settings():
    """테스트 설정 (메모리 DB)"""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        log_level="WARNING",
    )


@pytest.fixture
def marketplace():
    return MockMarketplace()


@pytest_asyncio.fixture
async def http_client(marketplace):
    client = httpx.AsyncClient(transport=marketplace.transport)
    yield client
    await client.aclose()


@pytest.fixture
def coupang_config():
    return ApiKeyChannelConfig(
        id="coupang",
        name="쿠팡",
        access_key="test-access-key",
        secret_key="test-secret-key",
        vendor_id="A00012345",
    )


@pytest.fixture
def naver_config():
    return OAuthChannelConfig(
        id="naver",
        name="네이버 스마트스토어",
        client_id="naver-client",
        client_secret="naver-secret",
    )

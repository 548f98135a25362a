"""의존성 주입 설정"""
from typing import Optional

import httpx
from fastapi import Request
from sqlalchemy.ext.asyncio import async_sessionmaker

from channel_hub.adapters.persistence.clock_adapter import ClockAdapter
from channel_hub.adapters.persistence.repositories import SqlAlchemyChannelRepository
from channel_hub.core.ports.clock_port import ClockPort
from channel_hub.services.channel_integration_service import ChannelIntegrationService
from channel_hub.services.channel_service import ChannelService
from channel_hub.shared.config import Settings


def create_http_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> httpx.AsyncClient:
    """모든 채널 어댑터가 공유하는 HTTP 클라이언트"""
    return httpx.AsyncClient(
        transport=transport,
        timeout=httpx.Timeout(settings.sync_timeout_seconds)
    )


def create_channel_service(
    settings: Settings,
    session_factory: async_sessionmaker,
    http_client: httpx.AsyncClient,
    clock: Optional[ClockPort] = None
) -> ChannelService:
    """채널 서비스 조립"""
    clock = clock or ClockAdapter()
    integration = ChannelIntegrationService(
        http_client=http_client,
        clock=clock,
        settings=settings,
        history_limit=settings.sync_history_limit
    )
    repository = SqlAlchemyChannelRepository(session_factory)
    return ChannelService(repository, integration, clock)


def get_channel_service(request: Request) -> ChannelService:
    """요청 처리용 채널 서비스 (애플리케이션 시작 시 생성)"""
    return request.app.state.channel_service

"""FastAPI 애플리케이션 메인 파일"""
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware

from channel_hub.adapters.persistence.models import create_engine_for, create_session_factory, init_models
from channel_hub.app.di import create_http_client, create_channel_service
from channel_hub.app.routes import health, channels
from channel_hub.core.ports.clock_port import ClockPort
from channel_hub.shared.config import Settings, get_settings
from channel_hub.shared.logging import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Optional[ClockPort] = None
) -> FastAPI:
    """FastAPI 애플리케이션 생성"""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """애플리케이션 생명주기 관리"""
        logger.info("멀티 채널 연동 서비스 시작")

        engine = create_engine_for(settings.database_url)
        await init_models(engine)

        http_client = create_http_client(settings, http_transport)
        channel_service = create_channel_service(
            settings, create_session_factory(engine), http_client, clock
        )
        await channel_service.initialize_default_channels()
        app.state.channel_service = channel_service

        yield

        await channel_service.integration.aclose()
        await http_client.aclose()
        await engine.dispose()
        logger.info("멀티 채널 연동 서비스 종료")

    app = FastAPI(
        title="멀티 채널 연동 서비스",
        description="네이버 스마트스토어, 쿠팡 등 판매 채널 연결 및 동기화",
        version="1.0.0",
        lifespan=lifespan
    )

    # CORS 미들웨어
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_router = APIRouter(prefix="/api/v1")
    api_router.include_router(health.router, tags=["health"])
    api_router.include_router(channels.router, prefix="/channels", tags=["channels"])
    app.include_router(api_router)

    @app.get("/")
    async def root():
        """루트 엔드포인트"""
        return {
            "message": "멀티 채널 연동 API 서버",
            "docs": "/docs",
            "health": "/api/v1/health"
        }

    return app


# 애플리케이션 인스턴스
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "channel_hub.app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower()
    )

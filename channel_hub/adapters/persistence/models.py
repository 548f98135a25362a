"""SQLAlchemy 모델"""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from sqlalchemy.sql import func

from channel_hub.shared.config import get_settings


# 데이터베이스 모델 베이스
class Base(DeclarativeBase):
    pass


# 판매 채널 설정 테이블
class ChannelModel(Base):
    __tablename__ = "channels"

    id = Column(Integer, primary_key=True, index=True)
    channel_id = Column(String(50), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    type = Column(String(20), nullable=False)  # oauth, api, webhook
    status = Column(String(20), nullable=False, default="disconnected")
    description = Column(Text)
    logo_url = Column(String(255))
    credentials = Column(JSON, nullable=False, default=dict)  # 유형별 인증 필드
    last_sync = Column(DateTime(timezone=True))
    last_error = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


def create_engine_for(database_url: str = None) -> AsyncEngine:
    """비동기 엔진 생성 (메모리 SQLite 는 단일 연결 공유)"""
    settings = get_settings()
    database_url = database_url or settings.database_url
    echo = settings.log_level == "DEBUG"

    if database_url.startswith("sqlite") and ":memory:" in database_url:
        return create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool
        )
    return create_async_engine(database_url, echo=echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """테이블 생성 (없는 테이블만)"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

"""리포지토리 구현체"""
from typing import List, Optional
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from channel_hub.adapters.persistence.models import ChannelModel
from channel_hub.core.entities.channel_config import ChannelConfig, channel_config_from_dict
from channel_hub.core.ports.channel_repo_port import ChannelRepositoryPort
from channel_hub.shared.logging import get_logger

logger = get_logger(__name__)


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite 는 타임존을 저장하지 않으므로 UTC 로 맞춰 저장한다
    if value is None:
        return None
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


def _from_db(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class SqlAlchemyChannelRepository(ChannelRepositoryPort):
    """채널 설정 리포지토리 구현체 (호출마다 세션 생성)"""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def get(self, channel_id: str) -> Optional[ChannelConfig]:
        """채널 ID 로 조회"""
        async with self.session_factory() as session:
            result = await session.execute(
                select(ChannelModel).where(ChannelModel.channel_id == channel_id)
            )
            model = result.scalar_one_or_none()
            return self._map_model_to_config(model) if model else None

    async def list_all(self) -> List[ChannelConfig]:
        """전체 채널 조회"""
        async with self.session_factory() as session:
            result = await session.execute(select(ChannelModel).order_by(ChannelModel.id))
            return [self._map_model_to_config(model) for model in result.scalars().all()]

    async def save(self, config: ChannelConfig) -> ChannelConfig:
        """채널 저장 (없으면 생성)"""
        async with self.session_factory() as session:
            try:
                result = await session.execute(
                    select(ChannelModel).where(ChannelModel.channel_id == config.id)
                )
                model = result.scalar_one_or_none()
                if model is None:
                    model = ChannelModel(channel_id=config.id)
                    session.add(model)

                self._apply_config(model, config)
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error(f"채널 저장 실패 {config.id}: {e}")
                raise

        return config

    async def ensure_defaults(self, configs: List[ChannelConfig]) -> int:
        """없는 기본 채널만 추가"""
        async with self.session_factory() as session:
            try:
                result = await session.execute(select(ChannelModel.channel_id))
                existing = set(result.scalars().all())

                added = 0
                for config in configs:
                    if config.id in existing:
                        continue
                    model = ChannelModel(channel_id=config.id)
                    self._apply_config(model, config)
                    session.add(model)
                    added += 1

                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error(f"기본 채널 생성 실패: {e}")
                raise

        if added:
            logger.info(f"기본 채널 {added}개 생성")
        return added

    def _apply_config(self, model: ChannelModel, config: ChannelConfig) -> None:
        model.name = config.name
        model.type = config.type.value
        model.status = config.status.value
        model.description = config.description
        model.logo_url = config.logo_url
        model.credentials = config.credentials()
        model.last_sync = _to_utc(config.last_sync)
        model.last_error = config.last_error

    def _map_model_to_config(self, model: ChannelModel) -> ChannelConfig:
        """SQLAlchemy 모델을 도메인 엔티티로 변환"""
        data = dict(model.credentials or {})
        data.update({
            'id': model.channel_id,
            'name': model.name,
            'type': model.type,
            'status': model.status,
            'description': model.description,
            'logo_url': model.logo_url,
            'last_sync': _from_db(model.last_sync),
            'last_error': model.last_error,
        })

        config = channel_config_from_dict(data)
        expires_at = getattr(config, 'token_expires_at', None)
        if expires_at is not None and expires_at.tzinfo is None:
            config.token_expires_at = expires_at.replace(tzinfo=timezone.utc)
        return config

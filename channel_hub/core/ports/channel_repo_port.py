"""채널 설정 저장소 포트 (인터페이스)"""
from abc import ABC, abstractmethod
from typing import List, Optional

from channel_hub.core.entities.channel_config import ChannelConfig


class ChannelRepositoryPort(ABC):
    """채널 설정 저장소 인터페이스"""

    @abstractmethod
    async def get(self, channel_id: str) -> Optional[ChannelConfig]:
        """채널 ID 로 설정 조회"""
        pass

    @abstractmethod
    async def list_all(self) -> List[ChannelConfig]:
        """전체 채널 설정 (채널 ID 순)"""
        pass

    @abstractmethod
    async def save(self, config: ChannelConfig) -> ChannelConfig:
        """설정 저장 (없으면 생성)"""
        pass

    @abstractmethod
    async def ensure_defaults(self, configs: List[ChannelConfig]) -> int:
        """없는 기본 채널만 추가하고 추가된 개수 반환"""
        pass

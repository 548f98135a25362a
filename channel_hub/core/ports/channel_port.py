"""마켓 채널 연동 포트 (인터페이스)"""
from abc import ABC, abstractmethod
from typing import Any

from channel_hub.core.entities.channel_config import ChannelConfig
from channel_hub.core.entities.sync_result import ChannelSyncResult


class ChannelPort(ABC):
    """채널 어댑터 인터페이스

    공개 메서드는 예외를 밖으로 던지지 않는다.
    실패는 ``False`` 또는 ``success=False`` 인 동기화 결과로 돌려준다.
    """

    @abstractmethod
    async def authenticate(self) -> bool:
        """마켓 인증"""
        pass

    @abstractmethod
    async def test_connection(self) -> bool:
        """판매자 정보 조회로 연결 확인"""
        pass

    @abstractmethod
    async def sync_products(self) -> ChannelSyncResult:
        """상품 목록 한 페이지 동기화"""
        pass

    @abstractmethod
    async def sync_orders(self) -> ChannelSyncResult:
        """최근 주문 한 페이지 동기화"""
        pass

    @abstractmethod
    async def update_inventory(self, product_id: str, stock: int) -> bool:
        """재고 수량 반영"""
        pass

    @abstractmethod
    def get_channel_id(self) -> str:
        pass

    @abstractmethod
    def get_channel_name(self) -> str:
        pass

    @abstractmethod
    def get_config(self) -> ChannelConfig:
        pass

    @abstractmethod
    def update_config(self, **changes: Any) -> None:
        """설정 부분 병합"""
        pass

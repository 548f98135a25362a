"""채널 통합 서비스 (어댑터 레지스트리 + 일괄 작업)"""
from typing import Dict, Any, List, Optional, Callable, Awaitable, Tuple, Type
import asyncio

import httpx

from channel_hub.adapters.channels.base import BaseChannelAdapter
from channel_hub.adapters.channels.coupang_adapter import CoupangAdapter
from channel_hub.adapters.channels.naver_adapter import NaverAdapter
from channel_hub.adapters.persistence.clock_adapter import ClockAdapter
from channel_hub.core.entities.channel_config import ChannelConfig
from channel_hub.core.entities.channel_data import ChannelStats
from channel_hub.core.entities.sync_result import ChannelSyncResult, SyncHistoryLog, SyncType
from channel_hub.core.ports.clock_port import ClockPort
from channel_hub.shared.config import Settings, get_settings
from channel_hub.shared.logging import get_logger, get_channel_logger
from channel_hub.shared.result import Result, Success, Failure

logger = get_logger(__name__)

# 어댑터가 구현된 채널만 등록 가능
ADAPTER_FACTORIES: Dict[str, Type[BaseChannelAdapter]] = {
    "naver": NaverAdapter,
    "coupang": CoupangAdapter,
}


class ChannelIntegrationService:
    """채널 통합 서비스

    등록된 채널 어댑터를 보관하고, 전체 채널 대상 작업을 동시에 실행한다.
    일괄 작업은 모든 채널이 끝날 때까지 기다리며 한 채널의 예외가
    다른 채널 결과를 막지 않는다.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Optional[ClockPort] = None,
        settings: Optional[Settings] = None,
        adapter_factories: Optional[Dict[str, Callable[..., BaseChannelAdapter]]] = None,
        history_limit: Optional[int] = None
    ):
        self.settings = settings or get_settings()
        self.clock = clock or ClockAdapter()
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient()
        self.adapter_factories = dict(adapter_factories or ADAPTER_FACTORIES)
        self.history_limit = history_limit or self.settings.sync_history_limit

        self._adapters: Dict[str, BaseChannelAdapter] = {}
        self._histories: Dict[str, SyncHistoryLog] = {}

    # 레지스트리

    def register_channel(self, config: ChannelConfig) -> Result[BaseChannelAdapter]:
        """채널 어댑터 생성 및 등록 (같은 ID 는 덮어씀)"""
        factory = self.adapter_factories.get(config.id)
        if factory is None:
            message = f"지원하지 않는 채널입니다: {config.id}"
            logger.warning(message)
            return Failure(message, code="unsupported_channel")

        adapter = factory(
            config,
            client=self.http_client,
            clock=self.clock,
            logger=get_channel_logger(config.id),
            settings=self.settings
        )
        self._adapters[config.id] = adapter
        self._histories.setdefault(config.id, SyncHistoryLog(self.history_limit))

        logger.info(f"채널 등록: {config.id} ({config.name})")
        return Success(adapter)

    def unregister_channel(self, channel_id: str) -> bool:
        """채널 등록 해제"""
        adapter = self._adapters.pop(channel_id, None)
        if adapter is None:
            return False

        self._histories.pop(channel_id, None)
        logger.info(f"채널 등록 해제: {channel_id}")
        return True

    def get_channel_service(self, channel_id: str) -> Optional[BaseChannelAdapter]:
        return self._adapters.get(channel_id)

    def get_all_channels(self) -> List[BaseChannelAdapter]:
        return list(self._adapters.values())

    def update_channel_config(self, channel_id: str, **changes: Any) -> bool:
        """등록된 어댑터 설정 부분 업데이트"""
        adapter = self._adapters.get(channel_id)
        if adapter is None:
            logger.warning(f"등록되지 않은 채널 설정 변경 요청: {channel_id}")
            return False

        try:
            adapter.update_config(**changes)
        except ValueError as e:
            logger.error(f"채널 설정 변경 실패 {channel_id}: {e}")
            return False

        return True

    # 일괄 작업

    async def test_all_connections(self) -> Dict[str, bool]:
        """전체 채널 연결 테스트"""
        outcomes = await self._run_all(lambda adapter: adapter.test_connection())

        results = {}
        for adapter, outcome in outcomes:
            channel_id = adapter.get_channel_id()
            if isinstance(outcome, Exception):
                self._mark_crashed(adapter, "연결 테스트", outcome)
                results[channel_id] = False
            else:
                results[channel_id] = bool(outcome)

        logger.info(f"전체 연결 테스트 완료: {sum(results.values())}/{len(results)} 성공")
        return results

    async def sync_all_products(self) -> Dict[str, ChannelSyncResult]:
        """전체 채널 상품 동기화"""
        return await self._sync_all(SyncType.PRODUCTS, lambda adapter: adapter.sync_products())

    async def sync_all_orders(self) -> Dict[str, ChannelSyncResult]:
        """전체 채널 주문 동기화"""
        return await self._sync_all(SyncType.ORDERS, lambda adapter: adapter.sync_orders())

    async def update_inventory_all_channels(self, product_id: str, stock: int) -> Dict[str, bool]:
        """전체 채널 재고 반영"""
        outcomes = await self._run_all(lambda adapter: adapter.update_inventory(product_id, stock))
        now = self.clock.now()

        results = {}
        for adapter, outcome in outcomes:
            channel_id = adapter.get_channel_id()
            if isinstance(outcome, Exception):
                self._mark_crashed(adapter, "재고 업데이트", outcome)
                outcome = False

            results[channel_id] = bool(outcome)
            if outcome:
                self.record_sync_result(ChannelSyncResult.succeeded(channel_id, SyncType.INVENTORY, 1, now))
            else:
                message = adapter.get_config().last_error or f"재고 업데이트 실패: {product_id}"
                self.record_sync_result(ChannelSyncResult.failed(channel_id, SyncType.INVENTORY, message, now))

        return results

    # 이력 / 통계

    def record_sync_result(self, result: ChannelSyncResult) -> None:
        history = self._histories.setdefault(result.channel_id, SyncHistoryLog(self.history_limit))
        history.append(result)

    def get_sync_history(self, channel_id: str) -> List[ChannelSyncResult]:
        """채널 동기화 이력 (최신순)"""
        history = self._histories.get(channel_id)
        return history.entries() if history else []

    def get_channel_stats(self) -> Dict[str, ChannelStats]:
        """채널별 통계 (마지막으로 가져온 상품/주문 기준)"""
        now = self.clock.now()
        return {
            channel_id: ChannelStats.from_snapshot(
                channel_id, adapter.last_products, adapter.last_orders, now
            )
            for channel_id, adapter in self._adapters.items()
        }

    async def aclose(self) -> None:
        for adapter in self._adapters.values():
            await adapter.aclose()
        if self._owns_client:
            await self.http_client.aclose()

    # 내부 헬퍼

    async def _run_all(
        self,
        operation: Callable[[BaseChannelAdapter], Awaitable[Any]]
    ) -> List[Tuple[BaseChannelAdapter, Any]]:
        """모든 채널에 동시 실행 (예외는 값으로 반환)

        실행 도중 등록이 바뀌어도 시작 시점의 어댑터 기준으로 결과를 돌려준다.
        """
        adapters = list(self._adapters.values())
        outcomes = await asyncio.gather(
            *(operation(adapter) for adapter in adapters),
            return_exceptions=True
        )
        return list(zip(adapters, outcomes))

    async def _sync_all(
        self,
        sync_type: SyncType,
        operation: Callable[[BaseChannelAdapter], Awaitable[ChannelSyncResult]]
    ) -> Dict[str, ChannelSyncResult]:
        outcomes = await self._run_all(operation)

        results = {}
        for adapter, outcome in outcomes:
            channel_id = adapter.get_channel_id()
            if isinstance(outcome, Exception):
                message = self._mark_crashed(adapter, f"{sync_type.value} 동기화", outcome)
                outcome = ChannelSyncResult.failed(channel_id, sync_type, message, self.clock.now())

            self.record_sync_result(outcome)
            results[channel_id] = outcome

        succeeded = sum(1 for result in results.values() if result.success)
        logger.info(f"전체 {sync_type.value} 동기화 완료: {succeeded}/{len(results)} 성공")
        return results

    def _mark_crashed(self, adapter: BaseChannelAdapter, action: str, error: Exception) -> str:
        message = str(error) or error.__class__.__name__
        logger.error(f"{action} 중 예외 발생 {adapter.get_channel_id()}: {message}")
        adapter.get_config().mark_error(message)
        return message

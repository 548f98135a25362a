"""채널 관리 서비스

저장소의 채널 설정이 기준이며, 통합 서비스에 등록된 어댑터는
저장할 때마다 다시 등록되는 사본이다.
"""
from typing import Dict, Any, List, Optional
import asyncio

from channel_hub.adapters.channels.base import BaseChannelAdapter
from channel_hub.core.entities.channel_config import (
    ChannelConfig, ChannelStatus, ChannelType, default_channel_configs
)
from channel_hub.core.entities.channel_data import ChannelStats
from channel_hub.core.entities.sync_result import ChannelSyncResult, SyncType
from channel_hub.core.exceptions import (
    ChannelNotFoundError, ChannelConfigIncompleteError, UnsupportedChannelError,
    ChannelNotConnectedError
)
from channel_hub.core.ports.channel_repo_port import ChannelRepositoryPort
from channel_hub.core.ports.clock_port import ClockPort
from channel_hub.services.channel_integration_service import ChannelIntegrationService
from channel_hub.shared.logging import get_logger

logger = get_logger(__name__)


class ChannelService:
    """채널 관리 서비스"""

    def __init__(
        self,
        repository: ChannelRepositoryPort,
        integration: ChannelIntegrationService,
        clock: ClockPort
    ):
        self.repository = repository
        self.integration = integration
        self.clock = clock

    async def initialize_default_channels(self) -> Dict[str, Any]:
        """기본 채널 생성 후 저장된 채널 전부 등록"""
        added = await self.repository.ensure_defaults(default_channel_configs())

        registered = []
        for config in await self.repository.list_all():
            if self.integration.register_channel(config).is_success():
                registered.append(config.id)

        logger.info(f"채널 초기화 완료: 신규 {added}개, 어댑터 등록 {registered}")
        return {"added": added, "registered": registered}

    async def find_all(self) -> List[ChannelConfig]:
        return await self.repository.list_all()

    async def find_one(self, channel_id: str) -> ChannelConfig:
        config = await self.repository.get(channel_id)
        if config is None:
            raise ChannelNotFoundError(channel_id)
        return config

    async def update_config(self, channel_id: str, changes: Dict[str, Any]) -> ChannelConfig:
        """채널 설정 부분 업데이트

        필수 인증 정보가 모두 있으면 ``pending``, 아니면 ``disconnected`` 로 둔다.
        """
        config = await self.find_one(channel_id)
        config.update(**changes)

        if config.has_required_fields():
            config.mark_pending()
        else:
            config.mark_disconnected()

        saved = await self.repository.save(config)
        self.integration.register_channel(saved)

        logger.info(f"채널 설정 업데이트: {channel_id} -> {saved.status.value}")
        return saved

    async def test_connection(self, channel_id: str) -> Dict[str, Any]:
        """채널 연결 테스트"""
        config = await self.find_one(channel_id)
        if not config.has_required_fields():
            raise ChannelConfigIncompleteError(channel_id, config.missing_fields())

        adapter = self._resolve_adapter(config)
        is_connected = await adapter.test_connection()
        saved = await self._save_adapter_config(adapter)

        return {
            "success": is_connected,
            "message": "연결 성공" if is_connected else (saved.last_error or "연결 실패"),
            "status": saved.status.value,
        }

    async def authenticate(
        self,
        channel_id: str,
        authorization_code: Optional[str] = None,
        state: Optional[str] = None
    ) -> Dict[str, Any]:
        """채널 인증 (OAuth 채널은 인가 코드 교환)"""
        config = await self.find_one(channel_id)
        adapter = self._resolve_adapter(config)

        if config.type == ChannelType.OAUTH:
            is_authenticated = await adapter.authenticate(
                authorization_code=authorization_code, state=state
            )
        else:
            is_authenticated = await adapter.authenticate()

        saved = await self._save_adapter_config(adapter)
        response = {
            "success": is_authenticated,
            "status": saved.status.value,
            "message": "인증 성공" if is_authenticated else (saved.last_error or "인증 대기 중"),
        }

        if not is_authenticated and saved.status == ChannelStatus.PENDING:
            response["authorization_url"] = adapter.build_authorization_url()
        return response

    async def get_authorization_url(
        self,
        channel_id: str,
        redirect_uri: Optional[str] = None,
        state: Optional[str] = None
    ) -> str:
        """판매자 동의 화면 URL"""
        config = await self.find_one(channel_id)
        if config.type != ChannelType.OAUTH:
            raise UnsupportedChannelError(channel_id)
        if not getattr(config, "client_id", None):
            raise ChannelConfigIncompleteError(channel_id, ["client_id"])

        adapter = self._resolve_adapter(config)
        return adapter.build_authorization_url(redirect_uri=redirect_uri, state=state)

    async def sync_orders(self, channel_id: str) -> ChannelSyncResult:
        """단일 채널 주문 동기화"""
        adapter = await self._connected_adapter(channel_id)
        result = await adapter.sync_orders()
        await self._record(adapter, result)
        return result

    async def sync_products(self, channel_id: str) -> ChannelSyncResult:
        """단일 채널 상품 동기화"""
        adapter = await self._connected_adapter(channel_id)
        result = await adapter.sync_products()
        await self._record(adapter, result)
        return result

    async def sync_all_channels(self) -> Dict[str, ChannelSyncResult]:
        """연결된 채널 전체 주문 동기화"""
        adapters = []
        for config in await self.find_all():
            if config.status != ChannelStatus.CONNECTED:
                continue
            adapter = self.integration.get_channel_service(config.id)
            if adapter is not None:
                adapters.append(adapter)

        outcomes = await asyncio.gather(
            *(adapter.sync_orders() for adapter in adapters),
            return_exceptions=True
        )

        results = {}
        for adapter, outcome in zip(adapters, outcomes):
            channel_id = adapter.get_channel_id()
            if isinstance(outcome, Exception):
                message = str(outcome) or outcome.__class__.__name__
                logger.error(f"주문 동기화 중 예외 발생 {channel_id}: {message}")
                adapter.get_config().mark_error(message)
                outcome = ChannelSyncResult.failed(channel_id, SyncType.ORDERS, message, self.clock.now())

            # 세션 동시 사용을 피하려고 저장은 순서대로 한다
            await self._record(adapter, outcome)
            results[channel_id] = outcome

        logger.info(f"연결된 채널 주문 동기화 완료: {len(results)}개 채널")
        return results

    async def test_all_connections(self) -> Dict[str, bool]:
        results = await self.integration.test_all_connections()
        await self._persist_registered()
        return results

    async def sync_all_products(self) -> Dict[str, ChannelSyncResult]:
        results = await self.integration.sync_all_products()
        await self._persist_registered()
        return results

    async def push_inventory(self, product_id: str, stock: int) -> Dict[str, bool]:
        """전체 채널 재고 반영"""
        results = await self.integration.update_inventory_all_channels(product_id, stock)
        await self._persist_registered()
        return results

    async def get_sync_history(self, channel_id: str) -> List[ChannelSyncResult]:
        await self.find_one(channel_id)
        return self.integration.get_sync_history(channel_id)

    def get_channel_stats(self) -> Dict[str, ChannelStats]:
        return self.integration.get_channel_stats()

    # 내부 헬퍼

    def _resolve_adapter(self, config: ChannelConfig) -> BaseChannelAdapter:
        adapter = self.integration.get_channel_service(config.id)
        if adapter is not None:
            return adapter

        result = self.integration.register_channel(config)
        if result.is_failure():
            raise UnsupportedChannelError(config.id)
        return result.get_value()

    async def _connected_adapter(self, channel_id: str) -> BaseChannelAdapter:
        config = await self.find_one(channel_id)
        if config.status != ChannelStatus.CONNECTED:
            raise ChannelNotConnectedError(channel_id, config.status.value)
        return self._resolve_adapter(config)

    async def _save_adapter_config(self, adapter: BaseChannelAdapter) -> ChannelConfig:
        """작업이 끝난 어댑터 설정 저장

        작업 도중 설정이 바뀌어 어댑터가 다시 등록됐다면 이전 어댑터의 설정은
        저장하지 않는다. 저장소에 있는 새 설정이 기준이다.
        """
        config = adapter.get_config()
        if self.integration.get_channel_service(config.id) is not adapter:
            logger.warning(f"설정이 변경되어 이전 작업 결과를 저장하지 않음: {config.id}")
            return config
        return await self.repository.save(config)

    async def _record(self, adapter: BaseChannelAdapter, result: ChannelSyncResult) -> None:
        self.integration.record_sync_result(result)
        await self._save_adapter_config(adapter)

    async def _persist_registered(self) -> None:
        for adapter in self.integration.get_all_channels():
            await self.repository.save(adapter.get_config())

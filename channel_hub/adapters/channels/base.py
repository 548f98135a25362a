"""채널 어댑터 공통 구현"""
from abc import abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional
import logging
import time

import httpx

from channel_hub.core.entities.channel_config import ChannelConfig
from channel_hub.core.entities.channel_data import ChannelProduct, ChannelOrder
from channel_hub.core.entities.sync_result import ChannelSyncResult, SyncType
from channel_hub.core.exceptions import ChannelApiError, ChannelConfigIncompleteError
from channel_hub.core.ports.channel_port import ChannelPort
from channel_hub.core.ports.clock_port import ClockPort
from channel_hub.adapters.persistence.clock_adapter import ClockAdapter
from channel_hub.shared.config import Settings, get_settings
from channel_hub.shared.logging import get_channel_logger, log_channel_request


class RequestKind(Enum):
    """타임아웃 정책 구분"""
    READ = "read"
    WRITE = "write"
    SYNC = "sync"


class BaseChannelAdapter(ChannelPort):
    """채널 어댑터 베이스

    HTTP 호출, 상태 전환, 실패를 결과 값으로 바꾸는 처리를 모아 둔다.
    하위 클래스는 마켓별 인증과 ``fetch_*`` / ``_push_inventory`` 만 구현한다.
    """

    def __init__(
        self,
        config: ChannelConfig,
        client: Optional[httpx.AsyncClient] = None,
        clock: Optional[ClockPort] = None,
        logger: Optional[logging.Logger] = None,
        settings: Optional[Settings] = None
    ):
        self.config = config
        self.settings = settings or get_settings()
        self.clock = clock or ClockAdapter()
        self.logger = logger or get_channel_logger(config.id)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient()

        # 통계 계산용 마지막 페이지
        self.last_products: List[ChannelProduct] = []
        self.last_orders: List[ChannelOrder] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    # 공통 접근자

    def get_channel_id(self) -> str:
        return self.config.id

    def get_channel_name(self) -> str:
        return self.config.name

    def get_config(self) -> ChannelConfig:
        return self.config

    def update_config(self, **changes: Any) -> None:
        self.config.update(**changes)

    # 마켓별 구현

    @abstractmethod
    async def fetch_products(self) -> List[ChannelProduct]:
        """상품 한 페이지 조회"""
        pass

    @abstractmethod
    async def fetch_orders(self) -> List[ChannelOrder]:
        """최근 주문 한 페이지 조회"""
        pass

    @abstractmethod
    async def _fetch_seller_info(self) -> Dict[str, Any]:
        """연결 확인용 판매자 정보 조회 (실패 시 예외)"""
        pass

    @abstractmethod
    async def _push_inventory(self, product_id: str, stock: int) -> None:
        """재고 반영 (마켓이 거부하면 예외)"""
        pass

    def _missing_credentials(self) -> List[str]:
        return self.config.missing_fields()

    # 공개 동작

    async def test_connection(self) -> bool:
        """판매자 정보 조회로 연결 테스트"""
        self._log("연결 테스트 시작")

        missing = self._missing_credentials()
        if missing:
            message = f"필수 인증 정보 누락: {', '.join(missing)}"
            self._log_error("연결 테스트 실패", message)
            self.config.mark_error(message)
            return False

        try:
            await self._fetch_seller_info()
        except Exception as e:
            self._log_error("연결 테스트 실패", e)
            self.config.mark_error(str(e))
            return False

        self.config.mark_connected(self.clock.now())
        self._log("연결 테스트 성공")
        return True

    async def sync_products(self) -> ChannelSyncResult:
        """상품 동기화"""
        self._log("상품 동기화 시작")
        try:
            self._ensure_credentials()
            products = await self.fetch_products()
        except Exception as e:
            return self._sync_failed(SyncType.PRODUCTS, e)

        self.last_products = products
        return self._sync_succeeded(SyncType.PRODUCTS, len(products))

    async def sync_orders(self) -> ChannelSyncResult:
        """주문 동기화"""
        self._log("주문 동기화 시작")
        try:
            self._ensure_credentials()
            orders = await self.fetch_orders()
        except Exception as e:
            return self._sync_failed(SyncType.ORDERS, e)

        self.last_orders = orders
        return self._sync_succeeded(SyncType.ORDERS, len(orders))

    async def update_inventory(self, product_id: str, stock: int) -> bool:
        """재고 업데이트"""
        self._log(f"재고 업데이트: {product_id} -> {stock}")
        try:
            if stock < 0:
                raise ValueError(f"재고 수량은 0 이상이어야 합니다: {stock}")
            self._ensure_credentials()
            await self._push_inventory(product_id, stock)
        except Exception as e:
            self._log_error(f"재고 업데이트 실패 ({product_id})", e)
            self.config.mark_error(str(e))
            return False

        self._log(f"재고 업데이트 완료: {product_id}")
        return True

    # 헬퍼

    def _ensure_credentials(self) -> None:
        missing = self._missing_credentials()
        if missing:
            raise ChannelConfigIncompleteError(self.config.id, missing)

    def _sync_succeeded(self, sync_type: SyncType, count: int) -> ChannelSyncResult:
        now = self.clock.now()
        self.config.last_sync = now
        self._log(f"{sync_type.value} 동기화 완료: {count}건")
        return ChannelSyncResult.succeeded(self.config.id, sync_type, count, now)

    def _sync_failed(self, sync_type: SyncType, error: Exception) -> ChannelSyncResult:
        message = str(error) or error.__class__.__name__
        self._log_error(f"{sync_type.value} 동기화 실패", error)
        self.config.mark_error(message)
        return ChannelSyncResult.failed(self.config.id, sync_type, message, self.clock.now())

    def _timeout(self, kind: RequestKind) -> float:
        return {
            RequestKind.READ: self.settings.read_timeout_seconds,
            RequestKind.WRITE: self.settings.write_timeout_seconds,
            RequestKind.SYNC: self.settings.sync_timeout_seconds,
        }[kind]

    async def _request(
        self,
        method: str,
        url: str,
        kind: RequestKind = RequestKind.READ,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None
    ) -> Any:
        """마켓 API 호출 후 JSON 반환 (2xx 가 아니면 ChannelApiError)"""
        started = time.monotonic()
        try:
            response = await self.client.request(
                method,
                url,
                headers=headers,
                params=params,
                json=json_body,
                data=data,
                timeout=self._timeout(kind)
            )
        except httpx.HTTPError as e:
            log_channel_request(self.logger, self.config.id, method, url, None, time.monotonic() - started)
            raise ChannelApiError(
                f"네트워크 오류: {e.__class__.__name__} {e}".strip(),
                channel_id=self.config.id
            ) from e

        log_channel_request(
            self.logger, self.config.id, method, url, response.status_code, time.monotonic() - started
        )

        if not response.is_success:
            raise ChannelApiError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                channel_id=self.config.id,
                status_code=response.status_code,
                details={"body": response.text[:500]}
            )

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise ChannelApiError(
                "응답을 JSON 으로 해석할 수 없습니다",
                channel_id=self.config.id,
                status_code=response.status_code
            ) from e

    @staticmethod
    def _extract_list(payload: Any, *path: str) -> List[Any]:
        """중첩 딕셔너리에서 목록 꺼내기 (없으면 빈 목록)"""
        current = payload
        for key in path:
            if not isinstance(current, dict):
                return []
            current = current.get(key)
        return current if isinstance(current, list) else []

    def _log(self, message: str) -> None:
        self.logger.info(f"[{self.config.name}] {message}")

    def _log_error(self, message: str, error: Any = None) -> None:
        self.logger.error(f"[{self.config.name}] {message}: {error}" if error else f"[{self.config.name}] {message}")

"""쿠팡 채널 어댑터"""
import hmac
import hashlib
from typing import Dict, Any, List, Optional

from channel_hub.adapters.channels.base import BaseChannelAdapter, RequestKind
from channel_hub.core.entities.channel_config import ApiKeyChannelConfig
from channel_hub.core.entities.channel_data import (
    ChannelProduct, ChannelOrder, OrderLine, ProductStatus, OrderStatus, PaymentStatus,
    parse_marketplace_datetime
)
from channel_hub.core.exceptions import ChannelApiError

API_PREFIX = "/v2/providers/seller_api/apis/api/v1/marketplace"
SELLER_INFO_PATH = f"{API_PREFIX}/seller-info"
VENDOR_ITEMS_PATH = f"{API_PREFIX}/vendor-items"
ORDERS_PATH = f"{API_PREFIX}/orders"

PRODUCT_STATUS_MAP = {
    "ONSALE": ProductStatus.ACTIVE,
    "APPROVED": ProductStatus.ACTIVE,
    "SOLDOUT": ProductStatus.SOLDOUT,
    "OUT_OF_STOCK": ProductStatus.SOLDOUT,
    "SUSPENDED": ProductStatus.INACTIVE,
    "STOP": ProductStatus.INACTIVE,
}

ORDER_STATUS_MAP = {
    "ACCEPT": OrderStatus.PENDING,
    "INSTRUCT": OrderStatus.CONFIRMED,
    "DEPARTURE": OrderStatus.SHIPPED,
    "DELIVERING": OrderStatus.SHIPPED,
    "FINAL_DELIVERY": OrderStatus.DELIVERED,
    "CANCEL": OrderStatus.CANCELLED,
}


def build_coupang_authorization(
    method: str,
    path: str,
    access_key: str,
    secret_key: str,
    timestamp: str
) -> str:
    """쿠팡 CEA 인증 헤더 생성"""
    message = f"{method}{path}{access_key}{timestamp}"
    signature = hmac.new(
        secret_key.encode('utf-8'),
        message.encode('utf-8'),
        hashlib.sha256
    ).hexdigest()

    return (
        f"CEA algorithm=HmacSHA256, access-key={access_key}, "
        f"signed-date={timestamp}, signature={signature}"
    )


class CoupangAdapter(BaseChannelAdapter):
    """쿠팡 Open API 어댑터 (HMAC 서명 API 키 방식)"""

    config: ApiKeyChannelConfig

    async def authenticate(self) -> bool:
        """쿠팡 인증 - API 키 방식이라 연결 테스트로 검증"""
        self._log("쿠팡 인증 정보 확인")
        is_valid = await self.test_connection()
        if is_valid:
            self._log("쿠팡 인증 성공")
        else:
            self._log_error("쿠팡 인증 실패", self.config.last_error)
        return is_valid

    async def _fetch_seller_info(self) -> Dict[str, Any]:
        payload = await self._coupang_request("GET", SELLER_INFO_PATH)
        self._expect_success(payload)
        return payload

    async def fetch_products(self) -> List[ChannelProduct]:
        payload = await self._coupang_request("GET", VENDOR_ITEMS_PATH, kind=RequestKind.SYNC)
        return [
            self._to_product(item)
            for item in self._extract_list(payload, "data", "content")
        ]

    async def fetch_orders(self) -> List[ChannelOrder]:
        created_to = self.clock.now()
        created_from = self.clock.days_ago(self.settings.order_sync_days)

        payload = await self._coupang_request(
            "GET",
            ORDERS_PATH,
            kind=RequestKind.SYNC,
            params={
                "createdAtFrom": created_from.isoformat(),
                "createdAtTo": created_to.isoformat(),
                "maxPerPage": self.settings.coupang_orders_page_size,
            }
        )
        return [
            self._to_order(order)
            for order in self._extract_list(payload, "data", "content")
        ]

    async def _push_inventory(self, product_id: str, stock: int) -> None:
        payload = await self._coupang_request(
            "PUT",
            f"{VENDOR_ITEMS_PATH}/{product_id}/prices/quantity",
            kind=RequestKind.WRITE,
            body={"quantity": stock}
        )
        self._expect_success(payload)

    async def get_product_pricing(self, product_id: str) -> Optional[Dict[str, Any]]:
        """상품 가격 정보 조회 (실패 시 None)"""
        try:
            self._ensure_credentials()
            return await self._coupang_request("GET", f"{VENDOR_ITEMS_PATH}/{product_id}/prices")
        except Exception as e:
            self._log_error(f"상품 가격 조회 실패 ({product_id})", e)
            return None

    async def update_product_price(self, product_id: str, price: int) -> bool:
        """판매가 변경"""
        try:
            self._ensure_credentials()
            payload = await self._coupang_request(
                "PUT",
                f"{VENDOR_ITEMS_PATH}/{product_id}/prices",
                kind=RequestKind.WRITE,
                body={"originalPrice": price, "salePrice": price}
            )
            self._expect_success(payload)
            return True
        except Exception as e:
            self._log_error(f"상품 가격 변경 실패 ({product_id})", e)
            return False

    async def _coupang_request(
        self,
        method: str,
        path: str,
        kind: RequestKind = RequestKind.READ,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None
    ) -> Any:
        """서명된 쿠팡 API 요청"""
        timestamp = self.clock.timestamp_millis()
        headers = {
            "Content-Type": "application/json;charset=UTF-8",
            "Authorization": build_coupang_authorization(
                method, path, self.config.access_key, self.config.secret_key, timestamp
            ),
            "X-EXTENDED-TIMEOUT": "90000",
        }

        return await self._request(
            method,
            f"{self.settings.coupang_api_url.rstrip('/')}{path}",
            kind=kind,
            headers=headers,
            params=params,
            json_body=body if method != "GET" else None
        )

    def _expect_success(self, payload: Any) -> None:
        if not isinstance(payload, dict) or payload.get("code") != "SUCCESS":
            message = payload.get("message") if isinstance(payload, dict) else None
            raise ChannelApiError(
                f"API returned error: {message or 'Unknown error'}",
                channel_id=self.config.id
            )

    def _to_product(self, item: Dict[str, Any]) -> ChannelProduct:
        status = str(item.get("saleStatus") or item.get("statusName") or "ONSALE").upper()
        return ChannelProduct(
            channel_id=self.config.id,
            channel_product_id=str(item.get("vendorItemId") or item.get("sellerProductId") or ""),
            title=item.get("sellerProductName") or item.get("itemName") or "",
            price=int(item.get("salePrice") or 0),
            stock=int(item.get("quantity") or item.get("maximumBuyCount") or 0),
            status=PRODUCT_STATUS_MAP.get(status, ProductStatus.INACTIVE),
            image_url=item.get("imageUrl"),
            category_path=item.get("displayCategoryName"),
        )

    def _to_order(self, order: Dict[str, Any]) -> ChannelOrder:
        orderer = order.get("orderer") or {}
        receiver = order.get("receiver") or {}
        lines = [
            OrderLine(
                product_id=str(line.get("vendorItemId") or ""),
                product_name=line.get("vendorItemName") or "",
                quantity=int(line.get("shippingCount") or 0),
                price=int(line.get("orderPrice") or 0),
            )
            for line in order.get("orderItems") or []
        ]
        status = ORDER_STATUS_MAP.get(str(order.get("status") or "").upper(), OrderStatus.PENDING)
        address = " ".join(part for part in (receiver.get("addr1"), receiver.get("addr2")) if part)

        return ChannelOrder(
            channel_id=self.config.id,
            channel_order_id=str(order.get("orderId") or order.get("shipmentBoxId") or ""),
            order_date=parse_marketplace_datetime(order.get("orderedAt")),
            customer_name=orderer.get("name") or "",
            customer_phone=orderer.get("safeNumber"),
            customer_email=orderer.get("email"),
            lines=lines,
            shipping_address=address,
            zip_code=receiver.get("postCode"),
            shipping_memo=order.get("parcelPrintMessage"),
            payment_method=order.get("paymentMethod") or "",
            payment_amount=sum(line.price for line in lines),
            payment_status=PaymentStatus.CANCELLED if status == OrderStatus.CANCELLED else PaymentStatus.PAID,
            status=status,
        )

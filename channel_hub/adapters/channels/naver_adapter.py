"""네이버 스마트스토어 채널 어댑터"""
from datetime import timedelta
from typing import Dict, Any, List, Optional
from urllib.parse import urlencode
import secrets

from channel_hub.adapters.channels.base import BaseChannelAdapter, RequestKind
from channel_hub.core.entities.channel_config import OAuthChannelConfig
from channel_hub.core.entities.channel_data import (
    ChannelProduct, ChannelOrder, OrderLine, ProductStatus, OrderStatus, PaymentStatus,
    parse_marketplace_datetime
)
from channel_hub.core.exceptions import ChannelAuthenticationError

SELLER_INFO_PATH = "/external/v1/seller-info"
PRODUCTS_PATH = "/external/v2/products"
ORDERS_PATH = "/external/v1/pay-order/seller/orders"

PRODUCT_STATUS_MAP = {
    "SALE": ProductStatus.ACTIVE,
    "OUTOFSTOCK": ProductStatus.SOLDOUT,
    "SUSPENSION": ProductStatus.INACTIVE,
    "CLOSE": ProductStatus.INACTIVE,
    "PROHIBITION": ProductStatus.INACTIVE,
}

ORDER_STATUS_MAP = {
    "PAYMENT_WAITING": OrderStatus.PENDING,
    "PAYED": OrderStatus.CONFIRMED,
    "DELIVERING": OrderStatus.SHIPPED,
    "DELIVERED": OrderStatus.DELIVERED,
    "PURCHASE_DECIDED": OrderStatus.DELIVERED,
    "CANCELED": OrderStatus.CANCELLED,
    "RETURNED": OrderStatus.CANCELLED,
}


class NaverAdapter(BaseChannelAdapter):
    """네이버 커머스 API 어댑터 (OAuth2 인가 코드 방식)

    토큰 만료는 자동으로 감지하지 않는다. 401 등을 받은 호출자가
    ``refresh_token()`` 을 직접 호출해야 한다.
    """

    config: OAuthChannelConfig

    def build_authorization_url(
        self,
        redirect_uri: Optional[str] = None,
        state: Optional[str] = None
    ) -> str:
        """판매자 동의 화면 URL 생성"""
        params = {
            "response_type": "code",
            "client_id": self.config.client_id,
            "redirect_uri": redirect_uri or self.settings.naver_redirect_uri,
            "scope": self.settings.naver_oauth_scope,
            "state": state or secrets.token_urlsafe(16),
        }
        return f"{self.settings.naver_authorize_url}?{urlencode(params)}"

    async def authenticate(
        self,
        authorization_code: Optional[str] = None,
        state: Optional[str] = None
    ) -> bool:
        """네이버 인증

        인가 코드가 있으면 토큰으로 교환하고, 없으면 보유한 토큰으로 연결을 검증한다.
        토큰도 코드도 없으면 동의 URL 을 남기고 ``pending`` 상태로 둔다.
        """
        self._log("네이버 인증 시작")

        missing = self.config.missing_fields()
        if missing:
            message = f"필수 인증 정보 누락: {', '.join(missing)}"
            self._log_error("네이버 인증 실패", message)
            self.config.mark_error(message)
            return False

        if authorization_code:
            try:
                await self.exchange_code(authorization_code, state)
            except Exception as e:
                self._log_error("네이버 토큰 교환 실패", e)
                self.config.mark_error(str(e))
                return False
            return await self.test_connection()

        if self.config.access_token:
            return await self.test_connection()

        if self.config.refresh_token:
            if not await self.refresh_token():
                return False
            return await self.test_connection()

        self._log(f"판매자 동의가 필요합니다: {self.build_authorization_url()}")
        self.config.mark_pending()
        return False

    async def exchange_code(self, code: str, state: Optional[str] = None) -> None:
        """인가 코드를 액세스/리프레시 토큰으로 교환"""
        payload = await self._request(
            "POST",
            self.settings.naver_token_url,
            kind=RequestKind.WRITE,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            data={
                "grant_type": "authorization_code",
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
                "code": code,
                "state": state or "",
            }
        )
        self._apply_token_response(payload)
        self._log("네이버 토큰 발급 완료")

    async def refresh_token(self) -> bool:
        """리프레시 토큰으로 새 토큰 쌍 발급"""
        if not self.config.refresh_token:
            self._log_error("네이버 토큰 갱신 실패", "리프레시 토큰이 없습니다")
            return False

        try:
            payload = await self._request(
                "POST",
                self.settings.naver_token_url,
                kind=RequestKind.WRITE,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                data={
                    "grant_type": "refresh_token",
                    "client_id": self.config.client_id,
                    "client_secret": self.config.client_secret,
                    "refresh_token": self.config.refresh_token,
                }
            )
            self._apply_token_response(payload)
        except Exception as e:
            self._log_error("네이버 토큰 갱신 실패", e)
            self.config.mark_error(str(e))
            return False

        self._log("네이버 토큰 갱신 완료")
        return True

    def _apply_token_response(self, payload: Any) -> None:
        # 네이버 토큰 엔드포인트는 실패도 200 + error 필드로 응답한다
        if not isinstance(payload, dict) or payload.get("error") or not payload.get("access_token"):
            description = payload.get("error_description") if isinstance(payload, dict) else None
            raise ChannelAuthenticationError(f"토큰 발급 실패: {description or 'access_token 없음'}")

        self.config.access_token = payload["access_token"]
        self.config.refresh_token = payload.get("refresh_token") or self.config.refresh_token

        expires_in = payload.get("expires_in")
        if expires_in:
            self.config.token_expires_at = self.clock.now() + timedelta(seconds=int(expires_in))

    def _missing_credentials(self) -> List[str]:
        missing = self.config.missing_fields()
        if not self.config.access_token:
            missing.append("access_token")
        return missing

    def _auth_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.access_token}",
            "Content-Type": "application/json",
        }

    def _url(self, path: str) -> str:
        return f"{self.settings.naver_api_url.rstrip('/')}{path}"

    async def _fetch_seller_info(self) -> Dict[str, Any]:
        return await self._request("GET", self._url(SELLER_INFO_PATH), headers=self._auth_headers())

    async def fetch_products(self) -> List[ChannelProduct]:
        payload = await self._request(
            "GET",
            self._url(PRODUCTS_PATH),
            kind=RequestKind.SYNC,
            headers=self._auth_headers()
        )
        items = self._extract_list(payload, "data") or self._extract_list(payload, "contents")
        return [self._to_product(item) for item in items]

    async def fetch_orders(self) -> List[ChannelOrder]:
        changed_to = self.clock.now()
        changed_from = self.clock.days_ago(self.settings.order_sync_days)

        payload = await self._request(
            "GET",
            self._url(ORDERS_PATH),
            kind=RequestKind.SYNC,
            headers=self._auth_headers(),
            params={
                "lastChangedFrom": changed_from.isoformat(),
                "lastChangedTo": changed_to.isoformat(),
                "limit": self.settings.naver_orders_page_size,
            }
        )
        orders = self._extract_list(payload, "data", "orders") or self._extract_list(payload, "data")
        return [self._to_order(order) for order in orders]

    async def _push_inventory(self, product_id: str, stock: int) -> None:
        await self._request(
            "PUT",
            self._url(f"{PRODUCTS_PATH}/{product_id}/stock"),
            kind=RequestKind.WRITE,
            headers=self._auth_headers(),
            json_body={"stock": stock}
        )

    def _to_product(self, item: Dict[str, Any]) -> ChannelProduct:
        image = item.get("representativeImage") or {}
        status = str(item.get("statusType") or "SALE").upper()
        return ChannelProduct(
            channel_id=self.config.id,
            channel_product_id=str(item.get("channelProductNo") or item.get("originProductNo") or ""),
            title=item.get("name") or "",
            price=int(item.get("salePrice") or 0),
            stock=int(item.get("stockQuantity") or 0),
            status=PRODUCT_STATUS_MAP.get(status, ProductStatus.INACTIVE),
            image_url=image.get("url") if isinstance(image, dict) else None,
            category_path=item.get("wholeCategoryName"),
        )

    def _to_order(self, order: Dict[str, Any]) -> ChannelOrder:
        address = order.get("shippingAddress") or {}
        lines = [
            OrderLine(
                product_id=str(line.get("productId") or ""),
                product_name=line.get("productName") or "",
                quantity=int(line.get("quantity") or 0),
                price=int(line.get("totalPaymentAmount") or line.get("unitPrice") or 0),
            )
            for line in order.get("productOrders") or []
        ]
        raw_status = str(order.get("productOrderStatus") or order.get("status") or "").upper()
        status = ORDER_STATUS_MAP.get(raw_status, OrderStatus.PENDING)

        if status == OrderStatus.CANCELLED:
            payment_status = PaymentStatus.CANCELLED
        elif raw_status == "PAYMENT_WAITING":
            payment_status = PaymentStatus.PENDING
        else:
            payment_status = PaymentStatus.PAID

        return ChannelOrder(
            channel_id=self.config.id,
            channel_order_id=str(order.get("orderId") or ""),
            order_date=parse_marketplace_datetime(order.get("orderDate")),
            customer_name=order.get("ordererName") or "",
            customer_phone=order.get("ordererTel"),
            lines=lines,
            shipping_address=" ".join(
                part for part in (address.get("baseAddress"), address.get("detailedAddress")) if part
            ),
            zip_code=address.get("zipCode"),
            shipping_memo=order.get("shippingMemo"),
            payment_method=order.get("paymentMeans") or "",
            payment_amount=int(order.get("totalPaymentAmount") or sum(line.price for line in lines)),
            payment_status=payment_status,
            status=status,
        )

"""채널 상품/주문/통계 도메인 엔티티"""
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
from datetime import datetime, timezone, timedelta
from enum import Enum

# 국내 마켓 API 는 타임존 없는 시각을 한국 시간으로 돌려준다
KST = timezone(timedelta(hours=9))


class ProductStatus(Enum):
    """채널 상품 판매 상태"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    SOLDOUT = "soldout"


class OrderStatus(Enum):
    """채널 주문 상태"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    """결제 상태"""
    PAID = "paid"
    PENDING = "pending"
    CANCELLED = "cancelled"


def parse_marketplace_datetime(value: Any) -> Optional[datetime]:
    """마켓 응답의 시각 문자열 파싱 (타임존 없으면 KST)"""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=KST)
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=KST)
    return parsed


@dataclass
class ChannelProduct:
    """채널에 등록된 상품"""
    channel_id: str
    channel_product_id: str
    title: str
    price: int
    stock: int
    status: ProductStatus = ProductStatus.ACTIVE
    image_url: Optional[str] = None
    category_path: Optional[str] = None

    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE


@dataclass
class OrderLine:
    """주문 상품 라인"""
    product_id: str
    product_name: str
    quantity: int
    price: int


@dataclass
class ChannelOrder:
    """채널에서 수집한 주문"""
    channel_id: str
    channel_order_id: str
    order_date: Optional[datetime]
    customer_name: str = ""
    customer_phone: Optional[str] = None
    customer_email: Optional[str] = None
    lines: List[OrderLine] = field(default_factory=list)
    shipping_address: str = ""
    zip_code: Optional[str] = None
    shipping_memo: Optional[str] = None
    payment_method: str = ""
    payment_amount: int = 0
    payment_status: PaymentStatus = PaymentStatus.PAID
    status: OrderStatus = OrderStatus.PENDING

    def is_cancelled(self) -> bool:
        return self.status == OrderStatus.CANCELLED or self.payment_status == PaymentStatus.CANCELLED


@dataclass
class RevenueSummary:
    """매출 요약"""
    today: int = 0
    this_month: int = 0
    total: int = 0


@dataclass
class ChannelStats:
    """채널별 통계 (마지막으로 가져온 페이지 기준)"""
    channel_id: str
    total_products: int = 0
    active_products: int = 0
    total_orders: int = 0
    today_orders: int = 0
    revenue: RevenueSummary = field(default_factory=RevenueSummary)

    @classmethod
    def from_snapshot(
        cls,
        channel_id: str,
        products: List[ChannelProduct],
        orders: List[ChannelOrder],
        now: datetime
    ) -> "ChannelStats":
        """상품/주문 스냅샷으로 통계 계산"""
        stats = cls(
            channel_id=channel_id,
            total_products=len(products),
            active_products=sum(1 for product in products if product.is_active()),
            total_orders=len(orders),
        )

        local_now = now.astimezone(KST) if now.tzinfo else now.replace(tzinfo=KST)
        for order in orders:
            if order.is_cancelled():
                continue
            stats.revenue.total += order.payment_amount

            if order.order_date is None:
                continue
            ordered = order.order_date.astimezone(KST)
            if (ordered.year, ordered.month) == (local_now.year, local_now.month):
                stats.revenue.this_month += order.payment_amount
                if ordered.date() == local_now.date():
                    stats.today_orders += 1
                    stats.revenue.today += order.payment_amount

        return stats

    def to_dict(self) -> Dict[str, Any]:
        return {
            'channel_id': self.channel_id,
            'total_products': self.total_products,
            'active_products': self.active_products,
            'total_orders': self.total_orders,
            'today_orders': self.today_orders,
            'revenue': {
                'today': self.revenue.today,
                'this_month': self.revenue.this_month,
                'total': self.revenue.total,
            },
        }

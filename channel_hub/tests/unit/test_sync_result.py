"""동기화 결과/이력/통계 단위 테스트"""
import pytest
from datetime import datetime, timedelta

from channel_hub.core.entities.channel_data import (
    KST, ChannelProduct, ChannelOrder, ProductStatus, OrderStatus, PaymentStatus,
    ChannelStats, parse_marketplace_datetime
)
from channel_hub.core.entities.sync_result import ChannelSyncResult, SyncHistoryLog, SyncType

NOW = datetime(2024, 5, 15, 12, 0, tzinfo=KST)


class TestChannelSyncResult:
    """동기화 결과 테스트"""

    def test_failed_result_shape(self):
        """실패 결과는 오류 1건, 처리 0건"""
        result = ChannelSyncResult.failed("coupang", SyncType.ORDERS, "HTTP 500", NOW)

        assert not result.success
        assert result.processed_count == 0
        assert result.error_count == 1
        assert result.errors == ("HTTP 500",)

    def test_succeeded_result_has_no_errors(self):
        result = ChannelSyncResult.succeeded("naver", SyncType.PRODUCTS, 3, NOW)

        assert result.success
        assert result.errors == ()
        assert "errors" not in result.to_dict()

    def test_errors_must_match_error_count(self):
        """오류 건수와 메시지 불일치 거부"""
        with pytest.raises(ValueError):
            ChannelSyncResult(
                channel_id="naver",
                sync_type=SyncType.ORDERS,
                success=False,
                processed_count=0,
                error_count=1,
                last_sync_time=NOW,
            )

    def test_negative_counts_rejected(self):
        with pytest.raises(ValueError):
            ChannelSyncResult("naver", SyncType.ORDERS, True, -1, 0, NOW)


class TestSyncHistoryLog:
    """동기화 이력 테스트"""

    def test_keeps_latest_ten_newest_first(self):
        """11번째 결과가 들어오면 가장 오래된 결과 제거"""
        history = SyncHistoryLog()
        for i in range(11):
            history.append(
                ChannelSyncResult.succeeded("naver", SyncType.ORDERS, i, NOW + timedelta(minutes=i))
            )

        entries = history.entries()
        assert len(entries) == 10
        assert [entry.processed_count for entry in entries] == list(range(10, 0, -1))

    def test_latest_by_type(self):
        history = SyncHistoryLog(limit=5)
        history.append(ChannelSyncResult.succeeded("naver", SyncType.PRODUCTS, 1, NOW))
        history.append(ChannelSyncResult.succeeded("naver", SyncType.ORDERS, 2, NOW))

        assert history.latest().sync_type == SyncType.ORDERS
        assert history.latest(SyncType.PRODUCTS).processed_count == 1
        assert history.latest(SyncType.INVENTORY) is None

    def test_limit_must_be_positive(self):
        with pytest.raises(ValueError):
            SyncHistoryLog(limit=0)


class TestChannelStats:
    """채널 통계 테스트"""

    def test_from_snapshot(self):
        """상품/주문 스냅샷으로 통계 계산"""
        products = [
            ChannelProduct("naver", "p1", "상품1", 10000, 5),
            ChannelProduct("naver", "p2", "상품2", 20000, 0, status=ProductStatus.SOLDOUT),
        ]
        orders = [
            ChannelOrder("naver", "o1", NOW - timedelta(hours=1), payment_amount=10000),
            ChannelOrder("naver", "o2", NOW - timedelta(days=3), payment_amount=20000),
            ChannelOrder("naver", "o3", datetime(2024, 4, 30, 10, 0, tzinfo=KST), payment_amount=5000),
            ChannelOrder(
                "naver", "o4", NOW, payment_amount=99999,
                status=OrderStatus.CANCELLED, payment_status=PaymentStatus.CANCELLED
            ),
        ]

        stats = ChannelStats.from_snapshot("naver", products, orders, NOW)

        assert stats.total_products == 2
        assert stats.active_products == 1
        assert stats.total_orders == 4
        assert stats.today_orders == 1
        assert stats.revenue.today == 10000
        assert stats.revenue.this_month == 30000
        assert stats.revenue.total == 35000

    def test_empty_snapshot(self):
        stats = ChannelStats.from_snapshot("coupang", [], [], NOW)

        assert stats.to_dict()["revenue"] == {"today": 0, "this_month": 0, "total": 0}


class TestParseMarketplaceDatetime:
    """마켓 시각 파싱 테스트"""

    def test_naive_value_is_kst(self):
        assert parse_marketplace_datetime("2024-05-15T09:30:00") == datetime(2024, 5, 15, 9, 30, tzinfo=KST)

    def test_epoch_millis(self):
        assert parse_marketplace_datetime(int(NOW.timestamp() * 1000)) == NOW

    def test_empty_value(self):
        assert parse_marketplace_datetime("") is None

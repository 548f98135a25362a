"""시간 어댑터"""
from datetime import datetime, tzinfo

from channel_hub.core.entities.channel_data import KST
from channel_hub.core.ports.clock_port import ClockPort


class ClockAdapter(ClockPort):
    """시스템 시계 구현체"""

    def __init__(self, tz: tzinfo = KST):
        self.tz = tz

    def now(self) -> datetime:
        """현재 시각 반환"""
        return datetime.now(self.tz)

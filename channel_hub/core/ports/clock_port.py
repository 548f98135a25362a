"""시간 포트 (인터페이스)"""
from abc import ABC, abstractmethod
from datetime import datetime, timedelta


class ClockPort(ABC):
    """시간 인터페이스"""

    @abstractmethod
    def now(self) -> datetime:
        """현재 시각 (타임존 포함)"""
        pass

    def days_ago(self, days: int) -> datetime:
        """현재 시각 기준 ``days`` 일 전"""
        return self.now() - timedelta(days=days)

    def timestamp_millis(self) -> str:
        """서명용 epoch 밀리초 문자열"""
        return str(int(self.now().timestamp() * 1000))

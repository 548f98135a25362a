"""채널 동기화 결과 도메인 엔티티"""
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Any, List, Tuple, Deque
from datetime import datetime
from enum import Enum

DEFAULT_HISTORY_LIMIT = 10


class SyncType(Enum):
    """동기화 타입"""
    PRODUCTS = "products"
    ORDERS = "orders"
    INVENTORY = "inventory"


@dataclass(frozen=True)
class ChannelSyncResult:
    """채널 1회 동기화 결과 (생성 후 변경 불가)"""
    channel_id: str
    sync_type: SyncType
    success: bool
    processed_count: int
    error_count: int
    last_sync_time: datetime
    errors: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.processed_count < 0 or self.error_count < 0:
            raise ValueError("처리/오류 건수는 음수일 수 없습니다")
        if bool(self.errors) != (self.error_count > 0):
            raise ValueError("오류 메시지는 오류 건수가 있을 때만 존재합니다")

    @classmethod
    def succeeded(
        cls,
        channel_id: str,
        sync_type: SyncType,
        processed_count: int,
        synced_at: datetime
    ) -> "ChannelSyncResult":
        return cls(
            channel_id=channel_id,
            sync_type=sync_type,
            success=True,
            processed_count=processed_count,
            error_count=0,
            last_sync_time=synced_at,
        )

    @classmethod
    def failed(
        cls,
        channel_id: str,
        sync_type: SyncType,
        message: str,
        synced_at: datetime
    ) -> "ChannelSyncResult":
        return cls(
            channel_id=channel_id,
            sync_type=sync_type,
            success=False,
            processed_count=0,
            error_count=1,
            last_sync_time=synced_at,
            errors=(message or "Unknown error",),
        )

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리 변환 (직렬화용)"""
        data = {
            'channel_id': self.channel_id,
            'sync_type': self.sync_type.value,
            'success': self.success,
            'processed_count': self.processed_count,
            'error_count': self.error_count,
            'last_sync_time': self.last_sync_time.isoformat(),
        }
        if self.errors:
            data['errors'] = list(self.errors)
        return data


class SyncHistoryLog:
    """채널별 최근 동기화 결과 (최신순, 최대 ``limit`` 개)"""

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError("이력 보관 개수는 1 이상이어야 합니다")
        self.limit = limit
        self._entries: Deque[ChannelSyncResult] = deque(maxlen=limit)

    def append(self, result: ChannelSyncResult) -> None:
        # 가득 차면 가장 오래된 결과가 반대편에서 밀려난다
        self._entries.appendleft(result)

    def entries(self) -> List[ChannelSyncResult]:
        return list(self._entries)

    def latest(self, sync_type: SyncType = None):
        for entry in self._entries:
            if sync_type is None or entry.sync_type == sync_type:
                return entry
        return None

    def __len__(self) -> int:
        return len(self._entries)

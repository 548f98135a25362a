"""채널 관련 DTO 스키마"""
from typing import Dict, List, Optional, Any
from pydantic import BaseModel, Field
from datetime import datetime


class ChannelConfigUpdateRequest(BaseModel):
    """채널 설정 업데이트 요청 (전달된 필드만 반영)"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    logo_url: Optional[str] = None

    # OAuth
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None

    # API 키
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    vendor_id: Optional[str] = None

    # 웹훅
    webhook_url: Optional[str] = None


class ChannelResponse(BaseModel):
    """채널 응답 (비밀 값 제외)"""
    id: str
    name: str
    type: str
    status: str
    description: Optional[str] = None
    logo_url: Optional[str] = None
    last_sync: Optional[datetime] = None
    last_error: Optional[str] = None
    configured: bool = False

    client_id: Optional[str] = None
    token_expires_at: Optional[datetime] = None
    access_key: Optional[str] = None
    vendor_id: Optional[str] = None
    webhook_url: Optional[str] = None


class ConnectionTestResponse(BaseModel):
    """연결 테스트 응답"""
    success: bool
    message: str
    status: str


class AuthenticateRequest(BaseModel):
    """채널 인증 요청"""
    authorization_code: Optional[str] = None
    state: Optional[str] = None


class AuthenticateResponse(BaseModel):
    """채널 인증 응답"""
    success: bool
    status: str
    message: str
    authorization_url: Optional[str] = None


class AuthorizationUrlResponse(BaseModel):
    """판매자 동의 URL 응답"""
    channel_id: str
    authorization_url: str


class SyncResultResponse(BaseModel):
    """동기화 결과 응답"""
    channel_id: str
    sync_type: str
    success: bool
    processed_count: int
    error_count: int
    last_sync_time: datetime
    errors: List[str] = []


class BatchSyncResponse(BaseModel):
    """전체 채널 동기화 응답"""
    results: Dict[str, SyncResultResponse]
    success_count: int
    failure_count: int


class InventoryUpdateRequest(BaseModel):
    """재고 반영 요청"""
    stock: int = Field(..., ge=0)


class InventoryUpdateResponse(BaseModel):
    """재고 반영 응답"""
    product_id: str
    results: Dict[str, bool]


class RevenueResponse(BaseModel):
    today: int
    this_month: int
    total: int


class ChannelStatsResponse(BaseModel):
    """채널 통계 응답"""
    channel_id: str
    total_products: int
    active_products: int
    total_orders: int
    today_orders: int
    revenue: RevenueResponse


def to_channel_response(data: Dict[str, Any]) -> ChannelResponse:
    """``ChannelConfig.to_dict()`` 결과를 응답 모델로 변환"""
    return ChannelResponse(**{
        key: value for key, value in data.items()
        if key in ChannelResponse.model_fields
    })

"""판매 채널 관련 라우트"""
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, status

from channel_hub.app.di import get_channel_service
from channel_hub.core.entities.sync_result import ChannelSyncResult
from channel_hub.core.exceptions import ChannelHubError, create_http_exception
from channel_hub.services.channel_service import ChannelService
from channel_hub.presentation.schemas.channels import (
    ChannelConfigUpdateRequest,
    ChannelResponse,
    ConnectionTestResponse,
    AuthenticateRequest,
    AuthenticateResponse,
    AuthorizationUrlResponse,
    SyncResultResponse,
    BatchSyncResponse,
    InventoryUpdateRequest,
    InventoryUpdateResponse,
    ChannelStatsResponse,
    to_channel_response
)
from channel_hub.shared.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


def _to_http_exception(error: Exception, action: str) -> HTTPException:
    if isinstance(error, HTTPException):
        return error
    if isinstance(error, ChannelHubError):
        return create_http_exception(error)
    if isinstance(error, ValueError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))

    logger.error(f"{action} 중 오류: {error}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


def _sync_response(result: ChannelSyncResult) -> SyncResultResponse:
    return SyncResultResponse(**result.to_dict())


def _batch_response(results: Dict[str, ChannelSyncResult]) -> BatchSyncResponse:
    success_count = sum(1 for result in results.values() if result.success)
    return BatchSyncResponse(
        results={channel_id: _sync_response(result) for channel_id, result in results.items()},
        success_count=success_count,
        failure_count=len(results) - success_count
    )


# 고정 경로는 /{channel_id} 보다 먼저 등록한다

@router.get("/stats", response_model=Dict[str, ChannelStatsResponse])
async def get_channel_stats(
    channel_service: ChannelService = Depends(get_channel_service)
):
    """채널별 통계"""
    try:
        stats = channel_service.get_channel_stats()
        return {
            channel_id: ChannelStatsResponse(**channel_stats.to_dict())
            for channel_id, channel_stats in stats.items()
        }
    except Exception as e:
        raise _to_http_exception(e, "채널 통계 조회")


@router.post("/sync-all", response_model=BatchSyncResponse)
async def sync_all_channels(
    channel_service: ChannelService = Depends(get_channel_service)
):
    """연결된 채널 전체 주문 동기화"""
    try:
        return _batch_response(await channel_service.sync_all_channels())
    except Exception as e:
        raise _to_http_exception(e, "전체 주문 동기화")


@router.post("/sync-all/products", response_model=BatchSyncResponse)
async def sync_all_products(
    channel_service: ChannelService = Depends(get_channel_service)
):
    """전체 채널 상품 동기화"""
    try:
        return _batch_response(await channel_service.sync_all_products())
    except Exception as e:
        raise _to_http_exception(e, "전체 상품 동기화")


@router.post("/test-all", response_model=Dict[str, bool])
async def test_all_connections(
    channel_service: ChannelService = Depends(get_channel_service)
):
    """전체 채널 연결 테스트"""
    try:
        return await channel_service.test_all_connections()
    except Exception as e:
        raise _to_http_exception(e, "전체 연결 테스트")


@router.put("/inventory/{product_id}", response_model=InventoryUpdateResponse)
async def update_inventory(
    product_id: str,
    request: InventoryUpdateRequest,
    channel_service: ChannelService = Depends(get_channel_service)
):
    """전체 채널 재고 반영"""
    try:
        results = await channel_service.push_inventory(product_id, request.stock)
        return InventoryUpdateResponse(product_id=product_id, results=results)
    except Exception as e:
        raise _to_http_exception(e, "재고 반영")


@router.get("", response_model=List[ChannelResponse])
async def get_channels(
    channel_service: ChannelService = Depends(get_channel_service)
):
    """채널 목록 조회"""
    try:
        channels = await channel_service.find_all()
        return [to_channel_response(channel.to_dict()) for channel in channels]
    except Exception as e:
        raise _to_http_exception(e, "채널 목록 조회")


@router.get("/{channel_id}", response_model=ChannelResponse)
async def get_channel(
    channel_id: str,
    channel_service: ChannelService = Depends(get_channel_service)
):
    """채널 상세 조회"""
    try:
        channel = await channel_service.find_one(channel_id)
        return to_channel_response(channel.to_dict())
    except Exception as e:
        raise _to_http_exception(e, "채널 조회")


@router.put("/{channel_id}/config", response_model=ChannelResponse)
async def update_channel_config(
    channel_id: str,
    request: ChannelConfigUpdateRequest,
    channel_service: ChannelService = Depends(get_channel_service)
):
    """채널 설정 업데이트"""
    try:
        channel = await channel_service.update_config(
            channel_id, request.model_dump(exclude_unset=True)
        )
        return to_channel_response(channel.to_dict())
    except Exception as e:
        raise _to_http_exception(e, "채널 설정 업데이트")


@router.post("/{channel_id}/test", response_model=ConnectionTestResponse)
async def test_channel_connection(
    channel_id: str,
    channel_service: ChannelService = Depends(get_channel_service)
):
    """채널 연결 테스트"""
    try:
        return ConnectionTestResponse(**await channel_service.test_connection(channel_id))
    except Exception as e:
        raise _to_http_exception(e, "연결 테스트")


@router.get("/{channel_id}/oauth-url", response_model=AuthorizationUrlResponse)
async def get_authorization_url(
    channel_id: str,
    redirect_uri: Optional[str] = None,
    state: Optional[str] = None,
    channel_service: ChannelService = Depends(get_channel_service)
):
    """판매자 동의 화면 URL"""
    try:
        url = await channel_service.get_authorization_url(channel_id, redirect_uri, state)
        return AuthorizationUrlResponse(channel_id=channel_id, authorization_url=url)
    except Exception as e:
        raise _to_http_exception(e, "동의 URL 생성")


@router.post("/{channel_id}/authenticate", response_model=AuthenticateResponse)
async def authenticate_channel(
    channel_id: str,
    request: AuthenticateRequest,
    channel_service: ChannelService = Depends(get_channel_service)
):
    """채널 인증"""
    try:
        result = await channel_service.authenticate(
            channel_id, request.authorization_code, request.state
        )
        return AuthenticateResponse(**result)
    except Exception as e:
        raise _to_http_exception(e, "채널 인증")


@router.get("/{channel_id}/oauth/callback", response_model=AuthenticateResponse)
async def oauth_callback(
    channel_id: str,
    code: str,
    state: Optional[str] = None,
    channel_service: ChannelService = Depends(get_channel_service)
):
    """OAuth 리다이렉트 콜백 (인가 코드 교환)"""
    try:
        return AuthenticateResponse(**await channel_service.authenticate(channel_id, code, state))
    except Exception as e:
        raise _to_http_exception(e, "OAuth 콜백 처리")


@router.post("/{channel_id}/sync", response_model=SyncResultResponse)
async def sync_channel_orders(
    channel_id: str,
    channel_service: ChannelService = Depends(get_channel_service)
):
    """단일 채널 주문 동기화"""
    try:
        return _sync_response(await channel_service.sync_orders(channel_id))
    except Exception as e:
        raise _to_http_exception(e, "주문 동기화")


@router.post("/{channel_id}/sync/products", response_model=SyncResultResponse)
async def sync_channel_products(
    channel_id: str,
    channel_service: ChannelService = Depends(get_channel_service)
):
    """단일 채널 상품 동기화"""
    try:
        return _sync_response(await channel_service.sync_products(channel_id))
    except Exception as e:
        raise _to_http_exception(e, "상품 동기화")


@router.get("/{channel_id}/history", response_model=List[SyncResultResponse])
async def get_sync_history(
    channel_id: str,
    channel_service: ChannelService = Depends(get_channel_service)
):
    """채널 동기화 이력 (최신순)"""
    try:
        history = await channel_service.get_sync_history(channel_id)
        return [_sync_response(result) for result in history]
    except Exception as e:
        raise _to_http_exception(e, "동기화 이력 조회")

"""헬스체크 라우트"""
from fastapi import APIRouter, Depends
from datetime import datetime

from channel_hub.app.di import get_channel_service
from channel_hub.services.channel_service import ChannelService
from channel_hub.shared.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health")
async def health_check(channel_service: ChannelService = Depends(get_channel_service)):
    """서비스 헬스체크"""
    try:
        channels = await channel_service.find_all()
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "service": "channel-hub",
            "version": "1.0.0",
            "channels": len(channels),
            "registered_adapters": len(channel_service.integration.get_all_channels())
        }

    except Exception as e:
        logger.error(f"헬스체크 실패: {e}")
        return {
            "status": "unhealthy",
            "timestamp": datetime.now().isoformat(),
            "error": str(e)
        }

"""채널 연동 예외 정의"""
from typing import Optional, Dict, Any

from fastapi import HTTPException, status


class ChannelHubError(Exception):
    """채널 연동 기본 예외"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ChannelNotFoundError(ChannelHubError):
    """존재하지 않는 채널"""

    def __init__(self, channel_id: str):
        super().__init__(f"채널을 찾을 수 없습니다: {channel_id}", {"channel_id": channel_id})
        self.channel_id = channel_id


class ChannelConfigIncompleteError(ChannelHubError):
    """채널 유형에 필요한 인증 정보 누락"""

    def __init__(self, channel_id: str, missing_fields: Optional[list] = None):
        missing_fields = missing_fields or []
        super().__init__(
            f"채널 설정이 완료되지 않았습니다: {channel_id}",
            {"channel_id": channel_id, "missing_fields": missing_fields}
        )
        self.channel_id = channel_id
        self.missing_fields = missing_fields


class UnsupportedChannelError(ChannelHubError):
    """어댑터가 없는 채널"""

    def __init__(self, channel_id: str):
        super().__init__(f"지원하지 않는 채널입니다: {channel_id}", {"channel_id": channel_id})
        self.channel_id = channel_id


class ChannelNotConnectedError(ChannelHubError):
    """연결되지 않은 채널에 대한 동기화 요청"""

    def __init__(self, channel_id: str, current_status: str):
        super().__init__(
            f"채널이 연결되어 있지 않습니다: {channel_id} ({current_status})",
            {"channel_id": channel_id, "status": current_status}
        )
        self.channel_id = channel_id


class ChannelAuthenticationError(ChannelHubError):
    """마켓 인증 실패"""
    pass


class ChannelApiError(ChannelHubError):
    """마켓 API 호출 실패"""

    def __init__(
        self,
        message: str,
        channel_id: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.channel_id = channel_id
        self.status_code = status_code

    @property
    def is_auth_error(self) -> bool:
        return self.status_code in (401, 403)


def create_http_exception(error: Exception) -> HTTPException:
    """채널 예외를 HTTP 예외로 변환"""
    error_type_mapping = {
        ChannelNotFoundError: status.HTTP_404_NOT_FOUND,
        ChannelConfigIncompleteError: status.HTTP_400_BAD_REQUEST,
        UnsupportedChannelError: status.HTTP_400_BAD_REQUEST,
        ChannelNotConnectedError: status.HTTP_409_CONFLICT,
        ChannelAuthenticationError: status.HTTP_401_UNAUTHORIZED,
        ChannelApiError: status.HTTP_502_BAD_GATEWAY,
    }

    if isinstance(error, ChannelHubError):
        status_code = error_type_mapping.get(type(error), status.HTTP_500_INTERNAL_SERVER_ERROR)
        return HTTPException(status_code=status_code, detail=error.message)

    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))

"""애플리케이션 설정"""
from pydantic_settings import BaseSettings
from pydantic import Field
import os


class Settings(BaseSettings):
    """애플리케이션 설정"""

    # 데이터베이스
    database_url: str = Field(default="sqlite+aiosqlite:///./channel_hub.db")

    # 로깅
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # API 설정
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_reload: bool = Field(default=False)

    # 쿠팡
    coupang_api_url: str = Field(default="https://api-gateway.coupang.com")
    coupang_orders_page_size: int = Field(default=50)

    # 네이버 스마트스토어
    naver_api_url: str = Field(default="https://api.commerce.naver.com")
    naver_authorize_url: str = Field(default="https://nid.naver.com/oauth2.0/authorize")
    naver_token_url: str = Field(default="https://nid.naver.com/oauth2.0/token")
    naver_redirect_uri: str = Field(default="http://localhost:8000/api/v1/channels/naver/oauth/callback")
    naver_oauth_scope: str = Field(default="commerce.read,commerce.write")
    naver_orders_page_size: int = Field(default=100)

    # 호출 유형별 타임아웃 (초)
    read_timeout_seconds: float = Field(default=10.0)
    write_timeout_seconds: float = Field(default=10.0)
    sync_timeout_seconds: float = Field(default=30.0)

    # 동기화 설정
    order_sync_days: int = Field(default=7)
    sync_history_limit: int = Field(default=10)

    class Config:
        # .env 파일이 있는 경우에만 읽기
        env_file = ".env" if os.path.exists(".env") else None
        case_sensitive = False


# 전역 설정 인스턴스
settings = Settings()


def get_settings() -> Settings:
    """설정 인스턴스 반환"""
    return settings

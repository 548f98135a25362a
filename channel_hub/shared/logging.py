"""구조화된 로깅 유틸리티"""
import logging
import logging.config
from typing import Optional
import sys

from channel_hub.shared.config import get_settings

_configured = False


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """루트 로깅 설정 (프로세스당 한 번)"""
    global _configured

    settings = get_settings()
    level = (level or settings.log_level).upper()

    log_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'simple': {
                'format': fmt or settings.log_format
            }
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'simple',
                'stream': sys.stdout
            }
        },
        'loggers': {
            'channel_hub': {
                'handlers': ['console'],
                'level': level,
                'propagate': False
            }
        },
        'root': {
            'handlers': ['console'],
            'level': level
        }
    }

    logging.config.dictConfig(log_config)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """로거 인스턴스 반환"""
    if not _configured:
        configure_logging()
    return logging.getLogger(name)


def get_channel_logger(channel_id: str) -> logging.Logger:
    """채널 어댑터용 하위 로거"""
    return get_logger(f"channel_hub.channels.{channel_id}")


def log_channel_request(
    logger: logging.Logger,
    channel_id: str,
    method: str,
    path: str,
    status_code: Optional[int],
    duration: float
):
    """마켓 API 호출 로그"""
    log_data = {
        'channel_id': channel_id,
        'http_method': method,
        'endpoint': path,
        'status_code': status_code,
        'duration_ms': duration * 1000
    }

    logger.info(f"Channel API: {method} {path} - {status_code}", extra=log_data)

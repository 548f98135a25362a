"""채널 설정 도메인 엔티티

채널 설정은 ``type`` 으로 구분되는 태그드 유니언이다.
공통 필드는 ``ChannelConfig`` 에, 유형별 인증 정보는 하위 클래스에 둔다.
"""
from dataclasses import dataclass, fields
from typing import Dict, Any, Optional, List, Tuple, ClassVar, Type
from datetime import datetime
from enum import Enum

from channel_hub.core.exceptions import ChannelConfigIncompleteError


class ChannelType(Enum):
    """채널 인증 유형"""
    OAUTH = "oauth"
    API = "api"
    WEBHOOK = "webhook"


class ChannelStatus(Enum):
    """채널 연결 상태"""
    CONNECTED = "connected"
    PENDING = "pending"
    DISCONNECTED = "disconnected"
    ERROR = "error"


# 식별자/유형은 생성 후 바뀌지 않는다
IMMUTABLE_FIELDS = ("id", "type")
NON_NULL_FIELDS = ("name", "status")
DATETIME_FIELDS = ("last_sync", "token_expires_at")


@dataclass
class ChannelConfig:
    """채널 설정 공통 필드"""
    id: str
    name: str
    status: ChannelStatus = ChannelStatus.DISCONNECTED
    description: Optional[str] = None
    logo_url: Optional[str] = None
    last_sync: Optional[datetime] = None
    last_error: Optional[str] = None

    channel_type: ClassVar[ChannelType]
    secret_fields: ClassVar[Tuple[str, ...]] = ()

    @property
    def type(self) -> ChannelType:
        return self.channel_type

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def credential_field_names(cls) -> Tuple[str, ...]:
        """유형별 인증 필드 이름"""
        base_names = {f.name for f in fields(ChannelConfig)}
        return tuple(name for name in cls.field_names() if name not in base_names)

    def required_fields(self) -> Tuple[str, ...]:
        return ()

    def missing_fields(self) -> List[str]:
        return [name for name in self.required_fields() if not getattr(self, name)]

    def has_required_fields(self) -> bool:
        """유형별 필수 인증 정보가 모두 채워졌는지 확인"""
        return not self.missing_fields()

    def credentials(self) -> Dict[str, Any]:
        """인증 필드 값 (영속화용)"""
        result = {}
        for name in self.credential_field_names():
            value = getattr(self, name)
            result[name] = value.isoformat() if isinstance(value, datetime) else value
        return result

    def update(self, **changes: Any) -> None:
        """부분 병합 업데이트 - 전달된 필드만 변경"""
        allowed = set(self.field_names())
        for key in changes:
            if key in IMMUTABLE_FIELDS:
                raise ValueError(f"변경할 수 없는 필드입니다: {key}")
            if key not in allowed:
                raise ValueError(f"{self.type.value} 채널에 없는 필드입니다: {key}")

        values = {key: _coerce_field(key, value) for key, value in changes.items()}
        for key, value in values.items():
            setattr(self, key, value)

    def mark_connected(self, now: datetime) -> None:
        """연결 성공 처리"""
        if not self.has_required_fields():
            raise ChannelConfigIncompleteError(self.id, self.missing_fields())
        self.status = ChannelStatus.CONNECTED
        self.last_sync = now
        self.last_error = None

    def mark_error(self, message: str) -> None:
        """오류 상태 전환"""
        self.status = ChannelStatus.ERROR
        self.last_error = message

    def mark_pending(self) -> None:
        self.status = ChannelStatus.PENDING
        self.last_error = None

    def mark_disconnected(self) -> None:
        self.status = ChannelStatus.DISCONNECTED

    def to_dict(self, include_secrets: bool = False) -> Dict[str, Any]:
        """딕셔너리 변환 (직렬화용)"""
        data = {
            'id': self.id,
            'name': self.name,
            'type': self.type.value,
            'status': self.status.value,
            'description': self.description,
            'logo_url': self.logo_url,
            'last_sync': self.last_sync.isoformat() if self.last_sync else None,
            'last_error': self.last_error,
            'configured': self.has_required_fields(),
        }

        for name, value in self.credentials().items():
            if name in self.secret_fields and not include_secrets:
                continue
            data[name] = value

        return data


@dataclass
class OAuthChannelConfig(ChannelConfig):
    """OAuth 채널 설정 (네이버, 카카오)"""
    client_id: str = ""
    client_secret: str = ""
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_expires_at: Optional[datetime] = None

    channel_type: ClassVar[ChannelType] = ChannelType.OAUTH
    secret_fields: ClassVar[Tuple[str, ...]] = ("client_secret", "access_token", "refresh_token")

    def required_fields(self) -> Tuple[str, ...]:
        return ("client_id", "client_secret")

    def clear_tokens(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.token_expires_at = None


@dataclass
class ApiKeyChannelConfig(ChannelConfig):
    """API 키 채널 설정 (쿠팡 등)"""
    access_key: str = ""
    secret_key: str = ""
    vendor_id: str = ""

    channel_type: ClassVar[ChannelType] = ChannelType.API
    secret_fields: ClassVar[Tuple[str, ...]] = ("secret_key",)

    def required_fields(self) -> Tuple[str, ...]:
        # 쿠팡은 벤더 ID 까지 있어야 호출 가능
        if self.id == "coupang":
            return ("access_key", "secret_key", "vendor_id")
        return ("access_key", "secret_key")


@dataclass
class WebhookChannelConfig(ChannelConfig):
    """웹훅 채널 설정"""
    webhook_url: str = ""
    secret_key: Optional[str] = None

    channel_type: ClassVar[ChannelType] = ChannelType.WEBHOOK
    secret_fields: ClassVar[Tuple[str, ...]] = ("secret_key",)

    def required_fields(self) -> Tuple[str, ...]:
        return ("webhook_url",)


CONFIG_CLASSES: Dict[ChannelType, Type[ChannelConfig]] = {
    ChannelType.OAUTH: OAuthChannelConfig,
    ChannelType.API: ApiKeyChannelConfig,
    ChannelType.WEBHOOK: WebhookChannelConfig,
}


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _coerce_field(key: str, value: Any) -> Any:
    if value is None:
        if key in NON_NULL_FIELDS:
            raise ValueError(f"비울 수 없는 필드입니다: {key}")
        return None
    if key == "status" and not isinstance(value, ChannelStatus):
        try:
            return ChannelStatus(value)
        except ValueError:
            raise ValueError(f"알 수 없는 채널 상태: {value}")
    if key in DATETIME_FIELDS:
        try:
            return _parse_datetime(value)
        except ValueError:
            raise ValueError(f"날짜 형식이 올바르지 않습니다: {key}={value}")
    return value


def channel_config_from_dict(data: Dict[str, Any]) -> ChannelConfig:
    """``type`` 값에 맞는 설정 클래스로 역직렬화"""
    try:
        channel_type = ChannelType(data["type"])
    except (KeyError, ValueError):
        raise ValueError(f"알 수 없는 채널 유형: {data.get('type')}")

    config_class = CONFIG_CLASSES[channel_type]
    known = set(config_class.field_names())
    values = {key: value for key, value in data.items() if key in known}

    if "status" in values and not isinstance(values["status"], ChannelStatus):
        values["status"] = ChannelStatus(values["status"])
    for key in DATETIME_FIELDS:
        if key in values:
            values[key] = _parse_datetime(values[key])

    return config_class(**values)


def default_channel_configs() -> List[ChannelConfig]:
    """기본 지원 채널 목록 (애플리케이션 시작 시 등록)"""
    return [
        OAuthChannelConfig(
            id="naver",
            name="네이버 스마트스토어",
            logo_url="/assets/logos/naver.png",
            description="네이버 스마트스토어 연동으로 상품 및 주문 관리",
        ),
        ApiKeyChannelConfig(
            id="coupang",
            name="쿠팡",
            logo_url="/assets/logos/coupang.png",
            description="쿠팡 파트너스 연동으로 판매 관리",
        ),
        WebhookChannelConfig(
            id="29cm",
            name="29CM",
            logo_url="/assets/logos/29cm.png",
            description="29CM 연동으로 패션 상품 판매",
        ),
        WebhookChannelConfig(
            id="ohouse",
            name="오늘의집",
            logo_url="/assets/logos/ohouse.png",
            description="오늘의집 연동으로 홈 인테리어 상품 판매",
        ),
        ApiKeyChannelConfig(
            id="cjonstyle",
            name="CJ온스타일",
            logo_url="/assets/logos/cjonstyle.png",
            description="CJ온스타일 TV 쇼핑 연동",
        ),
        OAuthChannelConfig(
            id="kakao",
            name="카카오톡 스토어",
            logo_url="/assets/logos/kakao.png",
            description="카카오톡 스토어 연동으로 소셜 커머스",
        ),
        ApiKeyChannelConfig(
            id="imweb",
            name="아임웹",
            logo_url="/assets/logos/imweb.png",
            description="아임웹 쇼핑몰 연동",
        ),
        ApiKeyChannelConfig(
            id="toss",
            name="토스쇼핑",
            logo_url="/assets/logos/toss.png",
            description="토스쇼핑 연동으로 간편 결제",
        ),
    ]

"""Result 패턴 (성공/실패 값 객체)

서비스 계층은 예상 가능한 실패를 예외 대신 ``Failure`` 로 돌려준다.
호출자는 ``is_success()`` 로 분기한 뒤 ``get_value()`` / ``get_error()`` 를 읽는다.
"""
from typing import TypeVar, Generic, Union, Optional
from dataclasses import dataclass

T = TypeVar('T')


@dataclass(frozen=True)
class Success(Generic[T]):
    """성공 결과"""
    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def get_value(self) -> T:
        return self.value

    def get_error(self) -> None:
        return None

    def unwrap_or(self, default: T) -> T:
        return self.value


@dataclass(frozen=True)
class Failure(Generic[T]):
    """실패 결과

    ``code`` 는 호출자가 실패 종류를 구분할 때 쓰는 짧은 식별자
    (예: ``unsupported_channel``).
    """
    error: str
    code: Optional[str] = None
    value: Optional[T] = None

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def get_value(self) -> Optional[T]:
        return self.value

    def get_error(self) -> str:
        return self.error

    def unwrap_or(self, default: T) -> T:
        return default


Result = Union[Success[T], Failure[T]]


def success(value: T) -> "Result[T]":
    """성공 결과 생성"""
    return Success(value)


def failure(error: str, code: Optional[str] = None, value: Optional[T] = None) -> "Result[T]":
    """실패 결과 생성"""
    return Failure(error, code, value)

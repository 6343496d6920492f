from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional

from moodjournal.exceptions import DeviceBusyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceLease:
    """캡처 장치(마이크/카메라) 점유권. release() 할 때 그대로 돌려준다."""

    owner_id: int
    token: int


class DeviceRegistry:
    """
    캡처 장치 단일 슬롯 레지스트리.

    - 한 번에 하나의 세션만 장치를 점유할 수 있다.
    - "사용 중인지 확인"과 "점유"는 같은 lock 안에서 한 번에 일어난다.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._lease: Optional[DeviceLease] = None
        self._tokens = itertools.count(1)

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._lease is not None

    def acquire(self, owner: Any) -> DeviceLease:
        with self._lock:
            if self._lease is not None:
                raise DeviceBusyError("이미 진행 중인 녹음/녹화가 있습니다.", stage="recording")
            self._lease = DeviceLease(owner_id=id(owner), token=next(self._tokens))
            logger.debug("캡처 장치 점유: token=%s", self._lease.token)
            return self._lease

    def release(self, lease: Optional[DeviceLease]) -> bool:
        """현재 점유권과 같은 lease 일 때만 해제한다. (중복 호출 허용)"""
        if lease is None:
            return False
        with self._lock:
            if self._lease != lease:
                return False
            self._lease = None
            logger.debug("캡처 장치 해제: token=%s", lease.token)
            return True


# 프로세스 전역 레지스트리 (세션들이 공유)
DEFAULT_DEVICE_REGISTRY = DeviceRegistry()

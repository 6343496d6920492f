from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional, Union

from moodjournal.domain.models import MediaKind
from moodjournal.exceptions import NoActiveRecordingError
from moodjournal.recording.session import RecordingSession

logger = logging.getLogger(__name__)


class RecordingController:
    """
    서버에서 '지금 진행 중인 녹음 1개' 를 관리한다.

    세션은 일회용이라 start 할 때마다 새로 만든다.
    장치 점유 충돌은 세션(DeviceRegistry) 쪽에서 DeviceBusyError 로 알려준다.
    """

    def __init__(self, session_factory: Callable[[], RecordingSession] = RecordingSession):
        self._session_factory = session_factory
        self._session: Optional[RecordingSession] = None
        self._lock = asyncio.Lock()

    @property
    def session(self) -> Optional[RecordingSession]:
        return self._session

    async def start(self, kind: Union[MediaKind, str]) -> RecordingSession:
        session = self._session_factory()
        await session.start(kind)
        async with self._lock:
            self._session = session
        return session

    async def _take(self) -> RecordingSession:
        async with self._lock:
            session, self._session = self._session, None
        if session is None or not session.is_recording:
            raise NoActiveRecordingError("진행 중인 녹음이 없습니다.", stage="recording")
        return session

    async def stop(self) -> Path:
        session = await self._take()
        return await session.stop()

    async def cancel(self) -> bool:
        """취소했으면 True, 진행 중인 녹음이 없었으면 False."""
        try:
            session = await self._take()
        except NoActiveRecordingError:
            return False
        await session.cancel()
        return True

# moodjournal/infra/media_probe.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import soundfile as sf

from moodjournal.domain.models import MediaKind
from moodjournal.infra.media_files import media_kind_for

logger = logging.getLogger(__name__)


def _video_duration(path: Path) -> Optional[float]:
    import cv2

    cap = cv2.VideoCapture(str(path))
    try:
        if not cap.isOpened():
            return None
        fps = cap.get(cv2.CAP_PROP_FPS) or 0.0
        frames = cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0.0
    finally:
        cap.release()
    if fps <= 0 or frames <= 0:
        return None
    return frames / fps


def probe_duration(path: Path) -> Optional[float]:
    """
    미디어 재생 길이(초)를 구한다.

    - 오디오: soundfile(libsndfile) 헤더 정보
    - 비디오: OpenCV 프레임 수 / fps
    읽을 수 없는 형식이면 None (호출 측에서 기본값 사용)
    """
    try:
        if media_kind_for(path) is MediaKind.VIDEO:
            duration = _video_duration(path)
        else:
            duration = float(sf.info(str(path)).duration)
    except (RuntimeError, OSError, ValueError) as e:
        logger.warning("재생 길이를 읽을 수 없습니다: %s (%s)", path, e)
        return None

    if duration is None or duration <= 0:
        return None
    return duration

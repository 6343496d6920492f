# moodjournal/infra/media_library.py
from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from moodjournal.exceptions import MediaLibraryError
from moodjournal.infra.paths import MEDIA_LIBRARY_DIR

logger = logging.getLogger(__name__)


class MediaLibrary:
    """
    녹음/녹화 파일의 로컬 영구 보관소.

    - root/YYYY-MM/ 아래에 원본 파일명을 유지해서 복사한다.
    - 자동으로 지우지 않는다. (임시 캡처 파일과 달리 영구 사본)
    """

    def __init__(self, root: Optional[Path] = None, *, now: Callable[[], datetime] = datetime.now):
        self.root = root or MEDIA_LIBRARY_DIR
        self._now = now

    def save(self, path: Path) -> Path:
        target_dir = self.root / self._now().strftime("%Y-%m")
        target = target_dir / path.name
        n = 1
        while target.exists():
            target = target_dir / f"{path.stem}_{n}{path.suffix}"
            n += 1

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, target)
        except OSError as e:
            raise MediaLibraryError(f"로컬 미디어 라이브러리에 저장하지 못했습니다: {e}", stage="upload") from e

        logger.info("로컬 미디어 라이브러리에 저장: %s", target)
        return target

# moodjournal/infra/paths.py
import os
from pathlib import Path
from moodjournal.core.config import BASE_DIR

PACKAGE_DIR = Path(__file__).resolve().parents[1]
DATA_DIR    = PACKAGE_DIR / "data"

# 런타임 파일(임시 녹음, 로컬 미디어 라이브러리, 일기 저장소) 루트
VAR_DIR = Path(os.getenv("MOODJOURNAL_HOME") or str(BASE_DIR / "var"))

MEDIA_TMP_DIR     = VAR_DIR / "tmp_media"
MEDIA_LIBRARY_DIR = VAR_DIR / "media_library"
JOURNAL_DIR       = VAR_DIR / "journal"
REPORTS_DIR       = VAR_DIR / "reports"

EMOTION_KEYWORDS_PATH = DATA_DIR / "emotion_keywords.yaml"

def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path

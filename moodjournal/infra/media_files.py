# moodjournal/infra/media_files.py
from pathlib import Path
from typing import Union
from urllib.parse import unquote, urlparse

from moodjournal.domain.models import MediaKind

# 확장자 → (MIME 타입, 미디어 종류)
MEDIA_TYPES = {
    ".m4a": ("audio/m4a", MediaKind.AUDIO),
    ".wav": ("audio/wav", MediaKind.AUDIO),
    ".mp3": ("audio/mpeg", MediaKind.AUDIO),
    ".aac": ("audio/aac", MediaKind.AUDIO),
    ".ogg": ("audio/ogg", MediaKind.AUDIO),
    ".flac": ("audio/flac", MediaKind.AUDIO),
    ".webm": ("audio/webm", MediaKind.AUDIO),
    ".mp4": ("video/mp4", MediaKind.VIDEO),
    ".mov": ("video/quicktime", MediaKind.VIDEO),
}

def to_local_path(uri: Union[str, Path]) -> Path:
    """'file:///...' URI 또는 일반 경로를 Path 로 변환."""
    if isinstance(uri, Path):
        return uri
    if uri.startswith("file://"):
        return Path(unquote(urlparse(uri).path))
    return Path(uri)

def media_kind_for(path: Path) -> MediaKind:
    """확장자로 오디오/비디오 판별. 모르는 확장자는 오디오로 본다."""
    return MEDIA_TYPES.get(path.suffix.lower(), ("", MediaKind.AUDIO))[1]

def content_type_for(path: Path) -> str:
    entry = MEDIA_TYPES.get(path.suffix.lower())
    if entry:
        return entry[0]
    return "application/octet-stream"

def file_size(path: Path) -> int:
    """파일 크기. 없으면 0."""
    try:
        return path.stat().st_size if path.is_file() else 0
    except OSError:
        return 0

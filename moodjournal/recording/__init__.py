"""마이크/카메라 캡처 세션.

Public entrypoints:
- RecordingSession, RecordingStatus, RecordingController
- DeviceRegistry, DEFAULT_DEVICE_REGISTRY
- CaptureBackend, SoundDeviceMicrophone, OpenCVCamera
"""

from .backends import CaptureBackend, OpenCVCamera, SoundDeviceMicrophone, default_backend
from .registry import DEFAULT_DEVICE_REGISTRY, DeviceLease, DeviceRegistry
from .session import RecordingSession, RecordingStatus
from .controller import RecordingController

__all__ = [
    "CaptureBackend",
    "OpenCVCamera",
    "SoundDeviceMicrophone",
    "default_backend",
    "DEFAULT_DEVICE_REGISTRY",
    "DeviceLease",
    "DeviceRegistry",
    "RecordingSession",
    "RecordingStatus",
    "RecordingController",
]

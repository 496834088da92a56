# tests/conftest.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

import pytest

from origaspect.common import settings as settings_mod
from origaspect.domain.dataclasses.process import ProcessResult
from origaspect.domain.entities.disc import BlurayDiscInfo
from origaspect.domain.entities.probe import MediaInfo, MediaSourceRequest
from origaspect.domain.entities.video_item import VideoItem, VideoStream
from origaspect.domain.enums.video_type import VideoType


# ----- Fake ports -------------------------------------------------------------

class FakeInspector:
    """MediaInspectorPort stand-in: echoes the request path back as MediaInfo."""

    def __init__(self, *, fail: bool = False, raises: Optional[Exception] = None, duration_sec: float = 7200.0):
        self.fail = fail
        self.raises = raises
        self.duration_sec = duration_sec
        self.requests: List[MediaSourceRequest] = []

    def inspect(self, request: MediaSourceRequest) -> Optional[MediaInfo]:
        self.requests.append(request)
        if self.raises is not None:
            raise self.raises
        if self.fail:
            return None
        return MediaInfo(path=request.path, duration_sec=self.duration_sec, video_type=request.video_type)


class FakeDiscResolver:
    def __init__(
        self,
        *,
        vobs: Optional[List[str]] = None,
        disc_info: Optional[BlurayDiscInfo] = None,
        m2ts: Optional[List[str]] = None,
        raises: Optional[Exception] = None,
    ):
        self.vobs = vobs or []
        self.disc_info = disc_info
        self.m2ts = m2ts or []
        self.raises = raises
        self.calls: List[str] = []

    def primary_dvd_vob_files(self, path: str) -> List[str]:
        self.calls.append(f"dvd:{path}")
        if self.raises is not None:
            raise self.raises
        return list(self.vobs)

    def bluray_disc_info(self, path: str) -> Optional[BlurayDiscInfo]:
        self.calls.append(f"bdinfo:{path}")
        if self.raises is not None:
            raise self.raises
        return self.disc_info

    def primary_bluray_m2ts_files(self, path: str) -> List[str]:
        self.calls.append(f"m2ts:{path}")
        return list(self.m2ts)


class FakeDetector:
    def __init__(self, value: Optional[Decimal] = None, raises: Optional[Exception] = None):
        self.value = value
        self.raises = raises
        self.calls: List[Dict[str, Any]] = []

    def detect(self, file_path, duration_sec, cancel_event=None, *, checks_per_video=None):
        self.calls.append(
            {
                "file_path": file_path,
                "duration_sec": duration_sec,
                "cancel_event": cancel_event,
                "checks_per_video": checks_per_video,
            }
        )
        if self.raises is not None:
            raise self.raises
        return self.value


class FakeRunner:
    """ProcessRunnerPort stand-in replaying canned stderr lines."""

    def __init__(self, lines: Optional[List[str]] = None, result: Optional[ProcessResult] = None,
                 raises: Optional[Exception] = None):
        self.lines = lines or []
        self.result = result or ProcessResult(returncode=0)
        self.raises = raises
        self.cmds: List[List[str]] = []
        self.kwargs: List[Dict[str, Any]] = []

    def run(self, cmd, on_stderr_line: Callable[[str], None], *, cancel_event=None, timeout_sec=None):
        self.cmds.append(list(cmd))
        self.kwargs.append({"cancel_event": cancel_event, "timeout_sec": timeout_sec})
        if self.raises is not None:
            raise self.raises
        for line in self.lines:
            on_stderr_line(line)
        return self.result


# ----- Fixtures ---------------------------------------------------------------

@pytest.fixture()
def make_inspector() -> Callable[..., FakeInspector]:
    return FakeInspector


@pytest.fixture()
def make_disc_resolver() -> Callable[..., FakeDiscResolver]:
    return FakeDiscResolver


@pytest.fixture()
def make_detector() -> Callable[..., FakeDetector]:
    return FakeDetector


@pytest.fixture()
def make_runner() -> Callable[..., FakeRunner]:
    return FakeRunner


@pytest.fixture()
def make_item() -> Callable[..., VideoItem]:
    def _make(**overrides) -> VideoItem:
        stream_ratio = overrides.pop("stream_ratio", "16:9")
        fields: Dict[str, Any] = dict(
            name="Lawrence of Arabia",
            path="/media/movies/lawrence.mkv",
            video_type=VideoType.video_file,
            duration_sec=13_200.0,
            default_video_stream=VideoStream(aspect_ratio=stream_ratio, width=1920, height=1080),
        )
        fields.update(overrides)
        return VideoItem(**fields)
    return _make


@pytest.fixture()
def clean_settings(monkeypatch, tmp_path):
    """Fresh get_settings() cache, isolated from any developer .env."""
    monkeypatch.chdir(tmp_path)
    settings_mod.get_settings.cache_clear()
    yield settings_mod.get_settings
    settings_mod.get_settings.cache_clear()

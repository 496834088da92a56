# origaspect/services/api/deps.py
from __future__ import annotations
from fastapi import Depends

from origaspect.common.settings import get_settings
from origaspect.domain.dataclasses.reconcile import ReconcileConfig
from origaspect.domain.ports.cropdetect import AspectRatioDetectorPort
from origaspect.domain.ports.disc import DiscResolverPort
from origaspect.domain.ports.probe import MediaInspectorPort
from origaspect.services.cropdetect.detector import CropdetectDetector
from origaspect.services.disc.filesystem_resolver import FilesystemDiscResolver
from origaspect.services.probe.ffprobe_adapter import FFprobeInspector
from origaspect.services.reconcile.engine import ReconciliationEngine


def get_media_inspector() -> MediaInspectorPort:
    """
    Provide a MediaInspectorPort implementation (ffprobe) via DI.
    Swappable later if you add other probers.
    """
    return FFprobeInspector()


def get_disc_resolver() -> DiscResolverPort:
    return FilesystemDiscResolver()


def get_detector() -> AspectRatioDetectorPort:
    cfg = get_settings()
    return CropdetectDetector(
        ffmpeg_bin=cfg.effective_ffmpeg_bin,
        checks_per_video=cfg.aspect.checks_per_video,
    )


def get_reconcile_config() -> ReconcileConfig:
    """Snapshot of the aspect options, taken once per request."""
    return get_settings().aspect.to_reconcile_config()


def get_engine(
    inspector: MediaInspectorPort = Depends(get_media_inspector),
    disc_resolver: DiscResolverPort = Depends(get_disc_resolver),
    detector: AspectRatioDetectorPort = Depends(get_detector),
) -> ReconciliationEngine:
    return ReconciliationEngine(inspector=inspector, disc_resolver=disc_resolver, detector=detector)

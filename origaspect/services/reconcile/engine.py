# origaspect/services/reconcile/engine.py
from __future__ import annotations

import threading
from decimal import Decimal
from typing import Any, Optional

from origaspect.common.logging import get_logger
from origaspect.domain.dataclasses.reconcile import (
    ReconcileConfig,
    ReconciliationDecision,
    Skip,
    Write,
)
from origaspect.domain.entities.probe import MediaInfo, MediaSourceRequest
from origaspect.domain.entities.video_item import VideoItem
from origaspect.domain.enums.media_protocol import MediaProtocol
from origaspect.domain.enums.skip_reason import SkipReason
from origaspect.domain.enums.video_type import VideoType
from origaspect.domain.policies.ratio_converter import (
    format_ratio,
    parse_ratio,
    prepare_candidates,
    ratio_distance,
    select_nearest,
)
from origaspect.domain.ports.cropdetect import AspectRatioDetectorPort
from origaspect.domain.ports.disc import DiscResolverPort
from origaspect.domain.ports.probe import MediaInspectorPort

logger = get_logger(__name__)

# below this the detected ratio is considered equal to the stream's own
MATCH_TOLERANCE = Decimal("0.01")


class ReconcileCancelled(Exception):
    """The caller's cancel event was set before reconciliation could finish."""


class ReconciliationEngine:
    """
    Decides, for one item, whether its aspect-ratio field should be set to
    the accepted ratio nearest to what cropdetect sees.

    Every failure ends in a Skip carrying a reason. The only exception that
    leaves reconcile() is ReconcileCancelled. On Write the item's
    `aspect_ratio` is already updated; persisting it is up to the caller.
    """

    def __init__(
        self,
        inspector: MediaInspectorPort,
        disc_resolver: DiscResolverPort,
        detector: AspectRatioDetectorPort,
    ):
        self.inspector = inspector
        self.disc_resolver = disc_resolver
        self.detector = detector

    # ---- public ------------------------------------------------------------
    def reconcile(
        self,
        item: Any,
        config: ReconcileConfig,
        cancel_event: Optional[threading.Event] = None,
    ) -> ReconciliationDecision:
        self._check_cancelled(cancel_event)

        if not isinstance(item, VideoItem) or not item.supports_aspect_ratio:
            logger.debug(
                "Item %s is not a video or does not support original aspect ratio, skipping.",
                getattr(item, "name", item),
            )
            return Skip(SkipReason.unsupported_type)

        source_path = item.shortcut_path if item.is_shortcut else item.path
        if not (source_path or "").strip():
            logger.info("Item %s has no path, skipping.", item.name)
            return Skip(SkipReason.no_path)

        if item.has_aspect_ratio and not config.override_existing_aspect_ratio:
            logger.info("Item %s already has an original aspect ratio defined, skipping.", item.name)
            return Skip(SkipReason.already_set, item.aspect_ratio)

        candidates = prepare_candidates(config.accepted_aspect_ratios)
        if not candidates:
            logger.warning("No valid accepted aspect ratios configured; cannot reconcile %s.", item.name)
            return Skip(SkipReason.no_valid_candidates)

        source = self._resolve_source(item)
        if isinstance(source, Skip):
            return source

        self._check_cancelled(cancel_event)
        media_info = self._inspect(item, source)
        if media_info is None:
            logger.error("Unable to retrieve media info for item %s, skipping.", item.name)
            return Skip(SkipReason.inspection_failed, source.path)

        if not item.duration_sec or item.duration_sec <= 0:
            logger.info("Unable to determine runtime for %s and therefore cannot detect aspect ratio.", item.name)
            return Skip(SkipReason.no_duration)

        detected = self._detect(item, media_info, config, cancel_event)
        if detected is None:
            logger.warning("Failed to determine original aspect ratio for %s.", item.name)
            return Skip(SkipReason.detection_failed, media_info.path)
        logger.info("Discovered original aspect ratio value of %s for %s", format_ratio(detected, 4), item.name)

        stream_text = item.stream_aspect_ratio
        stream_value = parse_ratio(stream_text)
        logger.debug("Converted video stream aspect ratio of %s to %s for %s", stream_text, stream_value, item.name)
        if stream_value is None:
            logger.warning("Failed to convert video stream aspect ratio for %s.", item.name)
            return Skip(SkipReason.stream_ratio_unparseable, stream_text)

        selected = select_nearest(detected, candidates)
        logger.info(
            "Matched discovered original aspect ratio of %s to accepted value %s for %s.",
            format_ratio(detected, 4), selected.text, item.name,
        )

        selected_value = parse_ratio(selected.text)
        if selected_value is None:
            logger.warning("Failed to convert accepted original aspect ratio for %s.", item.name)
            return Skip(SkipReason.selected_ratio_unparseable, selected.text)

        discrepancy = ratio_distance(selected_value, stream_value)
        logger.debug(
            "Discrepancy between accepted ratio %s and stream ratio %s for %s is %s.",
            selected_value, stream_value, item.name, discrepancy,
        )
        if discrepancy < MATCH_TOLERANCE and not config.always_write_original_aspect_ratio:
            logger.info(
                "Accepted original aspect ratio of %s for %s matches video stream aspect ratio of %s, skipping.",
                selected.text, item.name, stream_text,
            )
            return Skip(SkipReason.matches_existing_ratio, selected.text)

        item.aspect_ratio = selected.text
        logger.info("Saved original aspect ratio of %s for %s.", selected.text, item.name)
        return Write(aspect_ratio=selected.text, value=selected_value, detected=detected)

    # ---- steps -------------------------------------------------------------
    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise ReconcileCancelled()

    def _resolve_source(self, item: VideoItem) -> MediaSourceRequest | Skip:
        if item.video_type == VideoType.dvd:
            try:
                vobs = list(self.disc_resolver.primary_dvd_vob_files(item.path))
            except Exception:
                logger.exception("Error resolving DVD structure for %s", item.name)
                vobs = []
            if not vobs:
                logger.error("No playable .vob files found in DVD structure for %s, skipping.", item.name)
                return Skip(SkipReason.no_playable_dvd_content, item.path)
            return MediaSourceRequest(path=str(vobs[0]), video_type=VideoType.dvd)

        if item.video_type == VideoType.bluray:
            try:
                disc_info = self.disc_resolver.bluray_disc_info(item.path)
            except Exception:
                logger.exception("Error getting Blu-ray disc info for %s", item.name)
                disc_info = None
            try:
                m2ts = list(self.disc_resolver.primary_bluray_m2ts_files(item.path))
            except Exception:
                logger.exception("Error resolving Blu-ray playlist for %s", item.name)
                m2ts = []
            if disc_info is None or not disc_info.files or not m2ts:
                logger.error("No playable .m2ts files found in Blu-ray structure for %s, skipping.", item.name)
                return Skip(SkipReason.no_playable_bluray_content, item.path)
            return MediaSourceRequest(path=str(m2ts[0]), video_type=VideoType.bluray)

        if item.is_shortcut:
            path = item.shortcut_path or ""
            return MediaSourceRequest(
                path=path,
                protocol=MediaProtocol.from_path(path),
                video_type=item.video_type,
            )
        return MediaSourceRequest(path=item.path, protocol=item.protocol, video_type=item.video_type)

    def _inspect(self, item: VideoItem, source: MediaSourceRequest) -> Optional[MediaInfo]:
        try:
            return self.inspector.inspect(source)
        except Exception:
            logger.exception("Media inspection raised for %s", item.name)
            return None

    def _detect(
        self,
        item: VideoItem,
        media_info: MediaInfo,
        config: ReconcileConfig,
        cancel_event: Optional[threading.Event],
    ) -> Optional[Decimal]:
        try:
            value = self.detector.detect(
                media_info.path,
                item.duration_sec,
                cancel_event,
                checks_per_video=config.checks_per_video,
            )
        except Exception:
            logger.exception("Aspect ratio detection raised for %s", item.name)
            return None
        if value is None or value <= 0:
            return None
        return value

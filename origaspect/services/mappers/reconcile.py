# origaspect/services/mappers/reconcile.py
from __future__ import annotations

from dataclasses import replace

from origaspect.domain.dataclasses.reconcile import ReconcileConfig, ReconciliationDecision, Write
from origaspect.domain.entities.video_item import VideoItem, VideoStream
from origaspect.services.schemas.aspect import ReconcileOptions, ReconcileResponse, VideoItemIn


def to_domain_video_item(s: VideoItemIn) -> VideoItem:
    stream = None
    if s.default_video_stream is not None:
        stream = VideoStream(**s.default_video_stream.model_dump())
    return VideoItem(
        name=s.name,
        path=s.path,
        kind=s.kind,
        video_type=s.video_type,
        protocol=s.protocol,
        aspect_ratio=s.aspect_ratio,
        duration_sec=s.duration_sec,
        default_video_stream=stream,
        is_shortcut=s.is_shortcut,
        shortcut_path=s.shortcut_path,
    )


def apply_options(base: ReconcileConfig, opts: ReconcileOptions) -> ReconcileConfig:
    """Overlay explicitly-set request options on the settings snapshot."""
    changes = opts.model_dump(exclude_none=True)
    if "accepted_aspect_ratios" in changes:
        changes["accepted_aspect_ratios"] = tuple(changes["accepted_aspect_ratios"])
    return replace(base, **changes)


def to_reconcile_response(decision: ReconciliationDecision) -> ReconcileResponse:
    if isinstance(decision, Write):
        return ReconcileResponse(
            action="write",
            update_type=str(decision.update_type),
            aspect_ratio=decision.aspect_ratio,
            detected=float(decision.detected),
        )
    return ReconcileResponse(
        action="skip",
        update_type=str(decision.update_type),
        reason=str(decision.reason),
        detail=decision.detail,
    )

import threading
from decimal import Decimal

import pytest

from origaspect.domain.dataclasses.reconcile import ReconcileConfig, Skip, Write
from origaspect.domain.entities.disc import BlurayDiscInfo
from origaspect.domain.enums.item_kind import ItemKind
from origaspect.domain.enums.media_protocol import MediaProtocol
from origaspect.domain.enums.skip_reason import SkipReason
from origaspect.domain.enums.update_type import ItemUpdateType
from origaspect.domain.enums.video_type import VideoType
from origaspect.services.reconcile.engine import ReconcileCancelled, ReconciliationEngine


@pytest.fixture()
def build_engine(make_inspector, make_disc_resolver, make_detector):
    """Engine over fakes; returns (engine, inspector, resolver, detector)."""
    def _build(detected="2.0", inspector=None, resolver=None, detector=None):
        inspector = inspector or make_inspector()
        resolver = resolver or make_disc_resolver()
        detector = detector or make_detector(Decimal(detected) if detected is not None else None)
        engine = ReconciliationEngine(inspector=inspector, disc_resolver=resolver, detector=detector)
        return engine, inspector, resolver, detector
    return _build


CFG = ReconcileConfig(accepted_aspect_ratios=("1.33", "1.78", "1.85", "2.00", "2.39"))


# ----- happy path -------------------------------------------------------------

def test_writes_nearest_candidate_text(make_item, build_engine):
    engine, inspector, _, detector = build_engine(detected="2.0")
    item = make_item(stream_ratio="1.78")

    decision = engine.reconcile(item, CFG)

    assert isinstance(decision, Write)
    assert decision.aspect_ratio == "2.00"
    assert decision.value == Decimal("2.00")
    assert decision.update_type == ItemUpdateType.metadata_import
    assert item.aspect_ratio == "2.00"
    # detector analyzes the inspected path, with the item's duration
    assert detector.calls[0]["file_path"] == inspector.requests[0].path == item.path
    assert detector.calls[0]["duration_sec"] == item.duration_sec
    assert detector.calls[0]["checks_per_video"] == 10


def test_writes_ratio_in_configured_colon_form(make_item, build_engine):
    cfg = ReconcileConfig(accepted_aspect_ratios=("4:3", "16:9", "2.39"))
    engine, *_ = build_engine(detected="1.3333")
    item = make_item(stream_ratio="16:9")
    decision = engine.reconcile(item, cfg)
    assert isinstance(decision, Write)
    assert item.aspect_ratio == "4:3"


def test_selection_and_write_skip_invalid_candidates(make_item, build_engine):
    cfg = ReconcileConfig(accepted_aspect_ratios=("junk", "2.39", ":9"))
    engine, *_ = build_engine(detected="2.40")
    decision = engine.reconcile(make_item(), cfg)
    assert isinstance(decision, Write)
    assert decision.aspect_ratio == "2.39"


# ----- gates ------------------------------------------------------------------

def test_non_video_is_unsupported(build_engine):
    engine, inspector, _, detector = build_engine()
    decision = engine.reconcile(object(), CFG)
    assert decision == Skip(SkipReason.unsupported_type)
    assert inspector.requests == [] and detector.calls == []


def test_kind_without_aspect_ratio_is_unsupported(make_item, build_engine):
    engine, *_ = build_engine()
    decision = engine.reconcile(make_item(kind=ItemKind.trailer), CFG)
    assert decision.reason == SkipReason.unsupported_type


def test_existing_ratio_skips_regardless_of_detection(make_item, build_engine):
    engine, _, _, detector = build_engine(detected="2.39")
    item = make_item(aspect_ratio="1.85")
    decision = engine.reconcile(item, CFG)
    assert decision.reason == SkipReason.already_set
    assert item.aspect_ratio == "1.85"
    assert detector.calls == []


def test_override_existing_ratio(make_item, build_engine):
    engine, *_ = build_engine(detected="2.39")
    item = make_item(aspect_ratio="1.85")
    cfg = ReconcileConfig(accepted_aspect_ratios=CFG.accepted_aspect_ratios, override_existing_aspect_ratio=True)
    decision = engine.reconcile(item, cfg)
    assert isinstance(decision, Write)
    assert item.aspect_ratio == "2.39"


def test_no_valid_candidates(make_item, build_engine):
    engine, inspector, _, _ = build_engine()
    cfg = ReconcileConfig(accepted_aspect_ratios=("abc", "1:", ""))
    decision = engine.reconcile(make_item(), cfg)
    assert decision.reason == SkipReason.no_valid_candidates
    assert inspector.requests == []


def test_empty_candidates(make_item, build_engine):
    engine, *_ = build_engine()
    assert engine.reconcile(make_item(), ReconcileConfig(accepted_aspect_ratios=())).reason == SkipReason.no_valid_candidates


# ----- source resolution ------------------------------------------------------

def test_dvd_uses_first_primary_vob(make_item, build_engine, make_disc_resolver):
    resolver = make_disc_resolver(vobs=["/dvd/VIDEO_TS/VTS_01_1.VOB", "/dvd/VIDEO_TS/VTS_01_2.VOB"])
    engine, inspector, _, detector = build_engine(resolver=resolver)
    decision = engine.reconcile(make_item(path="/dvd", video_type=VideoType.dvd), CFG)
    assert isinstance(decision, Write)
    assert inspector.requests[0].path == "/dvd/VIDEO_TS/VTS_01_1.VOB"
    assert inspector.requests[0].video_type == VideoType.dvd
    assert detector.calls[0]["file_path"] == "/dvd/VIDEO_TS/VTS_01_1.VOB"


def test_dvd_without_vobs(make_item, build_engine, make_disc_resolver):
    engine, inspector, *_ = build_engine(resolver=make_disc_resolver(vobs=[]))
    item = make_item(path="/dvd", video_type=VideoType.dvd)
    decision = engine.reconcile(item, CFG)
    assert decision.reason == SkipReason.no_playable_dvd_content
    assert inspector.requests == []
    assert item.aspect_ratio is None


def test_dvd_resolver_error_is_skip(make_item, build_engine, make_disc_resolver):
    engine, *_ = build_engine(resolver=make_disc_resolver(raises=OSError("unreadable")))
    decision = engine.reconcile(make_item(path="/dvd", video_type=VideoType.dvd), CFG)
    assert decision.reason == SkipReason.no_playable_dvd_content


def test_bluray_uses_first_primary_m2ts(make_item, build_engine, make_disc_resolver):
    resolver = make_disc_resolver(
        disc_info=BlurayDiscInfo(files=["/bd/BDMV/STREAM/00001.m2ts", "/bd/BDMV/STREAM/00002.m2ts"]),
        m2ts=["/bd/BDMV/STREAM/00002.m2ts", "/bd/BDMV/STREAM/00001.m2ts"],
    )
    engine, inspector, *_ = build_engine(resolver=resolver)
    decision = engine.reconcile(make_item(path="/bd", video_type=VideoType.bluray), CFG)
    assert isinstance(decision, Write)
    assert inspector.requests[0].path == "/bd/BDMV/STREAM/00002.m2ts"


@pytest.mark.parametrize(
    "disc_info,m2ts",
    [
        (None, ["/bd/BDMV/STREAM/00001.m2ts"]),
        (BlurayDiscInfo(files=[]), ["/bd/BDMV/STREAM/00001.m2ts"]),
        (BlurayDiscInfo(files=["/bd/BDMV/STREAM/00001.m2ts"]), []),
    ],
)
def test_bluray_without_playable_content(make_item, disc_info, m2ts, build_engine, make_disc_resolver):
    engine, inspector, *_ = build_engine(resolver=make_disc_resolver(disc_info=disc_info, m2ts=m2ts))
    decision = engine.reconcile(make_item(path="/bd", video_type=VideoType.bluray), CFG)
    assert decision.reason == SkipReason.no_playable_bluray_content
    assert inspector.requests == []


def test_bluray_disc_info_error_is_skip(make_item, build_engine, make_disc_resolver):
    engine, *_ = build_engine(resolver=make_disc_resolver(raises=RuntimeError("bdinfo blew up"), m2ts=["/x.m2ts"]))
    decision = engine.reconcile(make_item(path="/bd", video_type=VideoType.bluray), CFG)
    assert decision.reason == SkipReason.no_playable_bluray_content


def test_shortcut_inspects_target_with_inferred_protocol(make_item, build_engine):
    engine, inspector, *_ = build_engine()
    item = make_item(path="/lib/film.strm", is_shortcut=True, shortcut_path="https://media.example/film.m3u8")
    engine.reconcile(item, CFG)
    req = inspector.requests[0]
    assert req.path == "https://media.example/film.m3u8"
    assert req.protocol == MediaProtocol.http


# ----- inspection / detection failures ----------------------------------------

def test_inspection_failure(make_item, build_engine, make_inspector):
    engine, _, _, detector = build_engine(inspector=make_inspector(fail=True))
    decision = engine.reconcile(make_item(), CFG)
    assert decision.reason == SkipReason.inspection_failed
    assert detector.calls == []


def test_inspection_exception_is_normalized(make_item, build_engine, make_inspector):
    engine, *_ = build_engine(inspector=make_inspector(raises=RuntimeError("ffprobe exploded")))
    assert engine.reconcile(make_item(), CFG).reason == SkipReason.inspection_failed


@pytest.mark.parametrize("duration", [None, 0])
def test_no_duration(make_item, duration, build_engine):
    engine, _, _, detector = build_engine()
    decision = engine.reconcile(make_item(duration_sec=duration), CFG)
    assert decision.reason == SkipReason.no_duration
    assert detector.calls == []


def test_detection_failure_leaves_item_untouched(make_item, build_engine):
    engine, *_ = build_engine(detected=None)
    item = make_item()
    decision = engine.reconcile(item, CFG)
    assert decision.reason == SkipReason.detection_failed
    assert item.aspect_ratio is None


def test_detector_exception_is_detection_failure(make_item, build_engine, make_detector):
    engine, *_ = build_engine(detector=make_detector(raises=RuntimeError("ffmpeg segfault")))
    assert engine.reconcile(make_item(), CFG).reason == SkipReason.detection_failed


@pytest.mark.parametrize("stream_ratio", [None, "", "wide"])
def test_unparseable_stream_ratio(make_item, stream_ratio, build_engine):
    engine, *_ = build_engine()
    item = make_item(stream_ratio=stream_ratio)
    assert engine.reconcile(item, CFG).reason == SkipReason.stream_ratio_unparseable
    assert item.aspect_ratio is None


def test_missing_default_stream_is_unparseable(make_item, build_engine):
    engine, *_ = build_engine()
    assert engine.reconcile(make_item(default_video_stream=None), CFG).reason == SkipReason.stream_ratio_unparseable


# ----- tolerance ----------------------------------------------------------------

def test_match_within_tolerance_skips(make_item, build_engine):
    engine, *_ = build_engine(detected="1.777")
    item = make_item(stream_ratio="16:9")
    decision = engine.reconcile(item, CFG)
    assert decision.reason == SkipReason.matches_existing_ratio
    assert item.aspect_ratio is None


def test_discrepancy_exactly_tolerance_writes(make_item, build_engine):
    cfg = ReconcileConfig(accepted_aspect_ratios=("1.79",))
    engine, *_ = build_engine(detected="1.79")
    decision = engine.reconcile(make_item(stream_ratio="1.78"), cfg)
    assert isinstance(decision, Write)
    assert decision.aspect_ratio == "1.79"


def test_discrepancy_just_under_tolerance_skips(make_item, build_engine):
    cfg = ReconcileConfig(accepted_aspect_ratios=("1.7899",))
    engine, *_ = build_engine(detected="1.79")
    decision = engine.reconcile(make_item(stream_ratio="1.78"), cfg)
    assert decision.reason == SkipReason.matches_existing_ratio


def test_always_write_ignores_tolerance(make_item, build_engine):
    cfg = ReconcileConfig(accepted_aspect_ratios=CFG.accepted_aspect_ratios, always_write_original_aspect_ratio=True)
    engine, *_ = build_engine(detected="1.777")
    item = make_item(stream_ratio="16:9")
    decision = engine.reconcile(item, cfg)
    assert isinstance(decision, Write)
    assert item.aspect_ratio == "1.78"


# ----- cancellation -------------------------------------------------------------

def test_cancelled_before_start_raises(make_item, build_engine):
    engine, inspector, *_ = build_engine()
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(ReconcileCancelled):
        engine.reconcile(make_item(), CFG, cancel)
    assert inspector.requests == []


def test_cancel_event_forwarded_to_detector(make_item, build_engine):
    engine, _, _, detector = build_engine()
    cancel = threading.Event()
    engine.reconcile(make_item(), CFG, cancel)
    assert detector.calls[0]["cancel_event"] is cancel


# ----- hostile ratio text -------------------------------------------------------

def test_exponent_candidates_are_dropped(make_item, build_engine):
    engine, *_ = build_engine(detected="2.0")
    cfg = ReconcileConfig(accepted_aspect_ratios=("1e9999999", "2e0", "2.00"))
    decision = engine.reconcile(make_item(stream_ratio="1.78"), cfg)
    assert isinstance(decision, Write)
    assert decision.aspect_ratio == "2.00"


def test_oversized_plain_candidate_never_wins(make_item, build_engine):
    engine, *_ = build_engine(detected="2.0")
    cfg = ReconcileConfig(accepted_aspect_ratios=("9" * 1_000_001, "2.00"))
    decision = engine.reconcile(make_item(stream_ratio="1.78"), cfg)
    assert isinstance(decision, Write)
    assert decision.aspect_ratio == "2.00"


@pytest.mark.parametrize(
    "stream_ratio",
    ["1e999999:1e-999999", "1" + "0" * 600_000 + ":0." + "0" * 600_000 + "1"],
)
def test_overflowing_stream_ratio_is_unparseable(make_item, build_engine, stream_ratio):
    engine, *_ = build_engine()
    item = make_item(stream_ratio=stream_ratio)
    assert engine.reconcile(item, ReconcileConfig()).reason == SkipReason.stream_ratio_unparseable
    assert item.aspect_ratio is None


# ----- blank paths --------------------------------------------------------------

def test_blanked_path_is_skipped_before_inspection(make_item, build_engine):
    engine, inspector, resolver, _ = build_engine()
    item = make_item(path="/dvd", video_type=VideoType.dvd)
    item.path = "   "
    assert engine.reconcile(item, CFG) == Skip(SkipReason.no_path)
    assert inspector.requests == [] and resolver.calls == []


def test_blanked_shortcut_target_is_skipped(make_item, build_engine):
    engine, inspector, *_ = build_engine()
    item = make_item(is_shortcut=True, shortcut_path="https://media.example/a.m3u8")
    item.shortcut_path = ""
    assert engine.reconcile(item, CFG).reason == SkipReason.no_path
    assert inspector.requests == []

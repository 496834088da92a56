from __future__ import annotations
from enum import StrEnum

class SkipReason(StrEnum):
    unsupported_type = "unsupported_type"
    no_path = "no_path"
    already_set = "already_set"
    no_valid_candidates = "no_valid_candidates"
    no_playable_dvd_content = "no_playable_dvd_content"
    no_playable_bluray_content = "no_playable_bluray_content"
    inspection_failed = "inspection_failed"
    no_duration = "no_duration"
    detection_failed = "detection_failed"
    stream_ratio_unparseable = "stream_ratio_unparseable"
    selected_ratio_unparseable = "selected_ratio_unparseable"
    matches_existing_ratio = "matches_existing_ratio"

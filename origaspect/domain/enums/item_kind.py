from __future__ import annotations
from enum import StrEnum

class ItemKind(StrEnum):
    movie = "movie"
    episode = "episode"
    trailer = "trailer"
    music_video = "music_video"
    video = "video"


# kinds that carry an editable aspect-ratio attribute
ASPECT_RATIO_KINDS = frozenset({ItemKind.movie, ItemKind.episode})

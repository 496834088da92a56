from origaspect.domain.enums.item_kind import ItemKind, ASPECT_RATIO_KINDS
from origaspect.domain.enums.media_protocol import MediaProtocol
from origaspect.domain.enums.skip_reason import SkipReason
from origaspect.domain.enums.update_type import ItemUpdateType
from origaspect.domain.enums.video_type import VideoType
__all__ = [
    "ItemKind",
    "ASPECT_RATIO_KINDS",
    "MediaProtocol",
    "SkipReason",
    "ItemUpdateType",
    "VideoType",
]

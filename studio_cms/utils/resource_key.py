"""
Cloudinary URL parsing.

Delivery URLs look like
    https://res.cloudinary.com/{cloud}/image/upload/{transformations}/v{version}/{folders}/{name}.{ext}
where transformation and version segments are optional and may repeat. The
resource key (Cloudinary's public_id) is what remains once those are removed
and the image extension is stripped.
"""
import logging
import re
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

UPLOAD_MARKER = "/image/upload/"

VERSION_PATTERN = re.compile(r"v\d+")
# Folders are indistinguishable from transformations by name: a folder such
# as e_commerce/ is skipped like e_sharpen/, so uploads must not use folder
# names starting with one of these prefixes.
TRANSFORMATION_PATTERN = re.compile(
    r"(w|h|c|q|f|ar|dpr|e|fl|g|l|o|r|t|u|x|y|z)_"
)
IMAGE_EXTENSION_PATTERN = re.compile(r"\.(jpg|jpeg|png|webp|gif|avif)$", re.IGNORECASE)


class SegmentKind(Enum):
    VERSION = "version"
    TRANSFORMATION = "transformation"
    FILENAME = "filename"
    FOLDER = "folder"


def classify_segment(segment: str) -> SegmentKind:
    """Classify one path segment found after the upload marker."""
    if VERSION_PATTERN.fullmatch(segment):
        return SegmentKind.VERSION
    # Image filenames win over transformation prefixes (t_shirt.jpg);
    # dotted transformations such as dpr_2.0 carry no image extension
    if IMAGE_EXTENSION_PATTERN.search(segment):
        return SegmentKind.FILENAME
    if TRANSFORMATION_PATTERN.match(segment):
        return SegmentKind.TRANSFORMATION
    if "." in segment:
        return SegmentKind.FILENAME
    return SegmentKind.FOLDER


def extract_resource_key(url: str) -> Optional[str]:
    """
    Extract the Cloudinary resource key (public_id) from a delivery URL.

    Args:
        url: Absolute Cloudinary image URL

    Returns:
        str: Resource key such as "services/gallery/photo-1", or None when the
        URL is not a recognised Cloudinary upload URL.

    Example:
        >>> extract_resource_key(
        ...     "https://res.cloudinary.com/demo/image/upload/v1690000000/services/gallery/photo-1.JPG"
        ... )
        'services/gallery/photo-1'
    """
    if not isinstance(url, str):
        return None

    path = url.split("?", 1)[0].split("#", 1)[0]
    marker_index = path.find(UPLOAD_MARKER)
    if marker_index == -1:
        logger.debug(f"Not a Cloudinary upload URL: {url}")
        return None

    folders = []
    filename = None
    for segment in path[marker_index + len(UPLOAD_MARKER):].split("/"):
        if not segment:
            continue
        kind = classify_segment(segment)
        if kind in (SegmentKind.VERSION, SegmentKind.TRANSFORMATION):
            continue
        if kind is SegmentKind.FILENAME:
            filename = IMAGE_EXTENSION_PATTERN.sub("", segment)
            break
        folders.append(segment)

    if not filename:
        logger.debug(f"No filename segment in Cloudinary URL: {url}")
        return None

    return "/".join(folders + [filename])

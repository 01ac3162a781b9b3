from urllib.parse import urlparse

from models.track import Filetype

VIDEO_ID_LENGTH = 11
VIDEO_HOSTS = {"www.youtube.com", "youtu.be"}


def extract_video_id(src: str) -> str:
    """Extract a video identifier from a bare id or a video URL.

    Args:
        src: Source string, either an 11-character id or a URL.

    Returns:
        The identifier, or an empty string when none can be extracted.
    """
    if len(src) == VIDEO_ID_LENGTH and "." not in src:
        return src

    try:
        url = urlparse(src)
    except ValueError:
        return ""

    if url.hostname not in VIDEO_HOSTS:
        return ""

    if url.path == "/watch":
        query = "?" + url.query
        index = query.find("?v=")
        if index == -1:
            index = query.find("&v=")
        if index == -1:
            return ""
        return query[index + 3:index + 3 + VIDEO_ID_LENGTH]

    return url.path[1:1 + VIDEO_ID_LENGTH]


def classify(src: str) -> Filetype:
    """Return the backend family able to play ``src``."""
    if "soundcloud" in src:
        return Filetype.SC
    if extract_video_id(src):
        return Filetype.YT
    return Filetype.HTML

"""
Music video lookup on YouTube via yt-dlp.

Given "<track> <artist>", finds the top "official video" search result
without downloading anything.
"""

import logging
from typing import Any, Dict, Optional

import yt_dlp
from yt_dlp.utils import DownloadError

from novaplayer.models.music import VideoResult

logger = logging.getLogger(__name__)

_YDL_OPTS = {
    "quiet": True,
    "no_warnings": True,
    "skip_download": True,
    "extract_flat": True,
    "noplaylist": True,
}


def _thumbnail_url(entry: Dict[str, Any]) -> Optional[str]:
    thumbnails = entry.get("thumbnails") or []
    if thumbnails:
        # yt-dlp orders thumbnails from smallest to largest
        return thumbnails[-1].get("url")
    return entry.get("thumbnail")


class VideoService:
    """Service for finding a track's official video."""

    @staticmethod
    def find_official_video(query: str) -> Optional[VideoResult]:
        """
        Return the first YouTube result for "<query> official video".

        Returns None when the query is blank, nothing matches, or the
        search fails.
        """
        if not query or not query.strip():
            return None

        search_expr = f"ytsearch1:{query.strip()} official video"
        try:
            with yt_dlp.YoutubeDL(_YDL_OPTS) as ydl:
                info = ydl.extract_info(search_expr, download=False)
        except DownloadError as e:
            logger.error(f"Video search failed for {query!r}: {e}")
            return None

        entries = (info or {}).get("entries") or []
        entry = next(
            (e for e in entries if isinstance(e, dict) and e.get("id")), None
        )
        if entry is None:
            logger.debug(f"No video found for {query!r}")
            return None

        video_id = str(entry["id"])
        return VideoResult(
            video_id=video_id,
            title=entry.get("title") or "",
            url=entry.get("url")
            or f"https://www.youtube.com/watch?v={video_id}",
            thumbnail=_thumbnail_url(entry),
        )

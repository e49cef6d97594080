"""Embed markup for social media widgets."""

import html
import re
from typing import Optional, Union
from urllib.parse import urlparse

from services.dashboard_service.models import WidgetType

Dimension = Optional[Union[int, str]]

_YOUTUBE = re.compile(r"^.*((youtu\.be/)|(v/)|(/u/\w/)|(embed/)|(watch\?))\??v?=?([^#&?]*).*")
_TWITCH_VIDEO = re.compile(r"twitch\.tv/videos/(\d+)")
_TWITCH_CHANNEL = re.compile(r"twitch\.tv/([a-zA-Z0-9_]+)")
_SPOTIFY = re.compile(r"spotify\.com/(track|album|playlist|artist)/([a-zA-Z0-9]+)")
_TIKTOK = re.compile(r"tiktok\.com/@[^/]+/video/(\d+)")


def youtube_video_id(url: str) -> Optional[str]:
    match = _YOUTUBE.match(url)
    if match and len(match.group(7)) == 11:
        return match.group(7)
    return None


def twitch_target(url: str) -> Optional[tuple[str, str]]:
    """("video", id) or ("channel", name)."""
    video = _TWITCH_VIDEO.search(url)
    if video:
        return "video", video.group(1)
    channel = _TWITCH_CHANNEL.search(url)
    if channel:
        return "channel", channel.group(1)
    return None


def spotify_target(url: str) -> Optional[tuple[str, str]]:
    match = _SPOTIFY.search(url)
    return (match.group(1), match.group(2)) if match else None


def tiktok_video_id(url: str) -> Optional[str]:
    match = _TIKTOK.search(url)
    return match.group(1) if match else None


def generate_embed_code(
    widget_type: Union[WidgetType, str],
    url: str,
    app_url: str = "",
    width: Dimension = None,
    height: Dimension = None,
    autoplay: bool = False,
    loop: bool = False,
) -> str:
    """
    Build the iframe/blockquote snippet for a widget URL.

    Returns an empty string when the URL cannot be recognised for the type.
    """
    width = width or "100%"
    height = height or "315"
    safe_url = html.escape(url, quote=True)

    kind = WidgetType(widget_type)
    if kind == WidgetType.YOUTUBE:
        video_id = youtube_video_id(url)
        if not video_id:
            return ""
        params = []
        if autoplay:
            params.append("autoplay=1")
        if loop:
            params.append(f"loop=1&playlist={video_id}")
        query = f"?{'&'.join(params)}" if params else ""
        return (
            f'<iframe width="{width}" height="{height}" '
            f'src="https://www.youtube.com/embed/{video_id}{query}" frameborder="0" '
            'allow="accelerometer; autoplay; clipboard-write; encrypted-media; gyroscope; '
            'picture-in-picture" allowfullscreen></iframe>'
        )

    if kind == WidgetType.TWITCH:
        target = twitch_target(url)
        if target is None:
            return ""
        target_kind, target_id = target
        parent = urlparse(app_url).hostname or "localhost"
        return (
            f'<iframe src="https://player.twitch.tv/?{target_kind}={target_id}&parent={parent}'
            f'&autoplay={"true" if autoplay else "false"}" frameborder="0" allowfullscreen="true" '
            f'scrolling="no" height="{height}" width="{width}"></iframe>'
        )

    if kind == WidgetType.SPOTIFY:
        target = spotify_target(url)
        if target is None:
            return ""
        target_kind, target_id = target
        return (
            f'<iframe src="https://open.spotify.com/embed/{target_kind}/{target_id}" '
            f'width="{width}" height="{height}" frameborder="0" allowtransparency="true" '
            'allow="encrypted-media"></iframe>'
        )

    if kind == WidgetType.INSTAGRAM:
        return (
            f'<blockquote class="instagram-media" data-instgrm-permalink="{safe_url}" '
            f'data-instgrm-version="14" style="width:{width};"></blockquote>'
            '<script async src="//www.instagram.com/embed.js"></script>'
        )

    if kind == WidgetType.TWITTER:
        return (
            f'<blockquote class="twitter-tweet" data-width="{width}"><a href="{safe_url}"></a>'
            '</blockquote><script async src="https://platform.twitter.com/widgets.js" '
            'charset="utf-8"></script>'
        )

    video_id = tiktok_video_id(url)
    if not video_id:
        return ""
    return (
        f'<blockquote class="tiktok-embed" cite="{safe_url}" data-video-id="{video_id}" '
        f'style="width:{width}; height:{height};"><section></section></blockquote>'
        '<script async src="https://www.tiktok.com/embed.js"></script>'
    )

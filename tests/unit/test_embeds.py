import pytest

from services.dashboard_service.services.embeds import (
    generate_embed_code,
    twitch_target,
    youtube_video_id,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "url",
    [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://www.youtube.com/embed/dQw4w9WgXcQ",
    ],
)
def test_youtube_video_id(url):
    assert youtube_video_id(url) == "dQw4w9WgXcQ"


@pytest.mark.unit
def test_youtube_rejects_short_ids():
    assert youtube_video_id("https://www.youtube.com/watch?v=abc") is None
    assert generate_embed_code("youtube", "https://www.youtube.com/watch?v=abc") == ""


@pytest.mark.unit
def test_youtube_embed_options():
    code = generate_embed_code(
        "youtube", "https://youtu.be/dQw4w9WgXcQ", autoplay=True, loop=True, height=400
    )
    assert 'src="https://www.youtube.com/embed/dQw4w9WgXcQ?autoplay=1&loop=1&playlist=dQw4w9WgXcQ"' in code
    assert 'width="100%"' in code
    assert 'height="400"' in code


@pytest.mark.unit
def test_twitch_video_urls_are_not_read_as_channels():
    assert twitch_target("https://www.twitch.tv/videos/123456") == ("video", "123456")
    assert twitch_target("https://www.twitch.tv/somechannel") == ("channel", "somechannel")


@pytest.mark.unit
def test_twitch_parent_comes_from_app_url():
    code = generate_embed_code(
        "twitch", "https://twitch.tv/somechannel", app_url="https://shop.example.com/admin"
    )
    assert "channel=somechannel&parent=shop.example.com&autoplay=false" in code


@pytest.mark.unit
def test_spotify_and_tiktok():
    spotify = generate_embed_code("spotify", "https://open.spotify.com/playlist/37i9dQZF1DX")
    assert "https://open.spotify.com/embed/playlist/37i9dQZF1DX" in spotify

    tiktok = generate_embed_code("tiktok", "https://www.tiktok.com/@shop/video/7123456789")
    assert 'data-video-id="7123456789"' in tiktok
    assert generate_embed_code("tiktok", "https://www.tiktok.com/@shop") == ""


@pytest.mark.unit
def test_permalinks_are_escaped():
    code = generate_embed_code("twitter", 'https://x.com/a"><script>')
    assert "<script>" not in code.split("</blockquote>")[0]
    assert "&quot;&gt;&lt;script&gt;" in code

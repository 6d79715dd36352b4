import pytest
from unittest.mock import MagicMock


@pytest.fixture(autouse=True)
def oauth_env(monkeypatch):
    monkeypatch.setenv("OAUTH_CLIENT_ID", "client-id.apps.googleusercontent.com")
    monkeypatch.setenv("OAUTH_CLIENT_SECRET", "client-secret")
    monkeypatch.setenv("OAUTH_REFRESH_TOKEN", "1//refresh-token")
    monkeypatch.delenv("PLAYLIST_MODE", raising=False)
    monkeypatch.delenv("PLAYLIST_ID", raising=False)


@pytest.fixture
def mock_youtube():
    youtube = MagicMock()
    youtube.channels().list().execute.return_value = {
        "items": [{
            "id": "UC123",
            "contentDetails": {"relatedPlaylists": {"watchLater": "WL", "uploads": "UU123"}}
        }]
    }
    youtube.playlistItems().list().execute.return_value = {"items": []}
    return youtube


@pytest.fixture
def make_item():
    return build_item


def build_item(video_id, published_at, title="Video"):
    """Builds a raw playlistItems resource the way the API returns it."""
    item = {
        "snippet": {
            "title": title,
            "publishedAt": published_at,
            "resourceId": {"kind": "youtube#video"}
        },
        "contentDetails": {}
    }
    if video_id is not None:
        item["snippet"]["resourceId"]["videoId"] = video_id
        item["contentDetails"]["videoId"] = video_id
    return item

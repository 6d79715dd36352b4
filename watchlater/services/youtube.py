import logging
from datetime import datetime
from typing import List, Optional
from googleapiclient.discovery import build
from google.oauth2.credentials import Credentials
from .utils import cutoff_for, parse_published_at, resolve_days_back, watch_url
from ..config import settings
from ..models import Err, ListingStrategy, OAuthCredentials, Ok, PlaylistItem, Result

logger = logging.getLogger(__name__)


def get_youtube_client(credentials: OAuthCredentials):
    """Builds a YouTube Data API client that refreshes its own access token."""
    creds = Credentials(
        token=None,
        refresh_token=credentials.refresh_token,
        token_uri=settings.TOKEN_URI,
        client_id=credentials.client_id,
        client_secret=credentials.client_secret,
        scopes=settings.SCOPES
    )
    return build('youtube', 'v3', credentials=creds, cache_discovery=False)


def execute(request, label: str) -> Result:
    """Runs a single API request once, turning any failure into an Err."""
    try:
        return Ok(value=request.execute(num_retries=0))
    except Exception as e:
        logger.error(f"YouTube API {label} failed: {e}")
        return Err(message=str(e) or e.__class__.__name__)


def to_playlist_item(raw: dict) -> PlaylistItem:
    snippet = raw.get("snippet") or {}
    video_id = (snippet.get("resourceId") or {}).get("videoId")
    if not video_id:
        video_id = (raw.get("contentDetails") or {}).get("videoId")
    return PlaylistItem(
        video_id=video_id or None,
        title=snippet.get("title"),
        added_at=parse_published_at(snippet.get("publishedAt"))
    )


def find_watch_later_playlist_id(youtube) -> Result:
    """Looks up the authenticated account's Watch Later playlist ID."""
    request = youtube.channels().list(
        part="contentDetails",
        mine=True
    )
    result = execute(request, "channel lookup")
    if not result.ok:
        return result

    items = result.value.get("items") or []
    playlist_id = None
    if items:
        playlist_id = (
            (items[0].get("contentDetails") or {})
            .get("relatedPlaylists", {})
            .get("watchLater")
        )
    if not playlist_id:
        return Err(message="Could not find Watch Later playlist")
    return Ok(value=playlist_id)


def verify_auth(youtube) -> Result:
    """Cheap authenticated call made before listing a configured playlist."""
    request = youtube.channels().list(
        part="id",
        mine=True
    )
    result = execute(request, "auth check")
    if not result.ok:
        return result

    items = result.value.get("items") or []
    if not items:
        return Err(message="Authenticated account has no YouTube channel")
    channel_id = items[0].get("id")
    logger.info(f"Auth check passed for channel {channel_id}")
    return Ok(value=channel_id)


def list_playlist_items(youtube, playlist_id: str, paginate: bool = False, verbose: bool = False) -> Result:
    """Fetches playlist items, either the first page only or every page.

    A failure on any page fails the whole listing; items already fetched are
    dropped.
    """
    items = []
    next_page_token = None
    page = 0

    while True:
        page += 1
        request = youtube.playlistItems().list(
            part="snippet,contentDetails",
            playlistId=playlist_id,
            maxResults=settings.PAGE_SIZE,
            pageToken=next_page_token
        )
        result = execute(request, f"playlist items page {page}")
        if not result.ok:
            return result

        page_items = result.value.get("items") or []
        items.extend(page_items)
        next_page_token = result.value.get("nextPageToken")
        if verbose:
            logger.info(f"Page {page}: {len(page_items)} items, next page token: {next_page_token}")

        if not paginate or not next_page_token:
            break

    return Ok(value=items)


def select_recent_urls(items: List[PlaylistItem], days_back: float, now: Optional[datetime] = None, verbose: bool = False) -> List[str]:
    """Keeps items added at or after the cutoff and maps them to watch URLs."""
    cutoff = cutoff_for(days_back, now)
    if verbose:
        logger.info(f"Cutoff: {cutoff.isoformat()} ({days_back} days back), {len(items)} items to check")

    urls = []
    for item in items:
        url = watch_url(item.video_id)
        recent = item.added_at is not None and item.added_at >= cutoff
        if verbose:
            logger.info(f"Item {item.video_id} '{item.title}' added {item.added_at}: {'kept' if recent and url else 'skipped'}")
        if recent and url:
            urls.append(url)
    return urls


def fetch_recent_urls(youtube, strategy: ListingStrategy, requested_days_back=None, now: Optional[datetime] = None) -> Result:
    """Runs the configured strategy end to end and returns the list of URLs."""
    if strategy.fixed_days_back is not None:
        days_back = strategy.fixed_days_back
    else:
        days_back = resolve_days_back(requested_days_back, settings.DEFAULT_DAYS_BACK)

    if strategy.discover_watch_later:
        lookup = find_watch_later_playlist_id(youtube)
        if not lookup.ok:
            return lookup
        playlist_id = lookup.value
    elif strategy.playlist_id:
        playlist_id = strategy.playlist_id
    else:
        return Err(message="No playlist configured")

    if strategy.verify_auth:
        check = verify_auth(youtube)
        if not check.ok:
            return check

    listing = list_playlist_items(youtube, playlist_id, paginate=strategy.paginate, verbose=strategy.verbose)
    if not listing.ok:
        return listing

    items = [to_playlist_item(raw) for raw in listing.value]
    if strategy.verbose:
        logger.info(f"Fetched {len(items)} items from playlist {playlist_id}")

    return Ok(value=select_recent_urls(items, days_back, now, verbose=strategy.verbose))

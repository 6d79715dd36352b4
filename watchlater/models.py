from datetime import datetime
from typing import Generic, Optional, TypeVar, Union
from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class OAuthCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: str
    refresh_token: Optional[str] = None


class PlaylistItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    video_id: Optional[str] = None
    title: Optional[str] = None
    added_at: Optional[datetime] = None


class ListingStrategy(BaseModel):
    """How the tool finds its playlist and which lookback window it applies.

    ``discover`` resolves the account's Watch Later playlist and honours the
    caller's ``daysBack``. ``fixed_playlist`` reads a configured playlist,
    walks every page and always applies ``fixed_days_back``.
    """
    model_config = ConfigDict(frozen=True)

    discover_watch_later: bool = True
    playlist_id: Optional[str] = None
    fixed_days_back: Optional[float] = None
    paginate: bool = False
    verify_auth: bool = False
    verbose: bool = False

    @classmethod
    def discover(cls) -> "ListingStrategy":
        return cls()

    @classmethod
    def fixed_playlist(cls, playlist_id: str, days_back: float = 7) -> "ListingStrategy":
        return cls(
            discover_watch_later=False,
            playlist_id=playlist_id,
            fixed_days_back=days_back,
            paginate=True,
            verify_auth=True,
            verbose=True
        )


class Ok(BaseModel, Generic[T]):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: T

    @property
    def ok(self) -> bool:
        return True


class Err(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]

"""Episode models for raw stream records and aggregated episodes."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DecodedData(BaseModel):
    """Opaque payload attached to a stream record; only ``id`` is required."""

    model_config = ConfigDict(extra="allow")

    id: Union[int, str] = Field(..., description="Episode identifier")


class RawRecord(BaseModel):
    """One server/episode combination as stored in a stream file."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    anime_title: str = Field(default="", description="Anime series title")
    episode_title: str = Field(default="", description="Episode title, usually containing the anime title")
    episode_link: str = Field(default="", description="Episode page URL containing an episode/<slug>/ segment")
    episode_date: str = Field(default="", description="Release date as published, unparsed")
    decoded_data: DecodedData = Field(..., description="Decoded player payload")
    server: str = Field(default="", description="Streaming server name")
    quality: str = Field(default="", description="Stream quality label")
    stream_url: str = Field(default="", description="Third-party embed URL")
    is_default: bool = Field(default=False, description="Whether this server is preselected in the player")
    timestamp: Any = Field(default=None, description="Scrape time or other freshness marker")

    @field_validator("anime_title", "episode_title", "episode_link", "episode_date",
                     "server", "quality", "stream_url", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("is_default", mode="before")
    @classmethod
    def _none_to_false(cls, value: Any) -> Any:
        return False if value is None else value


class StreamServer(BaseModel):
    """A playback source for an episode."""

    server: str = Field(default="", description="Streaming server name")
    quality: str = Field(default="", description="Stream quality label")
    embed: str = Field(default="", description="Embed URL loaded in the player iframe")
    default: bool = Field(default=False, description="Preselected server")

    @property
    def label(self) -> str:
        return f"{self.server} - {self.quality}"


class AggregatedEpisode(BaseModel):
    """An episode with all of its servers, merged from every matching raw record."""

    model_config = ConfigDict(populate_by_name=True)

    id: Union[int, str] = Field(..., description="Identifier of the first record seen")
    title: str = Field(..., description="Anime title")
    episode: str = Field(default="", description="Episode title without the anime title")
    episode_number: int = Field(default=0, alias="episodeNumber", description="Parsed 'Episode N' number, 0 if absent")
    slug: str = Field(default="", description="Slug parsed from the episode link")
    date: str = Field(default="", description="Release date of the first record seen")
    code: Dict[str, Any] = Field(default_factory=dict, description="Decoded payload of the first record seen")
    servers: List[StreamServer] = Field(default_factory=list, description="Servers in the order they were read")
    timestamp: Any = Field(default=None, description="Timestamp of the first record seen")

    @property
    def display_title(self) -> str:
        return f"{self.title} - {self.episode}"

    @property
    def link_identifier(self) -> str:
        """Identifier used in player links: the slug, or the id when no slug was parsed."""
        return self.slug or str(self.id)

    def default_server(self) -> Optional[StreamServer]:
        """Return the server flagged as default, else the first one."""
        for server in self.servers:
            if server.default:
                return server
        return self.servers[0] if self.servers else None

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Navigation(BaseModel):
    """Neighbouring episodes of the same series."""

    previous: Optional[AggregatedEpisode] = None
    next: Optional[AggregatedEpisode] = None

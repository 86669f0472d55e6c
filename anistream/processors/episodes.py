"""Episode aggregation, lookup and series navigation."""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..models.episode import AggregatedEpisode, Navigation, RawRecord, StreamServer
from ..utils.normalization import extract_episode_number, extract_slug, strip_anime_title

logger = logging.getLogger(__name__)

EpisodeKey = Tuple[str, str]


def _server_from_record(record: RawRecord) -> StreamServer:
    return StreamServer(
        server=record.server,
        quality=record.quality,
        embed=record.stream_url,
        default=record.is_default,
    )


def _episode_from_record(record: RawRecord, servers: List[StreamServer]) -> AggregatedEpisode:
    return AggregatedEpisode(
        id=record.decoded_data.id,
        title=record.anime_title,
        episode=strip_anime_title(record.episode_title, record.anime_title),
        episode_number=extract_episode_number(record.episode_title),
        slug=extract_slug(record.episode_link),
        date=record.episode_date,
        code=record.decoded_data.model_dump(mode="json"),
        servers=servers,
        timestamp=record.timestamp,
    )


def aggregate(records: Iterable[RawRecord]) -> List[AggregatedEpisode]:
    """
    Fold raw stream records into one episode per (anime title, episode title).

    The first record seen for a key fixes the episode's id, slug, date and
    timestamp. Every record contributes one server, in input order. Episodes
    are returned in the order their key was first seen.

    Args:
        records: Raw records, files in filename order and records in file order

    Returns:
        List of aggregated episodes
    """
    firsts: Dict[EpisodeKey, RawRecord] = {}
    servers: Dict[EpisodeKey, List[StreamServer]] = {}
    record_count = 0

    for record in records:
        record_count += 1
        key = (record.anime_title, record.episode_title)
        if key not in firsts:
            firsts[key] = record
            servers[key] = []
        servers[key].append(_server_from_record(record))

    episodes = [_episode_from_record(first, servers[key]) for key, first in firsts.items()]
    logger.debug("Aggregated %d records into %d episodes", record_count, len(episodes))
    return episodes


def locate(identifier: str, episodes: Sequence[AggregatedEpisode]) -> Optional[AggregatedEpisode]:
    """
    Find an episode by id, falling back to slug.

    Ids are compared in their string form. The slug pass only runs when no id
    matched, and the first match in ``episodes`` order wins.
    """
    for episode in episodes:
        if str(episode.id) == identifier:
            return episode

    if not identifier:
        return None

    for episode in episodes:
        if episode.slug == identifier:
            return episode

    return None


def group_by_title(episodes: Sequence[AggregatedEpisode]) -> Dict[str, List[AggregatedEpisode]]:
    """Group episodes by anime title, each group sorted by episode number.

    The sort is stable, so episodes sharing a number keep their input order.
    """
    groups: Dict[str, List[AggregatedEpisode]] = {}
    for episode in episodes:
        groups.setdefault(episode.title, []).append(episode)

    return {
        title: sorted(group, key=lambda e: e.episode_number)
        for title, group in groups.items()
    }


def navigate(target: AggregatedEpisode, episodes: Sequence[AggregatedEpisode]) -> Navigation:
    """Return the previous and next episodes of ``target`` within its series."""
    series = group_by_title(episodes).get(target.title, [])

    index = next((i for i, episode in enumerate(series) if episode.id == target.id), None)
    if index is None:
        return Navigation()

    return Navigation(
        previous=series[index - 1] if index > 0 else None,
        next=series[index + 1] if index < len(series) - 1 else None,
    )

"""Parsing helpers for episode titles and links."""

import re

EPISODE_NUMBER_PATTERN = re.compile(r"Episode ([0-9]+)", re.IGNORECASE)
EPISODE_SLUG_PATTERN = re.compile(r"episode/([^/]+)/")


def extract_episode_number(episode_title: str) -> int:
    """Return N from the first 'Episode N' in the title, or 0."""
    match = EPISODE_NUMBER_PATTERN.search(episode_title or "")
    return int(match.group(1)) if match else 0


def extract_slug(episode_link: str) -> str:
    """Return the path segment following 'episode/' in a link, or an empty string."""
    match = EPISODE_SLUG_PATTERN.search(episode_link or "")
    return match.group(1) if match else ""


def strip_anime_title(episode_title: str, anime_title: str) -> str:
    """Remove the first occurrence of the anime title from the episode title."""
    episode_title = episode_title or ""
    if anime_title:
        episode_title = episode_title.replace(anime_title, "", 1)
    return episode_title.strip()

from __future__ import annotations

import json

import pytest


def make_record(
    anime: str = "X",
    number: int | None = 1,
    *,
    record_id=42,
    slug: str | None = None,
    server: str = "A",
    quality: str = "720p",
    stream_url: str = "u1",
    is_default: bool | None = None,
    date: str = "2024-01-01",
    timestamp=None,
) -> dict:
    episode_title = f"{anime} Episode {number}" if number is not None else f"{anime} Special"
    slug = slug if slug is not None else f"{anime.lower()}-{number}"
    record = {
        "anime_title": anime,
        "episode_title": episode_title,
        "episode_link": f"https://example.test/episode/{slug}/",
        "episode_date": date,
        "decoded_data": {"id": record_id},
        "server": server,
        "quality": quality,
        "stream_url": stream_url,
        "timestamp": timestamp,
    }
    if is_default is not None:
        record["is_default"] = is_default
    return record


@pytest.fixture
def stream_dir(tmp_path):
    directory = tmp_path / "stream"
    directory.mkdir()
    return directory


@pytest.fixture
def write_stream_file(stream_dir):
    def _write(name: str, content) -> None:
        path = stream_dir / name
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content), encoding="utf-8")
        return path

    return _write

from __future__ import annotations

import pytest
from conftest import make_record

from anistream.config import ServerConfig
from anistream.server import create_app


@pytest.fixture
def client(stream_dir):
    app = create_app(ServerConfig(stream_dir=stream_dir))
    app.config["TESTING"] = True
    return app.test_client()


@pytest.fixture
def twelve_episodes(write_stream_file):
    for number in range(1, 13):
        write_stream_file(
            f"{number:09d}.json",
            [
                make_record("X", number, record_id=100 + number, server="A"),
                make_record("X", number, record_id=100 + number, server="B", stream_url=f"b{number}", is_default=True),
            ],
        )


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "OK", "message": "Server is running"}


def test_unknown_route_is_plain_text_404(client) -> None:
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.mimetype == "text/plain"
    assert response.get_data(as_text=True) == "Nothing found here"


def test_index_lists_first_page(client, twelve_episodes) -> None:
    response = client.get("/")
    body = response.get_data(as_text=True)

    assert response.status_code == 200
    assert "X - Episode 1<" in body
    assert "X - Episode 5<" in body
    assert "X - Episode 6<" not in body
    assert "Page 1 of 3" in body
    assert "/play?episode=x-1" in body
    assert "/play?episode=101" in body


@pytest.mark.parametrize("page", ["1000", "9" * 5000])
def test_index_clamps_page(client, twelve_episodes, page) -> None:
    response = client.get(f"/?s={page}")
    body = response.get_data(as_text=True)

    assert response.status_code == 200
    assert "Page 3 of 3" in body
    assert "X - Episode 11<" in body
    assert "X - Episode 12<" in body
    assert "X - Episode 10<" not in body


@pytest.mark.parametrize("page", ["0", "abc", "-3"])
def test_index_rejects_invalid_page(client, page) -> None:
    response = client.get(f"/?s={page}")
    assert response.status_code == 400
    assert response.get_json() == {"error": "Invalid page number. Page must be a positive integer."}


def test_index_rejects_invalid_page_before_reading_files(tmp_path) -> None:
    app = create_app(ServerConfig(stream_dir=tmp_path / "missing"))
    response = app.test_client().get("/?s=abc")
    assert response.status_code == 400


def test_index_play_redirects_to_player(client) -> None:
    response = client.get("/?play=x-1")
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/play?episode=x-1")


def test_index_directory_failure_is_500(tmp_path) -> None:
    app = create_app(ServerConfig(stream_dir=tmp_path / "missing"))
    response = app.test_client().get("/")
    assert response.status_code == 500
    assert response.get_data(as_text=True) == "Internal server error"


def test_play_without_episode_redirects_home(client) -> None:
    response = client.get("/play")
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/")


def test_play_unknown_episode(client, twelve_episodes) -> None:
    response = client.get("/play?episode=missing")
    assert response.status_code == 404
    assert response.get_data(as_text=True) == "Episode not found"


def test_play_renders_player_with_navigation(client, twelve_episodes) -> None:
    response = client.get("/play?episode=x-5")
    body = response.get_data(as_text=True)

    assert response.status_code == 200
    assert "<title>X - Episode 5</title>" in body
    assert 'src="b5"' in body
    assert 'data-embed="u1"' in body
    assert 'data-embed="b5"' in body
    assert 'data-href="/play?episode=x-4"' in body
    assert 'data-href="/play?episode=x-6"' in body


def test_play_first_episode_has_no_previous(client, twelve_episodes) -> None:
    body = client.get("/play?episode=101").get_data(as_text=True)

    assert '<button class="nav-btn prev-btn" disabled>' in body
    assert 'data-href="/play?episode=x-2"' in body


def test_play_escapes_titles(client, write_stream_file) -> None:
    write_stream_file("000000001.json", make_record("<b>X</b>", 1, slug="x-1"))
    body = client.get("/play?episode=x-1").get_data(as_text=True)
    assert "<b>X</b>" not in body
    assert "&lt;b&gt;X&lt;/b&gt;" in body


def test_api_all(client, twelve_episodes) -> None:
    response = client.get("/api/all")
    data = response.get_json()

    assert response.status_code == 200
    assert len(data) == 12
    assert data[0]["id"] == 101
    assert data[0]["episodeNumber"] == 1
    assert [s["server"] for s in data[0]["servers"]] == ["A", "B"]


def test_api_all_directory_failure(tmp_path) -> None:
    app = create_app(ServerConfig(stream_dir=tmp_path / "missing"))
    response = app.test_client().get("/api/all")
    assert response.status_code == 500
    assert response.get_json() == {"error": "Failed to read JSON files directory"}


def test_api_episode_by_id_and_slug(client, twelve_episodes) -> None:
    by_id = client.get("/api/episode/103").get_json()
    by_slug = client.get("/api/episode/x-3").get_json()
    assert by_id == by_slug
    assert by_id["slug"] == "x-3"


def test_api_episode_not_found(client, twelve_episodes) -> None:
    response = client.get("/api/episode/nope")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Episode not found"}


def test_static_assets_are_served(client) -> None:
    response = client.get("/static/player.js")
    assert response.status_code == 200
    response.close()


@pytest.mark.parametrize("method, path", [("post", "/health"), ("post", "/"), ("delete", "/api/all")])
def test_unsupported_method_is_plain_text_404(client, method, path) -> None:
    response = getattr(client, method)(path)
    assert response.status_code == 404
    assert response.mimetype == "text/plain"
    assert response.get_data(as_text=True) == "Nothing found here"


def test_play_directory_failure_is_500(tmp_path) -> None:
    app = create_app(ServerConfig(stream_dir=tmp_path / "missing"))
    response = app.test_client().get("/play?episode=x-1")
    assert response.status_code == 500
    assert response.mimetype == "text/plain"
    assert response.get_data(as_text=True) == "Internal server error"


def test_api_episode_directory_failure(tmp_path) -> None:
    app = create_app(ServerConfig(stream_dir=tmp_path / "missing"))
    response = app.test_client().get("/api/episode/x-1")
    assert response.status_code == 500
    assert response.get_json() == {"error": "Failed to read JSON files directory"}

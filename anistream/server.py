"""Flask server for browsing aggregated episodes and playing their streams."""

import logging
from typing import Optional

from flask import Flask, Response, jsonify, redirect, render_template, request, send_from_directory, url_for

from .config import ServerConfig
from .constants.paths import STATIC_DIR, TEMPLATES_DIR
from .errors import InvalidPageError, StreamDirectoryError
from .processors.episodes import locate, navigate
from .utils.pagination import paginate, parse_page
from .utils.stream_files import StreamStore

logger = logging.getLogger(__name__)

INVALID_PAGE_MESSAGE = "Invalid page number. Page must be a positive integer."
NOT_FOUND_MESSAGE = "Nothing found here"
EPISODE_NOT_FOUND_MESSAGE = "Episode not found"
INTERNAL_ERROR_MESSAGE = "Internal server error"


def _text(body: str, status: int) -> Response:
    return Response(body, status=status, mimetype="text/plain")


def create_app(config: Optional[ServerConfig] = None) -> Flask:
    """Build the Flask app serving the stream directory named in ``config``."""
    config = config or ServerConfig.from_env()
    store = StreamStore(config.stream_dir, read_workers=config.read_workers, cache=config.cache)

    app = Flask(__name__, static_folder=None, template_folder=str(TEMPLATES_DIR))
    app.json.sort_keys = False
    app.config["ANISTREAM"] = config
    app.extensions["anistream.store"] = store

    @app.route("/static/<path:filename>")
    def serve_static(filename: str) -> Response:
        """Serve static files (JS, CSS)."""
        return send_from_directory(STATIC_DIR, filename)

    @app.route("/")
    def index():
        """Paginated episode listing; ``?play=`` redirects to the player."""
        play = request.args.get("play")
        if play:
            return redirect(url_for("play", episode=play))

        try:
            page_number = parse_page(request.args.get("s"))
        except InvalidPageError:
            return jsonify({"error": INVALID_PAGE_MESSAGE}), 400

        try:
            episodes = store.episodes()
            page = paginate(episodes, page_number, config.items_per_page)
            return render_template("index.html", page=page)
        except Exception as e:
            logger.error("Server error: %s", e, exc_info=True)
            return _text(INTERNAL_ERROR_MESSAGE, 500)

    @app.route("/play")
    def play():
        """Video player page for one episode."""
        identifier = request.args.get("episode")
        if not identifier:
            return redirect(url_for("index"))

        try:
            episodes = store.episodes()
            episode = locate(identifier, episodes)
            if episode is None:
                return _text(EPISODE_NOT_FOUND_MESSAGE, 404)

            navigation = navigate(episode, episodes)
            return render_template(
                "player.html",
                episode=episode,
                navigation=navigation,
                active_server=episode.default_server(),
            )
        except Exception as e:
            logger.error("Player error: %s", e, exc_info=True)
            return _text(INTERNAL_ERROR_MESSAGE, 500)

    @app.route("/api/all")
    def api_all():
        """All aggregated episodes as JSON."""
        try:
            episodes = store.episodes()
        except StreamDirectoryError as e:
            return jsonify({"error": str(e)}), 500
        except Exception as e:
            logger.error("API error: %s", e, exc_info=True)
            return jsonify({"error": INTERNAL_ERROR_MESSAGE}), 500

        return jsonify([episode.to_json() for episode in episodes])

    @app.route("/api/episode/<path:identifier>")
    def api_episode(identifier: str):
        """One aggregated episode, looked up by id or slug."""
        try:
            episode = locate(identifier, store.episodes())
        except StreamDirectoryError as e:
            return jsonify({"error": str(e)}), 500
        except Exception as e:
            logger.error("API error: %s", e, exc_info=True)
            return jsonify({"error": INTERNAL_ERROR_MESSAGE}), 500

        if episode is None:
            return jsonify({"error": EPISODE_NOT_FOUND_MESSAGE}), 404
        return jsonify(episode.to_json())

    @app.route("/health")
    def health():
        return jsonify({"status": "OK", "message": "Server is running"})

    @app.errorhandler(404)
    def not_found(_error):
        return _text(NOT_FOUND_MESSAGE, 404)

    @app.errorhandler(405)
    def method_not_allowed(_error):
        return _text(NOT_FOUND_MESSAGE, 404)

    return app


def run_server(config: Optional[ServerConfig] = None, debug: bool = False) -> None:
    """Run the Flask development server."""
    config = config or ServerConfig.from_env()
    app = create_app(config)
    logger.info("Serving %s at http://localhost:%d/", config.stream_dir, config.port)
    app.run(host=config.host, port=config.port, debug=debug)

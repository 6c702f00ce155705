import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify

from src.db import mongo
from src.editor import get_blueprint

DEFAULT_PORT = int(os.environ.get("FLASK_PORT", "5000"))
DEFAULT_HOST = os.environ.get("FLASK_HOST", "127.0.0.1")


def create_app(config: dict | None = None) -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    app.config["EDITOR_UPLOAD_FOLDER"] = os.environ.get(
        "EDITOR_UPLOAD_FOLDER",
        str(Path(app.instance_path) / "uploads"),
    )
    app.config["EDITOR_CLICK_QUIESCENCE_MS"] = float(os.environ.get("EDITOR_CLICK_QUIESCENCE_MS", "300"))
    app.config["EDITOR_SESSION_IDLE_SECONDS"] = float(os.environ.get("EDITOR_SESSION_IDLE_SECONDS", "3600"))
    # single-image uploads are capped at 5 MiB; batches of documents may be larger
    app.config["MAX_CONTENT_LENGTH"] = int(os.environ.get("EDITOR_MAX_REQUEST_BYTES", str(64 * 1024 * 1024)))
    if config:
        app.config.update(config)

    app.register_blueprint(get_blueprint())

    @app.route("/health")
    def health():
        return jsonify({"status": "ok", "mongo": mongo.ping_db()})

    return app


if __name__ == "__main__":
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    app = create_app()
    app.run(host=DEFAULT_HOST, port=DEFAULT_PORT, debug=True)

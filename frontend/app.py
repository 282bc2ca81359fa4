# frontend/app.py

import logging

from flask import Flask

from backend.config import load_config
from backend.storage import GameStore
from frontend.api import api_blueprint

logger = logging.getLogger(__name__)


def create_app(config=None, store=None):
    config = config or load_config()

    app = Flask(__name__)
    app.config["MINESWEEPER"] = config
    app.config["GAME_STORE"] = store or GameStore(config["storage"]["path"])
    app.register_blueprint(api_blueprint, url_prefix="/api")
    return app


def main():
    import argparse

    parser = argparse.ArgumentParser()
    parser.add_argument("--port", type=int, default=5000, help="Port to run the server on")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Host IP")
    parser.add_argument("--config", type=str, default=None, help="Path to the game config YAML")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    args = parser.parse_args()

    config = load_config(args.config)
    logging.basicConfig(
        level=getattr(logging, str(config["logging"]["level"]).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(config)
    logger.info("Running on http://%s:%d/", args.host, args.port)
    app.run(debug=args.debug, host=args.host, port=args.port)


if __name__ == "__main__":
    main()

from flask import Flask
from flask_cors import CORS
import logging

from core.components import build_components
from core.config import LOG_LEVEL, SECRET_KEY
from routes.notes_api import notes_bp
from routes.reminders_api import reminders_bp
from routes.verses_api import verses_bp
from utils.db import Database


def create_app(db_path=None, fetch=None, notifier=None, **component_options) -> Flask:
    """
    Build the Rooted API app.

    fetch and notifier replace the Bible API client and the local
    notification queue (tests pass fakes).
    """
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.config["SECRET_KEY"] = SECRET_KEY

    CORS(app, supports_credentials=True)

    db = Database(db_path)
    db.init_schema()
    app.extensions["rooted"] = build_components(
        db, fetch=fetch, notifier=notifier, **component_options
    )

    # Register blueprints
    app.register_blueprint(verses_bp)
    app.register_blueprint(reminders_bp)
    app.register_blueprint(notes_bp)

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="127.0.0.1", port=5055)

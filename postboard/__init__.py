import logging

from flask import Flask

from postboard.config import Config
from postboard.db import db
from postboard.extensions.extensions import jwt, ma
from postboard.routes.post_routes import post_bp


def create_app(config_overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    logging.basicConfig(level=app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    ma.init_app(app)
    jwt.init_app(app)
    app.register_blueprint(post_bp, url_prefix="/api")

    with app.app_context():
        db.create_all()

    return app

# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Flask

from remember_me.infrastructure.container import Container, container
from remember_me.infrastructure.db import init_db
from remember_me.shared.errors import register_error_handler
from remember_me.shared.logging import bind_flask, logger, setup_logging


def create_app(app_container: Container | None = None) -> Flask:
    app_container = app_container or container
    config = app_container.config

    setup_logging(debug_mode=config.debug_logging)
    init_db()

    app = Flask(__name__)
    app.config.update(SECRET_KEY=config.secret_key)

    bind_flask(app)
    register_error_handler(app, debug_mode=config.debug_logging)
    app_container.remember_me.init_app(app)
    app.register_blueprint(app_container.auth_controller.as_blueprint())

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Cache-Control", "no-store")
        return resp

    logger.info("Flask app initialized")
    return app


if __name__ == "__main__":
    create_app().run(host="127.0.0.1", port=5000, debug=True)

from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .api.errors import register_error_handlers
from .auth.controller import register as register_auth
from .cards.controller import register as register_cards
from .container import Container, build_container
from .core.log import configure_logging
from .ranking.controller import register as register_ranking
from .tasks.controller import register as register_tasks
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        container = build_container(
            db_config=db_config,
            jwt_secret=getattr(settings, "JWT_SECRET"),
            jwt_expires_hours=int(getattr(settings, "JWT_EXPIRES_HOURS", 24)),
            admin_email=getattr(settings, "ADMIN_EMAIL"),
            admin_password=getattr(settings, "ADMIN_PASSWORD"),
        )

    if bool(getattr(settings, "AUTO_INIT_DB", False)) and container.bootstrapper is not None:
        container.bootstrapper.ensure_schema()

    register_error_handlers(app)
    register_auth(app, container)
    register_users(app, container)
    register_tasks(app, container)
    register_cards(app, container)
    register_ranking(app, container)

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000)

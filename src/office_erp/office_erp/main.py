from __future__ import annotations

import importlib
import logging
import logging.handlers
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_employees, list_tables
from .networks.controller import register as register_networks
from .performance.controller import register as register_performance
from .requests.controller import register as register_requests
from .rewards.controller import register as register_rewards
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

_DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"
_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings) -> None:
    level = str(getattr(settings, "LOG_LEVEL", "INFO") or "INFO").upper()
    logging.basicConfig(level=level, format=_LOG_FORMAT)

    log_file = getattr(settings, "LOG_FILE", None)
    if log_file:
        root = logging.getLogger()
        if not any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers):
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            handler = logging.handlers.RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=5, encoding="utf-8")
            handler.setFormatter(logging.Formatter(_LOG_FORMAT))
            root.addHandler(handler)


def create_app(settings_module: Optional[str] = None, *, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(settings)

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.ensure_ascii = False

    hops = int(getattr(settings, "TRUST_PROXY_HOPS", 0) or 0)
    if hops > 0:
        # remote_addr then comes from X-Forwarded-For, trusted for exactly `hops` proxies.
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops)

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

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=_DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=_DATABASE_DIR / "seed.sql")
            ensure_demo_employees(db_config)
            logger.info("Demo seed ready")

        container = build_container(settings)

    register_users(app, container)
    register_networks(app, container)
    register_attendance(app, container)
    register_requests(app, container)
    register_rewards(app, container)
    register_performance(app, container)

    return app

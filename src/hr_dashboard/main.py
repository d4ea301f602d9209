from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from .config import get_settings_module
from .core.exceptions import GatewayError, LimitExceededError, NotFoundError, StorageError, ValidationError
from .database.bootstrap import apply_schema, list_tables

from .container import Container, build_container
from .documents.controller import register as register_documents
from .employees.controller import register as register_employees
from .leaves.controller import register as register_leaves
from .medical.controller import register as register_medical

logger = logging.getLogger(__name__)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(LimitExceededError)
    def limit_exceeded(e: LimitExceededError):
        payload = {"error": str(e), "amount": e.amount, "used": e.used, "limit": e.limit}
        if e.category:
            payload["category"] = e.category
        return jsonify(payload), 400

    @app.errorhandler(ValidationError)
    def validation_error(e: ValidationError):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(NotFoundError)
    def not_found(e: NotFoundError):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(GatewayError)
    def gateway_error(e: GatewayError):
        return jsonify({"error": str(e)}), 502

    @app.errorhandler(StorageError)
    def storage_error(e: StorageError):
        return jsonify({"error": str(e)}), 502


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            storage_root=getattr(settings, "STORAGE_ROOT"),
            storage_public_url=getattr(settings, "STORAGE_PUBLIC_URL"),
            annual_medical_limit=getattr(settings, "ANNUAL_MEDICAL_LIMIT_PKR"),
        )

    _register_error_handlers(app)
    register_employees(app, container)
    register_leaves(app, container)
    register_medical(app, container)
    register_documents(app, container)

    return app

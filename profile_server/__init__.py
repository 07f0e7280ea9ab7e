from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from flask import Flask, Response, request
from werkzeug.exceptions import MethodNotAllowed

from .config import ServerConfig
from .radio import RadioSilenceNegotiator
from .store import FileStore

LOGGER = logging.getLogger(__name__)

__all__ = ["ServerConfig", "create_app"]


def create_app(
    config: Optional[Union[ServerConfig, Mapping[str, Any]]] = None,
    *,
    store: Optional[FileStore] = None,
) -> Flask:
    from .routes import bp, error_response

    if isinstance(config, ServerConfig):
        server_config = config
    else:
        server_config = ServerConfig().with_overrides(config or {})

    app = Flask(__name__)
    app.config["SERVER_CONFIG"] = server_config

    file_store = store or FileStore()
    app.file_store = file_store  # type: ignore[attr-defined]
    app.radio_negotiator = RadioSilenceNegotiator(server_config, file_store)  # type: ignore[attr-defined]
    app.register_blueprint(bp)

    @app.errorhandler(MethodNotAllowed)
    def _method_not_allowed(exc: MethodNotAllowed) -> Response:
        response = error_response(f"Unexpected method: {request.method}", 405)
        allowed = [method for method in exc.valid_methods or () if method != "HEAD"]
        if allowed:
            response.headers["Allow"] = ", ".join(allowed)
        return response

    LOGGER.debug("Profile server configured: %s", server_config.to_dict())
    return app

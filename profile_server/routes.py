from __future__ import annotations

import logging

from flask import Blueprint, Response, current_app, request
from werkzeug.exceptions import BadRequest, MethodNotAllowed

from . import codec
from .config import ServerConfig
from .radio import RadioSilenceNegotiator
from .store import FileStore

LOGGER = logging.getLogger(__name__)


class BodyReadError(Exception):
    """Raised when the request body cannot be read."""


bp = Blueprint("profile", __name__, url_prefix="/api/v1")


def _config() -> ServerConfig:
    return current_app.config["SERVER_CONFIG"]


def _store() -> FileStore:
    return current_app.file_store  # type: ignore[attr-defined]


def _negotiator() -> RadioSilenceNegotiator:
    return current_app.radio_negotiator  # type: ignore[attr-defined]


def error_response(message: str, status: int) -> Response:
    LOGGER.error(message)
    return Response(message + "\n", status=status, mimetype="text/plain")


def _proto_response(data: bytes) -> Response:
    return Response(data, status=200, content_type=codec.MIME_PROTO)


def _read_body() -> bytes:
    try:
        return request.get_data(cache=False)
    except (BadRequest, OSError) as exc:
        raise BodyReadError(str(exc)) from exc


@bp.get("/local_profile", provide_automatic_options=False)
def local_profile() -> Response:
    if request.method != "GET":
        # HEAD is routed here implicitly for every GET rule.
        raise MethodNotAllowed(valid_methods=["GET"])
    path = _config().profile_file
    try:
        text = _store().read_text(path)
    except FileNotFoundError as exc:
        return error_response(f"ReadFile: {exc}", 404)
    except OSError as exc:
        return error_response(f"ReadFile: {exc}", 500)

    profile = codec.make_local_profile(text, _config().token)
    try:
        data = codec.encode_local_profile(profile)
    except codec.EncodeError as exc:
        return error_response(str(exc), 500)
    return _proto_response(data)


@bp.post("/radio", provide_automatic_options=False)
def radio() -> Response:
    try:
        body = _read_body()
    except BodyReadError as exc:
        return error_response(f"Failed to read request body: {exc}", 400)
    try:
        data = _negotiator().exchange(body)
    except codec.DecodeError as exc:
        return error_response(f"Failed to unmarshal request body: {exc}", 400)
    except codec.EncodeError as exc:
        return error_response(str(exc), 500)
    except OSError as exc:
        return error_response(f"File access failed: {exc}", 500)
    if data is None:
        return Response(status=204)
    return _proto_response(data)


@bp.post("/appinfo", provide_automatic_options=False)
def appinfo() -> Response:
    try:
        body = _read_body()
    except BodyReadError as exc:
        return error_response(f"Failed to read request body: {exc}", 400)
    try:
        app_info_list = codec.decode_local_app_info_list(body)
    except codec.DecodeError as exc:
        return error_response(f"Failed to unmarshal request body: {exc}", 400)
    try:
        data = codec.encode_local_app_info_list_as_text(app_info_list)
    except codec.EncodeError as exc:
        return error_response(str(exc), 500)

    path = _config().app_info_file
    try:
        _store().write(path, data)
    except OSError as exc:
        return error_response(f"Failed to write {path}: {exc}", 500)
    LOGGER.debug("Stored info for %d apps", len(app_info_list.apps_info))
    return Response(status=200)

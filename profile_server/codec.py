from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, Type

from google.protobuf import json_format, unknown_fields
from google.protobuf import message as pb_message

from .schema import LocalAppInfoList, LocalProfile, RadioConfig, RadioStatus

LOGGER = logging.getLogger(__name__)

MIME_PROTO = "application/x-proto-binary"

_SILENCE_ON = {"on", "1"}

UNKNOWN_FIELDS_KEY = "unknown_fields"

_WIRE_LENGTH_DELIMITED = 2
_WIRE_START_GROUP = 3


class CodecError(Exception):
    """Base class for wire format failures."""


class DecodeError(CodecError):
    """Raised when a device message cannot be parsed."""


class EncodeError(CodecError):
    """Raised when a message cannot be serialized."""


def _decode(cls: Type[Any], data: bytes) -> Any:
    msg = cls()
    try:
        msg.ParseFromString(data)
    except pb_message.DecodeError as exc:
        raise DecodeError(f"Failed to unmarshal {cls.DESCRIPTOR.name}: {exc}") from exc
    return msg


def _encode(msg: Any) -> bytes:
    try:
        return msg.SerializeToString()
    except pb_message.EncodeError as exc:
        raise EncodeError(f"Marshal: {exc}") from exc


def _encode_text(msg: Any) -> bytes:
    try:
        text = json_format.MessageToJson(msg, indent=None)
    except (json_format.SerializeToJsonError, ValueError) as exc:
        raise EncodeError(f"Marshal: {exc}") from exc
    return text.encode("utf-8")


def decode_local_app_info_list(data: bytes) -> Any:
    return _decode(LocalAppInfoList, data)


def encode_local_app_info_list_as_text(msg: Any) -> bytes:
    return _encode_text(msg)


def decode_local_app_info_list_text(data: bytes) -> Any:
    """Parse the persisted JSON form back into a LocalAppInfoList."""
    msg = LocalAppInfoList()
    try:
        json_format.Parse(data.decode("utf-8"), msg)
    except (json_format.ParseError, UnicodeDecodeError) as exc:
        raise DecodeError(f"Failed to parse app info JSON: {exc}") from exc
    return msg


def encode_local_profile(msg: Any) -> bytes:
    return _encode(msg)


def make_local_profile(text: str, token: str) -> Any:
    return LocalProfile(local_profile=text.strip(), server_token=token)


def decode_radio_status(data: bytes) -> Any:
    return _decode(RadioStatus, data)


def encode_radio_status_as_text(msg: Any) -> bytes:
    """JSON with proto field names, numeric enums and unset fields omitted.

    Fields the schema does not know are kept under ``unknown_fields`` of the
    message that carried them.
    """
    try:
        data = json_format.MessageToDict(
            msg,
            preserving_proto_field_name=True,
            use_integers_for_enums=True,
        )
    except (json_format.SerializeToJsonError, ValueError) as exc:
        raise EncodeError(f"Marshal: {exc}") from exc
    _attach_unknown_fields(msg, data)
    return json.dumps(data).encode("utf-8")


def _unknown_field_value(field: Any) -> Any:
    if field.wire_type == _WIRE_LENGTH_DELIMITED:
        return base64.b64encode(field.data).decode("ascii")
    if field.wire_type == _WIRE_START_GROUP:
        return [_unknown_field_to_dict(item) for item in field.data]
    return field.data


def _unknown_field_to_dict(field: Any) -> Dict[str, Any]:
    return {
        "number": field.field_number,
        "wire_type": field.wire_type,
        "value": _unknown_field_value(field),
    }


def _attach_unknown_fields(msg: Any, data: Dict[str, Any]) -> None:
    unknown = [_unknown_field_to_dict(field) for field in unknown_fields.UnknownFieldSet(msg)]
    if unknown:
        data[UNKNOWN_FIELDS_KEY] = unknown
    for field, value in msg.ListFields():
        if field.message_type is None:
            continue
        if isinstance(value, pb_message.Message):
            if field.name in data:
                _attach_unknown_fields(value, data[field.name])
        else:
            for item, item_data in zip(value, data.get(field.name, [])):
                _attach_unknown_fields(item, item_data)


def encode_radio_config(msg: Any) -> bytes:
    return _encode(msg)


def make_radio_config(radio_silence: bool, token: str) -> Any:
    return RadioConfig(radio_silence=radio_silence, server_token=token)


def parse_radio_silence_request(text: str) -> bool:
    """Return True when the request file asks for radio silence."""
    return text.strip().lower() in _SILENCE_ON

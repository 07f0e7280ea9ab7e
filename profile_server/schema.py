"""Protobuf messages exchanged with the device.

The classes are built at import time from ``FileDescriptorProto`` objects
that mirror the EVE API (``info`` cellular/app state types and the
``profile`` local_profile, radio and app_info messages), so no ``protoc``
step is needed. Field numbers, types and cardinality follow upstream.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence, Tuple

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf import timestamp_pb2  # noqa: F401  registers google/protobuf/timestamp.proto

INFO_PACKAGE = "org.lfedge.eve.info"
PROFILE_PACKAGE = "org.lfedge.eve.profile"
INFO_PROTO_FILE = "info/local_profile_server_info.proto"
PROFILE_PROTO_FILE = "profile/local_profile_server.proto"

_F = descriptor_pb2.FieldDescriptorProto

# (name, number, type, repeated, type_name)
_FieldSpec = Tuple[str, int, int, bool, Optional[str]]
_MessageSpec = Tuple[str, Sequence[_FieldSpec]]

SW_STATES: Sequence[str] = (
    "INVALID",
    "INITIAL",
    "DOWNLOAD_STARTED",
    "DOWNLOADED",
    "DELIVERED",
    "INSTALLED",
    "BOOTING",
    "RUNNING",
    "HALTING",
    "HALTED",
    "RESTARTING",
    "PURGING",
    "VERIFYING",
    "VERIFIED",
    "LOADING",
    "LOADED",
    "CREATING_VOLUME",
    "CREATED_VOLUME",
    "RESOLVING_TAG",
    "RESOLVED_TAG",
    "PENDING",
    "AWAITNETWORKINSTANCE",
    "START_DELAYED",
    "BROKEN",
    "UNKNOWN",
)

CELLULAR_OPERATING_STATES: Sequence[str] = (
    "Z_CELLULAR_OPERATING_STATE_UNSPECIFIED",
    "Z_CELLULAR_OPERATING_STATE_OFF",
    "Z_CELLULAR_OPERATING_STATE_ONLINE",
    "Z_CELLULAR_OPERATING_STATE_RADIO_OFF",
    "Z_CELLULAR_OPERATING_STATE_OFFLINE",
    "Z_CELLULAR_OPERATING_STATE_UNRECOGNIZED",
)

CELLULAR_CONTROL_PROTOCOLS: Sequence[str] = (
    "Z_CELLULAR_CONTROL_PROTOCOL_UNSPECIFIED",
    "Z_CELLULAR_CONTROL_PROTOCOL_QMI",
    "Z_CELLULAR_CONTROL_PROTOCOL_MBIM",
)

_INFO_ENUMS: Sequence[Tuple[str, Sequence[str]]] = (
    ("ZSwState", SW_STATES),
    ("ZCellularOperatingState", CELLULAR_OPERATING_STATES),
    ("ZCellularControlProtocol", CELLULAR_CONTROL_PROTOCOLS),
)

_INFO_MESSAGES: Sequence[_MessageSpec] = (
    (
        "ZCellularModuleInfo",
        (
            ("name", 1, _F.TYPE_STRING, False, None),
            ("imei", 2, _F.TYPE_STRING, False, None),
            ("firmware_version", 3, _F.TYPE_STRING, False, None),
            ("model", 4, _F.TYPE_STRING, False, None),
            ("operating_state", 5, _F.TYPE_ENUM, False, "ZCellularOperatingState"),
            ("control_protocol", 6, _F.TYPE_ENUM, False, "ZCellularControlProtocol"),
            ("manufacturer", 7, _F.TYPE_STRING, False, None),
        ),
    ),
    (
        "ZSimcardInfo",
        (
            ("name", 1, _F.TYPE_STRING, False, None),
            ("cellular_module_name", 2, _F.TYPE_STRING, False, None),
            ("state", 3, _F.TYPE_STRING, False, None),
            ("imsi", 4, _F.TYPE_STRING, False, None),
            ("iccid", 5, _F.TYPE_STRING, False, None),
        ),
    ),
    (
        "ZCellularProvider",
        (
            ("plmn", 1, _F.TYPE_STRING, False, None),
            ("description", 2, _F.TYPE_STRING, False, None),
            ("current_serving", 3, _F.TYPE_BOOL, False, None),
            ("roaming", 4, _F.TYPE_BOOL, False, None),
            ("forbidden", 5, _F.TYPE_BOOL, False, None),
        ),
    ),
)

_PROFILE_MESSAGES: Sequence[_MessageSpec] = (
    (
        "LocalProfile",
        (
            ("local_profile", 1, _F.TYPE_STRING, False, None),
            ("server_token", 2, _F.TYPE_STRING, False, None),
        ),
    ),
    (
        "CellularStatus",
        (
            ("logicallabel", 1, _F.TYPE_STRING, False, None),
            ("module", 2, _F.TYPE_MESSAGE, False, f".{INFO_PACKAGE}.ZCellularModuleInfo"),
            ("sim_cards", 3, _F.TYPE_MESSAGE, True, f".{INFO_PACKAGE}.ZSimcardInfo"),
            ("providers", 4, _F.TYPE_MESSAGE, True, f".{INFO_PACKAGE}.ZCellularProvider"),
            ("config_error", 10, _F.TYPE_STRING, False, None),
            ("probe_error", 11, _F.TYPE_STRING, False, None),
        ),
    ),
    (
        "RadioStatus",
        (
            ("radio_silence", 1, _F.TYPE_BOOL, False, None),
            ("config_error", 2, _F.TYPE_STRING, False, None),
            ("cellular_status", 3, _F.TYPE_MESSAGE, True, "CellularStatus"),
        ),
    ),
    (
        "RadioConfig",
        (
            ("server_token", 1, _F.TYPE_STRING, False, None),
            ("radio_silence", 2, _F.TYPE_BOOL, False, None),
        ),
    ),
    (
        "LocalAppInfo",
        (
            ("id", 1, _F.TYPE_STRING, False, None),
            ("version", 2, _F.TYPE_STRING, False, None),
            ("name", 3, _F.TYPE_STRING, False, None),
            ("state", 4, _F.TYPE_ENUM, False, f".{INFO_PACKAGE}.ZSwState"),
            ("error", 5, _F.TYPE_STRING, False, None),
            ("err_time", 6, _F.TYPE_MESSAGE, False, ".google.protobuf.Timestamp"),
        ),
    ),
    (
        "LocalAppInfoList",
        (("apps_info", 1, _F.TYPE_MESSAGE, True, "LocalAppInfo"),),
    ),
)


def _json_name(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _add_fields(
    message: descriptor_pb2.DescriptorProto, specs: Iterable[_FieldSpec], package: str
) -> None:
    for name, number, ftype, repeated, type_name in specs:
        field = message.field.add()
        field.name = name
        field.json_name = _json_name(name)
        field.number = number
        field.type = ftype
        field.label = _F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL
        if type_name:
            field.type_name = type_name if type_name.startswith(".") else f".{package}.{type_name}"


def _new_file(name: str, package: str, *dependencies: str) -> descriptor_pb2.FileDescriptorProto:
    proto = descriptor_pb2.FileDescriptorProto()
    proto.name = name
    proto.package = package
    proto.syntax = "proto3"
    proto.dependency.extend(dependencies)
    return proto


def _add_messages(proto: descriptor_pb2.FileDescriptorProto, messages: Iterable[_MessageSpec]) -> None:
    for message_name, specs in messages:
        message = proto.message_type.add()
        message.name = message_name
        _add_fields(message, specs, proto.package)


def build_file_descriptors() -> Sequence[descriptor_pb2.FileDescriptorProto]:
    """Return the info and profile files, dependencies first."""
    info = _new_file(INFO_PROTO_FILE, INFO_PACKAGE)
    for enum_name, labels in _INFO_ENUMS:
        enum = info.enum_type.add()
        enum.name = enum_name
        for number, label in enumerate(labels):
            value = enum.value.add()
            value.name = label
            value.number = number
    _add_messages(info, _INFO_MESSAGES)

    profile = _new_file(
        PROFILE_PROTO_FILE,
        PROFILE_PACKAGE,
        "google/protobuf/timestamp.proto",
        INFO_PROTO_FILE,
    )
    _add_messages(profile, _PROFILE_MESSAGES)
    return info, profile


def _load_classes() -> Dict[str, type]:
    pool = descriptor_pool.Default()
    for proto in build_file_descriptors():
        try:
            pool.FindFileByName(proto.name)
        except KeyError:
            pool.AddSerializedFile(proto.SerializeToString())

    classes: Dict[str, type] = {}
    for package, messages in ((INFO_PACKAGE, _INFO_MESSAGES), (PROFILE_PACKAGE, _PROFILE_MESSAGES)):
        for name, _ in messages:
            descriptor = pool.FindMessageTypeByName(f"{package}.{name}")
            classes[name] = message_factory.GetMessageClass(descriptor)
    return classes


_CLASSES = _load_classes()

ZCellularModuleInfo = _CLASSES["ZCellularModuleInfo"]
ZSimcardInfo = _CLASSES["ZSimcardInfo"]
ZCellularProvider = _CLASSES["ZCellularProvider"]
LocalProfile = _CLASSES["LocalProfile"]
CellularStatus = _CLASSES["CellularStatus"]
RadioStatus = _CLASSES["RadioStatus"]
RadioConfig = _CLASSES["RadioConfig"]
LocalAppInfo = _CLASSES["LocalAppInfo"]
LocalAppInfoList = _CLASSES["LocalAppInfoList"]

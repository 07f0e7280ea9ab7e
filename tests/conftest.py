import os
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from profile_server.config import ServerConfig


@pytest.fixture()
def server_config(tmp_path: Path) -> ServerConfig:
    return ServerConfig(
        profile_file=tmp_path / "profile",
        radio_silence_file=tmp_path / "radio-silence",
        radio_silence_counter_file=tmp_path / "radio-silence-counter",
        radio_status_file=tmp_path / "radio-status.json",
        app_info_file=tmp_path / "app-info-status.json",
        token="server-token-1234",
    )


@pytest.fixture()
def request_silence(server_config: ServerConfig):
    """Write the radio-silence request file with a controlled mtime."""
    clock = {"ns": 1_700_000_000 * 10**9}

    def _write(value: str, *, touch: bool = True) -> None:
        path = server_config.radio_silence_file
        path.write_text(value, encoding="utf-8")
        if touch:
            clock["ns"] += 10**9
        os.utime(path, ns=(clock["ns"], clock["ns"]))

    return _write

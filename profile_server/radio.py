from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from . import codec
from .config import ServerConfig
from .store import FileStore

LOGGER = logging.getLogger(__name__)


class RadioSilenceNegotiator:
    """Tracks radio-silence requests sent to the device and confirms them.

    The device POSTs its radio status periodically. A new RadioConfig is
    returned only when the request file's mtime moved since it was last sent;
    the report that follows a real ON/OFF change counts as its confirmation.

    Not thread-safe: a single device polling serially is assumed, and
    interleaved reports may double-count or lose a transition.
    """

    def __init__(self, config: ServerConfig, store: Optional[FileStore] = None) -> None:
        self._config = config
        self._store = store or FileStore()
        self.pending_transition = False
        self.transition_count = 0
        self.last_config_mtime: Optional[int] = None

    # ---------------------- public API ----------------------

    def exchange(self, body: bytes) -> Optional[bytes]:
        """Process one device report; return an encoded RadioConfig or None.

        Raises ``codec.DecodeError`` for a malformed report and ``OSError``
        when the status file cannot be written. Neither mutates state.
        """
        status = codec.decode_radio_status(body)
        self._publish_status(status)

        if self.pending_transition:
            self._confirm_transition()

        requested = self._read_request()
        if requested is None:
            return None

        radio_config = codec.make_radio_config(requested, self._config.token)
        data = codec.encode_radio_config(radio_config)
        self.pending_transition = bool(status.radio_silence) != requested
        LOGGER.info(
            "Requesting radio silence %s (device reports %s)",
            "ON" if requested else "OFF",
            "ON" if status.radio_silence else "OFF",
        )
        return data

    def snapshot(self) -> Dict[str, Any]:
        return {
            "pending_transition": self.pending_transition,
            "transition_count": self.transition_count,
            "last_config_mtime": self.last_config_mtime,
        }

    # ---------------------- helpers ----------------------

    def _publish_status(self, status: Any) -> None:
        data = codec.encode_radio_status_as_text(status)
        self._store.write(self._config.radio_status_file, data)

    def _confirm_transition(self) -> None:
        self.transition_count += 1
        self.pending_transition = False
        path = self._config.radio_silence_counter_file
        try:
            self._store.write(path, str(self.transition_count).encode("ascii"))
        except OSError as exc:
            LOGGER.error("WriteFile %s: %s", path, exc)
        else:
            LOGGER.debug("Radio silence transitions: %d", self.transition_count)

    def _read_request(self) -> Optional[bool]:
        path = self._config.radio_silence_file
        try:
            mtime = self._store.stat_mtime(path)
        except OSError as exc:
            LOGGER.debug("Stat %s: %s", path, exc)
            return None
        if mtime == self.last_config_mtime:
            return None

        self.last_config_mtime = mtime
        try:
            text = self._store.read_text(path)
        except FileNotFoundError as exc:
            LOGGER.warning("ReadFile %s: %s", path, exc)
            return None
        return codec.parse_radio_silence_request(text)

"""Constants used across the airsim-client package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "airsim-client"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path.home() / ".airsim" / DEFAULT_CONFIG_FILENAME

DEFAULT_AIRSIM_HOST = "127.0.0.1"
DEFAULT_AIRSIM_PORT = 41451

DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0
DEFAULT_CALL_TIMEOUT_SECONDS = 3600.0
DEFAULT_PING_TIMEOUT_SECONDS = 5.0

# Extra RPC time granted beyond a maneuver's own server-side timeout.
MANEUVER_TIMEOUT_MARGIN_SECONDS = 10.0

# msgpack-rpc request ids are uint32 on the wire.
MAX_REQUEST_ID = 0xFFFFFFFF

"""Configuration loader for airsim-client."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants


@dataclass(slots=True)
class AirSimConfig:
    host: str = constants.DEFAULT_AIRSIM_HOST
    port: int = constants.DEFAULT_AIRSIM_PORT
    vehicle_name: str = ""  # empty selects the default vehicle
    connect_timeout_seconds: float = constants.DEFAULT_CONNECT_TIMEOUT_SECONDS
    call_timeout_seconds: float = constants.DEFAULT_CALL_TIMEOUT_SECONDS
    ping_timeout_seconds: float = constants.DEFAULT_PING_TIMEOUT_SECONDS

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    log_wire: bool = False


@dataclass(slots=True)
class ClientConfig:
    airsim: AirSimConfig
    logging: LoggingConfig
    raw: ConfigParser
    path: Path


def load_config(path: Optional[Path] = None) -> ClientConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "airsim": {
                "host": constants.DEFAULT_AIRSIM_HOST,
                "port": str(constants.DEFAULT_AIRSIM_PORT),
                "vehicle_name": "",
                "connect_timeout_seconds": str(constants.DEFAULT_CONNECT_TIMEOUT_SECONDS),
                "call_timeout_seconds": str(constants.DEFAULT_CALL_TIMEOUT_SECONDS),
                "ping_timeout_seconds": str(constants.DEFAULT_PING_TIMEOUT_SECONDS),
            },
            "logging": {
                "level": "INFO",
                "log_wire": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    host_value = parser.get("airsim", "host")
    port_value = parser.getint("airsim", "port", fallback=constants.DEFAULT_AIRSIM_PORT)

    if ":" in host_value:
        host_part, port_part = host_value.rsplit(":", 1)
        try:
            parsed_port = int(port_part)
        except ValueError:
            pass
        else:
            host_value = host_part
            port_value = parsed_port
            parser.set("airsim", "host", host_part)
            parser.set("airsim", "port", str(parsed_port))

    defaults = AirSimConfig()

    airsim = AirSimConfig(
        host=host_value,
        port=port_value,
        vehicle_name=parser.get("airsim", "vehicle_name", fallback=""),
        connect_timeout_seconds=max(
            0.1,
            parser.getfloat(
                "airsim",
                "connect_timeout_seconds",
                fallback=defaults.connect_timeout_seconds,
            ),
        ),
        call_timeout_seconds=max(
            0.1,
            parser.getfloat(
                "airsim",
                "call_timeout_seconds",
                fallback=defaults.call_timeout_seconds,
            ),
        ),
        ping_timeout_seconds=max(
            0.1,
            parser.getfloat(
                "airsim",
                "ping_timeout_seconds",
                fallback=defaults.ping_timeout_seconds,
            ),
        ),
    )

    log_path_value = parser.get("logging", "path", fallback="").strip()
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_wire=parser.getboolean("logging", "log_wire", fallback=False),
    )

    return ClientConfig(
        airsim=airsim,
        logging=logging_config,
        raw=parser,
        path=config_path,
    )


def save_config(config: ClientConfig) -> None:
    """Persist the current configuration to disk."""

    config_path = config.path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as stream:
        config.raw.write(stream)

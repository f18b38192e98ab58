"""Asyncio msgpack-rpc client for the AirSim vehicle simulator."""

from .client import MultirotorClient
from .connection import ConnectionState, RpcConnection
from .errors import (
    AirSimClientError,
    CallTimeoutError,
    ConnectError,
    ConnectionLostError,
    RpcError,
    SchemaMismatch,
    UnknownVariant,
)
from .models import (
    BarometerData,
    CompressedImage,
    DistanceSensorData,
    DrivetrainType,
    EnvironmentState,
    GeoPoint,
    GnssFixType,
    GnssReport,
    GpsData,
    ImageRequest,
    ImageType,
    ImuData,
    MagnetometerData,
    Path,
    Pose,
    Quaternion,
    Vector3,
    YawMode,
)
from .wire import WireKind, WireValue

__all__ = [
    "AirSimClientError",
    "BarometerData",
    "CallTimeoutError",
    "CompressedImage",
    "ConnectError",
    "ConnectionLostError",
    "ConnectionState",
    "DistanceSensorData",
    "DrivetrainType",
    "EnvironmentState",
    "GeoPoint",
    "GnssFixType",
    "GnssReport",
    "GpsData",
    "ImageRequest",
    "ImageType",
    "ImuData",
    "MagnetometerData",
    "MultirotorClient",
    "Path",
    "Pose",
    "Quaternion",
    "RpcConnection",
    "RpcError",
    "SchemaMismatch",
    "UnknownVariant",
    "Vector3",
    "WireKind",
    "WireValue",
    "YawMode",
]

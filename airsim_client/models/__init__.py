"""Domain models exchanged with the simulator."""

from .geometry import DrivetrainType, GeoPoint, Path, Pose, Quaternion, Vector3, YawMode
from .sensors import (
    BarometerData,
    CompressedImage,
    DistanceSensorData,
    EnvironmentState,
    GnssFixType,
    GnssReport,
    GpsData,
    ImageRequest,
    ImageType,
    ImuData,
    MagnetometerData,
)

__all__ = [
    "BarometerData",
    "CompressedImage",
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
    "Path",
    "Pose",
    "Quaternion",
    "Vector3",
    "YawMode",
]

"""Telemetry records returned by the simulator's sensor APIs."""

from __future__ import annotations

import io
from dataclasses import dataclass
from enum import IntEnum

from PIL import Image

from .geometry import GeoPoint, Pose, Quaternion, Vector3

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class ImageType(IntEnum):
    SCENE = 0
    DEPTH_PLANAR = 1
    DEPTH_PERSPECTIVE = 2
    DEPTH_VIS = 3
    DISPARITY_NORMALIZED = 4
    SURFACE_NORMALS = 5
    INFRARED = 6
    OPTICAL_FLOW = 7
    OPTICAL_FLOW_VIS = 8


class GnssFixType(IntEnum):
    NO_FIX = 0
    TIME_ONLY = 1
    FIX_2D = 2
    FIX_3D = 3


@dataclass(frozen=True, slots=True)
class ImageRequest:
    camera_name: str
    image_type: ImageType = ImageType.SCENE
    pixels_as_float: bool = False
    compress: bool = True


@dataclass(frozen=True, slots=True)
class CompressedImage:
    """Compressed (PNG) image bytes as returned by ``simGetImage``."""

    data: bytes

    def __len__(self) -> int:
        return len(self.data)

    @property
    def is_png(self) -> bool:
        return self.data.startswith(PNG_SIGNATURE)

    def to_pil(self) -> Image.Image:
        """Decode the payload into a Pillow image.

        Raises:
            PIL.UnidentifiedImageError: If the bytes are not a known image format.
        """
        image = Image.open(io.BytesIO(self.data))
        image.load()
        return image


@dataclass(frozen=True, slots=True)
class ImuData:
    time_stamp: int
    orientation: Quaternion
    angular_velocity: Vector3  # rad/s
    linear_acceleration: Vector3  # m/s^2


@dataclass(frozen=True, slots=True)
class GnssReport:
    geo_point: GeoPoint
    eph: float
    epv: float
    velocity: Vector3
    fix_type: GnssFixType
    time_utc: int


@dataclass(frozen=True, slots=True)
class GpsData:
    time_stamp: int
    gnss: GnssReport
    is_valid: bool


@dataclass(frozen=True, slots=True)
class BarometerData:
    time_stamp: int
    altitude: float  # metres
    pressure: float  # pascals
    qnh: float  # millibars


@dataclass(frozen=True, slots=True)
class MagnetometerData:
    time_stamp: int
    magnetic_field_body: Vector3  # gauss
    # Not decoded from the wire; see codec.sensors.MAGNETOMETER_SCHEMA.
    magnetic_field_covariance: float = 0.0


@dataclass(frozen=True, slots=True)
class DistanceSensorData:
    time_stamp: int
    distance: float  # metres
    min_distance: float
    max_distance: float
    relative_pose: Pose


@dataclass(frozen=True, slots=True)
class EnvironmentState:
    position: Vector3
    geo_point: GeoPoint
    gravity: Vector3
    air_pressure: float
    temperature: float
    air_density: float

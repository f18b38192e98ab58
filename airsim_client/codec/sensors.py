"""Codecs for sensor telemetry and image requests."""

from __future__ import annotations

from typing import Iterable

from ..errors import SchemaMismatch
from ..models.sensors import (
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
from ..wire import WireKind, WireValue
from .geometry import decode_geo_point, decode_pose, decode_quaternion, decode_vector3
from .schema import decode_enum, define_schema, encode_enum

IMAGE_REQUEST_SCHEMA = define_schema(
    "ImageRequest",
    ("camera_name", "str"),
    ("image_type", "ImageType"),
    ("pixels_as_float", "bool"),
    ("compress", "bool"),
)

IMU_SCHEMA = define_schema(
    "ImuData",
    ("time_stamp", "int"),
    ("orientation", "Quaternion"),
    ("angular_velocity", "Vector3"),
    ("linear_acceleration", "Vector3"),
)

GNSS_REPORT_SCHEMA = define_schema(
    "GnssReport",
    ("geo_point", "GeoPoint"),
    ("eph", "float32"),
    ("epv", "float32"),
    ("velocity", "Vector3"),
    ("fix_type", "GnssFixType"),
    ("time_utc", "int"),
)

GPS_SCHEMA = define_schema(
    "GpsData", ("time_stamp", "int"), ("gnss", "GnssReport"), ("is_valid", "bool")
)

# Server struct order: altitude precedes pressure. Reading index 1 as
# pressure and index 2 as altitude swaps the two.
BAROMETER_SCHEMA = define_schema(
    "BarometerData",
    ("time_stamp", "int"),
    ("altitude", "float32"),
    ("pressure", "float32"),
    ("qnh", "float32"),
)

# The server also sends magnetic_field_covariance after these two fields.
# Its layout is unconfirmed, so it is left undecoded and reported as 0.0.
MAGNETOMETER_SCHEMA = define_schema(
    "MagnetometerData", ("time_stamp", "int"), ("magnetic_field_body", "Vector3")
)

DISTANCE_SENSOR_SCHEMA = define_schema(
    "DistanceSensorData",
    ("time_stamp", "int"),
    ("distance", "float32"),
    ("min_distance", "float32"),
    ("max_distance", "float32"),
    ("relative_pose", "Pose"),
)

ENVIRONMENT_SCHEMA = define_schema(
    "EnvironmentState",
    ("position", "Vector3"),
    ("geo_point", "GeoPoint"),
    ("gravity", "Vector3"),
    ("air_pressure", "float32"),
    ("temperature", "float32"),
    ("air_density", "float32"),
)


def encode_image_type(image_type: ImageType) -> WireValue:
    return encode_enum(image_type)


def decode_image_type(value: WireValue) -> ImageType:
    return decode_enum(value, ImageType)


def decode_gnss_fix_type(value: WireValue) -> GnssFixType:
    return decode_enum(value, GnssFixType)


def encode_image_request(request: ImageRequest) -> WireValue:
    return IMAGE_REQUEST_SCHEMA.encode(
        [
            WireValue.string(request.camera_name),
            encode_image_type(request.image_type),
            WireValue.boolean(request.pixels_as_float),
            WireValue.boolean(request.compress),
        ]
    )


def encode_image_requests(requests: Iterable[ImageRequest]) -> WireValue:
    return WireValue.sequence(encode_image_request(request) for request in requests)


def decode_compressed_image(value: WireValue) -> CompressedImage:
    """Accept either a binary blob or an array of byte-sized integers."""

    if value.kind is WireKind.BYTES:
        return CompressedImage(value.value)
    if value.kind is not WireKind.SEQ:
        raise SchemaMismatch("CompressedImage", expected="bytes", got=value.kind.value)

    pixels = bytearray()
    for index, item in enumerate(value.items):
        if item.kind is not WireKind.INT or not 0 <= item.value <= 0xFF:
            raise SchemaMismatch(
                "CompressedImage",
                field_index=index,
                expected_kind="uint8",
                got=item.kind.value,
            )
        pixels.append(item.value)
    return CompressedImage(bytes(pixels))


def decode_imu_data(value: WireValue) -> ImuData:
    fields = IMU_SCHEMA.read(value)
    return ImuData(
        time_stamp=fields.integer(0),
        orientation=fields.nested(1, decode_quaternion),
        angular_velocity=fields.nested(2, decode_vector3),
        linear_acceleration=fields.nested(3, decode_vector3),
    )


def decode_gnss_report(value: WireValue) -> GnssReport:
    fields = GNSS_REPORT_SCHEMA.read(value)
    return GnssReport(
        geo_point=fields.nested(0, decode_geo_point),
        eph=fields.float32(1),
        epv=fields.float32(2),
        velocity=fields.nested(3, decode_vector3),
        fix_type=fields.enum(4, GnssFixType),
        time_utc=fields.integer(5),
    )


def decode_gps_data(value: WireValue) -> GpsData:
    fields = GPS_SCHEMA.read(value)
    return GpsData(
        time_stamp=fields.integer(0),
        gnss=fields.nested(1, decode_gnss_report),
        is_valid=fields.boolean(2),
    )


def decode_barometer_data(value: WireValue) -> BarometerData:
    fields = BAROMETER_SCHEMA.read(value)
    return BarometerData(
        time_stamp=fields.integer(0),
        altitude=fields.float32(1),
        pressure=fields.float32(2),
        qnh=fields.float32(3),
    )


def decode_magnetometer_data(value: WireValue) -> MagnetometerData:
    fields = MAGNETOMETER_SCHEMA.read(value)
    return MagnetometerData(
        time_stamp=fields.integer(0),
        magnetic_field_body=fields.nested(1, decode_vector3),
    )


def decode_distance_sensor_data(value: WireValue) -> DistanceSensorData:
    fields = DISTANCE_SENSOR_SCHEMA.read(value)
    return DistanceSensorData(
        time_stamp=fields.integer(0),
        distance=fields.float32(1),
        min_distance=fields.float32(2),
        max_distance=fields.float32(3),
        relative_pose=fields.nested(4, decode_pose),
    )


def decode_environment_state(value: WireValue) -> EnvironmentState:
    fields = ENVIRONMENT_SCHEMA.read(value)
    return EnvironmentState(
        position=fields.nested(0, decode_vector3),
        geo_point=fields.nested(1, decode_geo_point),
        gravity=fields.nested(2, decode_vector3),
        air_pressure=fields.float32(3),
        temperature=fields.float32(4),
        air_density=fields.float32(5),
    )

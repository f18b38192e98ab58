"""Codecs for geometry types and maneuver arguments."""

from __future__ import annotations

from ..models.geometry import DrivetrainType, GeoPoint, Path, Pose, Quaternion, Vector3, YawMode
from ..wire import WireValue
from .schema import decode_enum, define_schema, encode_enum

VECTOR3_SCHEMA = define_schema(
    "Vector3", ("x_val", "float32"), ("y_val", "float32"), ("z_val", "float32")
)

QUATERNION_SCHEMA = define_schema(
    "Quaternion",
    ("w_val", "float32"),
    ("x_val", "float32"),
    ("y_val", "float32"),
    ("z_val", "float32"),
)

# latitude/longitude are doubles server-side; altitude is a float.
GEO_POINT_SCHEMA = define_schema(
    "GeoPoint", ("latitude", "float64"), ("longitude", "float64"), ("altitude", "float32")
)

POSE_SCHEMA = define_schema("Pose", ("position", "Vector3"), ("orientation", "Quaternion"))

YAW_MODE_SCHEMA = define_schema("YawMode", ("is_rate", "bool"), ("yaw_or_rate", "float32"))


def encode_vector3(vector: Vector3) -> WireValue:
    return VECTOR3_SCHEMA.encode(
        [
            WireValue.float32(vector.x),
            WireValue.float32(vector.y),
            WireValue.float32(vector.z),
        ]
    )


def decode_vector3(value: WireValue) -> Vector3:
    fields = VECTOR3_SCHEMA.read(value)
    return Vector3(fields.float32(0), fields.float32(1), fields.float32(2))


def encode_quaternion(quaternion: Quaternion) -> WireValue:
    return QUATERNION_SCHEMA.encode(
        [
            WireValue.float32(quaternion.w),
            WireValue.float32(quaternion.x),
            WireValue.float32(quaternion.y),
            WireValue.float32(quaternion.z),
        ]
    )


def decode_quaternion(value: WireValue) -> Quaternion:
    fields = QUATERNION_SCHEMA.read(value)
    return Quaternion(
        w=fields.float32(0),
        x=fields.float32(1),
        y=fields.float32(2),
        z=fields.float32(3),
    )


def encode_geo_point(point: GeoPoint) -> WireValue:
    return GEO_POINT_SCHEMA.encode(
        [
            WireValue.float64(point.latitude),
            WireValue.float64(point.longitude),
            WireValue.float32(point.altitude),
        ]
    )


def decode_geo_point(value: WireValue) -> GeoPoint:
    fields = GEO_POINT_SCHEMA.read(value)
    return GeoPoint(
        latitude=fields.float64(0),
        longitude=fields.float64(1),
        altitude=fields.float32(2),
    )


def encode_pose(pose: Pose) -> WireValue:
    return POSE_SCHEMA.encode(
        [encode_vector3(pose.position), encode_quaternion(pose.orientation)]
    )


def decode_pose(value: WireValue) -> Pose:
    fields = POSE_SCHEMA.read(value)
    return Pose(
        position=fields.nested(0, decode_vector3),
        orientation=fields.nested(1, decode_quaternion),
    )


def encode_yaw_mode(yaw_mode: YawMode) -> WireValue:
    return YAW_MODE_SCHEMA.encode(
        [WireValue.boolean(yaw_mode.is_rate), WireValue.float32(yaw_mode.yaw_or_rate)]
    )


def decode_yaw_mode(value: WireValue) -> YawMode:
    fields = YAW_MODE_SCHEMA.read(value)
    return YawMode(is_rate=fields.boolean(0), yaw_or_rate=fields.float32(1))


def encode_drivetrain(drivetrain: DrivetrainType) -> WireValue:
    return encode_enum(drivetrain)


def decode_drivetrain(value: WireValue) -> DrivetrainType:
    return decode_enum(value, DrivetrainType)


def encode_path(path: Path) -> WireValue:
    """Paths travel as a plain array of vectors."""
    return WireValue.sequence(encode_vector3(point) for point in path.waypoints)

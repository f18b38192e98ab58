"""Conversion between domain types and positional wire values."""

from .geometry import (
    GEO_POINT_SCHEMA,
    POSE_SCHEMA,
    QUATERNION_SCHEMA,
    VECTOR3_SCHEMA,
    YAW_MODE_SCHEMA,
    decode_drivetrain,
    decode_geo_point,
    decode_pose,
    decode_quaternion,
    decode_vector3,
    decode_yaw_mode,
    encode_drivetrain,
    encode_geo_point,
    encode_path,
    encode_pose,
    encode_quaternion,
    encode_vector3,
    encode_yaw_mode,
)
from .schema import (
    FieldReader,
    FieldSpec,
    Schema,
    decode_bool,
    decode_enum,
    decode_float32,
    decode_int,
    define_schema,
    encode_enum,
)
from .sensors import (
    BAROMETER_SCHEMA,
    DISTANCE_SENSOR_SCHEMA,
    ENVIRONMENT_SCHEMA,
    GNSS_REPORT_SCHEMA,
    GPS_SCHEMA,
    IMAGE_REQUEST_SCHEMA,
    IMU_SCHEMA,
    MAGNETOMETER_SCHEMA,
    decode_barometer_data,
    decode_compressed_image,
    decode_distance_sensor_data,
    decode_environment_state,
    decode_gnss_fix_type,
    decode_gnss_report,
    decode_gps_data,
    decode_image_type,
    decode_imu_data,
    decode_magnetometer_data,
    encode_image_request,
    encode_image_requests,
    encode_image_type,
)

__all__ = [
    "BAROMETER_SCHEMA",
    "DISTANCE_SENSOR_SCHEMA",
    "ENVIRONMENT_SCHEMA",
    "FieldReader",
    "FieldSpec",
    "GEO_POINT_SCHEMA",
    "GNSS_REPORT_SCHEMA",
    "GPS_SCHEMA",
    "IMAGE_REQUEST_SCHEMA",
    "IMU_SCHEMA",
    "MAGNETOMETER_SCHEMA",
    "POSE_SCHEMA",
    "QUATERNION_SCHEMA",
    "Schema",
    "VECTOR3_SCHEMA",
    "YAW_MODE_SCHEMA",
    "decode_barometer_data",
    "decode_bool",
    "decode_compressed_image",
    "decode_distance_sensor_data",
    "decode_drivetrain",
    "decode_enum",
    "decode_environment_state",
    "decode_float32",
    "decode_geo_point",
    "decode_gnss_fix_type",
    "decode_gnss_report",
    "decode_gps_data",
    "decode_image_type",
    "decode_imu_data",
    "decode_int",
    "decode_magnetometer_data",
    "decode_pose",
    "decode_quaternion",
    "decode_vector3",
    "decode_yaw_mode",
    "define_schema",
    "encode_drivetrain",
    "encode_enum",
    "encode_geo_point",
    "encode_image_request",
    "encode_image_requests",
    "encode_image_type",
    "encode_path",
    "encode_pose",
    "encode_quaternion",
    "encode_vector3",
    "encode_yaw_mode",
]

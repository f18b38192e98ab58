"""Tests for positional encode/decode of domain types."""

import io

import pytest

from airsim_client.codec import (
    BAROMETER_SCHEMA,
    IMU_SCHEMA,
    decode_barometer_data,
    decode_bool,
    decode_compressed_image,
    decode_distance_sensor_data,
    decode_drivetrain,
    decode_environment_state,
    decode_float32,
    decode_geo_point,
    decode_gnss_report,
    decode_gps_data,
    decode_image_type,
    decode_imu_data,
    decode_int,
    decode_magnetometer_data,
    decode_pose,
    decode_quaternion,
    decode_vector3,
    decode_yaw_mode,
    encode_drivetrain,
    encode_geo_point,
    encode_image_request,
    encode_image_type,
    encode_path,
    encode_pose,
    encode_quaternion,
    encode_vector3,
    encode_yaw_mode,
)
from airsim_client.errors import SchemaMismatch, UnknownVariant
from airsim_client.models import (
    DrivetrainType,
    GeoPoint,
    GnssFixType,
    ImageRequest,
    ImageType,
    Path,
    Pose,
    Quaternion,
    Vector3,
    YawMode,
)
from airsim_client.wire import WireKind, WireValue, pack, unpack


def _vector(x, y, z):
    return WireValue.record(
        [("x_val", WireValue.float64(x)), ("y_val", WireValue.float64(y)), ("z_val", WireValue.float64(z))]
    )


def _quaternion(w, x, y, z):
    return WireValue.record(
        [
            ("w_val", WireValue.float64(w)),
            ("x_val", WireValue.float64(x)),
            ("y_val", WireValue.float64(y)),
            ("z_val", WireValue.float64(z)),
        ]
    )


def _geo_point(lat, lon, alt):
    return WireValue.record(
        [
            ("latitude", WireValue.float64(lat)),
            ("longitude", WireValue.float64(lon)),
            ("altitude", WireValue.float64(alt)),
        ]
    )


def _pose():
    return WireValue.record(
        [("position", _vector(1.0, 2.0, 3.0)), ("orientation", _quaternion(1.0, 0.0, 0.0, 0.0))]
    )


def _gnss(fix_type=3):
    return WireValue.record(
        [
            ("geo_point", _geo_point(47.641468, -122.140165, 122.0)),
            ("eph", WireValue.float64(0.5)),
            ("epv", WireValue.float64(0.25)),
            ("velocity", _vector(0.0, 0.0, -1.0)),
            ("fix_type", fix_type if isinstance(fix_type, WireValue) else WireValue.integer(fix_type)),
            ("time_utc", WireValue.integer(1_700_000_000_000)),
        ]
    )


# ----------------------------------------------------------------------
# Round trips
# ----------------------------------------------------------------------
@pytest.mark.parametrize(
    "vector",
    [Vector3(), Vector3(1.5, -2.25, 1024.0), Vector3(-0.125, 0.0078125, -65504.0)],
)
def test_vector3_round_trip(vector):
    assert decode_vector3(encode_vector3(vector)) == vector


def test_vector3_round_trip_through_msgpack_bytes():
    vector = Vector3(0.5, -7.75, 12.0)

    assert decode_vector3(unpack(pack(encode_vector3(vector)))) == vector


def test_quaternion_round_trip():
    quaternion = Quaternion(w=0.5, x=-0.5, y=0.25, z=0.75)

    assert decode_quaternion(encode_quaternion(quaternion)) == quaternion


def test_geo_point_round_trip_keeps_double_precision_coordinates():
    point = GeoPoint(latitude=47.641468, longitude=-122.140165, altitude=122.5)

    assert decode_geo_point(unpack(pack(encode_geo_point(point)))) == point


def test_pose_and_yaw_mode_round_trip():
    pose = Pose(Vector3(1.0, 2.0, -3.0), Quaternion(1.0, 0.0, 0.0, 0.0))
    yaw_mode = YawMode(is_rate=False, yaw_or_rate=45.0)

    assert decode_pose(encode_pose(pose)) == pose
    assert decode_yaw_mode(encode_yaw_mode(yaw_mode)) == yaw_mode


def test_encode_uses_documented_field_order_and_widths():
    encoded = encode_vector3(Vector3(1.0, 2.0, 3.0))

    assert [key.value for key, _ in encoded.pairs] == ["x_val", "y_val", "z_val"]
    assert {val.kind for _, val in encoded.pairs} == {WireKind.FLOAT32}

    yaw = encode_yaw_mode(YawMode(True, 10.0))
    assert [(key.value, val.kind) for key, val in yaw.pairs] == [
        ("is_rate", WireKind.BOOL),
        ("yaw_or_rate", WireKind.FLOAT32),
    ]

    geo = encode_geo_point(GeoPoint(1.0, 2.0, 3.0))
    assert [val.kind for _, val in geo.pairs] == [
        WireKind.FLOAT64,
        WireKind.FLOAT64,
        WireKind.FLOAT32,
    ]


def test_encode_rounds_to_single_precision():
    encoded = encode_vector3(Vector3(0.1, 0.0, 0.0))

    assert decode_vector3(encoded).x == pytest.approx(0.1, rel=1e-7)
    assert decode_vector3(encoded).x != 0.1


# ----------------------------------------------------------------------
# Positional decoding
# ----------------------------------------------------------------------
def test_decode_reads_by_position_not_key():
    payload = WireValue.record(
        [
            ("z_val", WireValue.float64(1.0)),
            ("y_val", WireValue.float64(2.0)),
            ("x_val", WireValue.float64(3.0)),
        ]
    )

    assert decode_vector3(payload) == Vector3(1.0, 2.0, 3.0)


def test_decode_accepts_integer_cells_for_floats():
    payload = WireValue.record(
        [("a", WireValue.integer(1)), ("b", WireValue.float32(2.5)), ("c", WireValue.integer(-4))]
    )

    assert decode_vector3(payload) == Vector3(1.0, 2.5, -4.0)


def test_decode_ignores_trailing_fields():
    payload = WireValue.mapping(
        list(_vector(1.0, 2.0, 3.0).pairs) + [(WireValue.string("w_val"), WireValue.nil())]
    )

    assert decode_vector3(payload) == Vector3(1.0, 2.0, 3.0)


def test_short_map_is_schema_mismatch():
    payload = WireValue.record([("x_val", WireValue.float64(1.0)), ("y_val", WireValue.float64(2.0))])

    with pytest.raises(SchemaMismatch) as excinfo:
        decode_vector3(payload)

    assert excinfo.value.expected_fields == 3
    assert excinfo.value.got_fields == 2
    assert excinfo.value.type_name == "Vector3"


def test_non_map_is_schema_mismatch():
    with pytest.raises(SchemaMismatch) as excinfo:
        decode_quaternion(WireValue.sequence([WireValue.float64(1.0)] * 4))

    assert excinfo.value.expected == "map"
    assert excinfo.value.got == "seq"


def test_uncoercible_field_reports_index_and_kind():
    payload = WireValue.record(
        [
            ("x_val", WireValue.float64(1.0)),
            ("y_val", WireValue.string("two")),
            ("z_val", WireValue.float64(3.0)),
        ]
    )

    with pytest.raises(SchemaMismatch) as excinfo:
        decode_vector3(payload)

    assert excinfo.value.field_index == 1
    assert excinfo.value.expected_kind == "float32"
    assert excinfo.value.got == "str"


def test_bool_is_not_a_number():
    payload = WireValue.record(
        [("is_rate", WireValue.integer(1)), ("yaw_or_rate", WireValue.float64(0.0))]
    )

    with pytest.raises(SchemaMismatch) as excinfo:
        decode_yaw_mode(payload)

    assert excinfo.value.field_index == 0
    assert excinfo.value.expected_kind == "bool"


def test_nested_mismatch_is_attributed_to_outer_field():
    payload = WireValue.record(
        [("position", _vector(1.0, 2.0, 3.0)), ("orientation", WireValue.nil())]
    )

    with pytest.raises(SchemaMismatch) as excinfo:
        decode_pose(payload)

    assert excinfo.value.type_name == "Pose"
    assert excinfo.value.field_index == 1
    assert "Quaternion" in str(excinfo.value)


@pytest.mark.parametrize(
    "payload",
    [
        WireValue.nil(),
        WireValue.boolean(True),
        WireValue.integer(5),
        WireValue.string("x"),
        WireValue.binary(b"x"),
        WireValue.mapping([]),
        WireValue.record([("time_stamp", WireValue.string("now"))] * 4),
    ],
)
def test_decoders_never_raise_anything_but_schema_mismatch(payload):
    decoders = [
        decode_vector3,
        decode_quaternion,
        decode_geo_point,
        decode_pose,
        decode_yaw_mode,
        decode_imu_data,
        decode_gps_data,
        decode_gnss_report,
        decode_barometer_data,
        decode_magnetometer_data,
        decode_distance_sensor_data,
        decode_environment_state,
    ]
    for decoder in decoders:
        with pytest.raises(SchemaMismatch):
            decoder(payload)


# ----------------------------------------------------------------------
# Enums
# ----------------------------------------------------------------------
def test_image_type_codes():
    assert [encode_image_type(member).value for member in ImageType] == list(range(9))
    assert decode_image_type(WireValue.integer(8)) is ImageType.OPTICAL_FLOW_VIS


def test_unknown_image_type_code():
    with pytest.raises(UnknownVariant) as excinfo:
        decode_image_type(WireValue.integer(9))

    assert excinfo.value.code == 9
    assert excinfo.value.enum_name == "ImageType"
    assert isinstance(excinfo.value, SchemaMismatch)


def test_drivetrain_codes():
    assert encode_drivetrain(DrivetrainType.MAX_DEGREE_OF_FREEDOM) == WireValue.integer(0)
    assert encode_drivetrain(DrivetrainType.FORWARD_ONLY) == WireValue.integer(1)
    assert decode_drivetrain(WireValue.integer(1)) is DrivetrainType.FORWARD_ONLY
    with pytest.raises(UnknownVariant):
        decode_drivetrain(WireValue.integer(2))


def test_enum_requires_integer_code():
    with pytest.raises(SchemaMismatch) as excinfo:
        decode_drivetrain(WireValue.string("ForwardOnly"))

    assert not isinstance(excinfo.value, UnknownVariant)


# ----------------------------------------------------------------------
# Telemetry
# ----------------------------------------------------------------------
def test_decode_imu_data():
    payload = WireValue.record(
        [
            ("time_stamp", WireValue.integer(123456789)),
            ("orientation", _quaternion(1.0, 0.0, 0.0, 0.0)),
            ("angular_velocity", _vector(0.0, 0.5, 0.0)),
            ("linear_acceleration", _vector(0.0, 0.0, -9.75)),
        ]
    )

    imu = decode_imu_data(payload)

    assert imu.time_stamp == 123456789
    assert imu.orientation == Quaternion(1.0, 0.0, 0.0, 0.0)
    assert imu.angular_velocity == Vector3(0.0, 0.5, 0.0)
    assert imu.linear_acceleration == Vector3(0.0, 0.0, -9.75)


def test_imu_timestamp_must_be_integer():
    payload = WireValue.record(
        [
            ("time_stamp", WireValue.float64(1.5)),
            ("orientation", _quaternion(1.0, 0.0, 0.0, 0.0)),
            ("angular_velocity", _vector(0.0, 0.0, 0.0)),
            ("linear_acceleration", _vector(0.0, 0.0, 0.0)),
        ]
    )

    with pytest.raises(SchemaMismatch) as excinfo:
        decode_imu_data(payload)

    assert excinfo.value.field_index == 0
    assert excinfo.value.expected_kind == "int"


def test_decode_gps_data_with_nested_report():
    payload = WireValue.record(
        [
            ("time_stamp", WireValue.integer(42)),
            ("gnss", _gnss()),
            ("is_valid", WireValue.boolean(True)),
        ]
    )

    gps = decode_gps_data(payload)

    assert gps.time_stamp == 42
    assert gps.is_valid is True
    assert gps.gnss.fix_type is GnssFixType.FIX_3D
    assert gps.gnss.geo_point.latitude == 47.641468
    assert gps.gnss.eph == 0.5
    assert gps.gnss.velocity == Vector3(0.0, 0.0, -1.0)
    assert gps.gnss.time_utc == 1_700_000_000_000


def test_unknown_fix_type_surfaces_as_unknown_variant_through_nesting():
    payload = WireValue.record(
        [
            ("time_stamp", WireValue.integer(42)),
            ("gnss", _gnss(fix_type=7)),
            ("is_valid", WireValue.boolean(True)),
        ]
    )

    with pytest.raises(UnknownVariant) as excinfo:
        decode_gps_data(payload)

    assert excinfo.value.code == 7
    assert excinfo.value.enum_name == "GnssFixType"


def test_decode_barometer_data_field_order():
    payload = BAROMETER_SCHEMA.encode(
        [
            WireValue.integer(10),
            WireValue.float32(122.0),
            WireValue.float32(101325.0),
            WireValue.float32(1013.25),
        ]
    )

    barometer = decode_barometer_data(payload)

    assert barometer.time_stamp == 10
    assert barometer.altitude == 122.0
    assert barometer.pressure == 101325.0
    assert barometer.qnh == 1013.25


def test_decode_magnetometer_leaves_covariance_undecoded():
    payload = WireValue.record(
        [
            ("time_stamp", WireValue.integer(5)),
            ("magnetic_field_body", _vector(0.25, 0.0, 0.5)),
            ("magnetic_field_covariance", WireValue.sequence([WireValue.float64(1.0)] * 9)),
        ]
    )

    magnetometer = decode_magnetometer_data(payload)

    assert magnetometer.magnetic_field_body == Vector3(0.25, 0.0, 0.5)
    assert magnetometer.magnetic_field_covariance == 0.0


def test_decode_distance_sensor_data():
    payload = WireValue.record(
        [
            ("time_stamp", WireValue.integer(1)),
            ("distance", WireValue.float64(4.5)),
            ("min_distance", WireValue.float64(0.25)),
            ("max_distance", WireValue.float64(40.0)),
            ("relative_pose", _pose()),
        ]
    )

    sensor = decode_distance_sensor_data(payload)

    assert sensor.distance == 4.5
    assert sensor.min_distance == 0.25
    assert sensor.max_distance == 40.0
    assert sensor.relative_pose.position == Vector3(1.0, 2.0, 3.0)


def test_decode_environment_state():
    payload = WireValue.record(
        [
            ("position", _vector(0.0, 0.0, -10.0)),
            ("geo_point", _geo_point(47.5, -122.5, 132.0)),
            ("gravity", _vector(0.0, 0.0, 9.8125)),
            ("air_pressure", WireValue.float64(99000.0)),
            ("temperature", WireValue.float64(287.5)),
            ("air_density", WireValue.float64(1.125)),
        ]
    )

    environment = decode_environment_state(payload)

    assert environment.position == Vector3(0.0, 0.0, -10.0)
    assert environment.geo_point == GeoPoint(47.5, -122.5, 132.0)
    assert environment.gravity.z == 9.8125
    assert environment.air_pressure == 99000.0
    assert environment.temperature == 287.5
    assert environment.air_density == 1.125


def test_imu_schema_is_versioned_and_documented():
    assert IMU_SCHEMA.version == 1
    assert [field.name for field in IMU_SCHEMA.fields] == [
        "time_stamp",
        "orientation",
        "angular_velocity",
        "linear_acceleration",
    ]


# ----------------------------------------------------------------------
# Images and commands
# ----------------------------------------------------------------------
def test_decode_compressed_image_from_bin_and_array():
    assert decode_compressed_image(WireValue.binary(b"\x89PNG")).data == b"\x89PNG"
    as_array = WireValue.sequence(WireValue.integer(byte) for byte in b"\x89PNG")
    assert decode_compressed_image(as_array).data == b"\x89PNG"


def test_decode_compressed_image_rejects_bad_payloads():
    with pytest.raises(SchemaMismatch):
        decode_compressed_image(WireValue.record([]))

    with pytest.raises(SchemaMismatch) as excinfo:
        decode_compressed_image(WireValue.sequence([WireValue.integer(1), WireValue.integer(256)]))
    assert excinfo.value.field_index == 1


def test_encode_image_request_order():
    encoded = encode_image_request(
        ImageRequest("front_center", ImageType.DEPTH_VIS, pixels_as_float=True, compress=False)
    )

    assert encoded.to_python() == {
        "camera_name": "front_center",
        "image_type": 3,
        "pixels_as_float": True,
        "compress": False,
    }
    assert [key.value for key, _ in encoded.pairs] == [
        "camera_name",
        "image_type",
        "pixels_as_float",
        "compress",
    ]


def test_encode_path_is_array_of_vectors():
    encoded = encode_path(Path([Vector3(1.0, 0.0, -5.0), Vector3(2.0, 0.0, -5.0)]))

    assert encoded.kind is WireKind.SEQ
    assert [decode_vector3(item) for item in encoded.items] == [
        Vector3(1.0, 0.0, -5.0),
        Vector3(2.0, 0.0, -5.0),
    ]


def test_scalar_decoders():
    assert decode_bool(WireValue.boolean(False)) is False
    assert decode_int(WireValue.integer(3)) == 3
    assert decode_float32(WireValue.integer(3)) == 3.0
    with pytest.raises(SchemaMismatch):
        decode_bool(WireValue.nil())
    with pytest.raises(SchemaMismatch):
        decode_int(WireValue.float64(1.0))


def test_compressed_image_decodes_with_pillow():
    from PIL import Image

    buffer = io.BytesIO()
    Image.new("RGB", (4, 3), color=(255, 0, 0)).save(buffer, format="PNG")
    payload = WireValue.binary(buffer.getvalue())

    image = decode_compressed_image(payload)

    assert image.is_png
    assert len(image) == len(buffer.getvalue())
    decoded = image.to_pil()
    assert decoded.size == (4, 3)
    assert decoded.getpixel((0, 0)) == (255, 0, 0)


def test_enum_field_with_wrong_kind_names_enclosing_record():
    with pytest.raises(SchemaMismatch) as excinfo:
        decode_gnss_report(_gnss(fix_type=WireValue.string("3D")))

    assert not isinstance(excinfo.value, UnknownVariant)
    assert excinfo.value.type_name == "GnssReport"
    assert excinfo.value.field_index == 4
    assert excinfo.value.expected_kind == "GnssFixType"
    assert excinfo.value.got == "str"

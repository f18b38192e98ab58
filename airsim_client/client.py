"""High-level multirotor commands on top of :class:`RpcConnection`."""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from . import constants
from .codec import (
    decode_barometer_data,
    decode_bool,
    decode_compressed_image,
    decode_distance_sensor_data,
    decode_environment_state,
    decode_geo_point,
    decode_gps_data,
    decode_imu_data,
    decode_magnetometer_data,
    decode_pose,
    encode_drivetrain,
    encode_image_type,
    encode_path,
    encode_yaw_mode,
)
from .config import AirSimConfig, ClientConfig
from .connection import RpcConnection
from .models import (
    BarometerData,
    CompressedImage,
    DistanceSensorData,
    DrivetrainType,
    EnvironmentState,
    GeoPoint,
    GpsData,
    ImageType,
    ImuData,
    MagnetometerData,
    Path,
    Pose,
    Vector3,
    YawMode,
)
from .wire import WireValue

LOGGER = logging.getLogger(__name__)

# Server-side "wait forever" value used by the simulator's own clients.
FOREVER_SECONDS = 3e38


class MultirotorClient:
    """Command façade for one multirotor vehicle.

    Every command targeting a vehicle carries ``vehicle_name`` (empty string
    for the default vehicle) as an explicit parameter. Maneuvers block until
    the server reports completion or its own ``timeout_sec`` elapses; the
    RPC bound is extended past ``timeout_sec`` so the server decides first.

    Usage:
        async with await MultirotorClient.connect("127.0.0.1:41451") as client:
            await client.confirm_connection()
            await client.enable_api_control(True)
            await client.arm_disarm(True)
            await client.take_off_async()
    """

    def __init__(
        self, connection: RpcConnection, *, vehicle_name: Optional[str] = None
    ) -> None:
        self._connection = connection
        self._vehicle_name = (
            connection.vehicle_name if vehicle_name is None else vehicle_name
        )

    @classmethod
    async def connect(
        cls,
        address: str = f"{constants.DEFAULT_AIRSIM_HOST}:{constants.DEFAULT_AIRSIM_PORT}",
        vehicle_name: str = "",
        *,
        connect_timeout: float = constants.DEFAULT_CONNECT_TIMEOUT_SECONDS,
        call_timeout: float = constants.DEFAULT_CALL_TIMEOUT_SECONDS,
        ping_timeout: float = constants.DEFAULT_PING_TIMEOUT_SECONDS,
    ) -> MultirotorClient:
        connection = await RpcConnection.connect(
            address,
            vehicle_name,
            connect_timeout=connect_timeout,
            call_timeout=call_timeout,
            ping_timeout=ping_timeout,
        )
        return cls(connection)

    @classmethod
    async def from_config(cls, config: ClientConfig | AirSimConfig) -> MultirotorClient:
        airsim = config.airsim if isinstance(config, ClientConfig) else config
        return await cls.connect(
            airsim.address,
            airsim.vehicle_name,
            connect_timeout=airsim.connect_timeout_seconds,
            call_timeout=airsim.call_timeout_seconds,
            ping_timeout=airsim.ping_timeout_seconds,
        )

    @property
    def connection(self) -> RpcConnection:
        return self._connection

    @property
    def vehicle_name(self) -> str:
        return self._vehicle_name

    async def aclose(self) -> None:
        await self._connection.close()

    async def __aenter__(self) -> MultirotorClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Connection and control
    # ------------------------------------------------------------------
    async def ping(self) -> bool:
        return await self._connection.ping()

    async def confirm_connection(self) -> bool:
        return await self._connection.confirm_connection()

    async def reset(self) -> bool:
        """Reset the vehicle to its starting state.

        API control and arming must be requested again afterwards.
        """
        return self._completed(await self._connection.call("reset"))

    async def enable_api_control(self, is_enabled: bool) -> bool:
        return self._completed(
            await self._call("enableApiControl", [WireValue.boolean(is_enabled)])
        )

    async def is_api_control_enabled(self) -> bool:
        return decode_bool(await self._call("isApiControlEnabled", []))

    async def arm_disarm(self, arm: bool) -> bool:
        return decode_bool(await self._call("armDisarm", [WireValue.boolean(arm)]))

    # ------------------------------------------------------------------
    # Maneuvers
    # ------------------------------------------------------------------
    async def take_off_async(self, timeout_sec: float = 20.0) -> bool:
        """Take off to roughly 3m above ground. The vehicle should be at rest."""
        return await self._maneuver("takeoff", [WireValue.float32(timeout_sec)], timeout_sec)

    async def land_async(self, timeout_sec: float = 60.0) -> bool:
        return await self._maneuver("land", [WireValue.float32(timeout_sec)], timeout_sec)

    async def go_home_async(self, timeout_sec: float = FOREVER_SECONDS) -> bool:
        return await self._maneuver("goHome", [WireValue.float32(timeout_sec)], timeout_sec)

    async def hover_async(self) -> bool:
        return self._completed(await self._call("hover", []))

    async def move_to_position_async(
        self,
        position: Vector3,
        velocity: float,
        timeout_sec: float = FOREVER_SECONDS,
        drivetrain: DrivetrainType = DrivetrainType.MAX_DEGREE_OF_FREEDOM,
        yaw_mode: Optional[YawMode] = None,
        lookahead: int = -1,
        adaptive_lookahead: int = 0,
    ) -> bool:
        """Fly to ``position`` (NED) at ``velocity`` m/s.

        Args:
            position: Goal position.
            velocity: Desired speed along the path.
            timeout_sec: Server-side bound on the maneuver.
            drivetrain: ``FORWARD_ONLY`` keeps the nose on the direction of travel.
            yaw_mode: Fixed heading or rotation rate (default: zero rate).
            lookahead: Path-following lookahead; ``-1`` selects automatic.
            adaptive_lookahead: ``0`` disables adaptive lookahead.

        The server binds this handler as ``moveToPosition``, not
        ``moveToPositionAsync``; the ``Async`` suffix only exists on client
        method names. No vehicle name is appended.
        """
        params = [
            WireValue.float32(position.x),
            WireValue.float32(position.y),
            WireValue.float32(position.z),
            WireValue.float32(velocity),
            WireValue.float32(timeout_sec),
            encode_drivetrain(drivetrain),
            encode_yaw_mode(yaw_mode or YawMode()),
            WireValue.integer(lookahead),
            WireValue.integer(adaptive_lookahead),
        ]
        result = await self._connection.call(
            "moveToPosition", params, timeout=self._maneuver_timeout(timeout_sec)
        )
        return self._completed(result)

    async def move_on_path_async(
        self,
        path: Path,
        velocity: float,
        timeout_sec: float = FOREVER_SECONDS,
        drivetrain: DrivetrainType = DrivetrainType.MAX_DEGREE_OF_FREEDOM,
        yaw_mode: Optional[YawMode] = None,
        lookahead: int = -1,
        adaptive_lookahead: int = 0,
    ) -> bool:
        if not path.waypoints:
            raise ValueError("Path must contain at least one waypoint")
        params = [
            encode_path(path),
            WireValue.float32(velocity),
            WireValue.float32(timeout_sec),
            encode_drivetrain(drivetrain),
            encode_yaw_mode(yaw_mode or YawMode()),
            WireValue.integer(lookahead),
            WireValue.integer(adaptive_lookahead),
        ]
        return await self._maneuver("moveOnPath", params, timeout_sec)

    async def move_by_velocity_async(
        self,
        velocity: Vector3,
        duration: float,
        drivetrain: DrivetrainType = DrivetrainType.MAX_DEGREE_OF_FREEDOM,
        yaw_mode: Optional[YawMode] = None,
    ) -> bool:
        """Fly at ``velocity`` in the world NED frame for ``duration`` seconds."""
        return await self._move_by_velocity(
            "moveByVelocity", velocity.x, velocity.y, velocity.z, duration, drivetrain, yaw_mode
        )

    async def move_by_velocity_z_async(
        self,
        vx: float,
        vy: float,
        z: float,
        duration: float,
        drivetrain: DrivetrainType = DrivetrainType.MAX_DEGREE_OF_FREEDOM,
        yaw_mode: Optional[YawMode] = None,
    ) -> bool:
        """Fly at horizontal velocity in the world frame while holding altitude ``z``."""
        return await self._move_by_velocity(
            "moveByVelocityZ", vx, vy, z, duration, drivetrain, yaw_mode
        )

    async def move_by_velocity_body_frame_async(
        self,
        velocity: Vector3,
        duration: float,
        drivetrain: DrivetrainType = DrivetrainType.MAX_DEGREE_OF_FREEDOM,
        yaw_mode: Optional[YawMode] = None,
    ) -> bool:
        return await self._move_by_velocity(
            "moveByVelocityBodyFrame",
            velocity.x,
            velocity.y,
            velocity.z,
            duration,
            drivetrain,
            yaw_mode,
        )

    async def move_by_velocity_z_body_frame_async(
        self,
        vx: float,
        vy: float,
        z: float,
        duration: float,
        drivetrain: DrivetrainType = DrivetrainType.MAX_DEGREE_OF_FREEDOM,
        yaw_mode: Optional[YawMode] = None,
    ) -> bool:
        return await self._move_by_velocity(
            "moveByVelocityZBodyFrame", vx, vy, z, duration, drivetrain, yaw_mode
        )

    # ------------------------------------------------------------------
    # Telemetry
    # ------------------------------------------------------------------
    async def get_home_geo_point(self) -> GeoPoint:
        return decode_geo_point(await self._call("getHomeGeoPoint", []))

    async def get_imu_data(self, imu_name: str = "") -> ImuData:
        return decode_imu_data(
            await self._call("getImuData", [WireValue.string(imu_name)])
        )

    async def get_barometer_data(self, barometer_name: str = "") -> BarometerData:
        return decode_barometer_data(
            await self._call("getBarometerData", [WireValue.string(barometer_name)])
        )

    async def get_magnetometer_data(self, magnetometer_name: str = "") -> MagnetometerData:
        return decode_magnetometer_data(
            await self._call("getMagnetometerData", [WireValue.string(magnetometer_name)])
        )

    async def get_gps_data(self, gps_name: str = "") -> GpsData:
        return decode_gps_data(
            await self._call("getGpsData", [WireValue.string(gps_name)])
        )

    async def get_distance_sensor_data(
        self, distance_sensor_name: str = ""
    ) -> DistanceSensorData:
        return decode_distance_sensor_data(
            await self._call(
                "getDistanceSensorData", [WireValue.string(distance_sensor_name)]
            )
        )

    async def sim_get_vehicle_pose(self) -> Pose:
        return decode_pose(await self._call("simGetVehiclePose", []))

    async def sim_get_ground_truth_environment(self) -> EnvironmentState:
        return decode_environment_state(
            await self._call("simGetGroundTruthEnvironment", [])
        )

    async def sim_get_image(
        self,
        camera_name: str,
        image_type: ImageType = ImageType.SCENE,
        *,
        external: bool = False,
    ) -> CompressedImage:
        """Fetch one compressed (PNG) image from ``camera_name``."""
        result = await self._connection.call(
            "simGetImage",
            [
                WireValue.string(camera_name),
                encode_image_type(image_type),
                WireValue.string(self._vehicle_name),
                WireValue.boolean(external),
            ],
        )
        image = decode_compressed_image(result)
        if not image.data:
            LOGGER.warning(
                "simGetImage returned no data (camera=%r, type=%s)",
                camera_name,
                image_type.name,
            )
        return image

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _call(
        self,
        method: str,
        params: Sequence[WireValue],
        *,
        timeout: Optional[float] = None,
    ) -> WireValue:
        return await self._connection.call(
            method, [*params, WireValue.string(self._vehicle_name)], timeout=timeout
        )

    async def _maneuver(
        self, method: str, params: Sequence[WireValue], timeout_sec: float
    ) -> bool:
        result = await self._call(
            method, params, timeout=self._maneuver_timeout(timeout_sec)
        )
        return self._completed(result)

    async def _move_by_velocity(
        self,
        method: str,
        first: float,
        second: float,
        third: float,
        duration: float,
        drivetrain: DrivetrainType,
        yaw_mode: Optional[YawMode],
    ) -> bool:
        params = [
            WireValue.float32(first),
            WireValue.float32(second),
            WireValue.float32(third),
            WireValue.float32(duration),
            encode_drivetrain(drivetrain),
            encode_yaw_mode(yaw_mode or YawMode()),
        ]
        return await self._maneuver(method, params, duration)

    def _maneuver_timeout(self, timeout_sec: float) -> float:
        call_timeout = self._connection.call_timeout
        if not math.isfinite(timeout_sec) or timeout_sec >= FOREVER_SECONDS:
            return call_timeout
        return max(call_timeout, timeout_sec + constants.MANEUVER_TIMEOUT_MARGIN_SECONDS)

    @staticmethod
    def _completed(result: WireValue) -> bool:
        # void server methods answer nil; completion itself is success.
        if result.is_nil:
            return True
        return decode_bool(result)

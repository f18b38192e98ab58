"""Geometry and command argument types shared with the simulator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List


@dataclass(frozen=True, slots=True)
class Vector3:
    """Cartesian vector in the NED frame, metres (or m/s, m/s^2)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass(frozen=True, slots=True)
class Quaternion:
    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass(frozen=True, slots=True)
class GeoPoint:
    latitude: float = 0.0
    longitude: float = 0.0
    altitude: float = 0.0


@dataclass(frozen=True, slots=True)
class Pose:
    position: Vector3 = field(default_factory=Vector3)
    orientation: Quaternion = field(default_factory=Quaternion)


@dataclass(frozen=True, slots=True)
class YawMode:
    """Heading policy during a maneuver.

    With ``is_rate`` false, ``yaw_or_rate`` is a target heading in degrees;
    otherwise it is a rotation rate in degrees per second.
    """

    is_rate: bool = True
    yaw_or_rate: float = 0.0


class DrivetrainType(IntEnum):
    """Whether the vehicle's heading follows its direction of travel.

    ``FORWARD_ONLY`` keeps the front facing the direction of travel;
    ``MAX_DEGREE_OF_FREEDOM`` allows crab-like movement.
    """

    MAX_DEGREE_OF_FREEDOM = 0
    FORWARD_ONLY = 1


@dataclass(slots=True)
class Path:
    """Ordered waypoints for ``moveOnPath``."""

    waypoints: List[Vector3] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.waypoints)

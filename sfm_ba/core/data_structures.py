"""
Shared value types for the residual core.

These dataclasses are immutable containers used across:
- residual functors (the stored 2D observation)
- structured intrinsic records (the rig sub-pose)
- building flat parameter blocks for an external optimizer
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np

from sfm_ba.geometry.rotation import (
    angle_axis_to_rotation_matrix,
    rotation_matrix_to_angle_axis,
)


def _as_vector(values, size: int, name: str) -> Tuple[float, ...]:
    arr = np.asarray(values, dtype=np.float64).reshape(-1)
    if arr.size != size:
        raise ValueError(f"{name} must have {size} values, got {arr.size}")
    return tuple(float(x) for x in arr)


@dataclass(frozen=True)
class Observation:
    """
    A 2D detection of a 3D point in one image, in pixel coordinates.

    This is the only state a residual functor holds.
    """

    x: float
    y: float

    def __post_init__(self):
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    @classmethod
    def from_uv(cls, uv: Union["Observation", np.ndarray, Tuple[float, float]]) -> "Observation":
        """Build from an existing Observation or any (2,) sequence."""
        if isinstance(uv, Observation):
            return uv
        x, y = _as_vector(uv, 2, "Observation")
        return cls(x, y)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=np.float64)


@dataclass(frozen=True)
class Pose:
    """
    Rigid transform from world to camera coordinates: X_cam = R(rotation) X + translation.

    `rotation` is an angle-axis vector; the flat block layout is
    [rx, ry, rz, tx, ty, tz].
    """

    rotation: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    translation: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self):
        object.__setattr__(self, "rotation", _as_vector(self.rotation, 3, "rotation"))
        object.__setattr__(
            self, "translation", _as_vector(self.translation, 3, "translation")
        )

    @classmethod
    def identity(cls) -> "Pose":
        return cls()

    @classmethod
    def from_block(cls, block) -> "Pose":
        values = _as_vector(block, 6, "Extrinsic block")
        return cls(values[:3], values[3:])

    @classmethod
    def from_matrix(cls, R: np.ndarray, t: np.ndarray) -> "Pose":
        """
        Build from a rotation matrix and translation.

        Args:
            R: Rotation matrix (3x3) from world to camera coordinates.
            t: Translation vector (3,) or (3, 1).
        """
        rvec = rotation_matrix_to_angle_axis(R)
        return cls(rvec, np.asarray(t, dtype=np.float64).reshape(3))

    def to_block(self) -> np.ndarray:
        return np.array(self.rotation + self.translation, dtype=np.float64)

    def rotation_matrix(self) -> np.ndarray:
        return angle_axis_to_rotation_matrix(self.rotation)


__all__ = ["Observation", "Pose"]

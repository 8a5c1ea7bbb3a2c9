"""
Structured intrinsic records and their flat parameter blocks.

Internally cameras are described with named fields; `to_block()` and
`from_block()` preserve the exact flattening order an external optimizer
addresses when wiring parameter blocks to residual functors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, Type, Union

import numpy as np

from sfm_ba.cameras.intrinsics import CameraModel
from sfm_ba.cameras.pixel_models import predict_pixel
from sfm_ba.core.data_structures import Pose


def _check_block(block, model: CameraModel) -> np.ndarray:
    arr = np.asarray(block, dtype=np.float64).reshape(-1)
    if arr.size != model.intrinsic_block_size:
        raise ValueError(
            f"{model.value} intrinsic block must have {model.intrinsic_block_size} "
            f"values, got {arr.size}"
        )
    return arr


class _IntrinsicsMixin:
    model: ClassVar[CameraModel]

    def to_block(self) -> np.ndarray:
        raise NotImplementedError

    def project(self, pose: Pose, point) -> np.ndarray:
        """
        Predicted pixel of a world point seen from `pose`.

        Args:
            pose: Camera pose (world to camera).
            point: 3D point (3,).

        Returns:
            (2,) pixel coordinates; non-finite when the depth is zero.
        """
        return predict_pixel(self.model, self.to_block(), pose.to_block(), point)


@dataclass(frozen=True)
class PinholeIntrinsics(_IntrinsicsMixin):
    """Focal length and principal point, in pixels."""

    focal: float
    ppx: float
    ppy: float

    model: ClassVar[CameraModel] = CameraModel.PINHOLE

    def to_block(self) -> np.ndarray:
        return np.array([self.focal, self.ppx, self.ppy], dtype=np.float64)

    @classmethod
    def from_block(cls, block) -> "PinholeIntrinsics":
        b = _check_block(block, cls.model)
        return cls(float(b[0]), float(b[1]), float(b[2]))


@dataclass(frozen=True)
class RadialK1Intrinsics(_IntrinsicsMixin):
    focal: float
    ppx: float
    ppy: float
    k1: float = 0.0

    model: ClassVar[CameraModel] = CameraModel.PINHOLE_RADIAL_K1

    def to_block(self) -> np.ndarray:
        return np.array([self.focal, self.ppx, self.ppy, self.k1], dtype=np.float64)

    @classmethod
    def from_block(cls, block) -> "RadialK1Intrinsics":
        b = _check_block(block, cls.model)
        return cls(*(float(x) for x in b))


@dataclass(frozen=True)
class RadialK3Intrinsics(_IntrinsicsMixin):
    focal: float
    ppx: float
    ppy: float
    k1: float = 0.0
    k2: float = 0.0
    k3: float = 0.0

    model: ClassVar[CameraModel] = CameraModel.PINHOLE_RADIAL_K3

    def to_block(self) -> np.ndarray:
        return np.array(
            [self.focal, self.ppx, self.ppy, self.k1, self.k2, self.k3],
            dtype=np.float64,
        )

    @classmethod
    def from_block(cls, block) -> "RadialK3Intrinsics":
        b = _check_block(block, cls.model)
        return cls(*(float(x) for x in b))


@dataclass(frozen=True)
class RigIntrinsics(_IntrinsicsMixin):
    """
    Pinhole intrinsics plus the fixed offset of this camera on its rig.

    Block layout: [focal, ppx, ppy, subpose rotation (3), subpose translation (3)].
    """

    focal: float
    ppx: float
    ppy: float
    subpose: Pose = field(default_factory=Pose.identity)

    model: ClassVar[CameraModel] = CameraModel.PINHOLE_RIG

    def to_block(self) -> np.ndarray:
        return np.concatenate(
            [np.array([self.focal, self.ppx, self.ppy], dtype=np.float64), self.subpose.to_block()]
        )

    @classmethod
    def from_block(cls, block) -> "RigIntrinsics":
        b = _check_block(block, cls.model)
        return cls(float(b[0]), float(b[1]), float(b[2]), Pose.from_block(b[3:9]))


Intrinsics = Union[PinholeIntrinsics, RadialK1Intrinsics, RadialK3Intrinsics, RigIntrinsics]

INTRINSICS_TYPES: Dict[CameraModel, Type] = {
    CameraModel.PINHOLE: PinholeIntrinsics,
    CameraModel.PINHOLE_RADIAL_K1: RadialK1Intrinsics,
    CameraModel.PINHOLE_RADIAL_K3: RadialK3Intrinsics,
    CameraModel.PINHOLE_RIG: RigIntrinsics,
}


def intrinsics_from_block(model, block) -> Intrinsics:
    """Structured record for a flat intrinsic block of the given model."""
    return INTRINSICS_TYPES[CameraModel.parse(model)].from_block(block)


__all__ = [
    "PinholeIntrinsics",
    "RadialK1Intrinsics",
    "RadialK3Intrinsics",
    "RigIntrinsics",
    "Intrinsics",
    "INTRINSICS_TYPES",
    "intrinsics_from_block",
]

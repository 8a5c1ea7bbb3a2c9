"""
Camera model identifiers, intrinsic block layouts and the intrinsic mapping.
"""

from __future__ import annotations

from enum import Enum
from typing import Tuple

# Offsets into the flat intrinsic block, shared by every model.
OFFSET_FOCAL_LENGTH = 0
OFFSET_PRINCIPAL_POINT_X = 1
OFFSET_PRINCIPAL_POINT_Y = 2
# Radial models.
OFFSET_DISTO_K1 = 3
OFFSET_DISTO_K2 = 4
OFFSET_DISTO_K3 = 5
# Rig model: sub-camera pose [R_s; t_s].
OFFSET_SUBPOSE_ROTATION = 3
OFFSET_SUBPOSE_TRANSLATION = 6

EXTRINSIC_BLOCK_SIZE = 6
POINT_BLOCK_SIZE = 3
NUM_RESIDUALS = 2


class CameraModel(str, Enum):
    """Supported projection models."""

    PINHOLE = "pinhole"
    PINHOLE_RADIAL_K1 = "pinhole_radial_k1"
    PINHOLE_RADIAL_K3 = "pinhole_radial_k3"
    PINHOLE_RIG = "pinhole_rig"

    @property
    def intrinsic_block_size(self) -> int:
        return _INTRINSIC_BLOCK_SIZES[self]

    @property
    def parameter_block_sizes(self) -> Tuple[int, int, int]:
        """Sizes of (intrinsics, extrinsics, point) blocks."""
        return (self.intrinsic_block_size, EXTRINSIC_BLOCK_SIZE, POINT_BLOCK_SIZE)

    @classmethod
    def parse(cls, model) -> "CameraModel":
        """Accept an enum member or its string value."""
        if isinstance(model, cls):
            return model
        try:
            return cls(str(model).lower())
        except ValueError:
            known = ", ".join(m.value for m in cls)
            raise ValueError(
                f"Unknown camera model {model!r}; expected one of: {known}"
            ) from None


_INTRINSIC_BLOCK_SIZES = {
    CameraModel.PINHOLE: 3,
    CameraModel.PINHOLE_RADIAL_K1: 4,
    CameraModel.PINHOLE_RADIAL_K3: 6,
    CameraModel.PINHOLE_RIG: 9,
}


def apply_intrinsics(focal, principal_point_x, principal_point_y, x_d, y_d) -> Tuple:
    """
    Map normalized image coordinates to pixels with an isotropic focal length.

    Args:
        focal: Focal length in pixels.
        principal_point_x, principal_point_y: Principal point in pixels.
        x_d, y_d: (Distorted) normalized coordinates.

    Returns:
        Pixel coordinates (u, v).
    """
    projected_x = principal_point_x + focal * x_d
    projected_y = principal_point_y + focal * y_d
    return projected_x, projected_y


__all__ = [
    "OFFSET_FOCAL_LENGTH",
    "OFFSET_PRINCIPAL_POINT_X",
    "OFFSET_PRINCIPAL_POINT_Y",
    "OFFSET_DISTO_K1",
    "OFFSET_DISTO_K2",
    "OFFSET_DISTO_K3",
    "OFFSET_SUBPOSE_ROTATION",
    "OFFSET_SUBPOSE_TRANSLATION",
    "EXTRINSIC_BLOCK_SIZE",
    "POINT_BLOCK_SIZE",
    "NUM_RESIDUALS",
    "CameraModel",
    "apply_intrinsics",
]

"""
Reprojection residual functors, one per camera model.

Each functor stores a single 2D observation and maps
(intrinsic block, extrinsic block, 3D point block) to the 2-vector
`predicted_pixel - observed_pixel`.

Parameter blocks:
  - intrinsics: model dependent, see `sfm_ba.cameras.intrinsics`
      pinhole   [focal, ppx, ppy]
      radial K1 [focal, ppx, ppy, k1]
      radial K3 [focal, ppx, ppy, k1, k2, k3]
      rig       [focal, ppx, ppy, subpose rX, rY, rZ, subpose tx, ty, tz]
  - extrinsics: [rX, rY, rZ, tx, ty, tz] (angle-axis rotation, translation)
  - point: [X, Y, Z]

Calling a functor accepts any sequences of numbers or JAX-traced arrays; the
blocks are coerced to float64 JAX arrays first, so degenerate geometry (zero
depth) gives inf/nan instead of raising. `residuals()` returns the same
values as a numpy array.
"""

from __future__ import annotations

from typing import Dict, Sequence, Tuple, Type

import numpy as np

from sfm_ba.autodiff.jax_backend import as_block, stack_outputs
from sfm_ba.cameras.intrinsics import CameraModel
from sfm_ba.cameras.pixel_models import (
    predict_pinhole,
    predict_radial_k1,
    predict_radial_k3,
    predict_rig,
)
from sfm_ba.core.data_structures import Observation


class ResidualFunctor:
    """
    Base class: stores the observation and turns a prediction into a residual.

    Subclasses set `predict` to the stateless pixel model of their camera.
    """

    model: CameraModel

    __slots__ = ("_observation",)

    def __init__(self, observation):
        self._observation = Observation.from_uv(observation)

    @property
    def observation(self) -> Observation:
        return self._observation

    @staticmethod
    def predict(cam_K: Sequence, cam_Rt: Sequence, pos_3dpoint: Sequence) -> Tuple:
        raise NotImplementedError

    def __call__(self, cam_K: Sequence, cam_Rt: Sequence, pos_3dpoint: Sequence) -> Tuple:
        """
        Residual between predicted and observed pixel.

        Args:
            cam_K: Intrinsic block.
            cam_Rt: Extrinsic block (6,).
            pos_3dpoint: 3D point block (3,).

        Returns:
            (r_x, r_y) as 0-d float64 JAX arrays (tracers when differentiated).
        """
        projected_x, projected_y = self.predict(
            as_block(cam_K), as_block(cam_Rt), as_block(pos_3dpoint)
        )
        return (
            projected_x - self._observation.x,
            projected_y - self._observation.y,
        )

    def residuals(self, cam_K, cam_Rt, pos_3dpoint) -> np.ndarray:
        """Plain float64 residual (2,). Degenerate depth yields non-finite values."""
        return np.array(stack_outputs(self(cam_K, cam_Rt, pos_3dpoint)), dtype=np.float64)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(observation=({self._observation.x}, {self._observation.y}))"


class PinholeResidualFunctor(ResidualFunctor):
    model = CameraModel.PINHOLE
    __slots__ = ()
    predict = staticmethod(predict_pinhole)


class RadialK1ResidualFunctor(ResidualFunctor):
    model = CameraModel.PINHOLE_RADIAL_K1
    __slots__ = ()
    predict = staticmethod(predict_radial_k1)


class RadialK3ResidualFunctor(ResidualFunctor):
    model = CameraModel.PINHOLE_RADIAL_K3
    __slots__ = ()
    predict = staticmethod(predict_radial_k3)


class RigResidualFunctor(ResidualFunctor):
    """Rig camera: the rig translation does not enter the residual."""

    model = CameraModel.PINHOLE_RIG
    __slots__ = ()
    predict = staticmethod(predict_rig)


RESIDUAL_FUNCTORS: Dict[CameraModel, Type[ResidualFunctor]] = {
    CameraModel.PINHOLE: PinholeResidualFunctor,
    CameraModel.PINHOLE_RADIAL_K1: RadialK1ResidualFunctor,
    CameraModel.PINHOLE_RADIAL_K3: RadialK3ResidualFunctor,
    CameraModel.PINHOLE_RIG: RigResidualFunctor,
}


__all__ = [
    "ResidualFunctor",
    "PinholeResidualFunctor",
    "RadialK1ResidualFunctor",
    "RadialK3ResidualFunctor",
    "RigResidualFunctor",
    "RESIDUAL_FUNCTORS",
]

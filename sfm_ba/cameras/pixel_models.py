"""
Forward pixel prediction for every camera model.

Each `predict_*` function maps (intrinsic block, extrinsic block, 3D point)
to the predicted pixel (u, v). They are written with generic arithmetic and
`jax.numpy`, so the residual functors reuse them unchanged for plain values
and for JAX-traced Jacobians.
"""

from __future__ import annotations

from typing import Callable, Dict, Sequence, Tuple

import numpy as np

from sfm_ba.autodiff.jax_backend import as_block, stack_outputs
from sfm_ba.cameras.distortion import no_distortion, radial_k1, radial_k3
from sfm_ba.cameras.intrinsics import (
    OFFSET_DISTO_K1,
    OFFSET_DISTO_K2,
    OFFSET_DISTO_K3,
    OFFSET_FOCAL_LENGTH,
    OFFSET_PRINCIPAL_POINT_X,
    OFFSET_PRINCIPAL_POINT_Y,
    OFFSET_SUBPOSE_ROTATION,
    OFFSET_SUBPOSE_TRANSLATION,
    CameraModel,
    apply_intrinsics,
)
from sfm_ba.geometry.projection import (
    perspective_divide,
    project_to_normalized,
    rig_transform_point,
)


def _to_pixel(cam_K, x_d, y_d) -> Tuple:
    return apply_intrinsics(
        cam_K[OFFSET_FOCAL_LENGTH],
        cam_K[OFFSET_PRINCIPAL_POINT_X],
        cam_K[OFFSET_PRINCIPAL_POINT_Y],
        x_d,
        y_d,
    )


def predict_pinhole(cam_K: Sequence, cam_Rt: Sequence, pos_3dpoint: Sequence) -> Tuple:
    """Pinhole camera without distortion; intrinsic block <3>."""
    x_u, y_u = project_to_normalized(cam_Rt, pos_3dpoint)
    x_d, y_d = no_distortion(x_u, y_u)
    return _to_pixel(cam_K, x_d, y_d)


def predict_radial_k1(cam_K: Sequence, cam_Rt: Sequence, pos_3dpoint: Sequence) -> Tuple:
    """Pinhole camera with one radial coefficient; intrinsic block <4>."""
    x_u, y_u = project_to_normalized(cam_Rt, pos_3dpoint)
    x_d, y_d = radial_k1(x_u, y_u, cam_K[OFFSET_DISTO_K1])
    return _to_pixel(cam_K, x_d, y_d)


def predict_radial_k3(cam_K: Sequence, cam_Rt: Sequence, pos_3dpoint: Sequence) -> Tuple:
    """Pinhole camera with three radial coefficients; intrinsic block <6>."""
    x_u, y_u = project_to_normalized(cam_Rt, pos_3dpoint)
    x_d, y_d = radial_k3(
        x_u,
        y_u,
        cam_K[OFFSET_DISTO_K1],
        cam_K[OFFSET_DISTO_K2],
        cam_K[OFFSET_DISTO_K3],
    )
    return _to_pixel(cam_K, x_d, y_d)


def predict_rig(cam_K: Sequence, cam_Rt: Sequence, pos_3dpoint: Sequence) -> Tuple:
    """
    Pinhole camera mounted on a rig; intrinsic block <9>.

    The sub-camera pose lives in the intrinsic block because it is constant
    per physical rig camera. No distortion is applied.
    """
    cam_subpose_R = cam_K[OFFSET_SUBPOSE_ROTATION:OFFSET_SUBPOSE_ROTATION + 3]
    cam_subpose_t = cam_K[OFFSET_SUBPOSE_TRANSLATION:OFFSET_SUBPOSE_TRANSLATION + 3]

    pos_proj = rig_transform_point(cam_Rt, cam_subpose_R, cam_subpose_t, pos_3dpoint)
    x_u, y_u = perspective_divide(pos_proj)
    return _to_pixel(cam_K, x_u, y_u)


PIXEL_MODELS: Dict[CameraModel, Callable] = {
    CameraModel.PINHOLE: predict_pinhole,
    CameraModel.PINHOLE_RADIAL_K1: predict_radial_k1,
    CameraModel.PINHOLE_RADIAL_K3: predict_radial_k3,
    CameraModel.PINHOLE_RIG: predict_rig,
}


def predict_pixel(model, cam_K, cam_Rt, pos_3dpoint) -> np.ndarray:
    """
    Predicted pixel (u, v) for plain values.

    Args:
        model: CameraModel or its string value.
        cam_K: Intrinsic block.
        cam_Rt: Extrinsic block (6,).
        pos_3dpoint: 3D point (3,).

    Returns:
        (2,) float64 array; non-finite for zero depth.
    """
    predict = PIXEL_MODELS[CameraModel.parse(model)]
    uv = predict(as_block(cam_K), as_block(cam_Rt), as_block(pos_3dpoint))
    return np.array(stack_outputs(uv), dtype=np.float64)


__all__ = [
    "predict_pinhole",
    "predict_radial_k1",
    "predict_radial_k3",
    "predict_rig",
    "PIXEL_MODELS",
    "predict_pixel",
]

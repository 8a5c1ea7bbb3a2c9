"""
Angle-axis rotation primitive.

`angle_axis_rotate_point` is written with generic arithmetic plus
`jax.numpy`, so it evaluates plain float64 values and JAX tracers alike. The
small-angle fallback is selected with `jnp.where` rather than a Python branch,
which keeps it valid under `jax.jacfwd` and `jax.jit`. The matrix conversions
are plain-value helpers built on OpenCV's Rodrigues routine.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import cv2
import numpy as np

from sfm_ba.autodiff.jax_backend import jnp

# Below this squared angle the first-order expansion is used.
_EPSILON = float(np.finfo(np.float64).eps)


def _cross(a, b):
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def angle_axis_rotate_point(angle_axis: Sequence, pt: Sequence) -> Tuple:
    """
    Rotate a 3D point by an angle-axis vector (Rodrigues' formula).

    Args:
        angle_axis: Rotation vector (3,), direction is the axis and norm is the
            angle in radians.
        pt: 3D point (3,).

    Returns:
        Rotated point as a 3-tuple.
    """
    theta2 = (
        angle_axis[0] * angle_axis[0]
        + angle_axis[1] * angle_axis[1]
        + angle_axis[2] * angle_axis[2]
    )
    small = theta2 <= _EPSILON

    # sqrt is only taken of a value bounded away from zero, so the unused
    # branch stays finite and does not poison the derivatives.
    theta = jnp.sqrt(jnp.where(small, 1.0, theta2))
    costheta = jnp.cos(theta)
    sintheta = jnp.sin(theta)
    theta_inverse = 1.0 / theta

    w = (
        angle_axis[0] * theta_inverse,
        angle_axis[1] * theta_inverse,
        angle_axis[2] * theta_inverse,
    )
    w_cross_pt = _cross(w, pt)
    tmp = (w[0] * pt[0] + w[1] * pt[1] + w[2] * pt[2]) * (1.0 - costheta)

    rodrigues = (
        pt[0] * costheta + w_cross_pt[0] * sintheta + w[0] * tmp,
        pt[1] * costheta + w_cross_pt[1] * sintheta + w[1] * tmp,
        pt[2] * costheta + w_cross_pt[2] * sintheta + w[2] * tmp,
    )

    # Near zero: R ~ I + [aa]_x. Keeps the derivative w.r.t. the rotation
    # exact at the origin, where the normalised axis is undefined.
    aa_cross_pt = _cross(angle_axis, pt)
    first_order = (
        pt[0] + aa_cross_pt[0],
        pt[1] + aa_cross_pt[1],
        pt[2] + aa_cross_pt[2],
    )

    return tuple(jnp.where(small, f, r) for f, r in zip(first_order, rodrigues))


def angle_axis_to_rotation_matrix(angle_axis: np.ndarray) -> np.ndarray:
    """
    Convert a rotation vector to a rotation matrix.

    Args:
        angle_axis: Rotation vector (3,).

    Returns:
        Rotation matrix (3x3).
    """
    rvec = np.asarray(angle_axis, dtype=np.float64).reshape(3, 1)
    R, _ = cv2.Rodrigues(rvec)
    return R


def rotation_matrix_to_angle_axis(R: np.ndarray) -> np.ndarray:
    """
    Convert a rotation matrix to a rotation vector.

    Args:
        R: Rotation matrix (3x3).

    Returns:
        Rotation vector (3,).
    """
    R = np.asarray(R, dtype=np.float64)
    if R.shape != (3, 3):
        raise ValueError(f"R must be (3,3), got {R.shape}")
    rvec, _ = cv2.Rodrigues(R)
    return rvec.reshape(3)


__all__ = [
    "angle_axis_rotate_point",
    "angle_axis_to_rotation_matrix",
    "rotation_matrix_to_angle_axis",
]

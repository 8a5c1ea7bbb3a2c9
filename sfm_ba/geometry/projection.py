"""
Shared projection pipeline: pose transform and perspective divide.

All functions are generic over the scalar type (float64 or a JAX tracer). Depth is
never checked: a zero or negative camera-space Z passes straight through the
division.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from sfm_ba.geometry.rotation import angle_axis_rotate_point


def transform_point(cam_Rt: Sequence, pos_3dpoint: Sequence) -> Tuple:
    """
    Apply a camera pose to a world point: P_cam = R(r) P + t.

    Args:
        cam_Rt: Extrinsic block (6,) = [rx, ry, rz, tx, ty, tz].
        pos_3dpoint: 3D point (3,).

    Returns:
        Camera-space point as a 3-tuple.
    """
    cam_R = cam_Rt[0:3]
    cam_t = cam_Rt[3:6]

    pos_proj = angle_axis_rotate_point(cam_R, pos_3dpoint)
    return (
        pos_proj[0] + cam_t[0],
        pos_proj[1] + cam_t[1],
        pos_proj[2] + cam_t[2],
    )


def rig_transform_point(
    cam_Rt: Sequence,
    subpose_R: Sequence,
    subpose_t: Sequence,
    pos_3dpoint: Sequence,
) -> Tuple:
    """
    Apply the rig pose composition to a world point.

    P_cam = R_s (R P) + t_s + R t_s, where (R, t) is the rig pose and
    (R_s, t_s) the sub-camera offset. The rig translation t does not enter.
    This reproduces the formula existing rig calibrations were computed with.

    Args:
        cam_Rt: Rig extrinsic block (6,).
        subpose_R: Sub-camera rotation vector (3,).
        subpose_t: Sub-camera translation (3,).
        pos_3dpoint: 3D point (3,).

    Returns:
        Camera-space point as a 3-tuple.
    """
    cam_pose_R = cam_Rt[0:3]

    pos_rig = angle_axis_rotate_point(cam_pose_R, pos_3dpoint)
    pos_proj = angle_axis_rotate_point(subpose_R, pos_rig)
    rig_trans = angle_axis_rotate_point(cam_pose_R, subpose_t)

    return (
        pos_proj[0] + (subpose_t[0] + rig_trans[0]),
        pos_proj[1] + (subpose_t[1] + rig_trans[1]),
        pos_proj[2] + (subpose_t[2] + rig_trans[2]),
    )


def perspective_divide(pos_proj: Sequence) -> Tuple:
    """Homogeneous to euclidean: (X/Z, Y/Z)."""
    x_u = pos_proj[0] / pos_proj[2]
    y_u = pos_proj[1] / pos_proj[2]
    return x_u, y_u


def project_to_normalized(cam_Rt: Sequence, pos_3dpoint: Sequence) -> Tuple:
    """Normalized (undistorted) image coordinates of a world point."""
    return perspective_divide(transform_point(cam_Rt, pos_3dpoint))


__all__ = [
    "transform_point",
    "rig_transform_point",
    "perspective_divide",
    "project_to_normalized",
]

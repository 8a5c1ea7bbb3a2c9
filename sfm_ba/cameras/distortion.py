"""
Forward lens distortion models on normalized image coordinates.
"""

from __future__ import annotations

from typing import Tuple


def no_distortion(x_u, y_u) -> Tuple:
    """Identity model used by the plain pinhole camera."""
    return x_u, y_u


def radial_k1_scale(r2, k1):
    """Radial scale 1 + k1 r^2."""
    return 1.0 + k1 * r2


def radial_k3_scale(r2, k1, k2, k3):
    """Radial scale 1 + k1 r^2 + k2 r^4 + k3 r^6."""
    r4 = r2 * r2
    r6 = r4 * r2
    return 1.0 + k1 * r2 + k2 * r4 + k3 * r6


def radial_k1(x_u, y_u, k1) -> Tuple:
    """
    One-coefficient radial distortion.

    Args:
        x_u, y_u: Undistorted normalized coordinates.
        k1: First radial coefficient.

    Returns:
        Distorted normalized coordinates (x_d, y_d).
    """
    r2 = x_u * x_u + y_u * y_u
    r_coeff = radial_k1_scale(r2, k1)
    return x_u * r_coeff, y_u * r_coeff


def radial_k3(x_u, y_u, k1, k2, k3) -> Tuple:
    """
    Three-coefficient radial distortion.

    Args:
        x_u, y_u: Undistorted normalized coordinates.
        k1, k2, k3: Radial coefficients for r^2, r^4 and r^6.

    Returns:
        Distorted normalized coordinates (x_d, y_d).
    """
    r2 = x_u * x_u + y_u * y_u
    r_coeff = radial_k3_scale(r2, k1, k2, k3)
    return x_u * r_coeff, y_u * r_coeff


__all__ = [
    "no_distortion",
    "radial_k1_scale",
    "radial_k3_scale",
    "radial_k1",
    "radial_k3",
]

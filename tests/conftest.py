"""
Shared fixtures and helpers for the residual tests.
"""

import numpy as np
import pytest

from sfm_ba.cameras.intrinsics import CameraModel


def random_intrinsics(model: CameraModel, rng: np.random.Generator) -> np.ndarray:
    """Well-conditioned intrinsic block for `model` (focal > 0, small distortion)."""
    focal = rng.uniform(500.0, 1500.0)
    ppx, ppy = rng.uniform(300.0, 700.0, size=2)
    base = [focal, ppx, ppy]

    if model is CameraModel.PINHOLE:
        extra = []
    elif model is CameraModel.PINHOLE_RADIAL_K1:
        extra = [rng.uniform(-0.2, 0.2)]
    elif model is CameraModel.PINHOLE_RADIAL_K3:
        extra = [
            rng.uniform(-0.2, 0.2),
            rng.uniform(-0.05, 0.05),
            rng.uniform(-0.01, 0.01),
        ]
    else:
        extra = list(rng.uniform(-0.2, 0.2, size=3)) + list(rng.uniform(-0.2, 0.2, size=3))
    return np.array(base + extra, dtype=np.float64)


def random_extrinsics(rng: np.random.Generator) -> np.ndarray:
    rvec = rng.uniform(-0.3, 0.3, size=3)
    tvec = rng.uniform(-0.5, 0.5, size=3)
    return np.concatenate([rvec, tvec])


def random_point(rng: np.random.Generator) -> np.ndarray:
    """Point in front of a near-identity camera."""
    xy = rng.uniform(-1.0, 1.0, size=2)
    z = rng.uniform(4.0, 10.0)
    return np.array([xy[0], xy[1], z], dtype=np.float64)


def random_blocks(model: CameraModel, rng: np.random.Generator):
    return random_intrinsics(model, rng), random_extrinsics(rng), random_point(rng)


@pytest.fixture
def rng():
    return np.random.default_rng(12345)

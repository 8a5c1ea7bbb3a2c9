"""
Tests for structured camera records, poses and observations, and their
flat parameter-block layouts.

Run with: python -m pytest tests/test_camera_models.py -v
"""

import ast
import dataclasses
from pathlib import Path

import numpy as np
import pytest

from sfm_ba.ba.cost_functions import make_residual_functor
from sfm_ba.cameras.camera_models import (
    INTRINSICS_TYPES,
    PinholeIntrinsics,
    RadialK1Intrinsics,
    RadialK3Intrinsics,
    RigIntrinsics,
    intrinsics_from_block,
)
from sfm_ba.cameras.intrinsics import CameraModel
from sfm_ba.core.data_structures import Observation, Pose
from sfm_ba.geometry.rotation import angle_axis_to_rotation_matrix


class TestBlockLayouts:
    def test_pinhole(self):
        np.testing.assert_array_equal(
            PinholeIntrinsics(1000.0, 320.0, 240.0).to_block(), [1000.0, 320.0, 240.0]
        )

    def test_radial_k1(self):
        np.testing.assert_array_equal(
            RadialK1Intrinsics(1000.0, 320.0, 240.0, k1=-0.1).to_block(),
            [1000.0, 320.0, 240.0, -0.1],
        )

    def test_radial_k3(self):
        np.testing.assert_array_equal(
            RadialK3Intrinsics(1000.0, 320.0, 240.0, 0.1, 0.2, 0.3).to_block(),
            [1000.0, 320.0, 240.0, 0.1, 0.2, 0.3],
        )

    def test_rig_places_subpose_rotation_before_translation(self):
        rig = RigIntrinsics(1000.0, 320.0, 240.0, Pose((0.1, 0.2, 0.3), (1.0, 2.0, 3.0)))
        np.testing.assert_array_equal(
            rig.to_block(), [1000.0, 320.0, 240.0, 0.1, 0.2, 0.3, 1.0, 2.0, 3.0]
        )

    @pytest.mark.parametrize("model", list(CameraModel))
    def test_block_size_matches_model(self, model):
        block = np.arange(model.intrinsic_block_size, dtype=np.float64) + 1.0
        record = intrinsics_from_block(model, block)
        assert isinstance(record, INTRINSICS_TYPES[model])
        assert record.model is model
        np.testing.assert_array_equal(record.to_block(), block)

    @pytest.mark.parametrize("model", list(CameraModel))
    def test_wrong_length_block_is_rejected(self, model):
        with pytest.raises(ValueError, match="intrinsic block must have"):
            intrinsics_from_block(model, np.ones(model.intrinsic_block_size + 1))

    def test_records_are_frozen(self):
        cam = PinholeIntrinsics(1000.0, 320.0, 240.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            cam.focal = 10.0


class TestProject:
    def test_identity_case(self):
        cam = PinholeIntrinsics(1000.0, 320.0, 240.0)
        np.testing.assert_array_equal(cam.project(Pose.identity(), [0.0, 0.0, 10.0]), [320.0, 240.0])

    @pytest.mark.parametrize(
        "cam",
        [
            PinholeIntrinsics(800.0, 300.0, 200.0),
            RadialK1Intrinsics(800.0, 300.0, 200.0, 0.05),
            RadialK3Intrinsics(800.0, 300.0, 200.0, 0.05, -0.01, 0.002),
            RigIntrinsics(800.0, 300.0, 200.0, Pose((0.0, 0.1, 0.0), (0.1, 0.0, 0.0))),
        ],
    )
    def test_project_agrees_with_residual_functor(self, cam):
        pose = Pose((0.05, -0.02, 0.1), (0.2, -0.1, 0.3))
        X = np.array([0.5, -0.4, 7.0])

        uv = cam.project(pose, X)
        functor = make_residual_functor(cam.model, uv)
        np.testing.assert_allclose(functor.residuals(cam.to_block(), pose.to_block(), X), 0.0, atol=1e-9)

    def test_zero_depth_projects_to_non_finite(self):
        cam = RadialK1Intrinsics(800.0, 300.0, 200.0, 0.1)
        uv = cam.project(Pose.identity(), [1.0, 0.0, 0.0])
        assert not np.all(np.isfinite(uv))


class TestPose:
    def test_block_round_trip(self):
        block = np.array([0.1, 0.2, 0.3, 4.0, 5.0, 6.0])
        pose = Pose.from_block(block)
        assert pose.rotation == (0.1, 0.2, 0.3)
        assert pose.translation == (4.0, 5.0, 6.0)
        np.testing.assert_array_equal(pose.to_block(), block)

    def test_from_matrix(self):
        aa = np.array([0.3, -0.1, 0.2])
        R = angle_axis_to_rotation_matrix(aa)
        pose = Pose.from_matrix(R, np.array([[1.0], [2.0], [3.0]]))
        np.testing.assert_allclose(pose.rotation, aa, atol=1e-10)
        assert pose.translation == (1.0, 2.0, 3.0)
        np.testing.assert_allclose(pose.rotation_matrix(), R, atol=1e-10)

    def test_rejects_wrong_sizes(self):
        with pytest.raises(ValueError, match="Extrinsic block must have 6"):
            Pose.from_block(np.zeros(5))
        with pytest.raises(ValueError, match="rotation must have 3"):
            Pose((0.0, 0.0), (0.0, 0.0, 0.0))


class TestObservation:
    def test_from_uv_accepts_sequences_and_observations(self):
        obs = Observation.from_uv(np.array([1.5, 2.5]))
        assert obs == Observation(1.5, 2.5)
        assert Observation.from_uv(obs) is obs
        np.testing.assert_array_equal(obs.as_array(), [1.5, 2.5])

    def test_rejects_wrong_size(self):
        with pytest.raises(ValueError, match="Observation must have 2"):
            Observation.from_uv([1.0, 2.0, 3.0])


def test_camera_layer_does_not_import_bundle_adjustment_layer():
    cameras_dir = Path(__file__).resolve().parents[1] / "sfm_ba" / "cameras"
    for path in sorted(cameras_dir.glob("*.py")):
        tree = ast.parse(path.read_text())
        imported = [
            node.module
            for node in ast.walk(tree)
            if isinstance(node, ast.ImportFrom) and node.module
        ]
        imported += [
            alias.name
            for node in ast.walk(tree)
            if isinstance(node, ast.Import)
            for alias in node.names
        ]
        assert not [m for m in imported if m.startswith("sfm_ba.ba")], path.name

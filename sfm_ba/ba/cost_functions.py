"""
Automatic-differentiation cost functions built on the residual functors.

`AutoDiffCostFunction` differentiates the functor with `jax.jacfwd` and
returns one Jacobian per parameter block. Its `evaluate` method follows the
pyceres `CostFunction.Evaluate` convention so an external optimizer can drive
it directly.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np

from sfm_ba.autodiff.jax_backend import stack_outputs, value_and_jacobians
from sfm_ba.ba.residual_functors import RESIDUAL_FUNCTORS, ResidualFunctor
from sfm_ba.cameras.intrinsics import NUM_RESIDUALS, CameraModel
from sfm_ba.io.logging_utils import get_logger

logger = get_logger(__name__)


class AutoDiffCostFunction:
    """
    Wrap a generic residual functor with exact Jacobians from JAX.

    Args:
        functor: Callable taking one sequence per parameter block and
            returning `num_residuals` scalars; it must be traceable by JAX.
        num_residuals: Dimension of the residual.
        parameter_block_sizes: Expected length of each parameter block.
    """

    def __init__(
        self,
        functor,
        num_residuals: int,
        parameter_block_sizes: Sequence[int],
    ):
        self._functor = functor
        self._num_residuals = int(num_residuals)
        self._parameter_block_sizes = tuple(int(s) for s in parameter_block_sizes)

    @property
    def functor(self):
        return self._functor

    @property
    def num_residuals(self) -> int:
        return self._num_residuals

    @property
    def parameter_block_sizes(self) -> Tuple[int, ...]:
        return self._parameter_block_sizes

    def __repr__(self) -> str:
        return (
            f"AutoDiffCostFunction({self._functor!r}, num_residuals={self._num_residuals}, "
            f"parameter_block_sizes={list(self._parameter_block_sizes)})"
        )

    def _check_blocks(self, blocks: Sequence) -> List[np.ndarray]:
        if len(blocks) != len(self._parameter_block_sizes):
            raise ValueError(
                f"Expected {len(self._parameter_block_sizes)} parameter blocks, "
                f"got {len(blocks)}"
            )
        checked = []
        for i, (block, size) in enumerate(zip(blocks, self._parameter_block_sizes)):
            arr = np.asarray(block, dtype=np.float64).reshape(-1)
            if arr.size != size:
                raise ValueError(
                    f"Parameter block {i} must have {size} values, got {arr.size}"
                )
            checked.append(arr)
        return checked

    def _residual_values(self, blocks: List[np.ndarray]) -> np.ndarray:
        return np.array(stack_outputs(self._functor(*blocks)), dtype=np.float64)

    def __call__(self, *blocks) -> np.ndarray:
        """Residual values only, shape (num_residuals,)."""
        return self._residual_values(self._check_blocks(blocks))

    def residuals_and_jacobians(self, *blocks) -> Tuple[np.ndarray, List[np.ndarray]]:
        """
        Residuals and the Jacobian w.r.t. every parameter block.

        Returns:
            Tuple of (residuals, jacobians) where:
            - residuals: (num_residuals,) array.
            - jacobians: list with one (num_residuals, block_size) array per block.
        """
        blocks = self._check_blocks(blocks)
        return value_and_jacobians(self._functor, blocks)

    def evaluate(
        self,
        parameters: Sequence,
        residuals: np.ndarray,
        jacobians: Optional[List[Optional[np.ndarray]]] = None,
    ) -> bool:
        """
        pyceres-style evaluation into caller-owned buffers.

        Args:
            parameters: One array per parameter block.
            residuals: Output buffer (num_residuals,), written in place.
            jacobians: None, or a list with one entry per block that is either
                None (skip) or a row-major (num_residuals * block_size,) buffer.

        Returns:
            Always True; degenerate geometry shows up as non-finite values.
        """
        if jacobians is None or all(j is None for j in jacobians):
            residuals[:] = self._residual_values(self._check_blocks(parameters))
            return True

        if len(jacobians) != len(self._parameter_block_sizes):
            raise ValueError(
                f"Expected {len(self._parameter_block_sizes)} jacobian buffers, "
                f"got {len(jacobians)}"
            )

        values, blocks_J = self.residuals_and_jacobians(*parameters)
        residuals[:] = values
        for buffer, J in zip(jacobians, blocks_J):
            if buffer is not None:
                buffer[:] = J.ravel()
        return True


def make_residual_functor(model, observation) -> ResidualFunctor:
    """
    Residual functor for a camera model.

    Args:
        model: CameraModel or its string value.
        observation: Observation or (x, y) pixel coordinates.

    Returns:
        Functor instance holding the observation.
    """
    model = CameraModel.parse(model)
    return RESIDUAL_FUNCTORS[model](observation)


def make_cost_function(model, observation) -> AutoDiffCostFunction:
    """
    Autodiff cost function with blocks <2, intrinsics, 6, 3> for a camera model.

    Args:
        model: CameraModel or its string value.
        observation: Observation or (x, y) pixel coordinates.

    Returns:
        AutoDiffCostFunction wrapping the model's residual functor.
    """
    model = CameraModel.parse(model)
    functor = RESIDUAL_FUNCTORS[model](observation)
    logger.debug(
        "[ba] cost function for %s, blocks %s, observation (%.3f, %.3f)",
        model.value,
        model.parameter_block_sizes,
        functor.observation.x,
        functor.observation.y,
    )
    return AutoDiffCostFunction(functor, NUM_RESIDUALS, model.parameter_block_sizes)


__all__ = ["AutoDiffCostFunction", "make_residual_functor", "make_cost_function"]

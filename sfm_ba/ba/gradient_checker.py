"""
Compare autodiff Jacobians against central finite differences.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from sfm_ba.ba.config import GradientCheckConfig, get_default_gradient_check_config
from sfm_ba.ba.cost_functions import AutoDiffCostFunction
from sfm_ba.io.logging_utils import get_logger, make_logger

logger = get_logger(__name__)


@dataclass
class GradientCheckResult:
    """Outcome of a gradient check, one entry per parameter block."""

    ok: bool
    residuals: np.ndarray
    jacobians: List[np.ndarray] = field(default_factory=list)
    numeric_jacobians: List[np.ndarray] = field(default_factory=list)
    max_abs_errors: List[float] = field(default_factory=list)
    max_rel_errors: List[float] = field(default_factory=list)


def numeric_jacobians(
    cost_function: AutoDiffCostFunction,
    blocks: Sequence,
    relative_step: float = 1e-6,
) -> List[np.ndarray]:
    """
    Central-difference Jacobian w.r.t. each parameter block.

    Args:
        cost_function: Cost function whose residual values are differentiated.
        blocks: Parameter blocks at which to differentiate.
        relative_step: Step h = relative_step * max(|x|, 1) per parameter.

    Returns:
        List of (num_residuals, block_size) arrays.
    """
    base = [np.asarray(b, dtype=np.float64).reshape(-1).copy() for b in blocks]
    jacobians = []
    for bi, block in enumerate(base):
        J = np.zeros((cost_function.num_residuals, block.size), dtype=np.float64)
        for j in range(block.size):
            h = relative_step * max(abs(block[j]), 1.0)

            plus = [b.copy() for b in base]
            minus = [b.copy() for b in base]
            plus[bi][j] += h
            minus[bi][j] -= h

            J[:, j] = (cost_function(*plus) - cost_function(*minus)) / (2.0 * h)
        jacobians.append(J)
    return jacobians


def check_gradients(
    cost_function: AutoDiffCostFunction,
    blocks: Sequence,
    config: Optional[GradientCheckConfig] = None,
) -> GradientCheckResult:
    """
    Check autodiff Jacobians against central differences at `blocks`.

    Args:
        cost_function: Cost function under test.
        blocks: Parameter blocks (well-conditioned: positive depth, focal > 0).
        config: Step and tolerances; defaults to GradientCheckConfig().

    Returns:
        GradientCheckResult with per-block errors and an overall `ok` flag.
    """
    if config is None:
        config = get_default_gradient_check_config()
    make_logger(level=logging.DEBUG if config.verbose else logging.WARNING)

    residuals, auto_J = cost_function.residuals_and_jacobians(*blocks)
    num_J = numeric_jacobians(cost_function, blocks, config.relative_step)

    ok = True
    max_abs_errors = []
    max_rel_errors = []
    for bi, (Ja, Jn) in enumerate(zip(auto_J, num_J)):
        err = np.abs(Ja - Jn)
        scale = np.maximum(np.abs(Ja), np.abs(Jn))
        allowed = config.absolute_tolerance + config.relative_tolerance * scale

        with np.errstate(divide="ignore", invalid="ignore"):
            rel = np.where(scale > 0, err / scale, 0.0)

        max_abs = float(err.max()) if err.size else 0.0
        max_rel = float(rel.max()) if rel.size else 0.0
        max_abs_errors.append(max_abs)
        max_rel_errors.append(max_rel)

        if not np.all(err <= allowed):
            ok = False
            logger.warning(
                "[gradcheck] block %d mismatch: max abs err %.3e, max rel err %.3e",
                bi,
                max_abs,
                max_rel,
            )
        else:
            logger.debug(
                "[gradcheck] block %d ok: max abs err %.3e, max rel err %.3e",
                bi,
                max_abs,
                max_rel,
            )

    return GradientCheckResult(
        ok=ok,
        residuals=residuals,
        jacobians=auto_J,
        numeric_jacobians=num_J,
        max_abs_errors=max_abs_errors,
        max_rel_errors=max_rel_errors,
    )


__all__ = ["GradientCheckResult", "numeric_jacobians", "check_gradients"]

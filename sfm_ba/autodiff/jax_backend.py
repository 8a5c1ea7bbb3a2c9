"""
JAX setup shared by the camera formulas and their Jacobians.

The residuals are compared against float64 references, so 64-bit mode is
switched on here, before any array is created. Every module that evaluates
the formulas imports `jnp` from this module rather than from jax directly.
"""

from __future__ import annotations

from typing import Callable, List, Sequence, Tuple

import jax
import jax.numpy as jnp
import numpy as np

jax.config.update("jax_enable_x64", True)


def as_block(block) -> jnp.ndarray:
    """Flat float64 array for a parameter block; traced values pass through."""
    return jnp.ravel(jnp.asarray(block, dtype=jnp.float64))


def stack_outputs(outputs: Sequence) -> jnp.ndarray:
    return jnp.stack([jnp.asarray(o, dtype=jnp.float64) for o in outputs])


def value_and_jacobians(
    fn: Callable,
    blocks: Sequence[np.ndarray],
) -> Tuple[np.ndarray, List[np.ndarray]]:
    """
    Outputs of `fn(*blocks)` and their Jacobian w.r.t. each block.

    `fn` returns a sequence of scalars. Forward mode is used since there are
    only a few outputs per call and the parameter blocks are short.

    Args:
        fn: Function of one array per block.
        blocks: Parameter blocks (1D float64 arrays).

    Returns:
        Tuple of (values, jacobians) where:
        - values: (num_outputs,) float64 array.
        - jacobians: one (num_outputs, block_size) float64 array per block.
    """
    def stacked(*args):
        out = stack_outputs(fn(*args))
        return out, out

    argnums = tuple(range(len(blocks)))
    jac, values = jax.jacfwd(stacked, argnums=argnums, has_aux=True)(
        *(as_block(b) for b in blocks)
    )
    return (
        np.array(values, dtype=np.float64),
        [np.array(J, dtype=np.float64) for J in jac],
    )


__all__ = ["jax", "jnp", "as_block", "stack_outputs", "value_and_jacobians"]

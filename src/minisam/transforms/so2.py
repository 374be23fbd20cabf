"""SO(2) and so(2) Lie group operations in JAX.

Planar rotations are stored as unit complex numbers, a (..., 2) array
holding (re, im). The tangent space is the scalar rotation angle.
"""

import jax
import jax.numpy as jnp

from .rotation import normalize_complex

Array = jax.Array


def exp(theta: Array) -> Array:
    """
    SO(2) exponential map: convert an angle to a unit complex number.

    Args:
        theta: (...) array of angles in radians

    Returns:
        (..., 2) array of unit complex numbers (cos, sin)
    """
    return jnp.stack([jnp.cos(theta), jnp.sin(theta)], axis=-1)


def log(z: Array) -> Array:
    """
    SO(2) logarithm map: convert a unit complex number to an angle in (-pi, pi].

    Args:
        z: (..., 2) array of unit complex numbers

    Returns:
        (...) array of angles
    """
    return jnp.arctan2(z[..., 1], z[..., 0])


def hat(theta: Array) -> Array:
    """Map an angle to its 2x2 skew-symmetric so(2) matrix."""
    theta = jnp.asarray(theta)
    zeros = jnp.zeros_like(theta)
    return jnp.stack([
        jnp.stack([zeros, -theta], axis=-1),
        jnp.stack([theta, zeros], axis=-1),
    ], axis=-2)


def vee(omega: Array) -> Array:
    """Inverse of hat(): read the angle off a 2x2 so(2) matrix."""
    return omega[..., 1, 0]


def multiply(z1: Array, z2: Array) -> Array:
    """
    Compose two rotations by complex multiplication.

    The product is renormalized so that repeated composition stays on the group.
    """
    re = z1[..., 0] * z2[..., 0] - z1[..., 1] * z2[..., 1]
    im = z1[..., 0] * z2[..., 1] + z1[..., 1] * z2[..., 0]
    return normalize_complex(jnp.stack([re, im], axis=-1))


def inverse(z: Array) -> Array:
    """Inverse rotation: the complex conjugate."""
    return z * jnp.array([1.0, -1.0], dtype=z.dtype)


def to_matrix(z: Array) -> Array:
    """
    Convert unit complex numbers to 2x2 rotation matrices.

    Args:
        z: (..., 2) array of unit complex numbers

    Returns:
        (..., 2, 2) array of rotation matrices
    """
    re, im = z[..., 0], z[..., 1]
    return jnp.stack([
        jnp.stack([re, -im], axis=-1),
        jnp.stack([im, re], axis=-1),
    ], axis=-2)


def from_matrix(R: Array) -> Array:
    """Recover the unit complex number from the first column of a 2x2 rotation matrix."""
    return normalize_complex(R[..., :, 0])


def apply(z: Array, v: Array) -> Array:
    """
    Apply rotation to vector(s).

    Args:
        z: (2,) unit complex number
        v: (..., 2) vector(s) to rotate

    Returns:
        (..., 2) rotated vector(s)
    """
    R = to_matrix(z)
    return jnp.einsum('ij,...j->...i', R, v)

"""SO(3) and so(3) Lie group operations in JAX.

This module implements the mathematical foundation for 3D rotations using
unit quaternions in (w, x, y, z) order and axis-angle tangent vectors.
All functions are pure, JIT-able, and operate on JAX arrays.
"""

import jax
import jax.numpy as jnp

from .rotation import (
    matrix_to_quaternion,
    normalize_quaternions,
    quaternion_conjugate,
    quaternion_multiply,
    quaternion_to_matrix,
)

Array = jax.Array

# Below this angle the closed forms are replaced by their Taylor expansions.
EPSILON = 1e-10


def exp(omega: Array) -> Array:
    """
    SO(3) exponential map: convert axis-angle vector to a unit quaternion.

    Args:
        omega: (..., 3) array of axis-angle vectors

    Returns:
        (..., 4) array of unit quaternions in (w, x, y, z) format
    """
    theta_sq = jnp.sum(omega * omega, axis=-1, keepdims=True)
    theta = jnp.sqrt(theta_sq)

    small_angle = theta < EPSILON
    # Keep the unused branch of jnp.where finite
    safe_theta = jnp.where(small_angle, 1.0, theta)

    theta_po4 = theta_sq * theta_sq
    imag_factor = jnp.where(
        small_angle,
        0.5 - theta_sq / 48.0 + theta_po4 / 3840.0,
        jnp.sin(0.5 * safe_theta) / safe_theta,
    )
    real_factor = jnp.where(
        small_angle,
        1.0 - theta_sq / 8.0 + theta_po4 / 384.0,
        jnp.cos(0.5 * theta),
    )

    return jnp.concatenate([real_factor, imag_factor * omega], axis=-1)


def log(q: Array) -> Array:
    """
    SO(3) logarithm map: convert a unit quaternion to an axis-angle vector.

    The result has norm in [0, pi]; q and -q map to the same vector.

    Args:
        q: (..., 4) array of unit quaternions in (w, x, y, z) format

    Returns:
        (..., 3) array of axis-angle vectors
    """
    w = q[..., :1]
    vec = q[..., 1:]

    squared_n = jnp.sum(vec * vec, axis=-1, keepdims=True)
    n = jnp.sqrt(squared_n)

    small_angle = squared_n < EPSILON * EPSILON
    near_pi = jnp.abs(w) < EPSILON

    safe_w = jnp.where(near_pi, 1.0, w)
    safe_n = jnp.where(small_angle, 1.0, n)

    # atan(n / w) keeps the angle in [-pi/2, pi/2], so a negative w yields the
    # shorter of the two equivalent rotations.
    two_atan_nbyw_by_n = jnp.where(
        small_angle,
        2.0 / safe_w - (2.0 / 3.0) * squared_n / (safe_w * safe_w * safe_w),
        jnp.where(
            near_pi,
            jnp.where(w > 0, jnp.pi, -jnp.pi) / safe_n,
            2.0 * jnp.arctan(n / safe_w) / safe_n,
        ),
    )

    return two_atan_nbyw_by_n * vec


def hat(v: Array) -> Array:
    """
    Convert 3D vector to skew-symmetric matrix.

    Args:
        v: (..., 3) vector

    Returns:
        (..., 3, 3) skew-symmetric matrix
    """
    zeros = jnp.zeros(v.shape[:-1], dtype=v.dtype)

    return jnp.stack([
        jnp.stack([zeros, -v[..., 2], v[..., 1]], axis=-1),
        jnp.stack([v[..., 2], zeros, -v[..., 0]], axis=-1),
        jnp.stack([-v[..., 1], v[..., 0], zeros], axis=-1)
    ], axis=-2)


def vee(omega: Array) -> Array:
    """Inverse of hat(): extract the vector from a 3x3 skew-symmetric matrix."""
    return jnp.stack([omega[..., 2, 1], omega[..., 0, 2], omega[..., 1, 0]], axis=-1)


def multiply(q1: Array, q2: Array) -> Array:
    """
    Compose two rotations.

    The Hamilton product is renormalized to keep the quaternion on the unit sphere.

    Args:
        q1: (..., 4) first quaternion
        q2: (..., 4) second quaternion

    Returns:
        (..., 4) unit quaternion of q1 * q2
    """
    return normalize_quaternions(quaternion_multiply(q1, q2))


def inverse(q: Array) -> Array:
    """
    Compute inverse of a rotation.

    For unit quaternions, the inverse is simply the conjugate.
    """
    return quaternion_conjugate(q)


def to_matrix(q: Array) -> Array:
    """Convert (..., 4) unit quaternions to (..., 3, 3) rotation matrices."""
    return quaternion_to_matrix(q)


def from_matrix(R: Array) -> Array:
    """Convert (..., 3, 3) rotation matrices to (..., 4) unit quaternions."""
    return matrix_to_quaternion(R)


def apply(q: Array, v: Array) -> Array:
    """
    Apply rotation to vector(s).

    Args:
        q: (..., 4) unit quaternion
        v: (..., 3) or (..., N, 3) vector(s) to rotate

    Returns:
        (..., 3) or (..., N, 3) rotated vector(s)
    """
    R = to_matrix(q)
    if v.ndim == R.ndim - 1:  # Single vector case
        return jnp.einsum('...ij,...j->...i', R, v)
    else:  # Multiple vectors case
        return jnp.einsum('...ij,...nj->...ni', R, v)

"""SE(3) and se(3) Lie group operations in JAX.

This module implements SE(3) rigid body transforms as the pair (q, t) of a
(w, x, y, z) unit quaternion and a 3D translation, with 6D twist vectors.
All functions are pure, JIT-able, and operate on JAX arrays.
This implementation focuses on numerical stability, especially for small angles.
"""

from typing import Tuple

import jax
import jax.numpy as jnp

from . import so3

Array = jax.Array


def from_position_and_rotation(p: Array, R: Array) -> Array:
    """
    Construct the homogeneous matrix from position and rotation.

    Args:
        p: (..., 3) position vector
        R: (..., 3, 3) rotation matrix

    Returns:
        (..., 4, 4) homogeneous transformation matrix
    """
    batch_shape = jnp.broadcast_shapes(p.shape[:-1], R.shape[:-2])
    p = jnp.broadcast_to(p, batch_shape + (3,))
    R = jnp.broadcast_to(R, batch_shape + (3, 3))

    T = jnp.zeros(batch_shape + (4, 4), dtype=p.dtype)
    T = T.at[..., :3, :3].set(R)
    T = T.at[..., :3, 3].set(p)
    T = T.at[..., 3, 3].set(1.0)

    return T


def exp(twist: Array) -> Tuple[Array, Array]:
    """
    SE(3) exponential map: convert twist to rotation and translation.

    This function is numerically stable, using Taylor series approximations
    for small angles to avoid division by zero.

    Args:
        twist: (..., 6) array of twists [vx, vy, vz, wx, wy, wz].
               The first 3 elements are linear velocity, last 3 are angular.

    Returns:
        (q, t): (..., 4) unit quaternions and (..., 3) translations.
    """
    v, w = twist[..., :3], twist[..., 3:]
    angle = jnp.linalg.norm(w, axis=-1)

    # Rotation part is just the SO(3) exponential map
    q = so3.exp(w)

    angle_sq = angle * angle
    is_small_angle = angle < 1e-6
    safe_angle = jnp.where(is_small_angle, 1.0, angle)
    safe_angle_sq = safe_angle * safe_angle

    # Coefficient A = (1 - cos(theta)) / theta^2
    # Taylor expansion for small theta: A ≈ 1/2 - theta^2/24
    A = jnp.where(is_small_angle, 0.5 - angle_sq / 24.0, (1.0 - jnp.cos(safe_angle)) / safe_angle_sq)

    # Coefficient B = (theta - sin(theta)) / theta^3
    # Taylor expansion for small theta: B ≈ 1/6 - theta^2/120
    B = jnp.where(
        is_small_angle,
        1.0 / 6.0 - angle_sq / 120.0,
        (safe_angle - jnp.sin(safe_angle)) / (safe_angle_sq * safe_angle),
    )

    K = so3.hat(w)
    K_sq = jnp.matmul(K, K)

    I = jnp.eye(3, dtype=twist.dtype)
    I = jnp.broadcast_to(I, K.shape)

    # V = I + A*K + B*K^2
    V = I + A[..., None, None] * K + B[..., None, None] * K_sq

    t = jnp.einsum("...ij,...j->...i", V, v)

    return q, t


def log(q: Array, t: Array) -> Array:
    """
    SE(3) logarithm map: convert rotation and translation to a twist.

    Args:
        q: (..., 4) unit quaternions
        t: (..., 3) translations

    Returns:
        (..., 6) array of twists [vx, vy, vz, wx, wy, wz].
    """
    # Angular part is the SO(3) logarithm
    w = so3.log(q)
    angle = jnp.linalg.norm(w, axis=-1)

    K = so3.hat(w)

    is_small_angle = angle < 1e-6
    safe_angle = jnp.where(is_small_angle, 1.0, angle)
    half_angle = safe_angle / 2.0

    # Coefficient for the K^2 term of V^-1: (1 - theta/2 * cot(theta/2)) / theta^2.
    # For small angles, this coefficient tends to 1/12.
    cot_half_angle = jnp.cos(half_angle) / jnp.sin(half_angle)
    C = jnp.where(
        is_small_angle,
        1.0 / 12.0,
        (1.0 - half_angle * cot_half_angle) / (safe_angle * safe_angle),
    )

    I = jnp.eye(3, dtype=t.dtype)
    I = jnp.broadcast_to(I, K.shape)

    # V_inv = I - 0.5*K + C*K^2
    V_inv = I - 0.5 * K + C[..., None, None] * jnp.matmul(K, K)

    v = jnp.einsum("...ij,...j->...i", V_inv, t)

    return jnp.concatenate([v, w], axis=-1)


def hat(twist: Array) -> Array:
    """Map a (..., 6) twist to its (..., 4, 4) se(3) matrix."""
    twist = jnp.asarray(twist)
    omega = so3.hat(twist[..., 3:])
    top = jnp.concatenate([omega, twist[..., :3, None]], axis=-1)
    bottom = jnp.zeros(twist.shape[:-1] + (1, 4), dtype=twist.dtype)
    return jnp.concatenate([top, bottom], axis=-2)


def vee(omega: Array) -> Array:
    """Inverse of hat()."""
    return jnp.concatenate([omega[..., :3, 3], so3.vee(omega[..., :3, :3])], axis=-1)


def multiply(q1: Array, t1: Array, q2: Array, t2: Array) -> Tuple[Array, Array]:
    """Compose (q1, t1) * (q2, t2)."""
    return so3.multiply(q1, q2), t1 + so3.apply(q1, t2)


def inverse(q: Array, t: Array) -> Tuple[Array, Array]:
    """
    Compute inverse of an SE(3) transform.

    Uses the block structure:
    T^-1 = [[R^T, -R^T @ t], [0, 1]]
    """
    q_inv = so3.inverse(q)
    return q_inv, -so3.apply(q_inv, t)


def apply(q: Array, t: Array, points: Array) -> Array:
    """
    Apply SE(3) transformation to points.

    Args:
        q: (4,) unit quaternion
        t: (3,) translation
        points: (..., 3) or (..., N, 3) points to transform

    Returns:
        (..., 3) or (..., N, 3) transformed points
    """
    R = so3.to_matrix(q)
    return jnp.einsum("ij,...j->...i", R, points) + t


def to_matrix(q: Array, t: Array) -> Array:
    """(..., 4, 4) homogeneous matrix of the transform."""
    return from_position_and_rotation(t, so3.to_matrix(q))


def from_matrix(T: Array) -> Tuple[Array, Array]:
    """Split a (..., 4, 4) homogeneous matrix into (q, t)."""
    return so3.from_matrix(T[..., :3, :3]), T[..., :3, 3]


def adjoint(q: Array, t: Array) -> Array:
    """
    Compute the adjoint matrix of SE(3) transformation.

    The adjoint matrix is used to transform twists between coordinate frames.

    Returns:
        (..., 6, 6) adjoint matrix
    """
    R = so3.to_matrix(q)

    # Skew-symmetric matrix of translation
    t_skew = so3.hat(t)

    zeros = jnp.zeros_like(R)

    # Adjoint matrix is [[R, [t]_x R], [0, R]]
    top = jnp.concatenate([R, jnp.matmul(t_skew, R)], axis=-1)
    bottom = jnp.concatenate([zeros, R], axis=-1)

    return jnp.concatenate([top, bottom], axis=-2)

"""SE(2) and se(2) Lie group operations in JAX.

A planar rigid transform is the pair (z, t) of a (2,) unit complex rotation
and a (2,) translation. Tangent vectors are ordered (v1, v2, theta): the
translational part first, the rotation angle last.
"""

from typing import Tuple

import jax
import jax.numpy as jnp

from . import so2

Array = jax.Array

EPSILON = 1e-10


def exp(xi: Array) -> Tuple[Array, Array]:
    """
    SE(2) exponential map.

    Args:
        xi: (3,) tangent vector (v1, v2, theta)

    Returns:
        (z, t) unit complex rotation and translation
    """
    upsilon, theta = xi[..., :2], xi[..., 2]
    z = so2.exp(theta)

    small_angle = jnp.abs(theta) < EPSILON
    safe_theta = jnp.where(small_angle, 1.0, theta)
    theta_sq = theta * theta

    sin_theta_by_theta = jnp.where(
        small_angle, 1.0 - theta_sq / 6.0, jnp.sin(safe_theta) / safe_theta
    )
    one_minus_cos_theta_by_theta = jnp.where(
        small_angle,
        0.5 * theta - theta * theta_sq / 24.0,
        (1.0 - jnp.cos(safe_theta)) / safe_theta,
    )

    t = jnp.stack([
        sin_theta_by_theta * upsilon[..., 0] - one_minus_cos_theta_by_theta * upsilon[..., 1],
        one_minus_cos_theta_by_theta * upsilon[..., 0] + sin_theta_by_theta * upsilon[..., 1],
    ], axis=-1)

    return z, t


def log(z: Array, t: Array) -> Array:
    """
    SE(2) logarithm map.

    Args:
        z: (2,) unit complex rotation
        t: (2,) translation

    Returns:
        (3,) tangent vector (v1, v2, theta)
    """
    theta = so2.log(z)
    half_theta = 0.5 * theta

    real_minus_one = z[..., 0] - 1.0
    small_angle = jnp.abs(real_minus_one) < EPSILON
    safe_real_minus_one = jnp.where(small_angle, 1.0, real_minus_one)

    # (theta / 2) * cot(theta / 2), written in terms of the unit complex number
    halftheta_by_tan_of_halftheta = jnp.where(
        small_angle,
        1.0 - theta * theta / 12.0,
        -(half_theta * z[..., 1]) / safe_real_minus_one,
    )

    upsilon = jnp.stack([
        halftheta_by_tan_of_halftheta * t[..., 0] + half_theta * t[..., 1],
        -half_theta * t[..., 0] + halftheta_by_tan_of_halftheta * t[..., 1],
    ], axis=-1)

    return jnp.concatenate([upsilon, theta[..., None]], axis=-1)


def hat(xi: Array) -> Array:
    """Map a (3,) tangent vector to its 3x3 se(2) matrix."""
    xi = jnp.asarray(xi)
    omega = so2.hat(xi[..., 2])
    top = jnp.concatenate([omega, xi[..., :2, None]], axis=-1)
    bottom = jnp.zeros(xi.shape[:-1] + (1, 3), dtype=xi.dtype)
    return jnp.concatenate([top, bottom], axis=-2)


def vee(omega: Array) -> Array:
    """Inverse of hat()."""
    return jnp.stack([omega[..., 0, 2], omega[..., 1, 2], omega[..., 1, 0]], axis=-1)


def multiply(z1: Array, t1: Array, z2: Array, t2: Array) -> Tuple[Array, Array]:
    """Compose (z1, t1) * (z2, t2)."""
    return so2.multiply(z1, z2), t1 + so2.apply(z1, t2)


def inverse(z: Array, t: Array) -> Tuple[Array, Array]:
    """
    Compute inverse of an SE(2) transform.

    T^-1 = (R^T, -R^T @ t)
    """
    z_inv = so2.inverse(z)
    return z_inv, -so2.apply(z_inv, t)


def apply(z: Array, t: Array, points: Array) -> Array:
    """Apply the transform to (..., 2) points."""
    return so2.apply(z, points) + t


def to_matrix(z: Array, t: Array) -> Array:
    """
    Construct the homogeneous matrix of an SE(2) transform.

    Returns:
        (..., 3, 3) homogeneous transformation matrix
    """
    batch_shape = jnp.broadcast_shapes(z.shape[:-1], t.shape[:-1])
    t = jnp.broadcast_to(t, batch_shape + (2,))

    T = jnp.zeros(batch_shape + (3, 3), dtype=t.dtype)
    T = T.at[..., :2, :2].set(so2.to_matrix(z))
    T = T.at[..., :2, 2].set(t)
    T = T.at[..., 2, 2].set(1.0)
    return T


def from_matrix(T: Array) -> Tuple[Array, Array]:
    """Split a (..., 3, 3) homogeneous matrix into (z, t)."""
    return so2.from_matrix(T[..., :2, :2]), T[..., :2, 2]


def adjoint(z: Array, t: Array) -> Array:
    """
    Compute the adjoint matrix of an SE(2) transform.

    Adjoint matrix is [[R, (t2, -t1)^T], [0, 0, 1]].

    Returns:
        (..., 3, 3) adjoint matrix
    """
    batch_shape = jnp.broadcast_shapes(z.shape[:-1], t.shape[:-1])
    t = jnp.broadcast_to(t, batch_shape + (2,))

    Ad = jnp.zeros(batch_shape + (3, 3), dtype=t.dtype)
    Ad = Ad.at[..., :2, :2].set(so2.to_matrix(z))
    Ad = Ad.at[..., 0, 2].set(t[..., 1])
    Ad = Ad.at[..., 1, 2].set(-t[..., 0])
    Ad = Ad.at[..., 2, 2].set(1.0)
    return Ad

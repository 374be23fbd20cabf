"""Quaternion and unit-complex conversion utilities in JAX.

Quaternions are stored scalar first, (w, x, y, z). The Eigen coefficient
order (x, y, z, w) only appears at the class layer boundary.
"""

import jax
import jax.numpy as jnp

Array = jax.Array


def normalize_quaternions(quaternions: Array) -> Array:
    """Normalize quaternions to unit length."""
    return quaternions / jnp.linalg.norm(quaternions, axis=-1, keepdims=True)


def normalize_complex(z: Array) -> Array:
    """Normalize (re, im) pairs to unit length."""
    return z / jnp.linalg.norm(z, axis=-1, keepdims=True)


def wxyz_to_xyzw(quaternions: Array) -> Array:
    """Reorder scalar-first quaternions to scalar-last (Eigen coefficient order)."""
    return jnp.concatenate([quaternions[..., 1:], quaternions[..., :1]], axis=-1)


def xyzw_to_wxyz(quaternions: Array) -> Array:
    """Reorder scalar-last quaternions to scalar-first."""
    return jnp.concatenate([quaternions[..., 3:], quaternions[..., :3]], axis=-1)


def quaternion_multiply(q1: Array, q2: Array) -> Array:
    """
    Hamilton product of two quaternions.

    Args:
        q1: (..., 4) quaternions in (w, x, y, z) format
        q2: (..., 4) quaternions in (w, x, y, z) format

    Returns:
        (..., 4) product q1 * q2 in (w, x, y, z) format
    """
    w1, v1 = q1[..., :1], q1[..., 1:]
    w2, v2 = q2[..., :1], q2[..., 1:]

    w = w1 * w2 - jnp.sum(v1 * v2, axis=-1, keepdims=True)
    v = w1 * v2 + w2 * v1 + jnp.cross(v1, v2)

    return jnp.concatenate([w, v], axis=-1)


def quaternion_conjugate(quaternions: Array) -> Array:
    """Negate the vector part; the inverse of a unit quaternion."""
    return quaternions * jnp.array([1.0, -1.0, -1.0, -1.0], dtype=quaternions.dtype)


def quaternion_to_matrix(quaternions: Array) -> Array:
    """
    Convert quaternions to rotation matrices.

    Args:
        quaternions: (..., 4) array of quaternions in (w, x, y, z) format

    Returns:
        (..., 3, 3) array of rotation matrices
    """
    # Unpack quaternion components - preserving batch dimensions
    w, x, y, z = jnp.moveaxis(quaternions, -1, 0)

    xx, yy, zz = x*x, y*y, z*z
    wx, wy, wz = w*x, w*y, w*z
    xy, xz, yz = x*y, x*z, y*z

    matrix = jnp.stack([
        jnp.stack([1 - 2*(yy + zz), 2*(xy - wz), 2*(xz + wy)], axis=-1),
        jnp.stack([2*(xy + wz), 1 - 2*(xx + zz), 2*(yz - wx)], axis=-1),
        jnp.stack([2*(xz - wy), 2*(yz + wx), 1 - 2*(xx + yy)], axis=-1)
    ], axis=-2)

    return matrix


def matrix_to_quaternion(matrix: Array) -> Array:
    """
    Convert rotation matrices to quaternions (w, x, y, z).
    Batch-safe and JIT-friendly implementation.

    Args:
        matrix: (..., 3, 3) array of rotation matrices

    Returns:
        (..., 4) array of unit quaternions with non-negative scalar part
    """
    m00 = matrix[..., 0, 0]
    m01 = matrix[..., 0, 1]
    m02 = matrix[..., 0, 2]
    m10 = matrix[..., 1, 0]
    m11 = matrix[..., 1, 1]
    m12 = matrix[..., 1, 2]
    m20 = matrix[..., 2, 0]
    m21 = matrix[..., 2, 1]
    m22 = matrix[..., 2, 2]

    trace = m00 + m11 + m22

    # Use dtype-adaptive epsilon
    eps = jnp.finfo(matrix.dtype).eps

    # Four candidate quaternions, one per dominant component
    q0 = jnp.stack([trace + 1.0, m21 - m12, m02 - m20, m10 - m01], axis=-1) * 0.5
    q1 = jnp.stack([m21 - m12, m00 - m11 - m22 + 1.0, m01 + m10, m02 + m20], axis=-1) * 0.5
    q2 = jnp.stack([m02 - m20, m01 + m10, m11 - m00 - m22 + 1.0, m12 + m21], axis=-1) * 0.5
    q3 = jnp.stack([m10 - m01, m02 + m20, m12 + m21, m22 - m00 - m11 + 1.0], axis=-1) * 0.5

    s0 = 1.0 / jnp.sqrt(jnp.maximum(1.0 + trace, eps))
    s1 = 1.0 / jnp.sqrt(jnp.maximum(1.0 + m00 - m11 - m22, eps))
    s2 = 1.0 / jnp.sqrt(jnp.maximum(1.0 + m11 - m00 - m22, eps))
    s3 = 1.0 / jnp.sqrt(jnp.maximum(1.0 + m22 - m00 - m11, eps))

    q0 = q0 * s0[..., None]
    q1 = q1 * s1[..., None]
    q2 = q2 * s2[..., None]
    q3 = q3 * s3[..., None]

    mask0 = (trace > 0)
    mask1 = (~mask0) & (m00 > m11) & (m00 > m22)
    mask2 = (~mask0) & (~mask1) & (m11 > m22)
    mask3 = (~mask0) & (~mask1) & (~mask2)

    quaternion = (
        jnp.where(mask0[..., None], q0, 0) +
        jnp.where(mask1[..., None], q1, 0) +
        jnp.where(mask2[..., None], q2, 0) +
        jnp.where(mask3[..., None], q3, 0)
    )

    # Ensure non-negative scalar part and normalize
    quaternion = jnp.where(quaternion[..., 0:1] < 0, -quaternion, quaternion)
    return normalize_quaternions(quaternion)

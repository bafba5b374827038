from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy import typing as npt


def triangle_areas(
    vertices: npt.NDArray[np.float64],
    faces: npt.NDArray[np.int64]
) -> npt.NDArray[np.float64]:
    """
    Area of every face as half the magnitude of the edge cross product.

    Args:
        vertices: Array of shape (n, 3) with vertex positions.
        faces: Array of shape (m, 3) with vertex indices, already validated.

    Returns:
        Array of shape (m,) with non-negative areas.
    """
    corners = vertices[faces]
    cross = np.cross(corners[:, 1] - corners[:, 0], corners[:, 2] - corners[:, 0])
    return 0.5 * np.linalg.norm(cross, axis=1)


def longest_edges_squared(
    vertices: npt.NDArray[np.float64],
    faces: npt.NDArray[np.int64]
) -> npt.NDArray[np.float64]:
    """Squared length of the longest edge of every face, shape (m,)."""
    corners = vertices[faces]
    edges = corners - np.roll(corners, 1, axis=1)
    return np.einsum("mij,mij->mi", edges, edges).max(axis=1)


def degenerate_mask(
    areas: npt.NDArray[np.float64],
    longest_sq: npt.NDArray[np.float64],
    epsilon: float
) -> npt.NDArray[np.bool_]:
    """
    Faces whose area is negligible relative to their own size.

    A face is degenerate when ``area <= epsilon * longest_edge**2``. The test
    is scale-free: shrinking a mesh uniformly does not change which faces are
    degenerate. Faces with coincident corners (``longest_edge == 0``) are
    always degenerate.

    Args:
        areas: Face areas, shape (m,).
        longest_sq: Squared longest edge per face, shape (m,).
        epsilon: Relative tolerance.

    Returns:
        Boolean array of shape (m,).
    """
    return (areas <= epsilon * longest_sq) | (areas == 0.0)


def face_normals(
    vertices: npt.NDArray[np.float64],
    faces: npt.NDArray[np.int64],
    degenerate: npt.NDArray[np.bool_] | None = None
) -> npt.NDArray[np.float64]:
    """
    Unit normal of every face, following the right-hand rule on ``(v0, v1, v2)``.

    Zero-area faces, and faces flagged in ``degenerate``, get the zero vector.

    Args:
        vertices: Array of shape (n, 3) with vertex positions.
        faces: Array of shape (m, 3) with vertex indices.
        degenerate: Optional mask of faces that have no normal.

    Returns:
        Array of shape (m, 3).
    """
    corners = vertices[faces]
    cross = np.cross(corners[:, 1] - corners[:, 0], corners[:, 2] - corners[:, 0])
    length = np.linalg.norm(cross, axis=1)
    normals = np.zeros_like(cross)
    valid = length > 0.0
    if degenerate is not None:
        valid &= ~degenerate
    normals[valid] = cross[valid] / length[valid, np.newaxis]
    return normals


def fold_unit_square(u2, u3):
    """
    Fold a point of the unit square into the lower-left unit triangle.

    Points with ``u2 + u3 > 1`` are reflected through ``(0.5, 0.5)``. The
    reflection is measure-preserving, so a uniform point in the square becomes
    a uniform point in the triangle.

    Works on scalars and on arrays of equal shape.
    """
    u2 = np.asarray(u2, dtype=np.float64)
    u3 = np.asarray(u3, dtype=np.float64)
    outside = u2 + u3 > 1.0
    return np.where(outside, 1.0 - u2, u2), np.where(outside, 1.0 - u3, u3)


def barycentric_weights(u2, u3) -> npt.NDArray[np.float64]:
    """
    Barycentric weights ``(1 - u2 - u3, u2, u3)`` for folded coordinates.

    Returns:
        Array of shape ``(..., 3)``.
    """
    u2 = np.asarray(u2, dtype=np.float64)
    u3 = np.asarray(u3, dtype=np.float64)
    return np.stack([1.0 - u2 - u3, u2, u3], axis=-1)


def barycentric_to_cartesian(
    corners: npt.NDArray[np.float64],
    weights: npt.NDArray[np.float64]
) -> npt.NDArray[np.float64]:
    """
    Affine combination of triangle corners.

    Args:
        corners: Array of shape ``(..., 3, 3)``; the second to last axis runs over corners.
        weights: Array of shape ``(..., 3)`` with barycentric weights.

    Returns:
        Array of shape ``(..., 3)`` with Cartesian positions.
    """
    corners = np.asarray(corners, dtype=np.float64)
    weights = np.asarray(weights, dtype=np.float64)
    return (
        weights[..., 0, np.newaxis] * corners[..., 0, :]
        + weights[..., 1, np.newaxis] * corners[..., 1, :]
        + weights[..., 2, np.newaxis] * corners[..., 2, :]
    )


def cartesian_to_barycentric(
    corners: npt.NDArray[np.float64],
    point: npt.NDArray[np.float64]
) -> npt.NDArray[np.float64]:
    """
    Barycentric coordinates of a point projected onto the plane of a triangle.

    Args:
        corners: Array of shape (3, 3) with the triangle corners.
        point: Array of shape (3,).

    Raises:
        ZeroDivisionError: If the triangle is degenerate.

    Returns:
        Array ``[w0, w1, w2]`` summing to one.
    """
    a, b, c = np.asarray(corners, dtype=np.float64)
    p = np.asarray(point, dtype=np.float64)
    e1 = b - a
    e2 = c - a
    d = p - a
    d11 = e1 @ e1
    d12 = e1 @ e2
    d22 = e2 @ e2
    denom = d11 * d22 - d12 * d12
    if denom == 0.0:
        raise ZeroDivisionError("Barycentric coordinates are undefined for a degenerate triangle.")
    d1 = d @ e1
    d2 = d @ e2
    w1 = (d22 * d1 - d12 * d2) / denom
    w2 = (d11 * d2 - d12 * d1) / denom
    return np.array([1.0 - w1 - w2, w1, w2])

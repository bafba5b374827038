"""
Geometric Primitives for surface sampling.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING
import math

import numpy as np

from meshsample.config import AREA_EPSILON
from meshsample.model.geometry_utils import (
    fold_unit_square,
    barycentric_weights,
    barycentric_to_cartesian,
    cartesian_to_barycentric,
)

if TYPE_CHECKING:
    import numpy.typing as npt
    from meshsample.sampling.random_source import UniformSource


def _longest_edge_squared(points: npt.NDArray[np.float64]) -> float:
    edges = points - np.roll(points, 1, axis=0)
    return float(np.max(np.einsum("ij,ij->i", edges, edges)))


@dataclass(frozen=True, eq=False)
class Triangle:
    """
    A single face of the mesh, resolved to vertex positions.

    Attributes:
        points: Array of shape (3, 3) with the corners in face order.
        normal: Unit normal pointing out of the positively oriented side. For
            corners ``a = (0, 0, 0)``, ``b = (1, 0, 0)``, ``c = (0, 1, 0)``
            the normal is ``(0, 0, 1)``; swapping ``a`` and ``b`` flips it.
            Zero for degenerate triangles.
        area: Triangle area.
        epsilon: Relative tolerance used by :attr:`is_degenerate`.
    """
    points: npt.NDArray[np.float64]
    normal: npt.NDArray[np.float64]
    area: float
    epsilon: float = AREA_EPSILON

    @classmethod
    def from_points(cls, p0, p1, p2, epsilon: float = AREA_EPSILON) -> Triangle:
        points = np.array([p0, p1, p2], dtype=np.float64)
        cross = np.cross(points[1] - points[0], points[2] - points[0])
        length = float(np.linalg.norm(cross))
        area = 0.5 * length
        degenerate = area == 0.0 or area <= epsilon * _longest_edge_squared(points)
        normal = np.zeros(3) if degenerate else cross / length
        points.flags.writeable = False
        normal.flags.writeable = False
        return cls(points=points, normal=normal, area=area, epsilon=epsilon)

    @property
    def is_degenerate(self) -> bool:
        """Same relative test as :attr:`SurfaceModel.degenerate_faces`."""
        return self.area == 0.0 or self.area <= self.epsilon * _longest_edge_squared(self.points)

    @property
    def centroid(self) -> npt.NDArray[np.float64]:
        return self.points.mean(axis=0)

    def point_at(self, barycentric) -> npt.NDArray[np.float64]:
        """Cartesian position for the given barycentric weights."""
        return barycentric_to_cartesian(self.points, barycentric)

    def barycentric_of(self, point) -> npt.NDArray[np.float64]:
        """Barycentric coordinates of ``point`` projected onto this triangle's plane."""
        return cartesian_to_barycentric(self.points, point)

    def contains(self, point, tol: float = 1e-9) -> bool:
        """
        Whether ``point`` lies in this triangle.

        The point must be within ``tol`` of the plane (scaled by the triangle
        size) and all barycentric weights must be in ``[-tol, 1 + tol]``.
        Degenerate triangles contain no points.
        """
        if self.is_degenerate:
            return False
        point = np.asarray(point, dtype=np.float64)
        scale = max(math.sqrt(self.area), 1.0)
        if abs(float((point - self.points[0]) @ self.normal)) > tol * scale:
            return False
        weights = self.barycentric_of(point)
        return bool(np.all(weights >= -tol) and np.all(weights <= 1.0 + tol))

    def sample(self, rng: UniformSource) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Uniformly sample a point inside the triangle.

        Consumes two draws from ``rng``.

        Returns:
            Tuple of (position, barycentric weights).
        """
        u2 = rng.random()
        u3 = rng.random()
        weights = barycentric_weights(*fold_unit_square(u2, u3))
        return self.point_at(weights), weights

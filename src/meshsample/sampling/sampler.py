"""
Surface Sampler
===============
Draws area-weighted uniform points from a :class:`SurfaceModel`.

Each sample consumes exactly three uniforms: one selects a face by binary
search over the cumulative area table, two pick a point inside that face.

Classes:
    SurfSample: Result of one draw.
    Sampler: Query-time component bound to one model.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Union

import numpy as np

from meshsample.model.geometry_utils import (
    fold_unit_square,
    barycentric_weights,
    barycentric_to_cartesian,
)

if TYPE_CHECKING:
    import numpy.typing as npt
    from meshsample.model.surface import SurfaceModel
    from meshsample.sampling.random_source import UniformSource

logger = logging.getLogger(__name__)

SeedLike = Union[int, np.random.Generator, None]


@dataclass(frozen=True, eq=False)
class SurfSample:
    """
    A point on the mesh surface.

    Attributes:
        position: Cartesian coordinates, shape (3,).
        face_index: Index of the face the point lies on, in input order.
        barycentric: Weights of the face's three vertices, shape (3,), summing to one.
        normal: Unit normal of that face.
    """
    position: npt.NDArray[np.float64]
    face_index: int
    barycentric: npt.NDArray[np.float64]
    normal: npt.NDArray[np.float64]


def select_face(cumulative_weights: npt.NDArray[np.float64], u):
    """
    Map uniform draw(s) to face indices by binary search.

    Returns the first index whose cumulative weight is strictly greater than
    ``u * total``. Zero-weight faces repeat the previous cumulative value and
    are therefore never returned.

    This is a strict ``>`` rather than the usual "first ``cumulative >= u *
    total``" rule. The two differ only when ``u * total`` lands exactly on a
    cumulative entry: with ``>=`` the boundary draw goes to the face ending
    there, here it goes to the next face with positive weight. For example,
    with ``cumulative = [0.5, 1.0, 1.5, 2.0]`` a draw of ``u = 0.25`` selects
    face 1, not face 0. The strict form keeps a leading zero-weight face
    unreachable at ``u == 0``. Since boundary draws have probability zero,
    the distribution over faces is unchanged.

    Args:
        cumulative_weights: Non-decreasing running sum of face weights with a
            positive last entry.
        u: A float or array of floats in ``[0, 1)``.

    Returns:
        An int for scalar ``u``, an int64 array otherwise.
    """
    total = cumulative_weights[-1]
    index = np.searchsorted(cumulative_weights, np.asarray(u) * total, side="right")
    # Rounding in u * total can land exactly on the total
    last = np.searchsorted(cumulative_weights, total, side="left")
    index = np.minimum(index, last)
    if np.ndim(index) == 0:
        return int(index)
    return index.astype(np.int64)


class Sampler:
    """
    Samples points uniformly by area from a :class:`SurfaceModel`.

    The sampler holds no mutable state, so a single instance may be used from
    several threads as long as each passes its own random source.
    """

    def __init__(self, model: SurfaceModel) -> None:
        self.model = model

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.model!r})"

    def sample(self, rng: UniformSource) -> SurfSample:
        """
        Draw one sample, consuming three values from ``rng``.

        Args:
            rng: Any object whose ``random()`` returns floats in ``[0, 1)``.
        """
        u1 = rng.random()
        u2 = rng.random()
        u3 = rng.random()
        return self.sample_from_uniforms(u1, u2, u3)

    def sample_from_uniforms(self, u1: float, u2: float, u3: float) -> SurfSample:
        """
        Deterministic mapping from three uniforms to a sample.

        ``u1`` picks the face, ``(u2, u3)`` the point inside it.
        """
        face_index = select_face(self.model.cumulative_weights, u1)
        weights = barycentric_weights(*fold_unit_square(u2, u3))
        corners = self.model.vertices[self.model.faces[face_index]]
        position = barycentric_to_cartesian(corners, weights)
        normal = self.model.face_normals[face_index].copy()
        for array in (position, weights, normal):
            array.flags.writeable = False
        return SurfSample(
            position=position,
            face_index=face_index,
            barycentric=weights,
            normal=normal,
        )

    def sample_many(self, rng: UniformSource, n: int) -> list[SurfSample]:
        """
        Draw ``n`` samples one after another from ``rng``.

        Raises:
            ValueError: If ``n`` is negative.
        """
        if n < 0:
            raise ValueError(f"Number of samples must be non-negative, got {n}.")
        return [self.sample(rng) for _ in range(n)]

    def sample_points(
        self,
        n: int,
        seed: SeedLike = None,
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.int64], npt.NDArray[np.float64]]:
        """
        Vectorised batch sampling with numpy.

        Row ``i`` of the uniform block ``(u1, u2, u3)`` is mapped exactly as in
        :meth:`sample_from_uniforms`.

        Args:
            n: Number of samples.
            seed: Seed or an existing ``numpy.random.Generator``.

        Raises:
            ValueError: If ``n`` is negative.

        Returns:
            Tuple of positions (n, 3), face indices (n,), and barycentric weights (n, 3).
        """
        if n < 0:
            raise ValueError(f"Number of samples must be non-negative, got {n}.")
        rng = seed if isinstance(seed, np.random.Generator) else np.random.default_rng(seed)
        uniforms = rng.random((n, 3))
        return self.map_uniforms(uniforms)

    def map_uniforms(
        self,
        uniforms: npt.ArrayLike,
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.int64], npt.NDArray[np.float64]]:
        """
        Map a block of uniforms of shape (n, 3) to samples.

        Raises:
            ValueError: If ``uniforms`` does not have shape (n, 3).
        """
        uniforms = np.asarray(uniforms, dtype=np.float64)
        if uniforms.ndim != 2 or uniforms.shape[1] != 3:
            raise ValueError(f"Uniforms must have shape (n, 3), got {uniforms.shape}.")
        face_indices = select_face(self.model.cumulative_weights, uniforms[:, 0])
        weights = barycentric_weights(*fold_unit_square(uniforms[:, 1], uniforms[:, 2]))
        corners = self.model.vertices[self.model.faces[face_indices]]
        positions = barycentric_to_cartesian(corners, weights)
        logger.debug(f"Mapped {uniforms.shape[0]} uniform triples to surface samples.")
        return positions, face_indices, weights

"""
Surface Model
=============
Validates a triangle mesh once and precomputes everything needed to draw
area-weighted samples from it.

Classes:
    SurfaceModel: Immutable mesh plus its cumulative area table.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

import numpy as np

from meshsample.config import AREA_EPSILON
from meshsample.errors import (
    SurfaceModelError,
    MeshShapeError,
    InvalidIndexError,
    EmptyMeshError,
    ZeroAreaError,
)
from meshsample.model.geometry_primitives import Triangle
from meshsample.model.geometry_utils import (
    triangle_areas,
    longest_edges_squared,
    degenerate_mask,
    face_normals,
)

if TYPE_CHECKING:
    import numpy.typing as npt
    from meshsample.sampling.sampler import SurfSample

logger = logging.getLogger(__name__)


def _read_only(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


def _rejected(error: SurfaceModelError) -> SurfaceModelError:
    logger.warning(f"Rejected mesh: {error}")
    return error


def _first_invalid_index(faces, n_vertices: int) -> tuple[int, int] | None:
    """Scan raw face input for the first index outside ``[0, n_vertices)``."""
    for face_index, face in enumerate(faces):
        try:
            indices = [int(vertex_index) for vertex_index in face]
        except (TypeError, ValueError):
            continue
        for vertex_index in indices:
            if not 0 <= vertex_index < n_vertices:
                return face_index, vertex_index
    return None


class SurfaceModel:
    """
    A triangulated surface prepared for area-weighted sampling.

    The model copies its inputs, so later changes to the caller's arrays do not
    affect it, and every exposed array is read-only. One instance can be shared
    between any number of samplers.
    """

    def __init__(
        self,
        vertices: Sequence[Sequence[float]] | npt.ArrayLike,
        faces: Sequence[Sequence[int]] | npt.ArrayLike,
        epsilon: float = AREA_EPSILON,
    ) -> None:
        """
        Validate the mesh and build the cumulative-weight table.

        Args:
            vertices: Vertex positions, shape (n, 3) with n >= 3.
            faces: Vertex index triples, shape (m, 3).
            epsilon: Relative tolerance. A face with
                ``area <= epsilon * longest_edge**2`` is degenerate and gets
                zero weight; the mesh is rejected if every face is degenerate.

        Raises:
            MeshShapeError: If the arrays have the wrong shape.
            InvalidIndexError: If a face references a missing vertex.
            EmptyMeshError: If there are no faces.
            ZeroAreaError: If every face is degenerate.
        """
        try:
            vertex_array = np.array(vertices, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise _rejected(MeshShapeError(f"Could not convert vertices to an array: {e}")) from e

        if vertex_array.ndim != 2 or vertex_array.shape[1] != 3:
            raise _rejected(MeshShapeError(f"Vertices must have shape (n, 3), got {vertex_array.shape}."))
        if vertex_array.shape[0] < 3:
            raise _rejected(MeshShapeError(f"At least 3 vertices are required, got {vertex_array.shape[0]}."))
        n_vertices = vertex_array.shape[0]

        try:
            face_array = np.array(faces, dtype=np.int64)
        except OverflowError as e:
            # Some index does not fit in int64, so it cannot address a vertex
            located = _first_invalid_index(faces, n_vertices)
            if located is None:
                raise _rejected(MeshShapeError(f"Could not convert faces to an array: {e}")) from e
            raise _rejected(InvalidIndexError(*located, n_vertices)) from e
        except (TypeError, ValueError) as e:
            raise _rejected(MeshShapeError(f"Could not convert faces to an array: {e}")) from e

        # An empty face list usually arrives as shape (0,)
        if face_array.size == 0:
            face_array = face_array.reshape(0, 3)
        if face_array.ndim != 2 or face_array.shape[1] != 3:
            raise _rejected(MeshShapeError(f"Faces must have shape (m, 3), got {face_array.shape}."))

        out_of_range = (face_array < 0) | (face_array >= n_vertices)
        if out_of_range.any():
            face_index, corner = np.argwhere(out_of_range)[0]
            raise _rejected(
                InvalidIndexError(int(face_index), int(face_array[face_index, corner]), n_vertices)
            )

        if face_array.shape[0] == 0:
            raise _rejected(EmptyMeshError())

        areas = triangle_areas(vertex_array, face_array)
        degenerate = degenerate_mask(areas, longest_edges_squared(vertex_array, face_array), epsilon)
        weights = np.where(degenerate, 0.0, areas)
        cumulative = np.cumsum(weights)
        total_area = float(cumulative[-1])
        if total_area == 0.0:
            raise _rejected(ZeroAreaError(float(areas.sum()), epsilon))

        self._vertices = _read_only(vertex_array)
        self._faces = _read_only(face_array)
        self._face_areas = _read_only(areas)
        self._weights = _read_only(weights)
        self._degenerate = _read_only(degenerate)
        self._face_normals = _read_only(face_normals(vertex_array, face_array, degenerate))
        self._cumulative_weights = _read_only(cumulative)
        self._total_area = total_area
        self._epsilon = epsilon

        logger.debug(
            f"Built surface model: {self.n_faces} faces "
            f"({self.n_degenerate_faces} degenerate), total area {total_area:.6g}."
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(n_vertices={self.n_vertices}, "
            f"n_faces={self.n_faces}, total_area={self.total_area:.6g})"
        )

    @property
    def vertices(self) -> npt.NDArray[np.float64]:
        return self._vertices

    @property
    def faces(self) -> npt.NDArray[np.int64]:
        return self._faces

    @property
    def face_areas(self) -> npt.NDArray[np.float64]:
        """Area of each face, in input order."""
        return self._face_areas

    @property
    def face_normals(self) -> npt.NDArray[np.float64]:
        """Unit normal of each face; zero for degenerate faces."""
        return self._face_normals

    @property
    def cumulative_weights(self) -> npt.NDArray[np.float64]:
        """Running sum of face weights; the last entry is the total area."""
        return self._cumulative_weights

    @property
    def total_area(self) -> float:
        return self._total_area

    @property
    def epsilon(self) -> float:
        return self._epsilon

    @property
    def n_vertices(self) -> int:
        return self._vertices.shape[0]

    @property
    def n_faces(self) -> int:
        return self._faces.shape[0]

    @property
    def degenerate_faces(self) -> npt.NDArray[np.bool_]:
        """Mask of faces that can never be sampled."""
        return self._degenerate

    @property
    def n_degenerate_faces(self) -> int:
        return int(np.count_nonzero(self.degenerate_faces))

    @property
    def face_probabilities(self) -> npt.NDArray[np.float64]:
        """Probability of each face being selected by one sample."""
        return self._weights / self._total_area

    def triangle(self, face_index: int) -> Triangle:
        """
        Resolve one face to a :class:`Triangle`.

        Raises:
            IndexError: If ``face_index`` is out of range.
        """
        if not 0 <= face_index < self.n_faces:
            raise IndexError(f"Face index {face_index} out of range (n_faces = {self.n_faces}).")
        return Triangle.from_points(*self._vertices[self._faces[face_index]], epsilon=self._epsilon)

    def interpolate(
        self,
        sample: SurfSample,
        vertex_values: npt.ArrayLike,
    ) -> npt.NDArray[np.float64] | float:
        """
        Interpolate per-vertex values at a sample's location.

        Args:
            sample: A sample drawn from this model.
            vertex_values: Values of shape (n_vertices,) or (n_vertices, k),
                e.g. vertex normals, colours or UVs.

        Raises:
            ValueError: If ``vertex_values`` does not have one row per vertex.

        Returns:
            A float for 1D input, an array of shape (k,) otherwise.
        """
        values = np.asarray(vertex_values, dtype=np.float64)
        if values.shape[0] != self.n_vertices:
            raise ValueError(
                f"Expected {self.n_vertices} vertex values, got {values.shape[0]}."
            )
        corner_values = values[self._faces[sample.face_index]]
        result = np.tensordot(np.asarray(sample.barycentric), corner_values, axes=1)
        if values.ndim == 1:
            return float(result)
        return result

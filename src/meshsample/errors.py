"""
Error Taxonomy
==============
All failures are raised while building a :class:`~meshsample.model.surface.SurfaceModel`.
Sampling from a valid model never raises.
"""
from __future__ import annotations


class MeshSampleError(Exception):
    """Base class for every error raised by meshsample."""


class SurfaceModelError(MeshSampleError, ValueError):
    """The vertex/face arrays cannot form a sampling distribution."""


class MeshShapeError(SurfaceModelError):
    """Input arrays have the wrong shape, or there are fewer than three vertices."""


class InvalidIndexError(SurfaceModelError):
    """A face references a vertex index outside ``[0, n_vertices)``."""

    def __init__(self, face_index: int, vertex_index: int, n_vertices: int) -> None:
        self.face_index = face_index
        self.vertex_index = vertex_index
        self.n_vertices = n_vertices
        super().__init__(
            f"Face {face_index} references vertex index {vertex_index}, "
            f"which is out of range (n_vertices = {n_vertices})."
        )


class EmptyMeshError(SurfaceModelError):
    """The face list is empty."""

    def __init__(self) -> None:
        super().__init__("Cannot build a surface distribution from an empty face list.")


class ZeroAreaError(SurfaceModelError):
    """Every face is degenerate, so the total surface area is (numerically) zero."""

    def __init__(self, total_area: float, epsilon: float) -> None:
        self.total_area = total_area
        self.epsilon = epsilon
        super().__init__(
            f"All faces are degenerate (total surface area {total_area:g}, "
            f"relative tolerance {epsilon:g})."
        )


# Both names are in use for the same failure
DegenerateMeshError = ZeroAreaError


class SourceExhaustedError(MeshSampleError, IndexError):
    """A scripted uniform source has no values left."""

"""
Area-weighted random sampling of points on triangle mesh surfaces.

Build a :class:`SurfaceModel` once, then draw as many samples as needed::

    import random
    from meshsample import SurfaceModel, Sampler

    vertices = [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)]
    faces = [(1, 0, 2), (2, 0, 3), (0, 1, 3), (1, 2, 3)]
    sampler = Sampler(SurfaceModel(vertices, faces))
    sample = sampler.sample(random.Random(0))
    print(sample.position, sample.face_index, sample.barycentric)
"""
from meshsample.errors import (
    MeshSampleError,
    SurfaceModelError,
    MeshShapeError,
    InvalidIndexError,
    EmptyMeshError,
    ZeroAreaError,
    DegenerateMeshError,
    SourceExhaustedError,
)
from meshsample.model.geometry_primitives import Triangle
from meshsample.model.surface import SurfaceModel
from meshsample.sampling.random_source import UniformSource, ScriptedSource
from meshsample.sampling.sampler import SurfSample, Sampler, select_face

__all__ = [
    "MeshSampleError",
    "SurfaceModelError",
    "MeshShapeError",
    "InvalidIndexError",
    "EmptyMeshError",
    "ZeroAreaError",
    "DegenerateMeshError",
    "SourceExhaustedError",
    "Triangle",
    "SurfaceModel",
    "UniformSource",
    "ScriptedSource",
    "SurfSample",
    "Sampler",
    "select_face",
]

import math
import random
import unittest
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from scipy import stats

from meshsample import (
    SurfaceModel,
    Sampler,
    SurfSample,
    ScriptedSource,
    UniformSource,
    SourceExhaustedError,
    select_face,
)
from tests.meshes import (
    TETRA_VERTICES,
    TETRA_FACES,
    TETRA_AREAS,
    TETRA_TOTAL_AREA,
    SCALED_VERTICES,
    SCALED_FACES,
    SCALED_AREAS,
    UNIT_TRIANGLE_VERTICES,
    UNIT_TRIANGLE_FACES,
)

# Goodness-of-fit threshold for the seeded statistical tests
P_VALUE_FLOOR = 1e-4


class TestSelectFace(unittest.TestCase):
    def test_picks_first_face_above_target(self):
        cumulative = np.array([0.5, 1.0, 1.5, 2.0])
        self.assertEqual(select_face(cumulative, 0.0), 0)
        self.assertEqual(select_face(cumulative, 0.2), 0)
        self.assertEqual(select_face(cumulative, 0.3), 1)
        self.assertEqual(select_face(cumulative, 0.99), 3)

    def test_exact_boundary_goes_to_next_face(self):
        cumulative = np.array([0.5, 1.0, 1.5, 2.0])
        # u * total == 0.5 sits on the end of face 0
        self.assertEqual(select_face(cumulative, 0.25), 1)
        self.assertEqual(select_face(cumulative, 0.5), 2)
        self.assertEqual(select_face(cumulative, 0.24999999), 0)

    def test_never_selects_leading_zero_weight_face(self):
        cumulative = np.array([0.0, 0.5, 1.0])
        self.assertEqual(select_face(cumulative, 0.0), 1)

    def test_never_selects_inner_zero_weight_face(self):
        cumulative = np.array([0.5, 0.5, 1.0])
        self.assertEqual(select_face(cumulative, 0.5), 2)

    def test_never_selects_trailing_zero_weight_face(self):
        cumulative = np.array([0.5, 1.0, 1.0])
        self.assertEqual(select_face(cumulative, 0.999999), 1)
        # A draw of exactly 1.0 is outside the contract but still lands on a real face
        self.assertEqual(select_face(cumulative, 1.0), 1)

    def test_vectorised(self):
        cumulative = np.array([1.0, 3.0, 6.0])
        faces = select_face(cumulative, np.array([0.0, 0.1, 0.2, 0.5, 0.9]))
        self.assertEqual(faces.dtype, np.int64)
        np.testing.assert_array_equal(faces, [0, 0, 1, 2, 2])

    def test_returns_python_int_for_scalar(self):
        self.assertIsInstance(select_face(np.array([1.0, 2.0]), 0.75), int)


class TestScriptedSource(unittest.TestCase):
    def test_replays_values(self):
        source = ScriptedSource([0.1, 0.2])
        self.assertEqual(source.random(), 0.1)
        self.assertEqual(source.random(), 0.2)
        self.assertEqual(source.consumed, 2)
        self.assertEqual(source.remaining, 0)

    def test_exhaustion(self):
        source = ScriptedSource([0.5])
        source.random()
        with self.assertRaises(SourceExhaustedError):
            source.random()
        self.assertTrue(issubclass(SourceExhaustedError, IndexError))

    def test_protocol(self):
        self.assertIsInstance(ScriptedSource([]), UniformSource)
        self.assertIsInstance(random.Random(0), UniformSource)
        self.assertIsInstance(np.random.default_rng(0), UniformSource)


class TestDeterministicSampling(unittest.TestCase):
    def setUp(self):
        self.model = SurfaceModel(TETRA_VERTICES, TETRA_FACES)
        self.sampler = Sampler(self.model)

    def test_scripted_sample_without_fold(self):
        source = ScriptedSource([0.25, 0.25, 0.5])
        sample = self.sampler.sample(source)
        self.assertIsInstance(sample, SurfSample)
        self.assertEqual(source.consumed, 3)
        self.assertEqual(sample.face_index, 1)
        np.testing.assert_array_equal(sample.barycentric, [0.25, 0.25, 0.5])
        np.testing.assert_array_equal(sample.position, [0.0, 0.25, 0.5])
        np.testing.assert_array_equal(sample.normal, [-1.0, 0.0, 0.0])

    def test_scripted_sample_with_fold(self):
        sample = self.sampler.sample(ScriptedSource([0.9, 0.75, 0.5]))
        self.assertEqual(sample.face_index, 3)
        np.testing.assert_array_equal(sample.barycentric, [0.25, 0.25, 0.5])
        np.testing.assert_array_equal(sample.position, [0.25, 0.25, 0.5])
        s = 1.0 / math.sqrt(3.0)
        np.testing.assert_allclose(sample.normal, [s, s, s])

    def test_zero_draws_give_first_vertex_of_first_face(self):
        sample = self.sampler.sample(ScriptedSource([0.0, 0.0, 0.0]))
        self.assertEqual(sample.face_index, 0)
        np.testing.assert_array_equal(sample.barycentric, [1.0, 0.0, 0.0])
        np.testing.assert_array_equal(sample.position, TETRA_VERTICES[TETRA_FACES[0][0]])

    def test_consumes_exactly_three_draws_per_sample(self):
        source = ScriptedSource([0.1, 0.2, 0.3] * 4)
        self.sampler.sample_many(source, 4)
        self.assertEqual(source.remaining, 0)
        with self.assertRaises(SourceExhaustedError):
            self.sampler.sample(source)

    def test_same_seed_reproduces_samples(self):
        first = self.sampler.sample_many(random.Random(42), 50)
        second = self.sampler.sample_many(random.Random(42), 50)
        for a, b in zip(first, second):
            self.assertEqual(a.face_index, b.face_index)
            np.testing.assert_array_equal(a.position, b.position)
            np.testing.assert_array_equal(a.barycentric, b.barycentric)

    def test_sample_is_read_only(self):
        sample = self.sampler.sample(random.Random(1))
        with self.assertRaises(ValueError):
            sample.position[0] = 1.0
        with self.assertRaises(AttributeError):
            sample.face_index = 0

    def test_batch_matches_single_mapping(self):
        uniforms = np.random.default_rng(7).random((200, 3))
        positions, faces, weights = self.sampler.map_uniforms(uniforms)
        for row, position, face, weight in zip(uniforms, positions, faces, weights):
            sample = self.sampler.sample_from_uniforms(*row)
            self.assertEqual(sample.face_index, face)
            np.testing.assert_allclose(sample.barycentric, weight, rtol=0, atol=1e-15)
            np.testing.assert_allclose(sample.position, position, rtol=0, atol=1e-15)

    def test_sample_points_is_seeded(self):
        a = self.sampler.sample_points(100, seed=3)
        b = self.sampler.sample_points(100, seed=np.random.default_rng(3))
        for x, y in zip(a, b):
            np.testing.assert_array_equal(x, y)

    def test_sample_points_shapes(self):
        positions, faces, weights = self.sampler.sample_points(10, seed=0)
        self.assertEqual(positions.shape, (10, 3))
        self.assertEqual(faces.shape, (10,))
        self.assertEqual(weights.shape, (10, 3))
        positions, faces, weights = self.sampler.sample_points(0, seed=0)
        self.assertEqual(positions.shape, (0, 3))

    def test_negative_counts(self):
        with self.assertRaises(ValueError):
            self.sampler.sample_many(random.Random(0), -1)
        with self.assertRaises(ValueError):
            self.sampler.sample_points(-1)

    def test_map_uniforms_shape(self):
        with self.assertRaises(ValueError):
            self.sampler.map_uniforms(np.zeros((4, 2)))

    def test_shared_model_across_threads(self):
        def draw(seed):
            return [s.face_index for s in self.sampler.sample_many(random.Random(seed), 200)]

        with ThreadPoolExecutor(max_workers=4) as pool:
            threaded = list(pool.map(draw, range(8)))
        self.assertEqual(threaded, [draw(seed) for seed in range(8)])


class TestSampleDistribution(unittest.TestCase):
    def test_containment(self):
        model = SurfaceModel(TETRA_VERTICES, TETRA_FACES)
        sampler = Sampler(model)
        rng = random.Random(2024)
        for sample in sampler.sample_many(rng, 2000):
            self.assertTrue(np.all(sample.barycentric >= 0.0))
            self.assertTrue(np.all(sample.barycentric <= 1.0))
            self.assertAlmostEqual(float(sample.barycentric.sum()), 1.0, places=12)
            self.assertTrue(model.triangle(sample.face_index).contains(sample.position))

    def test_numpy_generator_as_source(self):
        model = SurfaceModel(TETRA_VERTICES, TETRA_FACES)
        sample = Sampler(model).sample(np.random.default_rng(5))
        self.assertTrue(model.triangle(sample.face_index).contains(sample.position))

    def test_area_weighted_face_selection(self):
        sampler = Sampler(SurfaceModel(SCALED_VERTICES, SCALED_FACES))
        n = 100_000
        _, faces, _ = sampler.sample_points(n, seed=12345)
        counts = np.bincount(faces, minlength=4)
        self.assertEqual(counts[1], 0)
        valid = [0, 2, 3]
        expected = np.array([SCALED_AREAS[i] for i in valid]) / 7.0 * n
        result = stats.chisquare(counts[valid], expected)
        self.assertGreater(result.pvalue, P_VALUE_FLOOR)

    def test_model_triangle_agrees_on_degeneracy(self):
        vertices = [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0.5, 1e-13, 0)]
        model = SurfaceModel(vertices, [(0, 1, 2), (0, 1, 3)])
        for face in range(model.n_faces):
            self.assertEqual(model.triangle(face).is_degenerate, bool(model.degenerate_faces[face]))

    def test_degenerate_face_is_never_selected(self):
        sampler = Sampler(SurfaceModel(SCALED_VERTICES, SCALED_FACES))
        rng = random.Random(99)
        faces = {sample.face_index for sample in sampler.sample_many(rng, 5000)}
        self.assertNotIn(1, faces)
        self.assertEqual(faces, {0, 2, 3})

    def test_uniform_within_triangle(self):
        sampler = Sampler(SurfaceModel(UNIT_TRIANGLE_VERTICES, UNIT_TRIANGLE_FACES))
        n = 100_000
        positions, faces, _ = sampler.sample_points(n, seed=777)
        self.assertTrue(np.all(faces == 0))

        # 10x10 grid over the unit square: 45 cells lie fully inside the
        # triangle, each holding 2% of the area; the diagonal cells take the rest.
        bins = 10
        cells = np.minimum((positions[:, :2] * bins).astype(np.int64), bins - 1)
        full_cells = [(i, j) for i in range(bins) for j in range(bins) if i + j <= bins - 2]
        counts = Counter(map(tuple, cells))
        observed = [counts[cell] for cell in full_cells]
        observed.append(n - sum(observed))
        expected = [n * 0.02] * len(full_cells) + [n * (1.0 - 0.02 * len(full_cells))]
        result = stats.chisquare(observed, expected)
        self.assertGreater(result.pvalue, P_VALUE_FLOOR)

        # Not pulled towards the centroid or the edges
        np.testing.assert_allclose(positions[:, :2].mean(axis=0), [1 / 3, 1 / 3], atol=0.005)

    def test_tetrahedron_oblique_face_frequency(self):
        sampler = Sampler(SurfaceModel(TETRA_VERTICES, TETRA_FACES))
        n = 10_000
        counts = Counter(s.face_index for s in sampler.sample_many(random.Random(31337), n))
        expected = TETRA_AREAS[3] / TETRA_TOTAL_AREA
        self.assertAlmostEqual(expected, 0.366, places=3)
        self.assertAlmostEqual(counts[3] / n, expected, delta=0.02)
        for face in range(3):
            self.assertAlmostEqual(counts[face] / n, 0.5 / TETRA_TOTAL_AREA, delta=0.02)


if __name__ == '__main__':
    unittest.main()

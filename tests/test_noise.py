# tests/test_noise.py

import numpy as np

from planet_generator.noise import NoiseField, NoiseMode, build_permutation_table


class TestPermutationTable:
    def test_table_is_a_doubled_permutation(self):
        table = build_permutation_table(1337)
        assert table.shape == (512,)
        assert np.array_equal(table[:256], table[256:])
        assert sorted(table[:256]) == list(range(256))

    def test_same_seed_same_table(self):
        assert np.array_equal(build_permutation_table(5), build_permutation_table(5))
        assert not np.array_equal(build_permutation_table(5), build_permutation_table(6))


class TestNoiseField:
    def setup_method(self):
        rng = np.random.default_rng(0)
        v = rng.normal(size=(3, 40, 30))
        v /= np.linalg.norm(v, axis=0)
        self.x, self.y, self.z = v

    def test_output_keeps_input_shape_and_range(self):
        for mode in NoiseMode:
            values = NoiseField(11, mode, frequency=1.5, octaves=4).sample(self.x, self.y, self.z)
            assert values.shape == self.x.shape
            assert values.min() >= -1.0
            assert values.max() <= 1.0

    def test_sampling_is_deterministic(self):
        a = NoiseField(3, NoiseMode.FRACTAL, 0.8, 6).sample(self.x, self.y, self.z)
        b = NoiseField(3, NoiseMode.FRACTAL, 0.8, 6).sample(self.x, self.y, self.z)
        assert np.array_equal(a, b)

    def test_seeds_give_independent_fields(self):
        a = NoiseField(1).sample(self.x, self.y, self.z)
        b = NoiseField(2).sample(self.x, self.y, self.z)
        assert not np.allclose(a, b)

    def test_billow_and_ridged_are_mirror_images(self):
        billow = NoiseField(9, NoiseMode.BILLOW, 1.0, 1).sample(self.x, self.y, self.z)
        ridged = NoiseField(9, NoiseMode.RIDGED, 1.0, 1).sample(self.x, self.y, self.z)
        assert np.allclose(billow, -ridged)

    def test_simplex_ignores_octaves(self):
        field = NoiseField(4, NoiseMode.SIMPLEX, octaves=6)
        assert field.octaves == 1

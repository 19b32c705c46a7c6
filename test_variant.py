"""Tests for the Variant reward accumulator."""
import math
import unittest

from variant import RewardOutOfRange, Variant, new_variant


class TestVariant(unittest.TestCase):
    def assertVariantAlmostEqual(self, a, b):
        self.assertAlmostEqual(a.reward_sum, b.reward_sum, places=6)
        self.assertAlmostEqual(a.reward_square_sum, b.reward_square_sum, places=6)
        self.assertEqual(a.observation_count, b.observation_count)

    def test_new_variant_is_zero(self):
        v = new_variant()
        self.assertEqual(v, Variant(0.0, 0.0, 0))
        self.assertEqual(Variant(), v)

    def test_observe(self):
        cases = [
            (0.0, Variant(), Variant(0, 0, 1)),
            (0.1, Variant(0, 0, 1), Variant(0.1, 0.01, 2)),
            (0.9, Variant(0.1, 0.5, 2), Variant(1.0, 1.31, 3)),
        ]
        for reward, before, after in cases:
            with self.subTest(reward=reward, before=before):
                self.assertVariantAlmostEqual(before.observe(reward), after)

    def test_observe_returns_new_value(self):
        v = Variant()
        out = v.observe(0.25)
        self.assertIsNot(out, v)
        self.assertEqual(v, Variant())
        self.assertVariantAlmostEqual(out, Variant(0.25, 0.0625, 1))

    def test_observe_wrong_range(self):
        v = Variant(0.5, 0.25, 1)
        for reward in (-0.00001, 1.0001, 1.0, math.nan, math.inf):
            with self.subTest(reward=reward):
                with self.assertRaises(RewardOutOfRange) as ctx:
                    v.observe(reward)
                self.assertIs(ctx.exception.variant, v)
                self.assertEqual(v, Variant(0.5, 0.25, 1))

    def test_out_of_range_is_value_error(self):
        with self.assertRaises(ValueError):
            Variant().observe(2.0)

    def test_immutable(self):
        v = Variant()
        with self.assertRaises(AttributeError):
            v.reward_sum = 1.0

    def test_negative_count_rejected(self):
        with self.assertRaises(ValueError):
            Variant(0.0, 0.0, -1)

    def test_inconsistent_sums_rejected(self):
        for args in ((math.nan, 0.0, 1), (-0.1, 0.0, 1), (2.0, 1.0, 1), (0.5, 0.25, 0), (0.5, math.nan, 1)):
            with self.subTest(args=args):
                with self.assertRaises(ValueError):
                    Variant(*args)


if __name__ == "__main__":
    unittest.main()

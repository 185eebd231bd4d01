"""Unit tests for bucketed, temporally diverse sampling"""

import random
import unittest
from unittest.mock import patch

from clipmix.video.sampling import DiverseSampler, build_buckets, build_time_buckets


class TestBuckets(unittest.TestCase):
    def test_buckets_partition_indices(self):
        for total in range(1, 31):
            for count in range(1, total + 1):
                buckets = build_buckets(total, count)
                self.assertEqual(len(buckets), count)
                flattened = [idx for bucket in buckets for idx in bucket]
                self.assertEqual(flattened, list(range(total)), (total, count))

    def test_nine_into_three(self):
        self.assertEqual(build_buckets(9, 3), [range(0, 3), range(3, 6), range(6, 9)])

    def test_more_buckets_than_indices(self):
        buckets = build_buckets(2, 3)
        self.assertEqual(len(buckets), 3)
        self.assertTrue(all(len(bucket) == 1 for bucket in buckets))

    def test_time_buckets(self):
        self.assertEqual(build_time_buckets(60, 3), [(0.0, 20.0), (20.0, 20.0), (40.0, 20.0)])


class TestDiverseSampler(unittest.TestCase):
    """Test cases for DiverseSampler"""
    def test_one_index_per_bucket(self):
        sampler = DiverseSampler(random.Random(5))
        for _ in range(100):
            indices = sampler.pick(9, 3)
            for i, idx in enumerate(indices):
                self.assertIn(idx, range(3 * i, 3 * i + 3))

    def test_differs_from_previous(self):
        sampler = DiverseSampler(random.Random(11))
        previous = None
        for _ in range(200):
            indices = sampler.pick(12, 3, previous)
            self.assertNotEqual(indices, previous)
            previous = indices

    def test_accepts_repeat_after_attempt_cap(self):
        """With a single possible combination the repeat is eventually accepted"""
        sampler = DiverseSampler(random.Random(0), max_attempts=30)
        with patch.object(sampler, "_draw", wraps=sampler._draw) as draw:
            self.assertEqual(sampler.pick(3, 3, previous=(0, 1, 2)), (0, 1, 2))
        self.assertEqual(draw.call_count, 31)

    def test_invalid_arguments(self):
        sampler = DiverseSampler(random.Random(0))
        with self.assertRaises(ValueError):
            sampler.pick(0, 3)
        with self.assertRaises(ValueError):
            sampler.pick(3, 0)


if __name__ == "__main__":
    unittest.main()

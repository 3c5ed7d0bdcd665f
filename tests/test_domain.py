import math
import unittest

from cellsize_viewer.core.domain import Domain, compute_domain, format_tick, make_ticks
from cellsize_viewer.core.normalize import TrajectoryPoint


class ComputeDomainTests(unittest.TestCase):
    def test_padding_is_five_percent_of_span(self):
        low, high = compute_domain([10, 20, 30])
        self.assertAlmostEqual(low, 9.0)
        self.assertAlmostEqual(high, 31.0)

    def test_degenerate_values_widen_by_one(self):
        self.assertEqual(compute_domain([5, 5, 5]), Domain(4.0, 6.0))

    def test_empty_and_non_finite_inputs(self):
        self.assertEqual(compute_domain([]), Domain(0.0, 1.0))
        self.assertEqual(compute_domain([math.nan, math.inf]), Domain(0.0, 1.0))
        self.assertEqual(compute_domain([math.nan, 2.0]), Domain(1.0, 3.0))

    def test_key_reads_attributes_or_dict_values(self):
        points = [TrajectoryPoint.create("A", "1", "1", t, 1.0) for t in (0.0, 5.0)]
        low, high = compute_domain(points, key="time")
        self.assertAlmostEqual(low, -0.25)
        self.assertAlmostEqual(high, 5.25)
        rows = [{"size": 1.0}, {"size": 3.0}, {"other": 9.0}]
        low, high = compute_domain(rows, key="size")
        self.assertAlmostEqual(low, 0.9)
        self.assertAlmostEqual(high, 3.1)

    def test_domain_helpers(self):
        domain = Domain(2.0, 6.0)
        self.assertEqual(domain.span, 4.0)
        self.assertEqual(domain.center, 4.0)
        self.assertTrue(domain.contains(6.0))
        self.assertFalse(domain.contains(6.5))


class TickTests(unittest.TestCase):
    def test_ticks_include_both_ends(self):
        self.assertEqual(make_ticks(Domain(0.0, 10.0), count=6), [0.0, 2.0, 4.0, 6.0, 8.0, 10.0])

    def test_degenerate_and_invalid_ticks(self):
        self.assertEqual(make_ticks(Domain(3.0, 3.0)), [3.0])
        self.assertEqual(make_ticks(Domain(0.0, 1.0), count=1), [0.0])
        self.assertEqual(make_ticks(Domain(math.nan, 1.0)), [])

    def test_format_tick(self):
        self.assertEqual(format_tick(1234.56), "1235")
        self.assertEqual(format_tick(-150.0), "-150")
        self.assertEqual(format_tick(3.14159), "3.14")
        self.assertEqual(format_tick(math.nan), "")


if __name__ == "__main__":
    unittest.main()

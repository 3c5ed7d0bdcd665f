import unittest

from cellsize_viewer.core.grouping import (
    SeriesKey,
    enumerate_series,
    group_by_cell,
    lineage_display_key,
    lineage_sort_key,
    series_points,
)
from cellsize_viewer.core.normalize import TrajectoryPoint


def point(experiment="A", lineage="1", cell="1", time=0.0, size=1.0):
    return TrajectoryPoint.create(experiment, lineage, cell, time, size)


class EnumerateSeriesTests(unittest.TestCase):
    def test_numeric_lineages_sort_numerically(self):
        points = [point(lineage="2"), point(lineage="10"), point(lineage="1")]
        keys = [entry.key.lineage for entry in enumerate_series(points)]
        self.assertEqual(keys, ["1", "2", "10"])

    def test_experiments_sort_lexicographically_first(self):
        points = [point(experiment="B", lineage="1"), point(experiment="A", lineage="5")]
        keys = [tuple(entry.key) for entry in enumerate_series(points)]
        self.assertEqual(keys, [("A", "5"), ("B", "1")])

    def test_non_numeric_lineages_follow_numeric_in_first_seen_order(self):
        points = [point(lineage="beta"), point(lineage="3"), point(lineage="alpha")]
        keys = [entry.key.lineage for entry in enumerate_series(points)]
        self.assertEqual(keys, ["3", "beta", "alpha"])

    def test_equal_numeric_values_keep_first_seen_order(self):
        points = [point(lineage="1.0"), point(lineage="1")]
        keys = [entry.key.lineage for entry in enumerate_series(points)]
        self.assertEqual(keys, ["1.0", "1"])

    def test_representative_and_counts(self):
        first = point(cell="7", time=3.0)
        points = [first, point(cell="8", time=1.0), point(lineage="2")]
        entries = enumerate_series(points)
        self.assertIs(entries[0].representative, first)
        self.assertEqual(entries[0].point_count, 2)
        self.assertEqual(entries[0].label, "A | lineage 1")

    def test_lineage_sort_key(self):
        self.assertEqual(lineage_sort_key("10"), (0, 10.0))
        self.assertEqual(lineage_sort_key("x"), (1, 0.0))
        self.assertEqual(lineage_sort_key("nan"), (1, 0.0))
        self.assertEqual(lineage_sort_key("inf"), (1, 0.0))
        self.assertEqual(lineage_sort_key("-Infinity"), (1, 0.0))
        self.assertEqual(lineage_sort_key("1_0"), (1, 0.0))
        self.assertEqual(lineage_sort_key(" 3 "), (0, 3.0))

    def test_non_finite_lineages_sort_after_numeric(self):
        points = [point(lineage="inf"), point(lineage="1_0"), point(lineage="2")]
        keys = [entry.key.lineage for entry in enumerate_series(points)]
        self.assertEqual(keys, ["2", "inf", "1_0"])

    def test_lineage_display_key_breaks_ties_by_id(self):
        ordered = sorted(["b", "10", "a", "2", "inf"], key=lineage_display_key)
        self.assertEqual(ordered, ["2", "10", "a", "b", "inf"])


class GroupByCellTests(unittest.TestCase):
    def test_cells_sorted_by_time_with_stable_ties(self):
        a = point(cell="1", time=5.0, size=1.0)
        b = point(cell="1", time=0.0, size=2.0)
        c = point(cell="1", time=5.0, size=3.0)
        d = point(cell="2", time=1.0)
        groups = group_by_cell([a, d, b, c])
        self.assertEqual(list(groups), ["1", "2"])
        self.assertEqual(groups["1"], [b, a, c])

    def test_series_points_filters_by_key(self):
        points = [point(lineage="1"), point(lineage="2"), point(experiment="B", lineage="1")]
        selected = series_points(points, SeriesKey("A", "1"))
        self.assertEqual(selected, [points[0]])


if __name__ == "__main__":
    unittest.main()

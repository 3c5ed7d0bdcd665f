import math
import unittest

from cellsize_viewer.core.normalize import TrajectoryPoint
from cellsize_viewer.core.statistics import (
    derive_cell_summaries,
    lineage_counts,
    summarize_cell,
    summary_values,
)


def point(cell, time, size, lineage="1"):
    return TrajectoryPoint.create("A", lineage, cell, time, size)


class CellStatisticsTests(unittest.TestCase):
    def test_growth_rate_from_first_and_last_point(self):
        summary = summarize_cell("1", [point("1", 0.0, 10.0), point("1", 2.0, 14.0), point("1", 5.0, 20.0)])
        self.assertAlmostEqual(summary.tau, 5.0)
        self.assertAlmostEqual(summary.phi, math.log(2.0))
        self.assertAlmostEqual(summary.lambda_, math.log(2.0) / 5.0)
        self.assertAlmostEqual(summary.initial_size, math.log(10.0))
        self.assertAlmostEqual(summary.final_size, math.log(20.0))
        self.assertTrue(summary.is_valid)

    def test_zero_generation_time_gives_no_growth_rate(self):
        summary = summarize_cell("1", [point("1", 3.0, 1.0), point("1", 3.0, 2.0)])
        self.assertEqual(summary.tau, 0.0)
        self.assertTrue(math.isnan(summary.lambda_))
        self.assertFalse(summary.is_valid)

    def test_points_are_time_sorted_before_summarizing(self):
        result = derive_cell_summaries([point("1", 5.0, 20.0), point("1", 0.0, 10.0)])
        self.assertAlmostEqual(result.summaries[0].tau, 5.0)
        self.assertGreater(result.summaries[0].phi, 0.0)

    def test_single_point_cells_are_skipped(self):
        result = derive_cell_summaries([point("1", 0.0, 1.0), point("2", 0.0, 1.0), point("2", 1.0, 2.0)])
        self.assertEqual([summary.cell for summary in result.summaries], ["2"])
        self.assertEqual(result.skipped, 1)

    def test_same_cell_id_in_different_lineages_stays_separate(self):
        points = [
            point("1", 0.0, 1.0, lineage="1"),
            point("1", 1.0, 2.0, lineage="1"),
            point("1", 0.0, 1.0, lineage="2"),
            point("1", 4.0, 2.0, lineage="2"),
        ]
        result = derive_cell_summaries(points)
        self.assertEqual([(s.lineage, s.tau) for s in result.summaries], [("1", 1.0), ("2", 4.0)])
        self.assertEqual(lineage_counts(result.summaries), {"1": 1, "2": 1})

    def test_summary_values(self):
        result = derive_cell_summaries([point("1", 0.0, 1.0), point("1", 2.0, 1.0)])
        self.assertEqual(summary_values(result.summaries, "tau").tolist(), [2.0])
        with self.assertRaises(KeyError):
            result.summaries[0].value("mass")


if __name__ == "__main__":
    unittest.main()

import csv
import math
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import matplotlib

matplotlib.use("Agg")

from cellsize_viewer.core.normalize import TrajectoryPoint
from cellsize_viewer.core.statistics import derive_cell_summaries
from cellsize_viewer.engine import ViewerEngine
from cellsize_viewer.exporters import (
    STATISTICS_FIELDS,
    default_statistics_path,
    export_cell_statistics_csv,
    export_viewport_png,
)

CSV_TEXT = "experiment,lineage,cell,time,size\n" + "".join(
    f"A,1,{cell},{t},{1 + t * 0.1 + cell}\n" for cell in (1, 2) for t in range(8)
)


class ExportTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_statistics_csv(self):
        points = [
            TrajectoryPoint.create("A", "1", "1", 0.0, 10.0),
            TrajectoryPoint.create("A", "1", "1", 5.0, 20.0),
            TrajectoryPoint.create("A", "1", "2", 2.0, 1.0),
            TrajectoryPoint.create("A", "1", "2", 2.0, 2.0),
        ]
        output = self.root / "nested" / "stats.csv"
        export_cell_statistics_csv(derive_cell_summaries(points).summaries, output)

        with output.open(newline="", encoding="utf-8") as handle:
            reader = csv.DictReader(handle)
            self.assertEqual(reader.fieldnames, STATISTICS_FIELDS)
            rows = list(reader)
        self.assertEqual(len(rows), 2)
        self.assertEqual(float(rows[0]["tau"]), 5.0)
        self.assertAlmostEqual(float(rows[0]["lambda"]), math.log(2.0) / 5.0)
        self.assertEqual(rows[1]["lambda"], "nan")

    def test_viewport_png(self):
        engine = ViewerEngine(loader=lambda source: CSV_TEXT)
        engine.load_series("inline.csv")
        engine.zoom(0.5)
        output = export_viewport_png(engine, self.root / "preview.png", dpi=50)
        self.assertEqual(output.read_bytes()[:8], b"\x89PNG\r\n\x1a\n")

    def test_viewport_png_closes_figure_when_save_fails(self):
        import matplotlib.pyplot as plt

        engine = ViewerEngine(loader=lambda source: CSV_TEXT)
        engine.load_series("inline.csv")
        plt.close("all")
        with mock.patch("matplotlib.figure.Figure.savefig", side_effect=OSError("disk full")):
            with self.assertRaises(OSError):
                export_viewport_png(engine, self.root / "fail.png")
        self.assertEqual(plt.get_fignums(), [])

    def test_viewport_png_requires_selection(self):
        with self.assertRaises(ValueError):
            export_viewport_png(ViewerEngine(), self.root / "empty.png")

    def test_default_statistics_path(self):
        path = default_statistics_path(
            "https://raw.githubusercontent.com/elevien/single-cell-size-data/main/data/WRB2010.csv", self.root
        )
        self.assertEqual(path, self.root / "wrb2010_cell_statistics.csv")


if __name__ == "__main__":
    unittest.main()

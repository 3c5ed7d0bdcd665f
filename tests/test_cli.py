import contextlib
import io
import tempfile
import textwrap
import unittest
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

from cellsize_viewer.cli import build_parser, main

DATA_DIR = Path(__file__).resolve().parent / "data"
SAMPLE = str(DATA_DIR / "sample_trajectories.csv")


def run_cli(*argv):
    stdout = io.StringIO()
    with contextlib.redirect_stdout(stdout):
        code = main(list(argv))
    return code, stdout.getvalue()


class CliTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_parser_requires_command(self):
        with self.assertRaises(SystemExit):
            build_parser().parse_args([])

    def test_inspect_lists_series(self):
        code, out = run_cli("inspect", SAMPLE)
        self.assertEqual(code, 0)
        self.assertIn("Points: 7 | rejected rows: 1", out)
        self.assertIn("0. exp | lineage 1 (4 points)", out)
        self.assertIn("2. exp | lineage 10 (1 points)", out)

    def test_inspect_missing_file_fails(self):
        code, _ = run_cli("inspect", str(self.root / "missing.csv"))
        self.assertEqual(code, 1)

    def test_stats_prints_summaries(self):
        code, out = run_cli("stats", SAMPLE)
        self.assertEqual(code, 0)
        lines = out.strip().splitlines()
        self.assertEqual(lines[0], "lineage,cell,tau,phi,lambda")
        self.assertEqual(len(lines), 4)
        self.assertTrue(lines[1].startswith("1,1,5,"))

    def test_stats_unknown_experiment(self):
        code, _ = run_cli("stats", SAMPLE, "--experiment", "nope")
        self.assertEqual(code, 2)

    def test_stats_output_file(self):
        output = self.root / "stats.csv"
        code, _ = run_cli("stats", SAMPLE, "--output", str(output))
        self.assertEqual(code, 0)
        self.assertEqual(len(output.read_text(encoding="utf-8").strip().splitlines()), 4)

    def test_preview_writes_png(self):
        output = self.root / "preview.png"
        code, _ = run_cli("preview", SAMPLE, "--output", str(output), "--zoom", "0.5", "--pan", "-40")
        self.assertEqual(code, 0)
        self.assertTrue(output.exists())

    def test_preview_bad_series_index(self):
        code, _ = run_cli("preview", SAMPLE, "--output", str(self.root / "x.png"), "--series", "9")
        self.assertEqual(code, 1)

    def test_datasets_from_catalog(self):
        catalog = self.root / "catalog.yaml"
        catalog.write_text(
            textwrap.dedent(
                """
                datasets:
                  - id: local
                    display_name: Local sample
                    primary_file: sample.csv
                    organism: E. coli
                  - id: cv
                    display_name: CV summary
                    primary_file: cv.csv
                    kind: summary
                """
            ),
            encoding="utf-8",
        )
        code, out = run_cli("datasets", "--catalog", str(catalog))
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "local: Local sample [E. coli]")

    def test_config_catalog_id_resolves_source(self):
        config = self.root / "viewer.yaml"
        config.write_text(
            textwrap.dedent(
                f"""
                datasets:
                  - id: sample
                    display_name: Sample
                    primary_file: "{SAMPLE}"
                """
            ),
            encoding="utf-8",
        )
        code, out = run_cli("--config", str(config), "inspect", "sample")
        self.assertEqual(code, 0)
        self.assertIn("Points: 7", out)

    def test_missing_config_returns_2(self):
        code, _ = run_cli("--config", str(self.root / "nope.yaml"), "inspect", SAMPLE)
        self.assertEqual(code, 2)


if __name__ == "__main__":
    unittest.main()

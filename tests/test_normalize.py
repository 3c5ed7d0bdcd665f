import math
import unittest

from cellsize_viewer.core.normalize import (
    EmptyDatasetError,
    TrajectoryPoint,
    coerce_number,
    normalize_rows,
    parse_csv_text,
    strip_dataset_suffix,
)


class CoerceNumberTests(unittest.TestCase):
    def test_numeric_strings_and_numbers(self):
        self.assertEqual(coerce_number(" 3.5 "), 3.5)
        self.assertEqual(coerce_number(4), 4.0)
        self.assertEqual(coerce_number("1e2"), 100.0)

    def test_failures_become_nan(self):
        for value in ("", "   ", "abc", None, True):
            with self.subTest(value=value):
                self.assertTrue(math.isnan(coerce_number(value)))


class NormalizeRowsTests(unittest.TestCase):
    def test_aliases_resolve_in_declared_order(self):
        records = [{"time": "9", "time_units": "3", "Size": "2", "Lineage": "4", "cell_id": "c7"}]
        point = normalize_rows(records).points[0]
        self.assertEqual(point.time, 3.0)
        self.assertEqual(point.size, 2.0)
        self.assertEqual(point.lineage, "4")
        self.assertEqual(point.cell, "c7")
        self.assertAlmostEqual(point.log_size, math.log(2.0))

    def test_empty_alias_falls_through_to_next(self):
        records = [{"time_units": "", "minutes": "12", "volume": "8"}]
        point = normalize_rows(records).points[0]
        self.assertEqual(point.time, 12.0)
        self.assertEqual(point.size, 8.0)

    def test_missing_identifiers_get_defaults(self):
        point = normalize_rows([{"time": "1", "size": "2"}]).points[0]
        self.assertEqual((point.experiment, point.lineage, point.cell), ("default", "1", "1"))

    def test_experiment_file_suffix_is_stripped(self):
        point = normalize_rows([{"experiment": "WRB2010.csv", "time": "0", "size": "1"}]).points[0]
        self.assertEqual(point.experiment, "WRB2010")
        self.assertEqual(strip_dataset_suffix("run.TSV"), "run")
        self.assertEqual(strip_dataset_suffix(".csv"), ".csv")

    def test_invalid_rows_are_counted_not_kept(self):
        records = [
            {"time": "0", "size": "1"},
            {"time": "x", "size": "1"},
            {"time": "1", "size": ""},
            {"time": "2", "size": "1.5"},
        ]
        result = normalize_rows(records)
        self.assertEqual(len(result.points), 2)
        self.assertEqual(result.rejected, 2)
        self.assertEqual(result.total, 4)

    def test_non_positive_size_is_kept_with_nan_log(self):
        point = normalize_rows([{"time": "0", "size": "0"}]).points[0]
        self.assertEqual(point.size, 0.0)
        self.assertTrue(math.isnan(point.log_size))

    def test_all_rejected_raises(self):
        with self.assertRaises(EmptyDatasetError):
            normalize_rows([{"time": "a", "size": "b"}])
        with self.assertRaises(EmptyDatasetError):
            normalize_rows([])

    def test_normalizing_normalized_points_is_identity(self):
        first = normalize_rows(
            [
                {"experiment": "A.csv", "lineage": "2", "cell": "1", "time": "0", "size": "10"},
                {"experiment": "A.csv", "lineage": "2", "cell": "1", "time": "5", "size": "20"},
                {"experiment": "A.csv", "lineage": "2", "cell": "1", "time": "bad", "size": "20"},
            ]
        )
        second = normalize_rows(first.points)
        self.assertEqual(second.points, first.points)
        self.assertEqual(second.rejected, 0)

    def test_create_computes_log_size(self):
        point = TrajectoryPoint.create("A", "1", "1", 0.0, math.e)
        self.assertAlmostEqual(point.log_size, 1.0)


class ParseCsvTextTests(unittest.TestCase):
    def test_header_and_rows(self):
        records = parse_csv_text("experiment,lineage,cell,time_units,size\nA,1,1,0,10\nA,1,1,5,20\n")
        self.assertEqual(len(records), 2)
        self.assertEqual(records[1], {"experiment": "A", "lineage": "1", "cell": "1", "time_units": "5", "size": "20"})

    def test_bom_blank_lines_and_short_rows(self):
        records = parse_csv_text("\ufefftime, size ,cell\n1,2\n\n3,4,c\n")
        self.assertEqual(records, [{"time": "1", "size": "2", "cell": ""}, {"time": "3", "size": "4", "cell": "c"}])

    def test_quoted_fields(self):
        records = parse_csv_text('experiment,time,size\n"exp, one",1,2\n')
        self.assertEqual(records[0]["experiment"], "exp, one")

    def test_empty_text(self):
        self.assertEqual(parse_csv_text(""), [])
        self.assertEqual(parse_csv_text("time,size\n"), [])


if __name__ == "__main__":
    unittest.main()

import io
import os
import tempfile
import unittest

from processing.errors import EmptyInput, ParseFailure
from processing.signal_ingestor import SignalIngestor, detect_delimiter, read_csv_rows


class SignalIngestorTests(unittest.TestCase):
    def test_vertical_force_column_and_synthesized_time(self) -> None:
        rows = [{"vertical_force": "800"}, {"vertical_force": "950.5"}, {"vertical_force": "1200"}]
        samples = SignalIngestor().ingest(rows)
        self.assertEqual([s.force_n for s in samples], [800.0, 950.5, 1200.0])
        self.assertEqual([s.time_ms for s in samples], [0.0, 5.0, 10.0])

    def test_capitalized_columns(self) -> None:
        samples = SignalIngestor().ingest([{"Time": "12", "Force": "640"}])
        self.assertEqual(samples[0].time_ms, 12.0)
        self.assertEqual(samples[0].force_n, 640.0)

    def test_first_present_synonym_wins(self) -> None:
        samples = SignalIngestor().ingest([{"force": "700", "Force": "900", "vertical_force": "1000"}])
        self.assertEqual(samples[0].force_n, 700.0)

    def test_blank_value_falls_through_to_next_synonym(self) -> None:
        samples = SignalIngestor().ingest([{"time": "", "Time": "40", "force": " ", "vertical_force": "810"}])
        self.assertEqual(samples[0].time_ms, 40.0)
        self.assertEqual(samples[0].force_n, 810.0)

    def test_missing_force_column_yields_zero(self) -> None:
        samples = SignalIngestor().ingest([{"time": "0", "load": "800"}])
        self.assertEqual(samples[0].force_n, 0.0)

    def test_non_numeric_values_become_zero_and_are_recorded(self) -> None:
        ingestor = SignalIngestor()
        samples = ingestor.ingest([{"time": "0", "force": "800"}, {"time": "abc", "force": "n/a"}])
        self.assertEqual(samples[1].time_ms, 0.0)
        self.assertEqual(samples[1].force_n, 0.0)
        self.assertEqual(len(ingestor.warnings), 2)
        self.assertEqual(ingestor.warnings[0].row_index, 1)

    def test_value_with_unit_suffix_becomes_zero(self) -> None:
        ingestor = SignalIngestor()
        samples = ingestor.ingest([{"time": "0", "force": "812 N"}])
        self.assertEqual(samples[0].force_n, 0.0)
        self.assertEqual(ingestor.warnings[0].raw_value, "812 N")

    def test_warnings_reset_between_calls(self) -> None:
        ingestor = SignalIngestor()
        ingestor.ingest([{"force": "bad"}])
        ingestor.ingest([{"force": "800"}])
        self.assertEqual(ingestor.warnings, [])

    def test_order_is_preserved(self) -> None:
        rows = [{"time": "10", "force": "1"}, {"time": "5", "force": "2"}, {"time": "5", "force": "3"}]
        samples = SignalIngestor().ingest(rows)
        self.assertEqual([s.time_ms for s in samples], [10.0, 5.0, 5.0])
        self.assertEqual([s.force_n for s in samples], [1.0, 2.0, 3.0])

    def test_custom_sample_interval(self) -> None:
        samples = SignalIngestor(sample_interval_ms=1).ingest([{"force": "1"}, {"force": "2"}])
        self.assertEqual(samples[1].time_ms, 1.0)

    def test_limb_channels(self) -> None:
        samples = SignalIngestor().ingest([{"force": "2000", "left_force": "950", "right_force": "1050"}])
        self.assertTrue(samples[0].has_limb_channels)
        self.assertEqual((samples[0].left_n, samples[0].right_n), (950.0, 1050.0))

    def test_single_limb_channel_is_ignored(self) -> None:
        samples = SignalIngestor().ingest([{"force": "2000", "left_force": "950"}])
        self.assertFalse(samples[0].has_limb_channels)

    def test_invalid_interval_rejected(self) -> None:
        with self.assertRaises(ValueError):
            SignalIngestor(sample_interval_ms=0)


class ReadCsvRowsTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)

    def _write(self, name: str, text: str) -> str:
        path = os.path.join(self._tmp.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def test_reads_rows_as_strings(self) -> None:
        path = self._write("jump.csv", "time,force\n0,800\n5,812.5\n\n10,830\n")
        rows = read_csv_rows(path)
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[1], {"time": "5", "force": "812.5"})

    def test_reads_from_buffer(self) -> None:
        rows = read_csv_rows(io.StringIO("vertical_force\n800\n900\n"))
        self.assertEqual([r["vertical_force"] for r in rows], ["800", "900"])

    def test_header_only_is_empty_input(self) -> None:
        with self.assertRaises(EmptyInput):
            read_csv_rows(self._write("header.csv", "time,force\n"))

    def test_empty_file_is_empty_input(self) -> None:
        with self.assertRaises(EmptyInput):
            read_csv_rows(self._write("empty.csv", ""))

    def test_malformed_file_is_parse_failure(self) -> None:
        with self.assertRaises(ParseFailure):
            read_csv_rows(self._write("broken.csv", "time,force\n0,800\n5,900,1,2,3\n"))

    def test_trailing_delimiter_on_data_rows_is_parse_failure(self) -> None:
        with self.assertRaises(ParseFailure):
            read_csv_rows(io.StringIO("time,force\n0,800,\n500,500,\n1000,2450,\n1200,0,\n"))

    def test_trailing_delimiter_on_every_line_keeps_columns(self) -> None:
        rows = read_csv_rows(io.StringIO("time,force,\n0,800,\n500,2450,\n"))
        self.assertEqual([(r["time"], r["force"]) for r in rows], [("0", "800"), ("500", "2450")])

    def test_semicolon_delimited_file(self) -> None:
        rows = read_csv_rows(self._write("semicolon.csv", "time;force\n0;800\n500;2450\n"))
        self.assertEqual(rows[1], {"time": "500", "force": "2450"})

    def test_tab_delimited_file(self) -> None:
        rows = read_csv_rows(self._write("tab.csv", "time\tforce\n0\t800\n500\t2450\n"))
        self.assertEqual(rows[1], {"time": "500", "force": "2450"})

    def test_detect_delimiter(self) -> None:
        self.assertEqual(detect_delimiter("time,force\n0,800\n"), ",")
        self.assertEqual(detect_delimiter("\ntime;force;left_force\n"), ";")
        self.assertEqual(detect_delimiter("time\tforce\n"), "\t")
        self.assertEqual(detect_delimiter("force\n800\n"), ",")
        self.assertEqual(detect_delimiter(""), ",")

    def test_wrong_extension_is_parse_failure(self) -> None:
        with self.assertRaises(ParseFailure):
            read_csv_rows(self._write("jump.txt", "time,force\n0,800\n"))

    def test_missing_file_is_parse_failure(self) -> None:
        with self.assertRaises(ParseFailure):
            read_csv_rows(os.path.join(self._tmp.name, "missing.csv"))

    def test_empty_input_and_parse_failure_are_distinct(self) -> None:
        self.assertFalse(issubclass(EmptyInput, ParseFailure))
        self.assertFalse(issubclass(ParseFailure, EmptyInput))


if __name__ == "__main__":
    unittest.main()

import os
import tempfile
import unittest
from datetime import date

from processing.data_processor import UploadProcessor
from processing.models import AthleteProfile

JUMP_CSV = "time,force\n0,800\n500,500\n1000,2450\n1200,0\n"


class UploadProcessorTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.processor = UploadProcessor()
        self.completed = []
        self.failures = []
        self.markers = []
        self.statuses = []
        self.processor.analysis_complete_signal.connect(self.completed.append)
        self.processor.analysis_failed_signal.connect(lambda kind, message: self.failures.append(kind))
        self.processor.jump_event_markers_signal.connect(self.markers.append)
        self.processor.status_signal.connect(self.statuses.append)

    def _write(self, name: str, text: str) -> str:
        path = os.path.join(self._tmp.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def test_upload_and_process_cycle(self) -> None:
        count = self.processor.load_file(self._write("jump.csv", JUMP_CSV))
        self.assertEqual(count, 4)
        self.assertTrue(self.processor.has_data)
        self.assertIn("CSV uploaded successfully. Loaded 4 data points.", self.statuses)

        athlete = AthleteProfile(id="athlete-1", name="Marcus", body_weight_kg=82)
        metrics = self.processor.process(athlete=athlete, session_type="Jump", session_date=date(2024, 1, 15))

        self.assertIsNotNone(metrics)
        self.assertEqual(self.completed, [metrics])
        self.assertEqual(self.failures, [])
        self.assertEqual(self.processor.history.latest("athlete-1"), metrics)
        self.assertEqual(metrics.body_weight_kg, 82.0)
        self.assertEqual(len(self.markers), 1)
        self.assertAlmostEqual(self.markers[0]["onset_time"], 1.0)
        self.assertAlmostEqual(self.markers[0]["takeoff_time"], 1.2)

    def test_malformed_file_has_no_side_effects(self) -> None:
        count = self.processor.load_file(self._write("broken.csv", "time,force\n0,800\n5,900,1,2,3\n"))
        self.assertEqual(count, 0)
        self.assertFalse(self.processor.has_data)
        self.assertEqual(self.failures, ["parse_failure"])

        self.assertIsNone(self.processor.process())
        self.assertEqual(self.completed, [])
        self.assertEqual(len(self.processor.history), 0)

    def test_header_only_file_is_empty_input(self) -> None:
        self.processor.load_file(self._write("header.csv", "time,force\n"))
        self.assertEqual(self.failures, ["empty_input"])

    def test_process_without_upload(self) -> None:
        self.assertIsNone(self.processor.process())
        self.assertEqual(self.failures, ["empty_input"])

    def test_degenerate_signal_is_reported(self) -> None:
        self.processor.load_file(self._write("flat.csv", "time,force\n0,800\n5,810\n10,805\n"))
        self.assertIsNone(self.processor.process())
        self.assertEqual(self.failures, ["degenerate_signal"])
        self.assertEqual(self.completed, [])
        self.assertEqual(len(self.processor.history), 0)

    def test_unknown_session_type_is_reported(self) -> None:
        self.processor.load_file(self._write("jump.csv", JUMP_CSV))
        self.assertIsNone(self.processor.process(session_type="Sprint"))
        self.assertEqual(self.failures, ["unknown_session_type"])
        self.assertEqual(self.completed, [])
        self.assertEqual(len(self.processor.history), 0)

    def test_semicolon_export_is_processed(self) -> None:
        count = self.processor.load_file(self._write("jump.csv", JUMP_CSV.replace(",", ";")))
        self.assertEqual(count, 4)
        metrics = self.processor.process(session_date=date(2024, 1, 15))
        self.assertIsNotNone(metrics)
        self.assertEqual(metrics.peak_force_n, 2450.0)

    def test_trailing_delimiter_rows_are_rejected(self) -> None:
        count = self.processor.load_file(self._write("shifted.csv", "time,force\n0,800,\n500,500,\n1000,2450,\n1200,0,\n"))
        self.assertEqual(count, 0)
        self.assertEqual(self.failures, ["parse_failure"])
        self.assertFalse(self.processor.has_data)

    def test_failed_reload_discards_previous_rows(self) -> None:
        self.processor.load_file(self._write("jump.csv", JUMP_CSV))
        self.processor.load_file(self._write("broken.csv", "time,force\n0,800\n5,900,1,2,3\n"))
        self.assertFalse(self.processor.has_data)

    def test_load_rows_and_warnings(self) -> None:
        self.processor.load_rows([
            {"time": "0", "force": "800"},
            {"time": "100", "force": "oops"},
            {"time": "200", "force": "2000"},
            {"time": "300", "force": "0"},
        ])
        metrics = self.processor.process()
        self.assertIsNotNone(metrics)
        self.assertEqual(metrics.athlete_id, "unknown")
        self.assertEqual(len(self.processor.ingest_warnings), 1)

    def test_load_rows_empty(self) -> None:
        self.assertEqual(self.processor.load_rows([]), 0)
        self.assertEqual(self.failures, ["empty_input"])

    def test_reset(self) -> None:
        self.processor.load_file(self._write("jump.csv", JUMP_CSV))
        self.processor.reset()
        self.assertFalse(self.processor.has_data)


if __name__ == "__main__":
    unittest.main()

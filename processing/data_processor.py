"""
Coordinates an upload-and-process cycle for the UI:
- Loading the CSV export into rows
- Normalizing rows into samples
- Extracting the performance-metrics record
- Appending successful records to the athlete history

This facade delegates the work to the ingestor and extractor and reports the
outcome through Qt signals: either a complete record or a typed failure.
"""
import logging

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

import config
from .errors import EmptyInput, ForcePlateError
from .metrics_extractor import MetricsExtractor
from .session_history import AthleteHistory
from .signal_ingestor import SignalIngestor, read_csv_rows

logger = logging.getLogger(__name__)


class UploadProcessor(QObject):
    """
    Loads uploaded force-time exports and turns them into PerformanceMetrics.
    Operates in the main application thread.
    """
    status_signal = pyqtSignal(str)
    analysis_complete_signal = pyqtSignal(object)  # PerformanceMetrics
    analysis_failed_signal = pyqtSignal(str, str)  # Failure kind, message
    jump_event_markers_signal = pyqtSignal(dict)

    def __init__(self, settings=None, sample_interval_ms=config.SAMPLE_INTERVAL_MS, history=None, parent=None):
        super().__init__(parent)
        self._ingestor = SignalIngestor(sample_interval_ms)
        self._extractor = MetricsExtractor(settings)
        self.history = history if history is not None else AthleteHistory()

        self._rows = None
        self._source_name = None

    @property
    def has_data(self):
        return bool(self._rows)

    @property
    def ingest_warnings(self):
        return list(self._ingestor.warnings)

    @pyqtSlot()
    def reset(self):
        """Discards loaded rows before a new upload."""
        self._rows = None
        self._source_name = None
        self._emit_status("Upload cleared.")

    def load_file(self, path):
        """
        Reads a CSV export. On failure nothing is kept and a failure is emitted.

        Returns:
            int: Number of data rows loaded (0 on failure)
        """
        self._rows = None
        self._source_name = None
        try:
            rows = read_csv_rows(path)
        except ForcePlateError as e:
            self._emit_failure(e)
            return 0
        return self.load_rows(rows, source_name=str(path))

    def load_rows(self, rows, source_name=None):
        """Accepts already-parsed rows; load_file hands its CSV rows over here."""
        rows = list(rows)
        if not rows:
            self._rows = None
            self._source_name = None
            self._emit_failure(EmptyInput("No data rows found."))
            return 0
        self._rows = rows
        self._source_name = source_name
        prefix = "CSV uploaded successfully. " if source_name else ""
        self._emit_status(f"{prefix}Loaded {len(rows)} data points.")
        return len(rows)

    def process(self, athlete=None, session_type=config.DEFAULT_SESSION_TYPE, session_date=None):
        """
        Runs ingestion and extraction on the loaded rows.

        Returns:
            PerformanceMetrics or None when the cycle failed
        """
        if not self._rows:
            self._emit_failure(EmptyInput("Please upload a CSV file first."))
            return None

        samples = self._ingestor.ingest(self._rows)
        if self._ingestor.warnings:
            self._emit_status(f"{len(self._ingestor.warnings)} non-numeric value(s) were read as 0.")

        try:
            metrics = self._extractor.extract(
                samples, athlete=athlete, session_date=session_date, session_type=session_type)
        except ForcePlateError as e:
            self._emit_failure(e)
            return None

        self.history.append(metrics)
        logger.debug("Record %s from %s: %s", metrics.id, self._source_name or "rows", metrics.to_dict())
        athlete_label = athlete.name if athlete is not None and athlete.name else metrics.athlete_id
        self._emit_status(f"Added new {session_type.lower()} session for {athlete_label}.")
        self.analysis_complete_signal.emit(metrics)
        self.jump_event_markers_signal.emit(self.event_markers(metrics))
        return metrics

    @staticmethod
    def event_markers(metrics):
        """Event times (s) and forces (N) for plot markers."""
        series = metrics.force_time_series
        events = metrics.events
        markers = {
            'onset_time': series[events.onset_index].time_ms / 1000.0,
            'onset_force': series[events.onset_index].force_n,
            'peak_time': series[events.peak_index].time_ms / 1000.0,
            'peak_force': series[events.peak_index].force_n,
        }
        if events.takeoff_index is not None:
            markers['takeoff_time'] = series[events.takeoff_index].time_ms / 1000.0
            markers['takeoff_force'] = series[events.takeoff_index].force_n
        return markers

    def _emit_status(self, message):
        logger.info(message)
        self.status_signal.emit(message)

    def _emit_failure(self, error):
        logger.error("%s: %s", error.kind, error)
        self.analysis_failed_signal.emit(error.kind, str(error))

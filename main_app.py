"""
Main application window for the Force Plate Upload Analyzer.
Integrates CSV upload, metrics extraction, plotting, the results panel and athlete history.
"""
import logging
import re
import sys

import numpy as np
import pyqtgraph as pg
from PyQt6.QtCore import pyqtSlot
from PyQt6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QFormLayout,
    QPushButton, QLabel, QStatusBar, QTextEdit, QFileDialog, QLineEdit,
    QDoubleSpinBox, QComboBox, QFrame
)

import config
from display_results import format_results, format_session_history
from plot_handler import PlotHandler, TrendPlotHandler
from processing.data_processor import UploadProcessor
from processing.metrics_extractor import AnalysisSettings
from processing.models import AthleteProfile


class MainWindow(QMainWindow):
    def __init__(self, settings=None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Force Plate Upload Analyzer")
        self.setGeometry(100, 100, 1000, 700)

        self.settings = settings if settings is not None else AnalysisSettings()
        errors = self.settings.validate()
        if errors:
            logging.error("Configuration validation failed: " + "; ".join(errors))
            raise ValueError("Config validation error: " + "; ".join(errors))

        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.main_layout = QHBoxLayout(self.central_widget)

        # --- Control Panel (Left Side) ---
        self.control_panel_layout = QVBoxLayout()
        self.main_layout.addLayout(self.control_panel_layout, 1)

        form = QFormLayout()
        self.athlete_name_edit = QLineEdit()
        self.athlete_name_edit.setPlaceholderText("No athlete selected")
        self.body_weight_spin = QDoubleSpinBox()
        self.body_weight_spin.setRange(0.0, 250.0)
        self.body_weight_spin.setDecimals(1)
        self.body_weight_spin.setSuffix(" kg")
        self.body_weight_spin.setValue(config.DEFAULT_BODY_WEIGHT_KG)
        self.session_type_combo = QComboBox()
        self.session_type_combo.addItems(config.SESSION_TYPES)
        form.addRow("Athlete:", self.athlete_name_edit)
        form.addRow("Body weight:", self.body_weight_spin)
        form.addRow("Session type:", self.session_type_combo)
        self.control_panel_layout.addLayout(form)

        self.file_label = QLabel("No file loaded")
        self.control_panel_layout.addWidget(self.file_label)

        separator = QFrame()
        separator.setFrameShape(QFrame.Shape.HLine)
        separator.setFrameShadow(QFrame.Shadow.Sunken)
        self.control_panel_layout.addWidget(separator)

        self.btn_load = QPushButton("Load CSV")
        self.btn_process = QPushButton("Process Data")
        self.btn_save = QPushButton("Save Force-Time Data")
        self.control_panel_layout.addWidget(self.btn_load)
        self.control_panel_layout.addWidget(self.btn_process)
        self.control_panel_layout.addWidget(self.btn_save)

        self.results_label = QLabel("Analysis Results:")
        self.results_display = QTextEdit()
        self.results_display.setReadOnly(True)
        self.control_panel_layout.addWidget(self.results_label)
        self.control_panel_layout.addWidget(self.results_display, 1)

        # --- Plotting Area (Right Side) ---
        self.plot_widget = pg.PlotWidget()
        self.plot_layout = QVBoxLayout()
        self.plot_layout.addWidget(self.plot_widget, 3)
        self.btn_reset_view = QPushButton("Reset View")
        self.btn_reset_view.setFixedHeight(30)
        self.plot_layout.addWidget(self.btn_reset_view, 0)

        # --- Athlete History (below the force plot) ---
        history_layout = QHBoxLayout()
        history_side = QVBoxLayout()
        self.history_athlete_combo = QComboBox()
        self.history_display = QTextEdit()
        self.history_display.setReadOnly(True)
        history_side.addWidget(QLabel("Athlete history:"))
        history_side.addWidget(self.history_athlete_combo)
        history_side.addWidget(self.history_display, 1)
        history_layout.addLayout(history_side, 1)
        self.trend_plot_widget = pg.PlotWidget()
        history_layout.addWidget(self.trend_plot_widget, 2)
        self.plot_layout.addLayout(history_layout, 2)
        self.main_layout.addLayout(self.plot_layout, 3)

        self.setStatusBar(QStatusBar())
        self.statusBar().showMessage("Application Started. Ready.")

        # --- Backend Components ---
        self.upload_processor = UploadProcessor(settings=self.settings)
        self.plot_handler = PlotHandler(self.plot_widget)
        self.plot_handler.setup_plot()
        self.trend_plot_handler = TrendPlotHandler(self.trend_plot_widget)
        self.trend_plot_handler.setup_plot()

        self._connect_signals()

        self.btn_process.setEnabled(False)
        self.btn_save.setEnabled(False)
        self._last_metrics = None

    def _connect_signals(self):
        self.btn_load.clicked.connect(self.load_csv)
        self.btn_process.clicked.connect(self.process_data)
        self.btn_save.clicked.connect(self.save_data)
        self.btn_reset_view.clicked.connect(self.plot_handler.reset_view)
        self.history_athlete_combo.currentTextChanged.connect(self.show_athlete_history)

        self.upload_processor.status_signal.connect(self.update_status)
        self.upload_processor.analysis_failed_signal.connect(self.show_failure)
        self.upload_processor.analysis_complete_signal.connect(self.display_results)
        self.upload_processor.jump_event_markers_signal.connect(self.plot_handler.add_event_markers)

    def current_athlete(self):
        """AthleteProfile from the form, or None when no name is entered."""
        name = self.athlete_name_edit.text().strip()
        if not name:
            return None
        athlete_id = re.sub(r'[^a-z0-9]+', '-', name.lower()).strip('-') or config.UNKNOWN_ATHLETE_ID
        return AthleteProfile(id=athlete_id, name=name, body_weight_kg=self.body_weight_spin.value())

    @pyqtSlot()
    def load_csv(self):
        options = QFileDialog.Option.DontUseNativeDialog
        file_path, _ = QFileDialog.getOpenFileName(self, "Open Force Plate Export", "",
                                                   "CSV Files (*.csv)", options=options)
        if not file_path:
            self.update_status("Upload cancelled.")
            return
        self.load_path(file_path)

    def load_path(self, file_path):
        count = self.upload_processor.load_file(file_path)
        if count:
            self.file_label.setText(f"CSV loaded: {count} data points")
        else:
            self.file_label.setText("No file loaded")
        self.btn_process.setEnabled(count > 0)
        return count

    @pyqtSlot()
    def process_data(self):
        return self.upload_processor.process(
            athlete=self.current_athlete(),
            session_type=self.session_type_combo.currentText(),
        )

    @pyqtSlot(object)
    def display_results(self, metrics):
        self._last_metrics = metrics
        self.results_display.setText(format_results(
            metrics, self.upload_processor.history, self.upload_processor.ingest_warnings))
        self.plot_handler.show_metrics(
            metrics,
            baseline_force_n=self.settings.baseline_force_n,
            onset_threshold_factor=self.settings.onset_threshold_factor,
        )
        self.refresh_history(metrics.athlete_id)
        self.btn_save.setEnabled(True)
        self.update_status(f"Jump Height: {metrics.jump_height_cm:.1f} cm, Peak Force: {metrics.peak_force_n:.0f} N")

    def refresh_history(self, athlete_id=None):
        """Re-lists the athletes with records and selects `athlete_id`."""
        history = self.upload_processor.history
        self.history_athlete_combo.blockSignals(True)
        self.history_athlete_combo.clear()
        self.history_athlete_combo.addItems(history.athlete_ids())
        self.history_athlete_combo.blockSignals(False)
        if athlete_id is not None:
            self.history_athlete_combo.setCurrentText(athlete_id)
        self.show_athlete_history(self.history_athlete_combo.currentText())

    @pyqtSlot(str)
    def show_athlete_history(self, athlete_id):
        history = self.upload_processor.history
        if not athlete_id:
            self.history_display.clear()
            self.trend_plot_handler.clear_plot()
            return
        self.history_display.setText(format_session_history(history, athlete_id))
        self.trend_plot_handler.show_series(history.series(athlete_id))

    @pyqtSlot(str, str)
    def show_failure(self, kind, message):
        titles = {
            'parse_failure': "CSV parsing error",
            'empty_input': "Missing data",
            'degenerate_signal': "Processing failed",
            'unknown_session_type': "Invalid session type",
        }
        self.show_error(f"{titles.get(kind, 'Error')}: {message}")

    def save_data(self):
        """Saves the force-time series of the last processed record to a CSV file."""
        if self._last_metrics is None:
            self.show_error("No data available to save.")
            return

        options = QFileDialog.Option.DontUseNativeDialog
        file_path, _ = QFileDialog.getSaveFileName(self, "Save Data File", "",
                                                   "CSV Files (*.csv)", options=options)
        if not file_path:
            self.update_status("Save cancelled.")
            return
        self.save_series(file_path)

    def save_series(self, file_path):
        series = self._last_metrics.force_time_series
        save_data = np.array([[s.time_ms, s.force_n] for s in series], dtype=float)
        try:
            np.savetxt(file_path, save_data, delimiter=',', header="time,force", comments='')
        except OSError as e:
            self.show_error(f"Error saving file: {e}")
            return
        self.update_status(f"Data saved successfully to {file_path}.")

    @pyqtSlot(str)
    def update_status(self, message):
        """Updates the status bar message and logs it."""
        logging.info(message)
        self.statusBar().showMessage(message)

    @pyqtSlot(str)
    def show_error(self, message):
        """Shows an error message in the status bar and logs it."""
        logging.error(message)
        self.statusBar().showMessage(f"Error: {message}", 5000)


def main():
    logging.basicConfig(
        filename=config.LOG_FILE,
        level=logging.DEBUG,
        format='%(asctime)s %(levelname)s: %(message)s'
    )
    app = QApplication(sys.argv)
    app.setStyle('Fusion')
    main_win = MainWindow()
    main_win.show()
    return app.exec()


if __name__ == '__main__':
    sys.exit(main())

"""
Manages the PyQtGraph plots: the uploaded Force vs. Time series and the
per-athlete metric trend across sessions.
"""
import numpy as np
import pyqtgraph as pg
from PyQt6.QtCore import pyqtSlot, QObject, Qt

import config

pg.setConfigOptions(antialias=True)


class PlotHandler(QObject):
    """
    Plots the force-time series of a processed upload together with the
    baseline, the onset threshold and the detected onset/peak/take-off events.
    """
    def __init__(self, plot_widget):
        super().__init__()
        self.plot_widget = plot_widget
        self.plot_item = None
        self.force_curve = None
        self._reference_lines = []
        self._event_markers = {}

        self._y_max = config.PLOT_Y_AXIS_INITIAL_MAX
        self._y_min = config.PLOT_Y_AXIS_MIN

    def setup_plot(self):
        """Initializes the plot appearance."""
        if self.plot_item:
            self.plot_item.clear()
        else:
            self.plot_widget.setBackground('w')
            self.plot_item = self.plot_widget.getPlotItem()

        self.plot_item.addLegend()
        self.plot_item.setLabel('left', "Vertical Force", units='N')
        self.plot_item.setLabel('bottom', "Time", units='s')
        self.plot_item.setTitle("Force-Time Curve")
        self.plot_item.setMouseEnabled(x=True, y=True)
        self.plot_item.showGrid(x=True, y=True)
        self.plot_item.getViewBox().setLimits(yMin=self._y_min)

        self.force_curve = self.plot_item.plot(pen=pg.mkPen(color=(30, 30, 30), width=2), name="Force")
        self.clear_plot()

    def clear_plot(self):
        """Removes the curve data, reference lines and markers."""
        if self.force_curve is not None:
            self.force_curve.setData([], [])
        self._remove_reference_lines()
        self._remove_event_markers()
        self.reset_view()

    def show_metrics(self, metrics, baseline_force_n=config.BASELINE_FORCE_N,
                     onset_threshold_factor=config.ONSET_THRESHOLD_FACTOR):
        """Draws the series of a PerformanceMetrics record."""
        series = metrics.force_time_series
        time_s = np.array([s.time_ms for s in series], dtype=float) / 1000.0
        force = np.array([s.force_n for s in series], dtype=float)
        self.force_curve.setData(time_s, force)

        self._remove_reference_lines()
        for value, color, label in (
            (baseline_force_n, (120, 120, 120), "Baseline"),
            (baseline_force_n * onset_threshold_factor, (200, 150, 0), "Onset threshold"),
        ):
            line = pg.InfiniteLine(pos=value, angle=0, pen=pg.mkPen(color=color, style=Qt.PenStyle.DashLine),
                                   label=label, labelOpts={'position': 0.05, 'color': color})
            self.plot_item.addItem(line)
            self._reference_lines.append(line)

        if force.size:
            self._y_max = max(config.PLOT_Y_AXIS_INITIAL_MAX, float(force.max()) * 1.1)
        self.plot_item.enableAutoRange('y', False)
        self.plot_item.setYRange(self._y_min, self._y_max)
        if time_s.size > 1:
            self.plot_item.setXRange(time_s[0], time_s[-1], padding=0.02)

    def reset_view(self):
        """Resets the plot view to the initial Y range and auto X range."""
        if self.plot_item:
            self._y_max = config.PLOT_Y_AXIS_INITIAL_MAX
            self.plot_item.enableAutoRange('x', True)
            self.plot_item.enableAutoRange('y', False)
            self.plot_item.setYRange(self._y_min, self._y_max, padding=0)

    def _remove_reference_lines(self):
        for line in self._reference_lines:
            self.plot_item.removeItem(line)
        self._reference_lines = []

    def _remove_event_markers(self):
        for marker_items in self._event_markers.values():
            for item in marker_items:
                self.plot_item.removeItem(item)
        self._event_markers = {}

    @pyqtSlot(dict)
    def add_event_markers(self, events_dict):
        """
        Adds markers for the onset, peak and take-off events.

        Args:
            events_dict: '<event>_time' (s) and '<event>_force' (N) for each event found
        """
        self._remove_event_markers()
        if not events_dict:
            return

        marker_colors = {
            'onset': (0, 150, 0),
            'peak': (0, 0, 255),
            'takeoff': (255, 0, 0),
        }
        for event_type, color in marker_colors.items():
            time_key = f"{event_type}_time"
            force_key = f"{event_type}_force"
            if time_key not in events_dict or force_key not in events_dict:
                continue

            time_val = events_dict[time_key]
            force_val = events_dict[force_key]
            scatter_item = pg.ScatterPlotItem()
            scatter_item.setBrush(pg.mkBrush(color))
            scatter_item.setSize(10)
            scatter_item.addPoints([time_val], [force_val])

            text_item = pg.TextItem(text=event_type.capitalize(), color=color, anchor=(0.5, 1.5))
            text_item.setPos(time_val, force_val)

            self.plot_item.addItem(scatter_item)
            self.plot_item.addItem(text_item)
            self._event_markers[event_type] = [scatter_item, text_item]


class TrendPlotHandler(QObject):
    """
    Plots one metric of an athlete's date-ordered history (AthleteHistory.series rows)
    against the session number, with the session dates as axis ticks.
    """
    def __init__(self, plot_widget, metric='jump_height_cm', label="Jump Height", units='cm'):
        super().__init__()
        self.plot_widget = plot_widget
        self.metric = metric
        self.label = label
        self.units = units
        self.plot_item = None
        self.trend_curve = None

    def setup_plot(self):
        self.plot_widget.setBackground('w')
        self.plot_item = self.plot_widget.getPlotItem()
        self.plot_item.setLabel('left', self.label, units=self.units)
        self.plot_item.setLabel('bottom', "Session")
        self.plot_item.setTitle(f"{self.label} Trend")
        self.plot_item.showGrid(x=False, y=True)
        self.trend_curve = self.plot_item.plot(pen=pg.mkPen(color=(0, 90, 200), width=2),
                                               symbol='o', symbolBrush=(0, 90, 200))

    def show_series(self, rows):
        """
        Args:
            rows: list of {'date': date, <metric>: value} dicts, oldest first
        """
        points = [(index, row[self.metric]) for index, row in enumerate(rows) if row.get(self.metric) is not None]
        if not points:
            self.clear_plot()
            return
        x = np.array([p[0] for p in points], dtype=float)
        y = np.array([p[1] for p in points], dtype=float)
        self.trend_curve.setData(x, y)
        ticks = [(index, rows[index]['date'].strftime('%m-%d')) for index, _ in points]
        self.plot_item.getAxis('bottom').setTicks([ticks])
        self.plot_item.enableAutoRange()

    def clear_plot(self):
        if self.trend_curve is not None:
            self.trend_curve.setData([], [])
        if self.plot_item is not None:
            self.plot_item.getAxis('bottom').setTicks(None)

"""
Derives the performance-metrics record from an uploaded force-time series.
Computes peak force, RFD, impulse, jump height, contact/flight time, RSI-modified
and the left/right split. The raw sampled series is used as-is (no filtering).
"""
import logging
import math
import time
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Optional

import numpy as np
from scipy.integrate import trapezoid

import config
from .errors import DegenerateSignal, EmptyInput, UnknownSessionType
from .models import JumpEvents, PerformanceMetrics

logger = logging.getLogger(__name__)


@dataclass
class AnalysisSettings:
    """Tunable thresholds for metrics extraction. Defaults come from config."""

    baseline_force_n: float = config.BASELINE_FORCE_N
    onset_threshold_factor: float = config.ONSET_THRESHOLD_FACTOR
    takeoff_threshold_n: float = config.TAKEOFF_THRESHOLD_N
    default_contact_time_ms: float = config.DEFAULT_CONTACT_TIME_MS
    default_body_weight_kg: float = config.DEFAULT_BODY_WEIGHT_KG
    left_split_fraction: Optional[float] = config.LEFT_SPLIT_FRACTION

    @property
    def onset_threshold_n(self):
        return self.baseline_force_n * self.onset_threshold_factor

    def validate(self):
        """Returns a list of problems, empty when the settings are usable."""
        errors = []
        if self.baseline_force_n < 0:
            errors.append("baseline_force_n must not be negative.")
        if self.onset_threshold_factor <= 0:
            errors.append("onset_threshold_factor must be positive.")
        if self.takeoff_threshold_n < 0:
            errors.append("takeoff_threshold_n must not be negative.")
        if self.default_contact_time_ms < 0:
            errors.append("default_contact_time_ms must not be negative.")
        if self.default_body_weight_kg <= 0:
            errors.append("default_body_weight_kg must be positive.")
        if self.left_split_fraction is not None:
            low, high = config.LEFT_SPLIT_RANGE
            if not low <= self.left_split_fraction <= high:
                errors.append(f"left_split_fraction must be between {low} and {high}.")
        return errors


class MetricsExtractor:
    """
    Turns an ordered Sample sequence plus an optional AthleteProfile into a
    PerformanceMetrics record. Holds no state between calls.
    """

    def __init__(self, settings=None):
        """
        Args:
            settings: AnalysisSettings, defaults used when None

        Raises:
            ValueError: If the settings fail validation
        """
        self.settings = settings if settings is not None else AnalysisSettings()
        errors = self.settings.validate()
        if errors:
            raise ValueError("Invalid analysis settings: " + "; ".join(errors))

    def extract(self, samples, athlete=None, session_date=None, session_type=config.DEFAULT_SESSION_TYPE):
        """
        Args:
            samples: Ordered sequence of Sample
            athlete: AthleteProfile or None (defaults apply)
            session_date: Capture date, today when None
            session_type: One of config.SESSION_TYPES

        Returns:
            PerformanceMetrics

        Raises:
            EmptyInput: No samples
            DegenerateSignal: RFD or another metric is mathematically undefined
            UnknownSessionType: session_type is not in config.SESSION_TYPES
        """
        if not samples:
            raise EmptyInput("No samples to analyse.")
        if session_type not in config.SESSION_TYPES:
            raise UnknownSessionType(f"Unknown session type: {session_type}")

        samples = tuple(samples)
        time_ms = np.array([s.time_ms for s in samples], dtype=float)
        force = np.array([s.force_n for s in samples], dtype=float)
        if np.any(np.diff(time_ms) < 0):
            logger.warning("Time column is not monotonically non-decreasing; results may be unreliable.")

        # 1. Peak force
        peak_index = int(np.argmax(force))
        peak_force = float(force[peak_index])

        # 2-4. Onset and RFD
        onset_index = self._find_onset(force)
        rise_start_index = self._find_rise_start(onset_index, peak_index)
        rfd = self._calculate_rfd(time_ms, peak_force, rise_start_index, peak_index)

        # 5-6. Impulse and jump height
        gross_impulse, net_impulse = self._calculate_impulse(time_ms, force)
        body_weight_kg = self._body_weight(athlete)
        jump_height_cm = self._estimate_jump_height(net_impulse, body_weight_kg)

        # 7-9. Take-off, flight and RSI
        takeoff_index = self._find_takeoff(force, peak_index)
        if takeoff_index is not None:
            contact_time_ms = max(0.0, float(time_ms[takeoff_index] - time_ms[0]))
        else:
            contact_time_ms = float(self.settings.default_contact_time_ms)
        flight_time_ms = self._flight_time_from_height(jump_height_cm)
        rsi_modified = contact_time_ms / flight_time_ms if flight_time_ms > 0 else 0.0

        # 10-11. Left/right split and asymmetry
        left, right, split_source = self._split_limbs(samples[peak_index], peak_force)
        asymmetry = self._asymmetry_index(left, right, peak_force)

        self._check_finite(
            peak_force=peak_force, rfd=rfd, impulse=net_impulse, gross_impulse=gross_impulse,
            jump_height=jump_height_cm, flight_time=flight_time_ms, rsi=rsi_modified,
        )

        metrics = PerformanceMetrics(
            id=f"uploaded-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}",
            athlete_id=athlete.id if athlete is not None and athlete.id else config.UNKNOWN_ATHLETE_ID,
            session_date=session_date if session_date is not None else date.today(),
            jump_height_cm=jump_height_cm,
            peak_force_n=peak_force,
            rfd_n_per_s=rfd,
            impulse_ns=net_impulse,
            gross_impulse_ns=gross_impulse,
            asymmetry_index_pct=asymmetry,
            flight_time_ms=flight_time_ms,
            contact_time_ms=contact_time_ms,
            rsi_modified=rsi_modified,
            force_time_series=samples,
            left_leg_force_n=left,
            right_leg_force_n=right,
            limb_split_source=split_source,
            events=JumpEvents(
                peak_index=peak_index,
                onset_index=onset_index,
                rise_start_index=rise_start_index,
                takeoff_index=takeoff_index,
            ),
            body_weight_kg=body_weight_kg,
            session_type=session_type,
        )
        logger.info("Extracted metrics %s: peak %.1f N, RFD %.1f N/s, height %.1f cm",
                    metrics.id, peak_force, rfd, jump_height_cm)
        return metrics

    def _find_onset(self, force):
        """First index where force exceeds baseline * onset factor."""
        threshold = self.settings.onset_threshold_n
        above = np.flatnonzero(force > threshold)
        if above.size == 0:
            raise DegenerateSignal(
                f"No sample exceeds the onset threshold of {threshold:.1f} N; RFD is undefined.")
        return int(above[0])

    @staticmethod
    def _find_rise_start(onset_index, peak_index):
        """
        Index the force rise is measured from. Normally the onset; when the onset
        sample is itself the peak the rise happened within one sampling interval,
        so it is measured from the preceding sample.
        """
        if onset_index < peak_index:
            return onset_index
        if onset_index == 0:
            raise DegenerateSignal("Onset and peak are the first sample; rise time is undefined.")
        return onset_index - 1

    def _calculate_rfd(self, time_ms, peak_force, rise_start_index, peak_index):
        rise_time_s = (time_ms[peak_index] - time_ms[rise_start_index]) / 1000.0
        if rise_time_s <= 0:
            raise DegenerateSignal(
                f"Rise time from onset to peak is {rise_time_s * 1000.0:.1f} ms; RFD is undefined.")
        return float((peak_force - self.settings.baseline_force_n) / rise_time_s)

    def _calculate_impulse(self, time_ms, force):
        """Returns (gross, net) impulse in N*s using the trapezoidal rule."""
        if len(force) < 2:
            return 0.0, 0.0
        time_s = time_ms / 1000.0
        gross = float(trapezoid(force, time_s))
        duration_s = float(time_s[-1] - time_s[0])
        net = gross - self.settings.baseline_force_n * duration_s
        return gross, net

    def _body_weight(self, athlete):
        if athlete is None or athlete.body_weight_kg is None or athlete.body_weight_kg <= 0:
            return float(self.settings.default_body_weight_kg)
        return float(athlete.body_weight_kg)

    @staticmethod
    def _estimate_jump_height(net_impulse, body_weight_kg):
        """Jump height in cm from take-off velocity; 0 when no upward launch."""
        velocity = net_impulse / body_weight_kg
        if velocity <= 0:
            return 0.0
        return max(0.0, (velocity ** 2) / (2 * config.GRAVITY) * 100.0)

    def _find_takeoff(self, force, peak_index):
        after_peak = np.flatnonzero(force[peak_index + 1:] < self.settings.takeoff_threshold_n)
        if after_peak.size == 0:
            return None
        return peak_index + 1 + int(after_peak[0])

    @staticmethod
    def _flight_time_from_height(jump_height_cm):
        if jump_height_cm <= 0:
            return 0.0
        return math.sqrt(8 * jump_height_cm / config.GRAVITY_CM) * 1000.0

    def _split_limbs(self, peak_sample, peak_force):
        """Returns (left, right, source). Uses genuine channels before a configured fraction."""
        if peak_sample.has_limb_channels:
            return float(peak_sample.left_n), float(peak_sample.right_n), 'channels'
        if self.settings.left_split_fraction is not None:
            left = peak_force * self.settings.left_split_fraction
            return left, peak_force - left, 'fixed_fraction'
        return None, None, 'unavailable'

    @staticmethod
    def _asymmetry_index(left, right, peak_force):
        if left is None or right is None:
            return None
        if peak_force <= 0:
            return 0.0
        return abs(left - right) / peak_force * 100.0

    @staticmethod
    def _check_finite(**values):
        for name, value in values.items():
            if not math.isfinite(value):
                raise DegenerateSignal(f"Computed {name} is not finite ({value}).")

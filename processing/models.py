"""
Records passed between the ingestor, the extractor and the display layer.
"""
from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Optional, Tuple

import config


@dataclass(frozen=True)
class Sample:
    """One sampled instant of the force-time series."""

    time_ms: float
    force_n: float
    left_n: Optional[float] = None
    right_n: Optional[float] = None

    @property
    def has_limb_channels(self):
        return self.left_n is not None and self.right_n is not None


@dataclass(frozen=True)
class AthleteProfile:
    id: str
    name: str = ''
    sport: str = ''
    body_weight_kg: Optional[float] = None
    position: Optional[str] = None
    height_cm: Optional[float] = None


@dataclass(frozen=True)
class JumpEvents:
    """Sample indices found during extraction (None when not found)."""

    peak_index: int
    onset_index: int
    rise_start_index: int
    takeoff_index: Optional[int] = None


@dataclass(frozen=True)
class PerformanceMetrics:
    id: str
    athlete_id: str
    session_date: date
    jump_height_cm: float
    peak_force_n: float
    rfd_n_per_s: float
    impulse_ns: float
    gross_impulse_ns: float
    asymmetry_index_pct: Optional[float]
    flight_time_ms: float
    contact_time_ms: float
    rsi_modified: float
    force_time_series: Tuple[Sample, ...]
    left_leg_force_n: Optional[float]
    right_leg_force_n: Optional[float]
    limb_split_source: str
    events: JumpEvents
    body_weight_kg: float
    session_type: str = config.DEFAULT_SESSION_TYPE

    @property
    def asymmetry_available(self):
        return self.asymmetry_index_pct is not None

    def to_dict(self, include_series=False):
        """Plain-dict view for display and export."""
        data = asdict(self)
        data['session_date'] = self.session_date.isoformat()
        if not include_series:
            data.pop('force_time_series')
        return data


@dataclass(frozen=True)
class Session:
    """A dated test session grouping one or more uploaded records."""

    id: str
    athlete_id: str
    date: date
    type: str
    metrics: Tuple[PerformanceMetrics, ...] = field(default_factory=tuple)
    notes: Optional[str] = None
    fatigue: Optional[int] = None  # 1-10 scale

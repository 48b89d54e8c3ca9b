"""
Keeps the processed records of each athlete for latest/best/trend views.
"""
from collections import OrderedDict, defaultdict

from .models import Session


class AthleteHistory:
    """
    Stores PerformanceMetrics records per athlete id in insertion order.
    Records are immutable, so they are stored and returned as-is.
    """

    def __init__(self):
        self._records = defaultdict(list)

    def reset(self):
        """Forget all records."""
        self._records.clear()

    def append(self, metrics):
        self._records[metrics.athlete_id].append(metrics)

    def athlete_ids(self):
        return list(self._records.keys())

    def records(self, athlete_id):
        """All records for an athlete, oldest first."""
        return list(self._records.get(athlete_id, []))

    def latest(self, athlete_id):
        records = self._records.get(athlete_id)
        return records[-1] if records else None

    def best(self, athlete_id, metric='jump_height_cm', lower_is_better=False):
        """Record with the best value of `metric`, or None without records."""
        candidates = [r for r in self._records.get(athlete_id, []) if getattr(r, metric) is not None]
        if not candidates:
            return None
        pick = min if lower_is_better else max
        return pick(candidates, key=lambda r: getattr(r, metric))

    def trend(self, athlete_id, metric):
        """Latest value minus the previous one; 0 with fewer than two records."""
        records = self._records.get(athlete_id, [])
        if len(records) < 2:
            return 0.0
        latest = getattr(records[-1], metric)
        previous = getattr(records[-2], metric)
        if latest is None or previous is None:
            return 0.0
        return latest - previous

    def series(self, athlete_id, metrics=('jump_height_cm', 'peak_force_n', 'rfd_n_per_s')):
        """
        Date-ordered rows for trend plots.

        Returns:
            list of dict: {'date': date, <metric>: value, ...}
        """
        records = sorted(self._records.get(athlete_id, []), key=lambda r: r.session_date)
        rows = []
        for record in records:
            row = {'date': record.session_date}
            for metric in metrics:
                row[metric] = getattr(record, metric)
            rows.append(row)
        return rows

    def sessions(self, athlete_id):
        """Groups an athlete's records into Sessions by (date, session type)."""
        grouped = OrderedDict()
        for record in sorted(self._records.get(athlete_id, []), key=lambda r: r.session_date):
            grouped.setdefault((record.session_date, record.session_type), []).append(record)

        sessions = []
        for number, ((session_date, session_type), records) in enumerate(grouped.items(), start=1):
            sessions.append(Session(
                id=f"{athlete_id}-session-{number}",
                athlete_id=athlete_id,
                date=session_date,
                type=session_type,
                metrics=tuple(records),
            ))
        return sessions

    def __len__(self):
        return sum(len(records) for records in self._records.values())

"""
Formats performance-metrics records for the results panel and rates them
against benchmarks and the athlete's previous sessions.
"""
import config


def format_metric_value(value):
    """Compact display value: '2.6k' above 1000, one decimal otherwise."""
    if value is None:
        return "N/A"
    if value >= 1000:
        return f"{value / 1000:.1f}k"
    return f"{value:.1f}"


def performance_status(value, benchmark, lower_is_better=False):
    """
    Rates a value against a benchmark.

    Returns:
        str: 'good', 'warning', 'poor', or 'neutral' when there is no benchmark
    """
    if value is None or not benchmark:
        return 'neutral'
    ratio = value / benchmark
    if lower_is_better:
        if ratio <= 0.5:
            return 'good'
        if ratio <= 0.8:
            return 'warning'
        return 'poor'
    if ratio >= 0.95:
        return 'good'
    if ratio >= 0.85:
        return 'warning'
    return 'poor'


def trend_direction(trend, lower_is_better=False):
    if not trend:
        return 'neutral'
    if lower_is_better:
        return 'poor' if trend > 0 else 'good'
    return 'good' if trend > 0 else 'warning'


def asymmetry_level(asymmetry_pct):
    if asymmetry_pct is None:
        return 'Unavailable'
    if asymmetry_pct <= config.ASYMMETRY_NORMAL_PCT:
        return 'Normal'
    if asymmetry_pct <= config.ASYMMETRY_MODERATE_PCT:
        return 'Moderate'
    return 'High'


MAX_LISTED_WARNINGS = 5

# (label, attribute, unit, lower_is_better)
KEY_METRICS = (
    ("JUMP HEIGHT", 'jump_height_cm', 'cm', False),
    ("PEAK FORCE", 'peak_force_n', 'N', False),
    ("RFD", 'rfd_n_per_s', 'N/s', False),
)


def format_results(metrics, history=None, ingest_warnings=()):
    """
    Builds the results panel text for one record.

    Args:
        metrics: PerformanceMetrics
        history: AthleteHistory used for trend and best-session benchmark (optional)
        ingest_warnings: IngestWarning entries for values read as 0

    Returns:
        str
    """
    lines = [f"--- {metrics.session_type.upper()} RESULTS ({metrics.session_date.isoformat()}) ---"]
    lines.append(f"Athlete: {metrics.athlete_id}  (body weight {metrics.body_weight_kg:.1f} kg)")

    # Every metric is rated against the athlete's best jump-height session
    best = history.best(metrics.athlete_id) if history is not None else None
    for label, attribute, unit, lower_is_better in KEY_METRICS:
        value = getattr(metrics, attribute)
        line = f"{label}: {format_metric_value(value)} {unit}"
        if history is not None:
            trend = history.trend(metrics.athlete_id, attribute)
            benchmark = getattr(best, attribute) if best is not None else 0
            line += (f"  [trend {trend:+.1f} ({trend_direction(trend, lower_is_better)}),"
                     f" vs best: {performance_status(value, benchmark, lower_is_better)}]")
        lines.append(line)

    if metrics.asymmetry_available:
        level = asymmetry_level(metrics.asymmetry_index_pct)
        status = performance_status(metrics.asymmetry_index_pct, config.ASYMMETRY_NORMAL_PCT, lower_is_better=True)
        lines.append(f"ASYMMETRY: {metrics.asymmetry_index_pct:.1f} % ({level}, {status})")
        lines.append(f"LEFT / RIGHT: {metrics.left_leg_force_n:.1f} N / {metrics.right_leg_force_n:.1f} N"
                     f" ({metrics.limb_split_source})")
    else:
        lines.append("ASYMMETRY: unavailable (no per-limb data)")

    lines.append("")
    lines.append(f"Impulse (net): {metrics.impulse_ns:.1f} N*s")
    lines.append(f"Impulse (gross): {metrics.gross_impulse_ns:.1f} N*s")
    lines.append(f"Flight Time: {metrics.flight_time_ms:.0f} ms")
    lines.append(f"Contact Time: {metrics.contact_time_ms:.0f} ms")
    lines.append(f"RSI (modified): {metrics.rsi_modified:.2f}")
    lines.append(f"Samples: {len(metrics.force_time_series)}")
    if ingest_warnings:
        lines.append(f"Values read as 0: {len(ingest_warnings)}")
        for warning in ingest_warnings[:MAX_LISTED_WARNINGS]:
            lines.append(f"  row {warning.row_index + 1}, {warning.column}: {warning.raw_value!r}")
    return "\n".join(lines)


def format_session_history(history, athlete_id):
    """
    One line per session of an athlete, oldest first, for the history panel.

    Args:
        history: AthleteHistory
        athlete_id: Athlete to list

    Returns:
        str: Empty when the athlete has no records
    """
    lines = []
    for session in history.sessions(athlete_id):
        heights = [record.jump_height_cm for record in session.metrics]
        lines.append(f"{session.date.isoformat()}  {session.type:<9}  {len(heights)} trial(s),"
                     f" best {max(heights):.1f} cm")
    return "\n".join(lines)

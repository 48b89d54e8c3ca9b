"""
Typed failures raised while loading and analysing an uploaded force-time export.
"""


class ForcePlateError(ValueError):
    """Base class for upload and analysis failures."""

    kind = 'error'


class ParseFailure(ForcePlateError):
    """The file could not be tokenized into rows at all."""

    kind = 'parse_failure'


class EmptyInput(ForcePlateError):
    """The file parsed but held no data rows, or no samples reached the extractor."""

    kind = 'empty_input'


class DegenerateSignal(ForcePlateError):
    """
    The force-time series cannot produce a defined metric.
    Raised when no sample crosses the onset threshold or the rise time is not positive.
    """

    kind = 'degenerate_signal'


class UnknownSessionType(ForcePlateError):
    """The requested session type is not one of config.SESSION_TYPES."""

    kind = 'unknown_session_type'

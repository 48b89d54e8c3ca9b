"""
Reads uploaded force-time exports and normalizes their rows into ordered samples.
Column names are matched against the synonyms in config; malformed numbers are
coerced to 0 and recorded as warnings instead of rejecting the whole upload.
"""
import io
import logging
import math
import os
from collections import namedtuple

import pandas as pd

import config
from .errors import EmptyInput, ParseFailure
from .models import Sample

logger = logging.getLogger(__name__)

IngestWarning = namedtuple('IngestWarning', ['row_index', 'column', 'raw_value'])


def read_csv_rows(source):
    """
    Tokenizes a delimiter-separated export with a header row.

    Args:
        source: Path to a .csv file, or an open text buffer

    Returns:
        list of dict: One {column: string value} mapping per data row

    Raises:
        ParseFailure: Wrong file type, unreadable file or tokenizer error
        EmptyInput: The file holds no data rows
    """
    text = _read_text(source)
    delimiter = detect_delimiter(text)

    # The header is tokenized as an ordinary row so that a data row with more
    # fields than the header is a tokenizer error instead of an implicit index.
    try:
        frame = pd.read_csv(
            io.StringIO(text),
            sep=delimiter,
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            skipinitialspace=True,
        )
    except pd.errors.EmptyDataError as e:
        raise EmptyInput("No data rows found in file.") from e
    except pd.errors.ParserError as e:
        raise ParseFailure(f"There was an error reading the CSV file: {e}") from e

    if len(frame.index) < 2:
        raise EmptyInput("No data rows found in file.")

    columns = [str(column).strip() for column in frame.iloc[0]]
    rows = [dict(zip(columns, values)) for values in frame.iloc[1:].itertuples(index=False, name=None)]
    logger.info("Loaded %d rows with columns %s (delimiter %r)", len(rows), columns, delimiter)
    return rows


def _read_text(source):
    if not isinstance(source, (str, os.PathLike)):
        return source.read()

    if not os.fspath(source).lower().endswith('.csv'):
        raise ParseFailure(f"Invalid file type: {os.path.basename(os.fspath(source))}. Please upload a CSV file.")
    try:
        with open(source, encoding='utf-8-sig', newline='') as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise ParseFailure(f"There was an error reading the CSV file: {e}") from e
    except OSError as e:
        raise ParseFailure(f"Could not open file: {e}") from e


def detect_delimiter(text):
    """
    Picks the delimiter from the first non-blank line: the candidate in
    config.CSV_DELIMITERS occurring most often, comma when none occurs
    (single-column exports).
    """
    header_line = next((line for line in text.splitlines() if line.strip()), '')
    counts = {candidate: header_line.count(candidate) for candidate in config.CSV_DELIMITERS}
    delimiter = max(config.CSV_DELIMITERS, key=counts.get)
    return delimiter if counts[delimiter] else config.CSV_DELIMITERS[0]


class SignalIngestor:
    """
    Converts RawRow mappings into an ordered sequence of Sample records.
    Output order matches input order; no reordering or deduplication is done.
    """

    def __init__(self, sample_interval_ms=config.SAMPLE_INTERVAL_MS):
        """
        Args:
            sample_interval_ms: Interval used to synthesize time when a row has no time column
        """
        if sample_interval_ms <= 0:
            raise ValueError("sample_interval_ms must be positive.")
        self.sample_interval_ms = sample_interval_ms
        self.warnings = []

    def ingest(self, rows):
        """
        Args:
            rows: Iterable of {column: value} mappings

        Returns:
            list of Sample
        """
        self.warnings = []
        samples = []
        force_column_seen = False

        for index, row in enumerate(rows):
            force_column, force_raw = self._resolve(row, config.FORCE_COLUMNS)
            if force_column is not None:
                force_column_seen = True
                force = self._parse_number(force_raw, index, force_column)
            else:
                force = 0.0

            time_column, time_raw = self._resolve(row, config.TIME_COLUMNS)
            if time_column is not None:
                time_ms = self._parse_number(time_raw, index, time_column)
            else:
                time_ms = float(index * self.sample_interval_ms)

            left_n, right_n = self._limb_channels(row, index)
            samples.append(Sample(time_ms=time_ms, force_n=force, left_n=left_n, right_n=right_n))

        if samples and not force_column_seen:
            logger.warning("No recognized force column (%s); all forces read as 0.", ", ".join(config.FORCE_COLUMNS))
        if self.warnings:
            logger.warning("Coerced %d non-numeric value(s) to 0 (first at row %d, column '%s').",
                           len(self.warnings), self.warnings[0].row_index, self.warnings[0].column)
        return samples

    def _limb_channels(self, row, index):
        left_column, left_raw = self._resolve(row, config.LEFT_FORCE_COLUMNS)
        right_column, right_raw = self._resolve(row, config.RIGHT_FORCE_COLUMNS)
        if left_column is None or right_column is None:
            return None, None
        return (self._parse_number(left_raw, index, left_column),
                self._parse_number(right_raw, index, right_column))

    @staticmethod
    def _resolve(row, synonyms):
        """Returns (column, raw value) for the first synonym holding a non-blank value."""
        for column in synonyms:
            value = row.get(column)
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            return column, value
        return None, None

    def _parse_number(self, raw_value, index, column):
        try:
            value = float(str(raw_value).strip())
        except ValueError:
            value = math.nan
        if not math.isfinite(value):
            self.warnings.append(IngestWarning(index, column, raw_value))
            return 0.0
        return value

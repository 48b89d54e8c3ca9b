"""
Data processing modules for the Force Plate Upload Analyzer.

This package contains the upload-to-metrics pipeline:
- signal_ingestor.py: CSV reading and row-to-sample normalization
- metrics_extractor.py: Performance metrics from the force-time series
- session_history.py: Per-athlete record history (latest, best, trend)
- data_processor.py: Qt facade reporting results or typed failures
- models.py / errors.py: Records and failure types shared by the above
"""

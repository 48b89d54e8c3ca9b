# Configuration constants for the Force Plate Upload Analyzer

# Ingestion Settings
SAMPLE_INTERVAL_MS = 5  # Synthesized sampling interval when the export has no time column
TIME_COLUMNS = ('time', 'Time')
FORCE_COLUMNS = ('force', 'Force', 'vertical_force')
LEFT_FORCE_COLUMNS = ('left_force', 'Left', 'left')
RIGHT_FORCE_COLUMNS = ('right_force', 'Right', 'right')
CSV_DELIMITERS = (',', ';', '\t', '|')  # Candidates, in priority order, matched against the header line

# Analysis Settings
GRAVITY = 9.81 # m/s^2
GRAVITY_CM = 981.0 # cm/s^2, used for flight time from jump height in cm
BASELINE_FORCE_N = 800.0 # Approximate static bodyweight-on-plate reading
ONSET_THRESHOLD_FACTOR = 1.1 # Onset = first sample above baseline * factor
TAKEOFF_THRESHOLD_N = 50.0 # Below this the athlete is treated as airborne
DEFAULT_CONTACT_TIME_MS = 500.0 # Used when no take-off sample is found
DEFAULT_BODY_WEIGHT_KG = 75.0
LEFT_SPLIT_FRACTION = None # Fixed left-leg share of peak force, None => no synthesized split
LEFT_SPLIT_RANGE = (0.45, 0.53) # Accepted range for LEFT_SPLIT_FRACTION
UNKNOWN_ATHLETE_ID = 'unknown'

# Session Settings
SESSION_TYPES = ('Jump', 'Isometric', 'Landing')
DEFAULT_SESSION_TYPE = 'Jump'

# Indicator thresholds (percent asymmetry)
ASYMMETRY_NORMAL_PCT = 5.0
ASYMMETRY_MODERATE_PCT = 10.0

# Plotting Settings
PLOT_Y_AXIS_INITIAL_MAX = 3000.0 # N
PLOT_Y_AXIS_MIN = -20.0 # Fixed Y-axis minimum with padding below x-axis

# Logging
LOG_FILE = 'force_plate_upload.log'

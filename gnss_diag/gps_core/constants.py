"""NMEA protocol constants and pipeline defaults."""

# Sentinels shown in place of a value
UNKNOWN = "unknown"
PARSE_ERROR = "parse error"

# Speed conversion factor
KMH_PER_KNOT = 1.852

# Sentence tags (first 6 characters of the raw line)
GGA_TAGS = frozenset({"$GPGGA", "$GNGGA"})
RMC_TAGS = frozenset({"$GPRMC", "$GNRMC"})
GSV_TAGS = frozenset({"$GPGSV", "$GLGSV", "$GAGSV", "$GBGSV", "$BDGSV"})
GSA_TAGS = frozenset({"$GPGSA", "$GNGSA", "$GLGSA", "$GAGSA", "$BDGSA"})

# Minimum comma-separated field counts per sentence type
GGA_MIN_FIELDS = 15
RMC_MIN_FIELDS = 12
GSV_MIN_FIELDS = 4
GSA_MIN_FIELDS = 18

# GSV layout
GSV_FIRST_BLOCK = 4
GSV_BLOCK_SIZE = 4
GSV_MAX_BLOCKS = 4

# GSA PRN slots (fields 3..14 inclusive)
GSA_PRN_SLOTS = slice(3, 15)

# Registry bounds (soft cap -> trim target)
REGISTRY_MAX_SIZE = 100
REGISTRY_TRIM_TARGET = 80
DISPLAY_MAX_SIZE = 50
DISPLAY_TRIM_TARGET = 40

# Pipeline cadence (seconds)
PUBLISH_INTERVAL_S = 0.5
JANITOR_INTERVAL_S = 30.0
WORKER_POLL_TIMEOUT_S = 0.1

# Event log bounds
EVENT_LOG_MAX_ENTRIES = 200
EVENT_LOG_TRIM_TARGET = 150
EVENT_LOG_TIME_FORMAT = "%H:%M:%S"
EVENT_LOG_FILE_PREFIX = "gps_log"

# Main-sentence display throttle
MAIN_SENTENCE_TAGS = GGA_TAGS | RMC_TAGS
MAIN_SENTENCE_INTERVAL_S = 5.0
MAIN_SENTENCE_PREVIEW_CHARS = 60

# Default serial configuration
DEFAULT_BAUD_RATE = 9600
DEFAULT_SERIAL_PORT = "/dev/serial0"
DEFAULT_READ_TIMEOUT_S = 1.0

# Export
DEFAULT_DELIMITER = ","
OUTPUT_SUFFIX = ".csv"

# Per-pixel lookup
DEFAULT_MAX_WORKERS = 4
DEFAULT_ROWS_PER_BATCH = 64

# Colors farther than this (Euclidean, normalized RGB) from every colorbar
# sample become NaN. None disables the cutoff.
DEFAULT_MAX_COLOR_DISTANCE = None

# Candidates fetched per query when resolving equidistant colorbar samples
TIE_CANDIDATES = 4

# Crop corner convention: "any", "bottom_left" or "top_left"
DEFAULT_ORIGIN_CORNER = "any"

# Concurrency (CLI batch mode)
DEFAULT_MAX_CONCURRENCY = 4

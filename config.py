# config.py
import os

# ======= Search time box (seconds, 0 disables the bound) =======
TIMEOUT = int(os.getenv("BL_TIMEOUT", "60"))

# ======= Balance quality knobs (seconds) =======
# The cyclic heuristic stops once the best album deviation drops below this.
QUALITY_THRESHOLD = float(os.getenv("BL_QUALITY_THRESHOLD", "20.0"))
# The binary search accepts a capacity once the greedy album deviation is
# at or below this.
SPLIT_TOLERANCE   = float(os.getenv("BL_SPLIT_TOLERANCE", "10.0"))
# Headroom added to total/boxes when deriving a side capacity from a box count.
CAPACITY_SLACK_PCT = int(os.getenv("BL_CAPACITY_SLACK_PCT", "10"))

# ======= CP-SAT knobs =======
WORKERS            = int(os.getenv("BL_WORKERS", "1"))
MAX_MEMORY_MB      = int(os.getenv("BL_MAX_MEMORY_MB", "2048"))
CP_SAT_MAX_SECONDS = float(os.getenv("BL_CP_SAT_MAX_SECONDS", "60"))
RANDOM_SEED        = int(os.getenv("BL_RANDOM_SEED", "0"))

# ======= Rendering =======
DELIMITER = os.getenv("BL_DELIMITER", ",")[:1] or ","

# ======= Output names =======
SIDES_OUT = os.getenv("BL_SIDES_OUT", "sides.txt")
LOG_DIR   = os.getenv("BL_LOG_DIR", "logs")

VERSION = "1.0"


class CFG:
    TIMEOUT = TIMEOUT

    QUALITY_THRESHOLD  = QUALITY_THRESHOLD
    SPLIT_TOLERANCE    = SPLIT_TOLERANCE
    CAPACITY_SLACK_PCT = CAPACITY_SLACK_PCT

    WORKERS            = WORKERS
    MAX_MEMORY_MB      = MAX_MEMORY_MB
    CP_SAT_MAX_SECONDS = CP_SAT_MAX_SECONDS
    RANDOM_SEED        = RANDOM_SEED

    DELIMITER = DELIMITER

    SIDES_OUT = SIDES_OUT
    LOG_DIR   = LOG_DIR

    VERSION = VERSION


__all__ = ["CFG", "VERSION"]

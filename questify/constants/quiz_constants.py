"""Quiz-flow and analytics constants shared across the core."""

TICK_INTERVAL_MS: int = 100
ALREADY_ANSWERED_SENTINEL: str = "already answered"

# Lower bounds in seconds, checked in order.
ENGAGEMENT_VERY_HIGH: str = "Very High"
ENGAGEMENT_HIGH: str = "High"
ENGAGEMENT_MEDIUM: str = "Medium"
ENGAGEMENT_LOW_MEDIUM: str = "Low-Medium"
ENGAGEMENT_LOW: str = "Low"
ENGAGEMENT_BUCKETS: tuple[tuple[float, str], ...] = (
    (5.0, ENGAGEMENT_VERY_HIGH),
    (10.0, ENGAGEMENT_HIGH),
    (20.0, ENGAGEMENT_MEDIUM),
    (30.0, ENGAGEMENT_LOW_MEDIUM),
)
ENGAGEMENT_LEVELS: tuple[str, ...] = (
    ENGAGEMENT_VERY_HIGH,
    ENGAGEMENT_HIGH,
    ENGAGEMENT_MEDIUM,
    ENGAGEMENT_LOW_MEDIUM,
    ENGAGEMENT_LOW,
)

HARD_ACCURACY_THRESHOLD: float = 0.4
MEDIUM_ACCURACY_THRESHOLD: float = 0.7

TOP_STUDENTS_LIMIT: int = 10
TREND_DAYS_LIMIT: int = 30
TIME_RANGE_DAYS: dict[str, int] = {"7days": 7, "30days": 30, "90days": 90}

MIN_OPTIONS: int = 2
MAX_OPTIONS: int = 5
MIN_PASSWORD_LENGTH: int = 6

EXPORT_FORMATS: tuple[str, ...] = ("json", "csv", "ednet-basic", "ednet")
EXPORT_FILE_EXTENSIONS: dict[str, str] = {
    "json": "json",
    "csv": "csv",
    "ednet-basic": "csv",
    "ednet": "csv",
}

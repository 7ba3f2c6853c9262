from pathlib import Path

# === Core Paths ===
DATA_DIR = Path("data")
VISITS_PATH = DATA_DIR / "visits.json"
PLAYERS_PATH = DATA_DIR / "players.json"

# === Avatars ===
AVATARS_PATH = "assets/avatars/"
DEFAULT_AVATAR = "default.jpg"
AVATAR_FILES: dict[str, str] = {}  # player name -> file under AVATARS_PATH

# === Output ===
SCHEMA_VERSION = 1
TOP_LOCATIONS_LIMIT = 3
RECENT_VISITS_LIMIT = 10

# === Input Bounds (values outside are unparseable) ===
MIN_YEAR = 1900
MAX_YEAR = 2100
MAX_AMOUNT = 1_000_000_000.0

# === Time Windows (hours, 24h clock) ===
EARLY_BIRD_HOURS = (5, 6, 7, 8)
NIGHT_OWL_HOURS = (22, 23, 0, 1, 2, 3, 4)

# === Levels (min alone decides; max only drives progress) ===
LEVELS = [
    {"min": 0, "max": 5, "name": "Principiante", "color": "#808080"},
    {"min": 6, "max": 15, "name": "Appassionato", "color": "#4CAF50"},
    {"min": 16, "max": 30, "name": "Esperto", "color": "#2196F3"},
    {"min": 31, "max": 50, "name": "Maestro", "color": "#9C27B0"},
    {"min": 51, "max": 100, "name": "Leggenda", "color": "#FF9800"},
    {"min": 101, "max": 999, "name": "McDio", "color": "#FF0000"},
]

# === Badges ===
BADGES = {
    "VETERAN": {"name": "Veterano", "metric": "total_visits", "threshold": 30, "color": "#FFD700"},
    "REGULAR": {"name": "Regolare", "metric": "total_visits", "threshold": 15, "color": "#C0C0C0"},
    "STREAKER": {"name": "In Serie", "metric": "streak", "threshold": 3, "color": "#FF6B6B"},
    "EARLY_BIRD": {"name": "Mattiniero", "metric": "early_visits", "threshold": 10, "color": "#4ECDC4"},
    "NIGHT_OWL": {"name": "Nottambulo", "metric": "late_visits", "threshold": 10, "color": "#45B7D1"},
    "CHAMPION": {"name": "Campione", "metric": "total_visits", "threshold": 50, "color": "#FF0000"},
}

# === Filters ===
TIME_RANGES = ("all", "month", "week", "today")
SORT_KEYS = ("visits", "streak", "lastVisit")

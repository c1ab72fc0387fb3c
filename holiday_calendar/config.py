"""
Shared configuration for the holiday calendar service.

Every value can be overridden from the environment (or a .env file).
"""
import os

from dotenv import load_dotenv

load_dotenv()

# ── Source ──
SOURCE_URL = os.environ.get(
    "SOURCE_URL", "https://www8.cao.go.jp/chosei/shukujitsu/syukujitsu.csv"
)
SOURCE_ENCODING = os.environ.get("SOURCE_ENCODING", "cp932")  # Shift_JIS superset
FETCH_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
}
FETCH_TIMEOUT = float(os.environ.get("FETCH_TIMEOUT", "30"))  # seconds

# ── Data ──
TARGET_YEAR = int(os.environ.get("TARGET_YEAR", "2026"))
HOLIDAY_CSV = os.environ.get("HOLIDAY_CSV", f"holidays_{TARGET_YEAR}.csv")
PLACEHOLDER_LABEL = os.environ.get("PLACEHOLDER_LABEL", "祝日")

# ── Server ──
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8080"))

# ── Scheduler ──
REFRESH_AT = os.environ.get("REFRESH_AT", "05:00")  # daily, local time

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

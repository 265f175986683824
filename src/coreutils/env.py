from dotenv import load_dotenv
import os

load_dotenv()  # take environment variables from .env

# Remote sources
DEFAULT_STORM_DATA_URL = (
    "https://d396qusza40orc.cloudfront.net/repdata%2Fdata%2FStormData.csv.bz2"
)
DEFAULT_CPI_SERIES_URL = "https://fred.stlouisfed.org/graph/fredgraph.csv?id=CPIAUCSL"

# Local layout
DEFAULT_DATA_DIR = "data"
DEFAULT_OUTPUT_DIR = "output"
DEFAULT_LOOKUP_FILE = "event_type_lookup_v1.csv"


def env_get(key: str, default: str | None = None) -> str | None:
    """Get environment variable or return default."""
    return os.getenv(key, default)


def get_report_settings() -> dict:
    """Resolve report settings from the environment (.env included)"""
    data_dir = env_get("REPORT_DATA_DIR", DEFAULT_DATA_DIR)
    return {
        "storm_data_url": env_get("STORM_DATA_URL", DEFAULT_STORM_DATA_URL),
        "cpi_series_url": env_get("CPI_SERIES_URL", DEFAULT_CPI_SERIES_URL),
        "data_dir": data_dir,
        "output_dir": env_get("REPORT_OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
        "lookup_path": env_get(
            "EVENT_TYPE_LOOKUP_PATH", os.path.join(data_dir, DEFAULT_LOOKUP_FILE)
        ),
        "log_level": env_get("LOG_LEVEL", "INFO"),
    }

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.coreutils.env import get_report_settings
from src.extract.data_fetcher import fetch_raw_cpi_data
from src.load.local_storage import save_parquet


def main():
    settings = get_report_settings()

    # fetch the monthly series used for the inflation ratios
    df = fetch_raw_cpi_data(settings["cpi_series_url"])

    path = save_parquet(df, os.path.join(settings["output_dir"], "cpi_monthly.parquet"))

    print(f"Saved {df.height} rows to {path}")
    print(df.tail(12))


if __name__ == "__main__":
    main()

"""
Remote Sources Client - Pure I/O Operations

Handles the two remote collaborators of the report:
- the compressed NOAA storm events extract
- the FRED CPIAUCSL monthly series (CSV download)
Returns raw bytes / files; parsing happens in data_fetcher.
"""

import bz2
import os
import shutil
import time
import requests
from typing import Optional
import logging

from src.coreutils.env import DEFAULT_CPI_SERIES_URL, DEFAULT_STORM_DATA_URL
from src.coreutils.request import new_session, get_bytes, download_file

logger = logging.getLogger(__name__)


class ReportSourcesClient:
    """Pure client for the storm data mirror and FRED"""

    def __init__(
        self,
        storm_data_url: str = DEFAULT_STORM_DATA_URL,
        cpi_series_url: str = DEFAULT_CPI_SERIES_URL,
        session: Optional[requests.Session] = None,
    ):
        self.storm_data_url = storm_data_url
        self.cpi_series_url = cpi_series_url
        self.session = session or new_session()

    def download_storm_data(self, destination: str) -> str:
        """
        Download the bz2-compressed storm events file

        Args:
            destination: Path of the .bz2 file to write

        Returns:
            str: Path to the downloaded archive
        """
        logger.info(f"Downloading storm data from {self.storm_data_url}")
        os.makedirs(os.path.dirname(destination) or ".", exist_ok=True)
        return download_file(self.session, self.storm_data_url, destination)

    def get_cpi_csv(self) -> bytes:
        """
        Fetch the monthly CPI series as CSV

        Returns:
            bytes: Raw CSV body (two columns: observation date, index value)
        """
        logger.info(f"Fetching from {self.cpi_series_url}")
        start_time = time.time()

        try:
            data = get_bytes(self.session, self.cpi_series_url, timeout=60)
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching CPI series: {e}")
            raise

        elapsed = time.time() - start_time
        logger.info(f"Fetched from {self.cpi_series_url}: {elapsed:.2f} seconds")
        return data


def decompress_bz2(archive_path: str, destination: str) -> str:
    """
    Decompress a .bz2 archive next to the report data

    Args:
        archive_path: Path to the .bz2 file
        destination: Path of the decompressed file

    Returns:
        str: Path to the decompressed file
    """
    if not os.path.exists(archive_path):
        raise FileNotFoundError(f"Archive not found: {archive_path}")

    logger.info(f"Decompressing {archive_path} -> {destination}")
    partial = destination + ".part"
    try:
        with bz2.open(archive_path, "rb") as src, open(partial, "wb") as dst:
            shutil.copyfileobj(src, dst)
        os.replace(partial, destination)
    finally:
        if os.path.exists(partial):
            os.remove(partial)

    return destination


# Convenience functions for direct use
def download_storm_data(destination: str, url: str = DEFAULT_STORM_DATA_URL) -> str:
    """Convenience function to download the storm data archive"""
    client = ReportSourcesClient(storm_data_url=url)
    return client.download_storm_data(destination)


def get_cpi_csv(url: str = DEFAULT_CPI_SERIES_URL) -> bytes:
    """Convenience function to get the CPI series"""
    client = ReportSourcesClient(cpi_series_url=url)
    return client.get_cpi_csv()

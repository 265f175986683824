import os
import time
from urllib3.util.retry import Retry
import requests
from requests.adapters import HTTPAdapter
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_RETRY_STRATEGY = Retry(
    total=5,  # Total number of retries
    backoff_factor=2,  # The backoff factor (2 seconds, then 4, 8...)
    status_forcelist=[429, 500, 502, 503, 504],  # HTTP status codes to retry on
)

DOWNLOAD_CHUNK_SIZE = 1024 * 1024


def new_session() -> requests.Session:
    """Create a new requests session with retry strategy"""
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=DEFAULT_RETRY_STRATEGY)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    # Set default headers
    session.headers.update({"User-Agent": "storm-impact-report/1.0"})

    return session


def get_bytes(
    session: requests.Session,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    timeout: int = 30,
) -> bytes:
    """Fetch a small payload (e.g. a CSV series) and return the raw body

    Raises:
        requests.RequestException: On HTTP errors
    """
    start = time.time()
    try:
        response = session.get(url, params=params, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise requests.RequestException(
            f"HTTP request failed for {url}: {str(e)}"
        ) from e

    logger.debug(f"Fetched from {url}: {time.time() - start:.2f} seconds")
    return response.content


def download_file(
    session: requests.Session,
    url: str,
    destination: str,
    timeout: int = 300,
) -> str:
    """Stream a remote file to disk

    Args:
        session: HTTP session to use
        url: URL to download
        destination: Local file path to write
        timeout: Request timeout in seconds

    Returns:
        Path of the written file

    Raises:
        requests.RequestException: On HTTP errors
    """
    start = time.time()
    partial = destination + ".part"
    try:
        with session.get(url, stream=True, timeout=timeout) as response:
            response.raise_for_status()
            with open(partial, "wb") as f:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        os.replace(partial, destination)
    except requests.RequestException as e:
        raise requests.RequestException(
            f"Download failed for {url}: {str(e)}"
        ) from e
    finally:
        # only a complete download may land on the destination path
        if os.path.exists(partial):
            os.remove(partial)

    logger.info(f"Downloaded {url} -> {destination}: {time.time() - start:.2f} seconds")
    return destination

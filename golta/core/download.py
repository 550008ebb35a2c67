"""
Network download manager with progress tracking and retry logic.

This module provides the archive download used by installs:
- HTTP/HTTPS downloads with TLS verification
- Progress reporting (bytes, percentage, speed, ETA)
- Retry logic with exponential backoff for transient failures
- Timeout handling

The server must announce the archive size; a response without a
Content-Length header is rejected before any bytes are written.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests
from requests.exceptions import ConnectionError, HTTPError, RequestException, Timeout

from golta.core.exceptions import DownloadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


def download_file(
    url: str,
    destination: Path,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    timeout: int = 30,
    max_retries: int = 3,
) -> Path:
    """
    Download file from URL to destination with retry logic.

    Connection errors, timeouts and 5xx responses are retried with
    exponential backoff. Client errors (4xx) and a missing Content-Length
    fail immediately.

    Args:
        url: URL to download from
        destination: Local path to save file
        progress_callback: Optional callback for progress updates
        timeout: Request timeout in seconds
        max_retries: Maximum number of attempts

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If download fails after retries
        ValueError: If URL or destination is invalid

    Example:
        >>> def on_progress(progress):
        ...     print(f"Downloaded {progress.percentage:.1f}%")
        >>>
        >>> url = "https://go.dev/dl/go1.22.3.linux-amd64.tar.gz"
        >>> download_file(url, Path("downloads/go.tar.gz"), progress_callback=on_progress)
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    for attempt in range(max_retries):
        try:
            return _download_with_progress(
                url=url,
                destination=destination,
                progress_callback=progress_callback,
                timeout=timeout,
            )
        except HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status is not None and status < 500:
                raise DownloadError(
                    f"Failed to download {url}: HTTP {status}"
                ) from e
            if attempt == max_retries - 1:
                raise DownloadError(
                    f"Download failed after {max_retries} attempts: {e}"
                ) from e
            _backoff(attempt, e)
        except (Timeout, ConnectionError, RequestException) as e:
            if attempt == max_retries - 1:
                raise DownloadError(
                    f"Download failed after {max_retries} attempts: {e}"
                ) from e
            _backoff(attempt, e)

    raise DownloadError("Download failed for unknown reason")


def _backoff(attempt: int, error: Exception) -> None:
    """Sleep before the next attempt (1s, 2s, 4s, ...)."""
    backoff_seconds = 2**attempt
    logger.warning(
        f"Download attempt {attempt + 1} failed: {error}. "
        f"Retrying in {backoff_seconds}s..."
    )
    time.sleep(backoff_seconds)


def _download_with_progress(
    url: str,
    destination: Path,
    progress_callback: Optional[Callable[[DownloadProgress], None]],
    timeout: int,
) -> Path:
    """
    Perform download with streaming and progress updates.

    This is an internal function called by download_file().

    Raises:
        DownloadError: If the response carries no Content-Length
        RequestException: If HTTP request fails
    """
    logger.debug(f"Downloading from {url}")

    response = requests.get(url, stream=True, timeout=timeout, allow_redirects=True)
    try:
        response.raise_for_status()

        content_length = response.headers.get("content-length")
        if not content_length:
            raise DownloadError(
                f"Server did not report the size of {url} (missing Content-Length)"
            )
        try:
            total_size = int(content_length)
        except ValueError as e:
            raise DownloadError(
                f"Invalid Content-Length '{content_length}' for {url}"
            ) from e

        downloaded = 0
        start_time = time.time()
        last_progress_time = start_time

        with open(destination, "wb") as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if not chunk:
                    continue
                f.write(chunk)
                downloaded += len(chunk)

                # Report progress (max once per 0.5 seconds to avoid spam)
                current_time = time.time()
                if progress_callback and (
                    current_time - last_progress_time >= 0.5
                    or downloaded == total_size
                ):
                    elapsed = current_time - start_time
                    speed = downloaded / elapsed if elapsed > 0 else 0
                    remaining = max(total_size - downloaded, 0)
                    eta = remaining / speed if speed > 0 else 0

                    progress_callback(
                        DownloadProgress(
                            bytes_downloaded=downloaded,
                            total_bytes=total_size,
                            percentage=(downloaded / total_size * 100)
                            if total_size > 0
                            else 100.0,
                            speed_bps=speed,
                            eta_seconds=eta,
                        )
                    )
                    last_progress_time = current_time
    finally:
        response.close()

    if downloaded != total_size:
        raise DownloadError(
            f"Incomplete download of {url}: expected {total_size} bytes, "
            f"got {downloaded}"
        )

    logger.debug(f"Download complete: {destination}")
    return destination


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    return (
        f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
        f"({progress.percentage:.1f}%) "
        f"at {speed_mbps:.1f} MB/s "
        f"ETA: {progress.eta_seconds:.0f}s"
    )


__all__ = [
    "DownloadProgress",
    "DownloadError",
    "download_file",
    "format_progress",
]

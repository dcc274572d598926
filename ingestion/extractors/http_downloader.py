"""
HTTP archive downloader with skip-if-present semantics.

The archive body is streamed to disk in chunks so the full archive is never
held in memory. Bytes are written to a ``.part`` file that is renamed only
once the body has been fully received, so an interrupted download is never
mistaken for a complete one on the next run.
"""

import httpx
from pathlib import Path
from typing import Any, Dict, Optional, Union
from core.config import settings
from core.exceptions import DownloadError
from models.base import ETLStatus
import logging

logger = logging.getLogger(__name__)


class ArchiveDownloader:
    """
    Fetch a remote archive to a local path.

    Attributes:
        timeout: Request timeout in seconds (default: settings.DOWNLOAD_TIMEOUT)
        transport: Optional httpx transport, used to plug in a mock transport
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.timeout = timeout if timeout is not None else settings.DOWNLOAD_TIMEOUT
        self.transport = transport

    async def download(self, url: Optional[str], destination: Union[str, Path]) -> Dict[str, Any]:
        """
        Download url to destination unless destination already exists.

        Returns:
            Dictionary with status ("success" or "skipped"), path, bytes and
            a human-readable message

        Raises:
            DownloadError: Non-200 response or transport/file failure
        """
        destination = Path(destination)

        if destination.exists():
            message = f"File already exists at {destination}. Skipping download."
            logger.info(message)
            return {
                "status": ETLStatus.SKIPPED.value,
                "path": str(destination),
                "bytes": destination.stat().st_size,
                "message": message,
            }

        if not url:
            raise DownloadError(
                "No archive URL configured",
                context={"destination": str(destination)}
            )

        partial_path = destination.with_name(destination.name + ".part")
        bytes_written = 0

        logger.info(f"Downloading file from {url}")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
                follow_redirects=True
            ) as client:
                async with client.stream("GET", url) as response:
                    if response.status_code != 200:
                        raise DownloadError(
                            f"HTTP status code {response.status_code}",
                            context={
                                "url": url,
                                "destination": str(destination),
                                "status_code": response.status_code,
                            }
                        )

                    with open(partial_path, "wb") as fh:
                        async for chunk in response.aiter_bytes():
                            fh.write(chunk)
                            bytes_written += len(chunk)

            partial_path.replace(destination)

        except DownloadError:
            partial_path.unlink(missing_ok=True)
            raise

        except (httpx.HTTPError, OSError) as e:
            partial_path.unlink(missing_ok=True)
            raise DownloadError(
                "Failed to download archive",
                context={
                    "url": url,
                    "destination": str(destination),
                    "bytes_written": bytes_written,
                },
                original_exception=e
            )

        message = f"Download complete. File saved to {destination}"
        logger.info(f"{message} ({bytes_written} bytes)")
        return {
            "status": ETLStatus.SUCCESS.value,
            "path": str(destination),
            "bytes": bytes_written,
            "message": message,
        }

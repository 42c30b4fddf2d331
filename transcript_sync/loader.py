"""Caption file loading from local paths and http(s) URLs.

WHY: The transcript is usually published next to the media, either as a
file on disk or at a URL. Failing to get the bytes (network down, 404,
unreadable file) is a different condition from getting a file that holds
no usable cue: the first may deserve a retry, the second never does.

HOW: URLs are fetched with httpx.AsyncClient (a caller-supplied client is
reused, otherwise a short-lived one is created); everything else is read
as a UTF-8 file. Every transport or read failure is wrapped in
TranscriptLoadError.

RULES:
- Only http:// and https:// locations go over the network
- Non-2xx responses are load failures
- A leading byte order mark is stripped
- Successfully loaded text is returned as-is; parsing is not done here
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import httpx

from transcript_sync import config

logger = logging.getLogger(__name__)


class TranscriptLoadError(Exception):
    """Raised when caption text cannot be downloaded or read.

    WHY: Callers need a typed exception to tell "could not get the file"
    apart from "the file has no cues" (which is not an exception at all).

    RULES:
    - location is the path or URL that failed
    - The original exception is chained as __cause__
    """

    def __init__(self, location: str, message: str) -> None:
        self.location = location
        self.message = message
        super().__init__("Could not load transcript from {}: {}".format(location, message))


def is_url(location: Union[str, Path]) -> bool:
    text = str(location).lower()
    return text.startswith("http://") or text.startswith("https://")


def _strip_bom(text: str) -> str:
    return text[1:] if text.startswith("\ufeff") else text


async def _fetch_url(url: str, client: httpx.AsyncClient) -> str:
    try:
        response = await client.get(url, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise TranscriptLoadError(
            url, "HTTP {}".format(exc.response.status_code)
        ) from exc
    except httpx.HTTPError as exc:
        raise TranscriptLoadError(url, str(exc) or type(exc).__name__) from exc
    return _strip_bom(response.text)


async def fetch_caption_text(
    location: Union[str, Path],
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: Optional[float] = None,
) -> str:
    """Load caption text from a URL or a local file.

    Args:
        location: http(s) URL or filesystem path of the caption file.
        client: Optional httpx.AsyncClient to reuse for URLs.
        timeout: Request timeout in seconds (default config.FETCH_TIMEOUT_S),
                 only used when no client is given.

    Returns:
        The caption file content.

    Raises:
        TranscriptLoadError: If the file cannot be downloaded or read.
    """
    if is_url(location):
        url = str(location)
        logger.info("Fetching transcript %s", url)
        if client is not None:
            return await _fetch_url(url, client)
        async with httpx.AsyncClient(
            timeout=timeout if timeout is not None else config.FETCH_TIMEOUT_S,
        ) as own_client:
            return await _fetch_url(url, own_client)

    path = Path(location)
    logger.info("Reading transcript %s", path)
    try:
        return _strip_bom(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise TranscriptLoadError(str(path), str(exc)) from exc

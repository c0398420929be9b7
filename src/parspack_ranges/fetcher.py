"""One-shot HTTP retrieval of the CIDR list."""

from __future__ import annotations

import logging
from threading import Thread
from typing import Optional

import requests
from urllib3.exceptions import ReadTimeoutError

LOG = logging.getLogger(__name__)

CHUNK_SIZE = 8192


class FetchError(Exception):
    """A fetch attempt failed before a usable body was received."""


class FetchTimeout(FetchError):
    """The fetch did not complete within the configured timeout."""


class StatusError(FetchError):
    """The endpoint answered with a non-200 status code."""

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"unexpected status code {status_code} from {url}")
        self.status_code = status_code
        self.url = url


def _is_read_timeout(exc: requests.RequestException) -> bool:
    # requests reports a stalled body read as ConnectionError(ReadTimeoutError)
    return bool(exc.args) and isinstance(exc.args[0], ReadTimeoutError)


class _Download(Thread):
    """Perform the GET and body read so the caller can wait with a deadline."""

    def __init__(self, http, url: str, timeout: Optional[float]) -> None:
        super().__init__(daemon=True, name=f"fetch[{url}]")
        self._http = http
        self._url = url
        self._timeout = timeout
        self.response: Optional[requests.Response] = None
        self.body: Optional[bytes] = None
        self.error: Optional[Exception] = None

    def run(self) -> None:
        try:
            self.body = self._download()
        except Exception as exc:
            self.error = exc

    def _download(self) -> bytes:
        url = self._url
        try:
            response = self._http.get(url, timeout=self._timeout, stream=True)
        except requests.Timeout as exc:
            raise FetchTimeout(f"timed out fetching {url}") from exc
        except requests.RequestException as exc:
            raise FetchError(f"failed to fetch {url}: {exc}") from exc

        self.response = response
        with response:
            if response.status_code != requests.codes.ok:
                raise StatusError(response.status_code, url)
            try:
                return b"".join(response.iter_content(chunk_size=CHUNK_SIZE))
            except requests.Timeout as exc:
                raise FetchTimeout(f"timed out reading body from {url}") from exc
            except requests.RequestException as exc:
                if _is_read_timeout(exc):
                    raise FetchTimeout(f"timed out reading body from {url}") from exc
                raise FetchError(f"failed to read body from {url}: {exc}") from exc

    def abort(self) -> None:
        """Close the response so the reading thread stops early."""

        response = self.response
        if response is None:
            return
        try:
            response.close()
        except Exception:  # pragma: no cover - best effort from another thread
            LOG.debug("error closing abandoned response for %s", self._url, exc_info=True)


def fetch_text(
    url: str,
    timeout: float = 0.0,
    session: Optional[requests.Session] = None,
) -> str:
    """GET ``url`` and return the body as text.

    When ``timeout`` is positive it bounds the whole exchange, connect plus
    reading the full body, however slowly the server trickles it out.  ``0``
    waits indefinitely.
    """

    http = session if session is not None else requests
    download = _Download(http, url, timeout if timeout > 0 else None)

    if timeout > 0:
        download.start()
        download.join(timeout)
        if download.is_alive():
            download.abort()
            raise FetchTimeout(f"timed out fetching {url} after {timeout}s")
    else:
        download.run()

    if download.error is not None:
        raise download.error
    body = download.body or b""
    LOG.debug("fetched %d bytes from %s", len(body), url)
    return body.decode("utf-8", errors="replace")

"""HTTP downloads with charset and gzip negotiation.

All requests go through an ``httpx.Client``. Unless a caller passes its own,
the process-wide client from :func:`get_shared_client` is used; its cookie
jar keeps session cookies set on redirects for the lifetime of the process.
"""

from __future__ import annotations

import os
import re
from http.cookiejar import CookieJar, DefaultCookiePolicy

import httpx
import structlog

from freshfetch.config import settings
from freshfetch.storage.files import close_quietly, write_stream
from freshfetch.web.charset import resolve_charset

logger = structlog.get_logger()

REQUEST_HEADERS = {
    "Accept-Charset": "UTF-8",
    "Accept-Encoding": "gzip",
}

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")

_shared_client: httpx.Client | None = None


class AcceptAllCookiePolicy(DefaultCookiePolicy):
    """Store every cookie a server sets, whatever domain it names."""

    def set_ok(self, cookie, request):
        return True


def accept_all_cookies() -> httpx.Cookies:
    return httpx.Cookies(CookieJar(policy=AcceptAllCookiePolicy()))


class TransferError(RuntimeError):
    """Raised when the server answers with anything but 200 OK."""

    def __init__(self, status_code: int, url: str):
        self.status_code = status_code
        self.url = url
        super().__init__(f"server returned {status_code} for {url}")


def build_client(
    *,
    transport: httpx.BaseTransport | None = None,
    cookies: httpx.Cookies | None = None,
    timeout_seconds: float | None = None,
) -> httpx.Client:
    """Create a client that follows redirects and keeps every cookie it is given."""
    if timeout_seconds is None:
        timeout_seconds = settings.http_timeout_seconds
    return httpx.Client(
        timeout=timeout_seconds,
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
        cookies=cookies if cookies is not None else accept_all_cookies(),
        transport=transport,
    )


def get_shared_client() -> httpx.Client:
    """Process-wide client whose cookie jar is shared by all downloads."""
    global _shared_client
    if _shared_client is None or _shared_client.is_closed:
        _shared_client = build_client()
    return _shared_client


def _log_cipher(response: httpx.Response) -> None:
    if response.url.scheme != "https":
        return
    network_stream = response.extensions.get("network_stream")
    if network_stream is None:
        return
    ssl_object = network_stream.get_extra_info("ssl_object")
    if ssl_object is None:
        return
    cipher = ssl_object.cipher()
    logger.debug("TLS connection", host=response.url.host, cipher=cipher[0] if cipher else None)


def _split_lines(text: str) -> list[str]:
    if not text:
        return []
    parts = _LINE_BREAK_RE.split(text)
    if parts[-1] == "":
        parts.pop()
    return parts


def _open(client: httpx.Client, url: str) -> httpx.Response:
    request = client.build_request("GET", url, headers=REQUEST_HEADERS)
    return client.send(request, stream=True)


def _check_status(response: httpx.Response, url: str) -> None:
    if response.status_code != httpx.codes.OK:
        logger.warning("Download failed", url=url, status=response.status_code)
        raise TransferError(response.status_code, url)


def download(url: str | None, lines: list[str] | None, *, client: httpx.Client | None = None) -> None:
    """Download ``url`` and append its decoded lines to ``lines``.

    The charset comes from the Content-Type header; a gzip Content-Encoding
    is decompressed before decoding. Nothing happens if ``url`` or ``lines``
    is None.

    Raises:
        TransferError: if the server does not answer 200 OK
        httpx.TransportError: if the connection or read fails
    """
    if url is None or lines is None:
        return

    client = client or get_shared_client()
    logger.info("Downloading", url=url)
    response = _open(client, url)
    try:
        _log_cipher(response)
        _check_status(response, url)
        charset = resolve_charset(response.headers.get("content-type"))
        # httpx undoes the Content-Encoding while reading
        body = response.read()
        logger.debug(
            "Decoding body",
            url=url,
            charset=charset,
            content_encoding=response.headers.get("content-encoding"),
            size_bytes=len(body),
        )
        text = body.decode(charset, errors="replace")
    finally:
        close_quietly(response, url=url)

    new_lines = _split_lines(text)
    lines.extend(new_lines)
    logger.info("Downloaded", url=url, lines=len(new_lines))


def fetch_lines(url: str, *, client: httpx.Client | None = None) -> list[str]:
    """Return the decoded lines of ``url``."""
    lines: list[str] = []
    download(url, lines, client=client)
    return lines


def download_to_file(
    url: str | None,
    path: str | os.PathLike | None,
    *,
    client: httpx.Client | None = None,
) -> None:
    """Stream the body of ``url`` to ``path`` without charset translation."""
    if url is None or path is None:
        return

    client = client or get_shared_client()
    logger.info("Downloading to file", url=url, path=str(path))
    response = _open(client, url)
    try:
        _log_cipher(response)
        _check_status(response, url)
        write_stream(response.iter_bytes(), path)
    finally:
        close_quietly(response, url=url)

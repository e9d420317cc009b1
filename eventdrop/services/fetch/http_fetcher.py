from __future__ import annotations

import logging
import re
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from eventdrop.core.errors import EventDropError
from eventdrop.core.urls import extract_domain, validate_external_url

logger = logging.getLogger(__name__)

USER_AGENT = "eventdrop/0.1"
DEFAULT_TIMEOUT_S = 10.0
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
MAX_REDIRECTS = 5
PAGE_TEXT_LIMIT = 4000

_WHITESPACE = re.compile(r"\s+")


class ResponseTooLarge(Exception):
    pass


def fetch_url_text(
    url: str,
    timeout: float = DEFAULT_TIMEOUT_S,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> tuple[str | None, str | None, int | None]:
    """Fetch ``url`` and return ``(text, error, status)``.

    Redirects are followed by hand so every hop passes the URL validator;
    bodies larger than ``max_bytes`` are abandoned mid-stream.
    """
    headers = {"User-Agent": USER_AGENT}
    current = url

    try:
        with httpx.Client(headers=headers, timeout=timeout, follow_redirects=False) as client:
            for _ in range(MAX_REDIRECTS + 1):
                current = validate_external_url(current)
                with client.stream("GET", current) as response:
                    if response.is_redirect:
                        location = response.headers.get("location")
                        if not location:
                            return None, "redirect without location", response.status_code
                        current = urljoin(current, location)
                        continue
                    response.raise_for_status()
                    body = _read_bounded(response, max_bytes)
                    encoding = response.encoding or "utf-8"
                    logger.info(
                        "Fetched page domain=%s status=%s bytes=%s",
                        extract_domain(current),
                        response.status_code,
                        len(body),
                    )
                    return body.decode(encoding, errors="replace"), None, response.status_code
            return None, "too many redirects", None
    except EventDropError as exc:
        logger.warning("Refusing to fetch url=%s reason=%s", current, exc.message)
        return None, exc.message, None
    except ResponseTooLarge:
        logger.warning("Response too large url=%s limit=%s", current, max_bytes)
        return None, f"response exceeds {max_bytes} bytes", None
    except httpx.HTTPStatusError as exc:
        resp = exc.response
        status = resp.status_code if resp is not None else None
        return None, str(exc), status
    except Exception as exc:  # noqa: BLE001
        return None, str(exc), None


def html_to_text(html: str, limit: int = PAGE_TEXT_LIMIT) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()
    text = _WHITESPACE.sub(" ", soup.get_text(" ")).strip()
    return text[:limit]


def _read_bounded(response: httpx.Response, max_bytes: int) -> bytes:
    declared = response.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        raise ResponseTooLarge()

    chunks: list[bytes] = []
    total = 0
    for chunk in response.iter_bytes():
        total += len(chunk)
        if total > max_bytes:
            raise ResponseTooLarge()
        chunks.append(chunk)
    return b"".join(chunks)

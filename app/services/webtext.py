"""
Direct website fetch — download a page and reduce it to plain text.

Used as the fallback when the markdown extraction actor fails. Never raises:
every failure (bad URL, network, timeout, HTTP error) yields ''.
"""
import logging
import re
import time
from typing import Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup, Comment

from app.config import SITE_FETCH_TIMEOUT, SITE_TEXT_MAX_CHARS

logger = logging.getLogger('services.webtext')

USER_AGENT = 'Mozilla/5.0 (LeadEngineBot)'

_WS_RE = re.compile(r'\s+')

# Raw bytes read before stripping; markup outweighs text
MAX_BODY_BYTES = SITE_TEXT_MAX_CHARS * 4
CHUNK_BYTES = 16 * 1024


def normalize_url(url: str) -> Optional[str]:
    """scheme://host/path, dropping query + fragment. Bare hosts get https://."""
    if not url:
        return None
    url = url.strip()
    if '://' not in url:
        url = f'https://{url}'
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if not parsed.hostname:
        return None
    path = '' if parsed.path in ('', '/') else parsed.path
    return f'{parsed.scheme}://{parsed.hostname}{path}'


def strip_html(html: str) -> str:
    """Visible text of an HTML document, whitespace collapsed."""
    soup = BeautifulSoup(html, 'html.parser')
    for tag in soup(['script', 'style', 'noscript']):
        tag.decompose()
    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    return _WS_RE.sub(' ', soup.get_text(' ')).strip()


def _read_body(resp, deadline: float) -> bytes:
    """At most MAX_BODY_BYTES of the body, stopping early once the deadline passes."""
    chunks = []
    size = 0
    for chunk in resp.iter_content(chunk_size=CHUNK_BYTES):
        chunks.append(chunk)
        size += len(chunk)
        if size >= MAX_BODY_BYTES:
            break
        if time.monotonic() > deadline:
            logger.info("Fetch %s hit the time limit after %d bytes", resp.url, size)
            break
    return b''.join(chunks)[:MAX_BODY_BYTES]


def fetch_site_text(url: str, timeout: float = SITE_FETCH_TIMEOUT) -> str:
    """Fetch url and return its stripped text, truncated; '' on any failure.

    timeout bounds the whole download, not just each socket read.
    """
    norm = normalize_url(url)
    if not norm:
        return ''
    deadline = time.monotonic() + timeout
    resp = None
    try:
        resp = requests.get(norm, headers={'User-Agent': USER_AGENT}, timeout=timeout, stream=True)
        if resp.status_code >= 400:
            logger.info("Fetch %s returned %s", norm, resp.status_code)
            return ''
        body = _read_body(resp, deadline)
        html = body.decode(resp.encoding or 'utf-8', errors='replace')
        return strip_html(html)[:SITE_TEXT_MAX_CHARS]
    except Exception as e:
        logger.warning("Fetch %s failed: %s", norm, e)
        return ''
    finally:
        if resp is not None:
            resp.close()

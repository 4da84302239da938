from __future__ import annotations

from pathlib import Path
from typing import Optional

import requests


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------

REGISTRATION_HISTORY_URL = (
    "https://banner.apps.uillinois.edu/StudentRegistrationSSB/ssb/registrationHistory/registrationHistory"
)


# ---------------------------------------------------------------------------
# Core logic
# ---------------------------------------------------------------------------


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def fetch_page(url: str, cookie: Optional[str] = None, timeout: float = 30) -> str:
    """
    Download one page. Banner needs a logged-in session, so the browser's
    Cookie header can be passed through.
    """
    headers = {"Cookie": cookie} if cookie else {}
    resp = requests.get(url, headers=headers, timeout=timeout)
    resp.raise_for_status()
    return resp.text


def load_page(source: str | Path, cookie: Optional[str] = None, timeout: float = 30) -> str:
    """
    Return the HTML of a page given either a URL or a saved file path.

    Raises OSError for unreadable files and requests.RequestException for
    network / HTTP errors.
    """
    text = str(source)
    if is_url(text):
        return fetch_page(text, cookie=cookie, timeout=timeout)
    return Path(text).read_text(encoding="utf-8")

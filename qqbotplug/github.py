"""Search GitHub repositories and describe the best match."""

from __future__ import annotations

import json
from typing import Mapping
from urllib.parse import urlencode

import requests

SEARCH_API = "https://api.github.com/search/repositories"
PREVIEW_BASE = "https://opengraph.githubassets.com/0/"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/88.0.4324.182 Safari/537.36"
)
HELP = "GitHub仓库搜索\n- >github [xxx]\n- >github -p [xxx]"


def notnull(text: str, defstr: str) -> str:
    """``text``, or ``defstr`` when ``text`` is empty."""
    return text if text else defstr


def net_get(dest: str, headers: Mapping[str, str] | None = None) -> bytes:
    """Body of a GET request; any status other than 200 raises HTTPError."""
    response = requests.get(dest, headers=dict(headers or {}), timeout=30)
    body = response.content
    if response.status_code != 200:
        raise requests.HTTPError(f"code {response.status_code}", response=response)
    return body


def _str(value) -> str:
    return value if isinstance(value, str) else ""


def _int(value) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return 0
    return 0


def search_repo(query: str) -> dict:
    """The first repository GitHub finds for ``query``.

    Raises LookupError when nothing matches.
    """
    url = f"{SEARCH_API}?{urlencode({'q': query})}"
    info = json.loads(net_get(url, {"User-Agent": USER_AGENT}))
    if not isinstance(info, dict) or _int(info.get("total_count")) == 0:
        raise LookupError("没有找到这样的仓库")
    items = info.get("items") or []
    if not items:
        raise LookupError("没有找到这样的仓库")
    return items[0]


def format_repo(repo: Mapping) -> str:
    """Text summary of a repository record."""
    license_info = repo.get("license")
    license_key = _str(license_info.get("key")) if isinstance(license_info, Mapping) else ""
    return (
        f"{_str(repo.get('full_name'))}\n"
        f"Description: {_str(repo.get('description'))}\n"
        f"Star/Fork/Issue: {_int(repo.get('watchers'))}/{_int(repo.get('forks'))}"
        f"/{_int(repo.get('open_issues'))}\n"
        f"Language: {notnull(_str(repo.get('language')), 'None')}\n"
        f"License: {notnull(license_key.upper(), 'None')}\n"
        f"Last pushed: {_str(repo.get('pushed_at'))}\n"
        f"Jump: {_str(repo.get('html_url'))}\n"
    )


def preview_url(repo: Mapping) -> str:
    """Open Graph preview picture of a repository."""
    return PREVIEW_BASE + _str(repo.get("full_name"))
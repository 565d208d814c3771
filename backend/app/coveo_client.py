# app/coveo_client.py
"""
Replay of the captured search request with ranking debug switched on.

The browser-side shim reports every outbound request; only the main search
call (URL containing the configured search path) is kept. On export the same
request is re-sent with numberOfResults/debug/debugRankingInformation set,
and the decoded `results` array is returned.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode

import httpx

from app import config
from app.logging_utils import setup_logger, log_kv
from app.models import CapturedRequest

# httpx computes these itself for the replayed body
_DROP_HEADERS = {"host", "content-length"}


class ExportError(RuntimeError):
    """A run-level failure: the export is aborted and no CSV is produced."""


def is_search_request(url: Optional[str]) -> bool:
    return bool(url) and config.search_path() in url


class RequestCapture:
    """Remembers the last search request seen by the interception shim."""

    def __init__(self) -> None:
        self._last: Optional[CapturedRequest] = None

    @property
    def last(self) -> Optional[CapturedRequest]:
        return self._last

    def capture(self, url: str, headers: Optional[Dict[str, str]] = None, body: Optional[str] = None) -> bool:
        """Store the request if it is a search call; return whether it was kept."""
        if not is_search_request(url):
            return False
        self._last = CapturedRequest(url=url, headers=dict(headers or {}), body=body)
        log_kv(setup_logger("export"), event="captured", url=url)
        return True


# -------------------------------
# Body rewriting
# -------------------------------
def _set_param(pairs: List[Tuple[str, str]], key: str, value: str) -> List[Tuple[str, str]]:
    """Replace the first `key` in place, drop any repeats, append if missing."""
    out: List[Tuple[str, str]] = []
    done = False
    for k, v in pairs:
        if k != key:
            out.append((k, v))
        elif not done:
            out.append((k, value))
            done = True
    if not done:
        out.append((key, value))
    return out


def build_export_body(body: Optional[str], count: int) -> str:
    """
    Return the captured body with the export switches applied.
    Form-encoded bodies stay form-encoded; a JSON object body stays JSON.
    """
    stripped = (body or "").strip()
    if stripped.startswith("{"):
        try:
            payload = json.loads(stripped)
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            payload["numberOfResults"] = int(count)
            payload["debug"] = True
            payload["debugRankingInformation"] = True
            return json.dumps(payload)

    pairs = parse_qsl(body or "", keep_blank_values=True)
    pairs = _set_param(pairs, "numberOfResults", str(int(count)))
    pairs = _set_param(pairs, "debug", "true")
    pairs = _set_param(pairs, "debugRankingInformation", "true")
    return urlencode(pairs)


def replay_headers(headers: Dict[str, str], body: str) -> Dict[str, str]:
    out = {k: v for k, v in headers.items() if k.lower() not in _DROP_HEADERS}
    if not any(k.lower() == "content-type" for k in out):
        is_json = body.startswith("{")
        out["Content-Type"] = "application/json" if is_json else "application/x-www-form-urlencoded"
    return out


# -------------------------------
# Re-fetch
# -------------------------------
def fetch_results(captured: CapturedRequest, count: int, timeout: Optional[float] = None) -> List[Dict[str, Any]]:
    """
    POST the captured request again and return the `results` array.
    Any transport, HTTP status, decoding or shape problem raises ExportError.
    """
    log = setup_logger("export")
    body = build_export_body(captured.body, count)
    headers = replay_headers(captured.headers, body)

    try:
        r = httpx.post(
            captured.url,
            headers=headers,
            content=body,
            timeout=timeout if timeout is not None else config.request_timeout(),
        )
        r.raise_for_status()
        data = r.json()
    except httpx.HTTPStatusError as e:
        status = getattr(e.response, "status_code", None)
        raise ExportError(f"Network response was not ok (status={status})") from e
    except httpx.HTTPError as e:
        raise ExportError(f"Request failed: {e}") from e
    except ValueError as e:
        raise ExportError("Response is not valid JSON") from e

    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, list):
        raise ExportError("No results in response")

    log_kv(log, event="fetched", url=captured.url, requested=count, received=len(results))
    return results

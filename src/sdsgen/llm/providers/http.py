from __future__ import annotations

import json
import socket
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Dict, Optional, Protocol

from sdsgen.core.types import JSON
from sdsgen.errors import NetworkError


@dataclass(frozen=True)
class HttpResult:
    status: int
    body: JSON
    raw_text: str


class Transport(Protocol):
    def __call__(
        self,
        *,
        url: str,
        payload: JSON,
        headers: Optional[Dict[str, str]] = None,
        timeout_s: float = 30.0,
    ) -> HttpResult: ...


def _decode_body(raw: str) -> JSON:
    if not raw.strip():
        return {}
    try:
        obj = json.loads(raw)
    except ValueError:
        return {"raw": raw}
    return obj if isinstance(obj, dict) else {"raw": obj}


def post_json(
    *,
    url: str,
    payload: JSON,
    headers: Optional[Dict[str, str]] = None,
    timeout_s: float = 30.0,
) -> HttpResult:
    """POSTs a JSON payload and returns status + decoded body.

    HTTP error statuses are returned, not raised; the caller decides what a
    non-2xx status means. Transport failures (DNS, refused connection, socket
    timeout) raise NetworkError.
    """
    data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    req = urllib.request.Request(url=url, data=data, method="POST")
    req.add_header("Content-Type", "application/json")

    if headers:
        for k, v in headers.items():
            req.add_header(k, v)

    try:
        with urllib.request.urlopen(req, timeout=timeout_s) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
            return HttpResult(status=resp.status, body=_decode_body(raw), raw_text=raw)
    except urllib.error.HTTPError as e:
        raw = e.read().decode("utf-8", errors="replace") if e.fp else ""
        return HttpResult(status=int(e.code), body=_decode_body(raw), raw_text=raw)
    except (socket.timeout, TimeoutError) as e:
        raise NetworkError(f"Request timeout after {timeout_s:g} seconds", endpoint=url, status_code=408) from e
    except urllib.error.URLError as e:
        raise NetworkError(f"Network error: {e.reason}", endpoint=url, status_code=0) from e
    except OSError as e:
        raise NetworkError(f"Network error: {e}", endpoint=url, status_code=0) from e

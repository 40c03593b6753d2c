import os
from typing import Any, Dict, Optional

import requests

API_URL = os.getenv("API_URL", "http://localhost:8000")


class APIError(RuntimeError):
    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)


def _raise_for(default: str, resp: requests.Response):
    try:
        data = resp.json()
    except ValueError:
        raise APIError(default) from None
    raise APIError(data.get("mensagem") or data.get("detail") or default, data.get("codigo"))


def get(path: str, params: Optional[Dict[str, Any]] = None) -> Any:
    url = f"{API_URL}{path}"
    resp = requests.get(url, params=params, timeout=10)
    if resp.ok:
        return resp.json()
    _raise_for("A requisição falhou", resp)


def post(path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
    url = f"{API_URL}{path}"
    resp = requests.post(url, json=payload, timeout=10)
    if resp.ok:
        return resp.json()
    _raise_for("A requisição falhou", resp)


def download(path: str) -> Optional[bytes]:
    resp = requests.get(f"{API_URL}{path}", timeout=15)
    return resp.content if resp.ok else None

"""HTTP session factory and random identifier helper."""

from __future__ import annotations

import random

import requests
from requests.adapters import HTTPAdapter

DEFAULT_TIMEOUT = 3.0
"""Timeout in seconds applied to every request."""

LETTERS = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

_POOL_SIZE = 100


def new_session() -> requests.Session:
    """Create a session sending and accepting JSON, with a large connection pool."""
    session = requests.Session()
    session.headers.update(
        {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
    )
    adapter = HTTPAdapter(pool_connections=_POOL_SIZE, pool_maxsize=_POOL_SIZE)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def rand_str(length: int) -> str:
    """Return a random alphanumeric string of ``length`` characters."""
    if length < 0:
        raise ValueError("length must not be negative")
    return "".join(random.choices(LETTERS, k=length))
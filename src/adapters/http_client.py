"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts y headers para todas las llamadas a Gotify.
- Facilita testeo: se puede sustituir por un cliente con transporte mockeado.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings

GOTIFY_KEY_HEADER = "X-Gotify-Key"


def auth_headers(access_key: str) -> dict[str, str]:
    return {GOTIFY_KEY_HEADER: access_key}


def build_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` con defaults seguros.

    Por qué un builder:
    - Centraliza timeout/headers para que todas las operaciones se comporten igual.
    - Un único pool de conexiones reutilizable (y thread-safe) por Counting Client.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
    )

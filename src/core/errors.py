"""Errores tipados del Core.

Cada error lleva el endpoint consultado (`/application`, `/message`...) y la
fase en la que falló, para que la CLI (u otra capa) pueda reportar contexto
sin inspeccionar excepciones de `httpx` o `pydantic`.
"""

from __future__ import annotations


class GotifyError(Exception):
    """Base de todos los errores al consultar el servidor Gotify."""

    def __init__(self, message: str, *, endpoint: str | None = None, phase: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.endpoint = endpoint
        self.phase = phase

    def __str__(self) -> str:
        if self.endpoint:
            return f"{self.message} (endpoint={self.endpoint}, phase={self.phase})"
        return self.message


class RequestConstructionError(GotifyError):
    """URL o configuración inválida; no se llegó a enviar nada."""


class TransportError(GotifyError):
    """Fallo de red o timeout al alcanzar el servidor."""


class UpstreamStatusError(GotifyError):
    """El servidor respondió con un status distinto de 200."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        reason: str = "",
        endpoint: str | None = None,
        phase: str | None = "status",
    ) -> None:
        super().__init__(message, endpoint=endpoint, phase=phase)
        self.status_code = status_code
        self.reason = reason

    @property
    def status(self) -> str:
        return f"{self.status_code} {self.reason}".strip()


class DecodeError(GotifyError):
    """El body no tiene la forma esperada."""


class PaginationLimitError(GotifyError):
    """Se alcanzó el tope de páginas configurado sin ver `since == 0`."""

    def __init__(
        self,
        message: str,
        *,
        pages: int,
        cursor: int,
        endpoint: str | None = None,
        phase: str | None = "paginate",
    ) -> None:
        super().__init__(message, endpoint=endpoint, phase=phase)
        self.pages = pages
        self.cursor = cursor

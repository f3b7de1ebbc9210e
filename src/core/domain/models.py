"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta al decodificar las respuestas de Gotify, de modo
  que un body malformado se detecta en el borde y no como un conteo erróneo.
- Facilita la serialización del resultado para el widget del dashboard.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from core.errors import RequestConstructionError


class EndpointConfig(BaseModel):
    """Destino inmutable del Counting Client (URL base + token)."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        ...,
        min_length=1,
        description="Base URL del servidor Gotify, sin '/' final.",
    )
    access_key: str = Field(
        ...,
        min_length=1,
        repr=False,
        description="Token enviado en el header X-Gotify-Key.",
    )

    @classmethod
    def build(cls, *, base_url: str, access_key: str) -> "EndpointConfig":
        """Valida la URL y normaliza el '/' final.

        Falla con `RequestConstructionError` si la URL no es http(s) o no
        tiene host: es un error de configuración y debe aflorar de inmediato.
        """

        cleaned = (base_url or "").strip().rstrip("/")
        try:
            parts = urlsplit(cleaned)
            host = parts.hostname
        except ValueError as exc:
            raise RequestConstructionError(f"invalid Gotify base URL: {base_url!r}", phase="prepare") from exc
        if parts.scheme not in ("http", "https") or not host:
            raise RequestConstructionError(f"invalid Gotify base URL: {base_url!r}", phase="prepare")
        if not access_key:
            raise RequestConstructionError("Gotify access key is empty", phase="prepare")
        return cls(base_url=cleaned, access_key=access_key)

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"


class GotifyApplication(BaseModel):
    """Aplicación registrada en Gotify: cualquier objeto JSON; solo se cuenta."""

    model_config = ConfigDict(extra="allow")


class GotifyClient(BaseModel):
    """Cliente registrado en Gotify."""

    model_config = ConfigDict(extra="allow")


class Paging(BaseModel):
    """Bloque `paging` de `GET /message`.

    `since` es el id del último mensaje devuelto; `0` (o ausente) indica que
    no quedan más páginas.

    A diferencia de `since`, `size` es obligatorio: sin él la página no se
    puede sumar y se trata como body inesperado (`DecodeError`), igual que un
    body sin bloque `paging`.
    """

    model_config = ConfigDict(extra="ignore")

    size: int = Field(..., ge=0, description="Mensajes incluidos en esta página.")
    since: int = Field(default=0, ge=0, description="Cursor para la siguiente página.")
    limit: int | None = Field(default=None, description="Límite aplicado por el servidor.")
    next: str | None = Field(default=None, description="URL de la siguiente página (informativa).")


class MessagePage(BaseModel):
    """Respuesta de `GET /message`; los mensajes en sí no se decodifican."""

    model_config = ConfigDict(extra="ignore")

    paging: Paging


class AggregateCounts(BaseModel):
    """Totales que consume el widget del dashboard."""

    applications: int = Field(..., ge=0, description="Número de aplicaciones.")
    clients: int = Field(..., ge=0, description="Número de clientes.")
    messages: int = Field(..., ge=0, description="Número total de mensajes (todas las páginas).")

    def homepage_payload(self) -> dict[str, Any]:
        """Forma que lee el widget Gotify de Homepage.

        Homepage cuenta longitudes de arrays, así que se devuelven arrays de
        objetos vacíos del tamaño correspondiente.
        """

        return {
            "applications": [{} for _ in range(self.applications)],
            "clients": [{} for _ in range(self.clients)],
            "messages": {"messages": [{} for _ in range(self.messages)]},
        }

"""Counting Client para la API REST de Gotify.

Expone tres conteos para el widget del dashboard: aplicaciones, clientes y
mensajes. Los dos primeros son una sola petición; el de mensajes recorre
todas las páginas de `GET /message`, porque Gotify limita cada respuesta a
200 mensajes y un único request se queda corto.

Cualquier fallo (red, status, body) aborta la operación completa: no hay
totales parciales.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from adapters.http_client import auth_headers, build_client
from core.config import AppSettings
from core.domain.models import (
    EndpointConfig,
    GotifyApplication,
    GotifyClient,
    MessagePage,
    Paging,
)
from core.errors import (
    DecodeError,
    PaginationLimitError,
    RequestConstructionError,
    TransportError,
    UpstreamStatusError,
)

logger = logging.getLogger(__name__)

# Máximo que acepta Gotify por página.
MESSAGE_PAGE_LIMIT = 200

_APPLICATIONS = TypeAdapter(list[GotifyApplication])
_CLIENTS = TypeAdapter(list[GotifyClient])


class GotifyCounter:
    """Obtiene conteos frescos de un servidor Gotify.

    El único estado es la configuración inmutable y el `httpx.Client`
    compartido, así que las tres operaciones pueden invocarse en paralelo
    desde distintos hilos.
    """

    def __init__(
        self,
        endpoint: EndpointConfig,
        settings: AppSettings | None = None,
        *,
        client: httpx.Client | None = None,
        max_pages: int | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._settings = settings or AppSettings()
        self._max_pages = max_pages if max_pages is not None else self._settings.max_pages
        self._owns_client = client is None
        self._client = client or build_client(self._settings)
        self._headers = auth_headers(endpoint.access_key)

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None, **kwargs: Any) -> "GotifyCounter":
        settings = settings or AppSettings()
        return cls(settings.endpoint(), settings, **kwargs)

    @property
    def endpoint(self) -> EndpointConfig:
        return self._endpoint

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "GotifyCounter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def count_applications(self) -> int:
        records = self._fetch_records("/application", _APPLICATIONS, label="application stats")
        logger.info("gotify applications: %d", len(records))
        return len(records)

    def count_clients(self) -> int:
        records = self._fetch_records("/client", _CLIENTS, label="client stats")
        logger.info("gotify clients: %d", len(records))
        return len(records)

    def count_messages(self) -> int:
        """Suma `paging.size` de todas las páginas hasta ver `since == 0`.

        Una página con `size == 0` y `since != 0` no corta el bucle: el cursor
        es el id del último mensaje visto, no un contador de páginas.
        Sin `max_pages` el bucle confía en que el servidor termine.
        """

        total = 0
        cursor = 0
        pages = 0
        while True:
            if self._max_pages is not None and pages >= self._max_pages:
                logger.warning(
                    "gotify message pagination stopped after %d pages (cursor=%d)", pages, cursor
                )
                raise PaginationLimitError(
                    f"failed to get total messages: no final page after {pages} pages",
                    pages=pages,
                    cursor=cursor,
                    endpoint="/message",
                )

            paging = self._fetch_message_page(cursor)
            pages += 1
            total += paging.size
            logger.debug(
                "gotify message page %d: since=%d size=%d next=%d", pages, cursor, paging.size, paging.since
            )

            if paging.since == 0:
                break
            cursor = paging.since

        logger.info("gotify messages: %d (%d pages)", total, pages)
        return total

    def _fetch_message_page(self, cursor: int) -> Paging:
        response = self._get(
            "/message",
            label="message stats",
            params={"limit": MESSAGE_PAGE_LIMIT, "since": cursor},
        )
        page = self._decode(response, MessagePage, path="/message", label="message stats")
        return page.paging

    def _fetch_records(self, path: str, adapter: TypeAdapter, *, label: str) -> list[Any]:
        response = self._get(path, label=label)
        # Se decodifica el registro completo aunque solo se use la longitud:
        # un elemento malformado debe fallar como DecodeError.
        return self._decode(response, adapter, path=path, label=label)

    def _get(self, path: str, *, label: str, params: dict[str, Any] | None = None) -> httpx.Response:
        url = self._endpoint.url_for(path)
        try:
            response = self._client.get(url, params=params, headers=self._headers)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise RequestConstructionError(
                f"failed to prepare {label} request: {exc}", endpoint=path, phase="prepare"
            ) from exc
        except httpx.TimeoutException as exc:
            logger.warning("gotify %s timed out", path)
            raise TransportError(f"timed out fetching {label}", endpoint=path, phase="fetch") from exc
        except httpx.TransportError as exc:
            logger.warning("gotify %s unreachable: %s", path, exc)
            raise TransportError(f"failed to fetch {label}: {exc}", endpoint=path, phase="fetch") from exc
        except httpx.DecodingError as exc:
            logger.warning("gotify %s returned an undecodable body", path)
            raise DecodeError(f"failed to parse {label} response: {exc}", endpoint=path, phase="decode") from exc
        except httpx.HTTPError as exc:
            # TooManyRedirects y demás errores de httpx fuera de TransportError.
            logger.warning("gotify %s request failed: %s", path, exc)
            raise TransportError(f"failed to fetch {label}: {exc}", endpoint=path, phase="fetch") from exc

        if response.status_code != 200:
            logger.warning("gotify %s returned HTTP %d", path, response.status_code)
            raise UpstreamStatusError(
                f"failed to fetch {label} with status: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                reason=response.reason_phrase,
                endpoint=path,
            )
        return response

    @staticmethod
    def _decode(response: httpx.Response, target: type[BaseModel] | TypeAdapter, *, path: str, label: str) -> Any:
        try:
            if isinstance(target, TypeAdapter):
                return target.validate_json(response.content)
            return target.model_validate_json(response.content)
        except ValidationError as exc:
            logger.warning("gotify %s returned an unexpected body", path)
            raise DecodeError(
                f"failed to parse {label} response: {exc.error_count()} validation error(s)",
                endpoint=path,
                phase="decode",
            ) from exc

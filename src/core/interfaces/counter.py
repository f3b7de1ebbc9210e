"""Contrato del Counting Client.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite que el servicio del widget acepte el cliente real o un doble de
  test sin acoplar el Core a `httpx`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CountingClient(Protocol):
    """Contrato mínimo para obtener los conteos de un servidor Gotify.

    Reglas de diseño:
    - Las tres operaciones son síncronas y no comparten estado mutable.
    - Cada una es atómica: devuelve el total o lanza un `GotifyError`.
    """

    def count_applications(self) -> int:
        ...

    def count_clients(self) -> int:
        ...

    def count_messages(self) -> int:
        """Total de mensajes recorriendo todas las páginas."""

        ...

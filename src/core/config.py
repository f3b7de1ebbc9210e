"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import EndpointConfig
from core.errors import RequestConstructionError


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "gotify-widget"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "gotify-widget"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "gotify-widget"
    return Path.home() / ".config" / "gotify-widget"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str]) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# gotify-widget user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="GOTIFY_WIDGET_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    url: str | None = Field(
        default=None,
        description="Base URL del servidor Gotify (p.ej. https://gotify.example.com).",
    )
    key: str | None = Field(
        default=None,
        description="Client token enviado como header X-Gotify-Key.",
    )

    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="gotify-widget/0.1",
        min_length=1,
        description="User-Agent para peticiones al servidor Gotify.",
    )
    max_pages: int | None = Field(
        default=None,
        ge=1,
        description="Tope opcional de páginas al contar mensajes (sin tope si no se define).",
    )

    log_level: str = Field(
        default="WARNING",
        min_length=1,
        description="Nivel de logging para la CLI (DEBUG, INFO, WARNING...).",
    )

    def endpoint(self) -> EndpointConfig:
        """Construye el `EndpointConfig` inmutable a partir de url/key."""

        if not self.url:
            raise RequestConstructionError(
                "Gotify URL is not configured (set GOTIFY_WIDGET_URL)",
                phase="prepare",
            )
        if not self.key:
            raise RequestConstructionError(
                "Gotify key is not configured (set GOTIFY_WIDGET_KEY)",
                phase="prepare",
            )
        return EndpointConfig.build(base_url=self.url, access_key=self.key)


def load_settings(**overrides: object) -> AppSettings:
    """Carga `AppSettings`; los overrides no nulos tienen prioridad sobre env/.env.

    Un valor inválido (p.ej. timeout no numérico) es un error de configuración
    y se reporta como `RequestConstructionError`.
    """

    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        return AppSettings(**values)
    except ValidationError as exc:
        fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err.get("loc")) or "settings"
        raise RequestConstructionError(f"invalid configuration: {fields}", phase="prepare") from exc

"""Exportación JSON de los conteos.

Por qué JSON:
- Es lo que consume el dashboard (directamente o vía un proxy).
- Permite guardar una instantánea sin depender del render de la CLI.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from core.domain.models import AggregateCounts


def counts_payload(counts: AggregateCounts, *, homepage: bool = False) -> dict[str, Any]:
    """Devuelve el payload plano o con la forma del widget de Homepage."""

    if homepage:
        return counts.homepage_payload()
    return counts.model_dump(mode="json")


def dumps_counts(counts: AggregateCounts, *, homepage: bool = False) -> str:
    """Serializa los conteos a JSON UTF-8 con formato estable."""

    payload = counts_payload(counts, homepage=homepage)
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def export_counts_json(*, counts: AggregateCounts, output_path: Path, homepage: bool = False) -> Path:
    """Exporta `AggregateCounts` a un fichero JSON."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(dumps_counts(counts, homepage=homepage), encoding="utf-8")
    return output_path

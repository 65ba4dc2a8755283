"""
JSON import / export of GraphData.

The document has top-level ``nodes`` and ``links`` arrays (plus optional
``metadata``), in graph order. These functions guarantee:
- UTF-8 encoding and deterministic indentation
- an import either yields a complete GraphData or raises GraphImportError
- file helpers that fail gracefully instead of raising
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from .errors import GraphImportError
from .models import GraphData

logger = logging.getLogger(__name__)


def export_graph(data: GraphData) -> str:
    return json.dumps(data.to_dict(), indent=2, ensure_ascii=False)


def import_graph(text: str) -> GraphData:
    """
    Parse an exported document.

    Raises
    ------
    GraphImportError
        On malformed JSON, missing ``nodes``/``links`` arrays, bad records
        or duplicate node ids.
    """
    try:
        raw = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise GraphImportError(f"invalid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise GraphImportError("document root must be an object")
    if not isinstance(raw.get("nodes"), list) or not isinstance(raw.get("links"), list):
        raise GraphImportError("document needs 'nodes' and 'links' arrays")

    try:
        return GraphData.from_dict(raw)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise GraphImportError(f"invalid graph record: {exc}") from exc


def write_graph(path: Path, data: GraphData) -> bool:
    """
    Write ``data`` to ``path``, creating parent directories.

    Returns
    -------
    bool
        True if successfully written, False otherwise.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(export_graph(data))
        return True
    except OSError:
        logger.exception("failed writing graph to %s", path)
        return False


def read_graph(path: Path) -> Optional[GraphData]:
    """
    Read a graph document from ``path``.

    Returns
    -------
    Optional[GraphData]
        Parsed graph if the file exists and is valid, else None.
    """
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return import_graph(f.read())
    except (OSError, GraphImportError) as exc:
        logger.warning("could not read graph from %s: %s", path, exc)
        return None


__all__ = ["export_graph", "import_graph", "write_graph", "read_graph"]

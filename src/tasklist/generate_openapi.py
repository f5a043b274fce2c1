"""
Write the OpenAPI schema of the task list app to interfaces/openapi.json so
clients can be generated without running the server.

Usage:
    python -m tasklist.generate_openapi [output-path]
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .main import app, openapi_tags

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = Path(__file__).resolve().parents[2] / "interfaces" / "openapi.json"


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """Add any tag from openapi_tags that the generated schema lacks, keeping existing ones."""
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(out_path: Optional[Union[str, Path]] = None) -> Path:
    """Generate the schema, write it to out_path (default interfaces/openapi.json) and return the path."""
    schema = app.openapi()
    _ensure_tags(schema)

    path = Path(out_path) if out_path else DEFAULT_OUTPUT
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(schema, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Wrote OpenAPI schema to %s", path)
    return path


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    generate_openapi(args[0] if args else None)


if __name__ == "__main__":
    main()

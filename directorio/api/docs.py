"""Serves the directory API description at /openapi.json."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from flask import Blueprint, Response, current_app, jsonify

bp = Blueprint("docs", __name__)


def _spec_path() -> Path:
    """Packaged YAML unless OPENAPI_SPEC_PATH points elsewhere."""
    override = current_app.config.get("OPENAPI_SPEC_PATH")
    if override:
        return Path(override)
    return Path(current_app.root_path) / "openapi" / "directorio.yaml"


def _load_spec() -> dict[str, Any]:
    """Parse the YAML document; a missing file is a server error."""
    path = _spec_path()
    if not path.exists():
        raise FileNotFoundError(f"OpenAPI spec not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


@bp.route("/openapi.json", methods=["GET"])
def openapi_document() -> Response:
    """OpenAPI 3 document for /Login, /Usuario and the probes."""
    spec = _load_spec()
    return jsonify(spec)

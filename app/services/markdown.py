"""Front matter extraction for vault markdown files."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Tuple

import yaml

from app.config.logger import app_logger

FRONTMATTER_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(?:(.*?)\r?\n)?---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL,
)


def _to_json_safe(data: Dict[Any, Any]) -> Dict[str, Any]:
    # YAML dates and other scalars have to survive a round trip through the store's JSON column
    return json.loads(json.dumps({str(k): v for k, v in data.items()}, default=str))


def parse_markdown(markdown: str) -> Tuple[str, Dict[str, Any]]:
    """Split raw markdown into body content and its front matter mapping.

    Front matter is a leading YAML block fenced by ``---`` lines. When it is
    missing, malformed, or not a mapping the text is returned unchanged with
    an empty mapping; this runs unattended during sync and never raises.
    """
    match = FRONTMATTER_PATTERN.match(markdown)
    if not match:
        return markdown, {}

    raw = match.group(1) or ""
    try:
        data = yaml.safe_load(raw) if raw.strip() else {}
    except yaml.YAMLError as exc:
        app_logger.warning(f"Ignoring malformed front matter: {exc}")
        return markdown, {}

    if data is None:
        data = {}
    if not isinstance(data, dict):
        return markdown, {}

    return markdown[match.end():], _to_json_safe(data)

"""Jinja2 rendering and settings merging helpers."""

import logging
from typing import Any, Dict, Mapping

from jinja2 import Environment, StrictUndefined, TemplateError


logger = logging.getLogger(__name__)

# Fail on undefined template variables
_env = Environment(undefined=StrictUndefined, autoescape=False)


def render_template(source: str, **context: Any) -> str:
    """Render a Jinja2 template given as a string."""
    try:
        return _env.from_string(source).render(**context)
    except TemplateError as e:
        logger.error(f"Failed to render template: {e}")
        raise


def deep_merge(*layers: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge mappings left to right; nested mappings are merged key by key."""
    merged: Dict[str, Any] = {}
    for layer in layers:
        for key, value in (layer or {}).items():
            current = merged.get(key)
            if isinstance(current, Mapping) and isinstance(value, Mapping):
                merged[key] = deep_merge(current, value)
            else:
                merged[key] = value
    return merged

"""
JSONL output for storescm commands.

Every command prints one JSON object per line on stdout so results can be
piped into jq or a CI script. Errors go to stderr as a single JSON object.
Tables (--pretty) are produced by storescm.render instead.
"""

import json
import sys
from typing import Any, Dict, Iterable, Optional


def to_json(item: Any) -> str:
    """Serialise a domain object (via to_dict()) or a dict to one JSON line."""
    if hasattr(item, 'to_dict'):
        item = item.to_dict()
    elif not isinstance(item, dict):
        item = {'value': str(item)}
    return json.dumps(item, ensure_ascii=False)


def emit(items: Iterable[Any], err: bool = False) -> None:
    """Print items as JSON lines (stderr if err)."""
    stream = sys.stderr if err else sys.stdout
    for item in items:
        print(to_json(item), file=stream, flush=True)


def emit_error(
    error: str,
    type: str = "error",
    context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Print an error object to stderr.

    Example:
        emit_error("No job named 'weekly' is configured",
                   type="ConfigurationError", context={"job": "weekly"})
        # {"error": "...", "type": "ConfigurationError", "context": {"job": "weekly"}}
    """
    obj: Dict[str, Any] = {'error': error, 'type': type}
    if context:
        obj['context'] = context
    emit([obj], err=True)

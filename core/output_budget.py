# =============================================================================
# core/output_budget.py  -  Output Budget (bounding + formatting results)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   find-documents and aggregate can return arbitrarily large result sets.
#   An LLM client can't use a 5 MB tool response, so before we hand results
#   back we shrink them to fit a byte budget WITHOUT losing their shape:
#   the caller still sees every field name (up to 200 per object), a sample
#   element of every array, and the start of every long string, each with
#   a note saying how much was cut.
#
# THE ALGORITHM (truncate_for_output):
#   1. Serialize to compact JSON and measure it.  If it fits, return the
#      value untouched.  Small results pay nothing.
#   2. Otherwise, make ONE depth-first pass with fixed limits:
#        - str longer than 200 chars  -> first 200 chars + "...N more characters"
#        - list with >= 2 items       -> [first item, "...N more items"]
#        - dict with > 200 keys       -> first 200 keys + "...N more properties"
#        - everything else            -> unchanged
#
#   The pass does NOT re-measure as it goes and does NOT loop until the
#   result fits.  It is a best-effort structural cap: 200 keys of 199-char
#   strings still come out larger than 25000 bytes.  That is accepted.
#
# FORMATTING (format_json_output):
#   JSON has no "annotation" node, so the array/object markers are written
#   as strings first and then unquoted with a regex on the final text:
#       "...9 more items"               ->  ...9 more items
#       "...3 more properties": "..."   ->  ...3 more properties
#   A real document string that happens to equal one of those markers gets
#   unquoted too.  That collision is a known limitation.
# =============================================================================

import json
import re
from datetime import date, datetime
from typing import Any, Mapping

from core.models import DEFAULT_MAX_OUTPUT_BYTES, TreeValue

MAX_STRING_LENGTH = 200
MAX_OBJECT_KEYS = 200

_MORE_ITEMS_RE = re.compile(r'"\.\.\.(\d+) more items"')
_MORE_PROPERTIES_RE = re.compile(r'"\.\.\.(\d+) more properties": "\.\.\.?"')


def _json_default(value: Any) -> Any:
    # ObjectId, Decimal128, UUID, ... all have a readable str().
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.hex()
    return str(value)


def to_json(value: TreeValue, indent: int | None = None) -> str:
    """Serialize a TreeValue the one way this server does it.

    indent=None gives the compact form used for measuring; indent=2 gives
    the display form.
    """
    if indent is None:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=_json_default)
    return json.dumps(value, indent=indent, ensure_ascii=False, default=_json_default)


def serialized_size(value: TreeValue) -> int:
    """Size of the compact JSON form, in UTF-8 bytes."""
    return len(to_json(value).encode("utf-8"))


def _truncate_value(value: TreeValue) -> TreeValue:
    if isinstance(value, str):
        if len(value) > MAX_STRING_LENGTH:
            remaining = len(value) - MAX_STRING_LENGTH
            return f"{value[:MAX_STRING_LENGTH]}...{remaining} more characters"
        return value

    if isinstance(value, (list, tuple)):
        if len(value) <= 1:
            return [_truncate_value(item) for item in value]
        return [_truncate_value(value[0]), f"...{len(value) - 1} more items"]

    if isinstance(value, Mapping):
        keys = list(value.keys())
        result = {key: _truncate_value(value[key]) for key in keys[:MAX_OBJECT_KEYS]}
        if len(keys) > MAX_OBJECT_KEYS:
            result[f"...{len(keys) - MAX_OBJECT_KEYS} more properties"] = "..."
        return result

    return value


def truncate_for_output(value: TreeValue, max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES) -> TreeValue:
    """Shrink ``value`` so an LLM can read it, if it's over ``max_output_bytes``.

    Returns ``value`` itself (same object) when it already fits.
    """
    if serialized_size(value) <= max_output_bytes:
        return value
    return _truncate_value(value)


def format_json_output(data: TreeValue, max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES) -> str:
    """Bound ``data`` and render it as indented JSON with readable markers."""
    output_text = to_json(truncate_for_output(data, max_output_bytes), indent=2)
    output_text = _MORE_ITEMS_RE.sub(r"...\1 more items", output_text)
    output_text = _MORE_PROPERTIES_RE.sub(r"...\1 more properties", output_text)
    return output_text

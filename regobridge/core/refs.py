"""
Rendering of Rego references as display strings.

Only used for populating pick-lists from parsed dependencies, so not every
term type is rendered faithfully.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Mapping, Union

from .models import Term


VAR_PATTERN = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")

Segment = Union[Term, Mapping[str, Any]]


def _js_value(value: Any) -> Any:
    # JSON.stringify writes integral numbers without a fraction
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, list):
        return [_js_value(v) for v in value]
    if isinstance(value, dict):
        return {k: _js_value(v) for k, v in value.items()}
    return value


def _to_json(value: Any) -> str:
    return json.dumps(_js_value(value), separators=(",", ":"), ensure_ascii=False)


def _as_term(segment: Segment) -> Term:
    if isinstance(segment, Term):
        return segment
    return Term.model_validate(segment)


def ref_to_string(ref: Iterable[Segment]) -> str:
    """
    Format a ref as a string.

    A string root is emitted verbatim, any other root as JSON. String
    segments that are valid identifiers use dot-style lookup; everything
    else is bracketed and JSON-encoded.

    Raises:
        ValueError: if the ref is empty
    """
    terms = [_as_term(s) for s in ref]
    if not terms:
        raise ValueError("Cannot format an empty ref")

    root = terms[0].value
    parts = [root if isinstance(root, str) else _to_json(root)]
    for term in terms[1:]:
        if term.type == "string" and isinstance(term.value, str):
            if VAR_PATTERN.fullmatch(term.value):
                parts.append("." + term.value)
                continue
        parts.append("[" + _to_json(term.value) + "]")

    return "".join(parts)

"""
Pull a JSON object out of free-form model output.

Models are asked for bare JSON but regularly wrap it in prose or markdown
fences. Each strategy below is a pure ``str -> object`` function that raises
``ValueError`` (``json.JSONDecodeError`` included) when it does not apply.
``extract_json`` tries them in order and returns the first success.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Callable, Tuple

from worker.app.errors import ParseError

log = logging.getLogger(__name__)

_FENCED = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)


def parse_direct(content: str) -> Any:
    return json.loads(content)


def parse_fenced(content: str) -> Any:
    m = _FENCED.search(content)
    if not m:
        raise ValueError("no fenced json block")
    return json.loads(m.group(1))


def parse_braces(content: str) -> Any:
    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise ValueError("no brace-delimited object")
    return json.loads(content[start : end + 1])


STRATEGIES: Tuple[Callable[[str], Any], ...] = (
    parse_direct,
    parse_fenced,
    parse_braces,
)


def extract_json(content: str) -> Any:
    """Return the first value any strategy can decode, else raise ParseError."""
    for strategy in STRATEGIES:
        try:
            return strategy(content)
        except ValueError as e:
            log.debug(f"[extract] {strategy.__name__} failed: {e}")
    log.warning(f"[extract] could not parse model output: {content[:500]!r}")
    raise ParseError("failed to parse AI response")

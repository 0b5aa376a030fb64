"""Best-effort recovery of JSON values from AI responses.

The repair ladder is an ordered list of independent steps. Each step gets the
current text and the last parse error and returns a candidate (or None when
it does not apply). The first candidate that parses wins. Steps marked
``keep_on_failure`` feed their output to later steps even when it does not
parse yet; the others are tried in isolation.

``repair_json`` never raises: it returns the parsed value, or the cleaned
string when nothing worked so the caller can fall back.
"""

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal

from readflow.domain.exceptions import JSONRepairExhausted

logger = logging.getLogger(__name__)

Expect = Literal["array", "object"]

_FENCE = re.compile(r"```(?:json|JSON)?")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_NEWLINES = re.compile(r"\s*\n\s*")
_STRING_LITERAL = re.compile(r'"(?:\\.|[^"\\])*"')
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_$][\w$-]*)(\s*:)")
_BARE_VALUE = re.compile(r"(:\s*)([^\s\"',{}\[\]][^,{}\[\]]*?)(\s*[,}\]])")
_LITERAL = re.compile(r"-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?|true|false|null")
_STRING_END = frozenset(",}]:")
_CLOSER = {"[": "]", "{": "}"}


@dataclass(frozen=True)
class RepairStep:
    """One rung of the repair ladder."""

    name: str
    apply: Callable[[str, json.JSONDecodeError | None], str | None]
    keep_on_failure: bool = True


def _try_parse(text: str) -> tuple[Any, json.JSONDecodeError | None]:
    try:
        return json.loads(text), None
    except json.JSONDecodeError as e:
        return None, e


def extract_span(raw: str, expect: Expect | None = None) -> str | None:
    """Substring from the first opening bracket to the last matching closing one."""
    if expect == "array":
        pairs = [("[", "]")]
    elif expect == "object":
        pairs = [("{", "}")]
    else:
        pairs = sorted(
            (p for p in (("[", "]"), ("{", "}")) if p[0] in raw),
            key=lambda p: raw.index(p[0]),
        )
    if not pairs:
        return None
    opener, closer = pairs[0]
    start = raw.find(opener)
    if start < 0:
        return None
    end = raw.rfind(closer)
    if end < start:
        # No closing bracket at all: keep the tail for the truncation step.
        return raw[start:].strip()
    return raw[start : end + 1]


def _map_outside_strings(text: str, fn: Callable[[str], str]) -> str:
    """Apply fn to the parts of text that are not double-quoted string literals."""
    out: list[str] = []
    pos = 0
    for m in _STRING_LITERAL.finditer(text):
        out.append(fn(text[pos : m.start()]))
        out.append(m.group(0))
        pos = m.end()
    out.append(fn(text[pos:]))
    return "".join(out)


def _strip_comments(text: str) -> str:
    out: list[str] = []
    i, n = 0, len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue
        if ch == '"':
            in_string = True
        elif text.startswith("//", i):
            newline = text.find("\n", i)
            i = n if newline < 0 else newline
            continue
        elif text.startswith("/*", i):
            close = text.find("*/", i + 2)
            i = n if close < 0 else close + 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def _normalize_single_quotes(text: str) -> str:
    """Turn 'single-quoted' strings into double-quoted ones; apostrophes inside "..." stay."""
    out: list[str] = []
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            m = _STRING_LITERAL.match(text, i)
            if m is None:
                out.append(text[i:])
                break
            out.append(m.group(0))
            i = m.end()
            continue
        if ch == "'":
            j = i + 1
            buf: list[str] = []
            while j < n and text[j] != "'":
                if text[j] == "\\" and j + 1 < n:
                    buf.append(text[j : j + 2])
                    j += 2
                    continue
                buf.append('\\"' if text[j] == '"' else text[j])
                j += 1
            if j >= n:
                out.append(text[i:])
                break
            out.append('"' + "".join(buf) + '"')
            i = j + 1
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def clean(text: str, error: json.JSONDecodeError | None = None) -> str:
    """Strip fences and comments, normalize quotes, drop trailing commas, collapse newlines."""
    text = _FENCE.sub("", text)
    text = _strip_comments(text)
    text = _normalize_single_quotes(text)
    text = _TRAILING_COMMA.sub(r"\1", text)
    text = _NEWLINES.sub(" ", text)
    return text.strip()


def missing_closers(text: str) -> str | None:
    """Closing brackets needed to balance text, innermost first. None if unbalanceable."""
    stack: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _CLOSER:
            stack.append(_CLOSER[ch])
        elif ch in "]}":
            if not stack or stack.pop() != ch:
                return None
    if in_string:
        return None
    return "".join(reversed(stack))


def close_truncated(text: str, error: json.JSONDecodeError | None) -> str | None:
    """Cut at the last complete structure before the error offset and close what is open."""
    if error is None:
        return None
    before = text[: error.pos]
    cut = max(before.rfind("}"), before.rfind("]"))
    if cut <= 0:
        return None
    truncated = before[: cut + 1]
    closers = missing_closers(truncated)
    if closers is None:
        return None
    return _TRAILING_COMMA.sub(r"\1", truncated + closers)


def quote_bare_keys(text: str, error: json.JSONDecodeError | None = None) -> str:
    return _map_outside_strings(text, lambda part: _BARE_KEY.sub(r'\1"\2"\3', part))


def _quote_value(m: re.Match) -> str:
    value = m.group(2).strip()
    if not value or _LITERAL.fullmatch(value):
        return m.group(0)
    return f"{m.group(1)}{json.dumps(value, ensure_ascii=False)}{m.group(3)}"


def quote_bare_values(text: str, error: json.JSONDecodeError | None = None) -> str:
    return _map_outside_strings(text, lambda part: _BARE_VALUE.sub(_quote_value, part))


def escape_inner_quotes(text: str, error: json.JSONDecodeError | None = None) -> str:
    """Escape quotes inside string literals that are not followed by a structural character."""
    out: list[str] = []
    in_string = False
    escaped = False
    n = len(text)
    for i, ch in enumerate(text):
        if not in_string:
            if ch == '"':
                in_string = True
            out.append(ch)
            continue
        if escaped:
            escaped = False
            out.append(ch)
            continue
        if ch == "\\":
            escaped = True
            out.append(ch)
            continue
        if ch == '"':
            j = i + 1
            while j < n and text[j].isspace():
                j += 1
            if j >= n or text[j] in _STRING_END:
                in_string = False
                out.append(ch)
            else:
                out.append('\\"')
            continue
        out.append(ch)
    return "".join(out)


REPAIR_STEPS: list[RepairStep] = [
    RepairStep("clean", clean),
    RepairStep("close-truncated", close_truncated, keep_on_failure=False),
    RepairStep("quote-bare-keys", quote_bare_keys),
    RepairStep("quote-bare-values", quote_bare_values),
    RepairStep("escape-inner-quotes", escape_inner_quotes),
]


def repair_json(
    raw: str,
    expect: Expect | None = None,
    steps: list[RepairStep] | None = None,
) -> Any:
    """Parse raw AI output as JSON, escalating through the repair ladder.

    Returns the parsed list/dict, or the best-effort cleaned string.
    """
    span = extract_span(raw, expect)
    if span is None:
        logger.warning("No JSON %s found in response (%d chars)", expect or "value", len(raw))
        return clean(raw)
    current = span
    parsed, error = _try_parse(current)
    if error is None:
        return parsed
    for step in REPAIR_STEPS if steps is None else steps:
        candidate = step.apply(current, error)
        if candidate is None:
            continue
        parsed, candidate_error = _try_parse(candidate)
        if candidate_error is None:
            logger.info("JSON repaired by step '%s'", step.name)
            return parsed
        if step.keep_on_failure:
            current, error = candidate, candidate_error
    logger.warning("JSON repair exhausted: %s", error)
    return current


def expect_array(raw: str) -> list:
    """Repair raw into a JSON array. Raises JSONRepairExhausted otherwise."""
    result = repair_json(raw, "array")
    if isinstance(result, list):
        return result
    raise JSONRepairExhausted(
        "Response could not be repaired into a JSON array",
        cleaned=result if isinstance(result, str) else json.dumps(result, ensure_ascii=False),
    )


def expect_object(raw: str) -> dict:
    """Repair raw into a JSON object. Raises JSONRepairExhausted otherwise."""
    result = repair_json(raw, "object")
    if isinstance(result, dict):
        return result
    raise JSONRepairExhausted(
        "Response could not be repaired into a JSON object",
        cleaned=result if isinstance(result, str) else json.dumps(result, ensure_ascii=False),
    )

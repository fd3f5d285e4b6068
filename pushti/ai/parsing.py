# -*- coding: utf-8 -*-
"""Best-effort JSON extraction from chat-model text output."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterator, List, Tuple

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")
_CLOSER_AHEAD = re.compile(r"\s*[}\]]")


def _outside_strings(text: str) -> Iterator[Tuple[int, str]]:
    """(index, char) for every character outside a JSON string literal.

    Quote characters that open or close a literal are not yielded.
    """
    quoted = False
    pos = 0
    while pos < len(text):
        ch = text[pos]
        if not quoted:
            if ch == "\"":
                quoted = True
            else:
                yield pos, ch
        elif ch == "\\":
            pos += 1
        elif ch == "\"":
            quoted = False
        pos += 1


def remove_trailing_commas(text: str) -> str:
    """Drop commas directly before `}` or `]`, leaving string literals alone."""
    dangling = {
        pos for pos, ch in _outside_strings(text)
        if ch == "," and _CLOSER_AHEAD.match(text, pos + 1)
    }
    if not dangling:
        return text
    return "".join(ch for pos, ch in enumerate(text) if pos not in dangling)


def json_object_spans(text: str) -> List[str]:
    """Balanced top-level {...} spans of the (unfenced) text, in order."""
    body = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text.strip()))
    spans: List[str] = []
    depth = 0
    opened_at = 0
    for pos, ch in _outside_strings(body):
        if ch == "{":
            if depth == 0:
                opened_at = pos
            depth += 1
        elif ch == "}" and depth:
            depth -= 1
            if not depth:
                spans.append(body[opened_at : pos + 1])
    return spans


def sanitize_json_like(text: str) -> str:
    # Curly quotes, trailing commas and non-finite floats show up in model output.
    cleaned = text
    cleaned = cleaned.replace("“", "\"").replace("”", "\"")
    cleaned = remove_trailing_commas(cleaned)
    cleaned = re.sub(r"\bNaN\b", "null", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"-?\bInfinity\b", "null", cleaned, flags=re.IGNORECASE)
    return cleaned


def parse_model_output_json(content: str) -> Dict[str, Any]:
    last_error: Exception | None = None
    for candidate in json_object_spans(content or ""):
        for attempt in (candidate, sanitize_json_like(candidate)):
            try:
                parsed = json.loads(attempt)
            except ValueError as exc:
                last_error = exc
                continue
            if isinstance(parsed, dict):
                return parsed
    if last_error is None:
        raise ValueError("Model output does not contain a JSON object")
    raise ValueError(f"Failed to parse model JSON: {last_error}") from last_error


def extract_completion_text(data: object) -> str:
    """Text of an OpenAI-compatible chat completion response."""
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list):
        return ""
    out: List[str] = []
    for choice in choices:
        if not isinstance(choice, dict):
            continue
        message = choice.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str) and content:
                out.append(content)
            elif isinstance(content, list):
                for part in content:
                    if isinstance(part, dict) and isinstance(part.get("text"), str):
                        out.append(part["text"])
        text = choice.get("text")
        if isinstance(text, str) and text:
            out.append(text)
        if out:
            break
    return "".join(out)


def extract_error_message(data: object) -> str | None:
    if not isinstance(data, dict):
        return None
    err = data.get("error")
    if isinstance(err, dict):
        msg = err.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    if isinstance(err, str) and err.strip():
        return err.strip()
    return None

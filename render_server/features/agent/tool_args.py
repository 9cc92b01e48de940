"""Incremental decoding of streamed tool-call arguments.

Tool-call arguments arrive as raw fragments of a JSON object. The helpers here
rebuild the ``code`` argument while the object is still incomplete so the
client can render the program as it is being written.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field

from langchain_core.utils.json import parse_partial_json

CODE_ARG_NAME = "code"

# A trailing backslash, optionally followed by an unfinished \uXXXX sequence.
_DANGLING_ESCAPE_RE = re.compile(r"\\(?:u[0-9a-fA-F]{0,3})?$")


@dataclass(frozen=True)
class DecodedArgument:
    value: str
    complete: bool


def _code_field(parsed: object) -> str | None:
    if not isinstance(parsed, dict):
        return None
    value = parsed.get(CODE_ARG_NAME)
    return value if isinstance(value, str) else None


def _strict_decode(buffer: str) -> DecodedArgument | None:
    try:
        parsed = json.loads(buffer)
    except ValueError:
        return None
    value = _code_field(parsed)
    if value is None:
        return None
    return DecodedArgument(value=value, complete=True)


def _drop_dangling_escape(buffer: str) -> str:
    match = _DANGLING_ESCAPE_RE.search(buffer)
    if match is None:
        return buffer
    prefix = buffer[: match.start()]
    preceding = len(prefix) - len(prefix.rstrip("\\"))
    if preceding % 2:
        # The backslash is itself escaped, so nothing is left open.
        return buffer
    return prefix


def _tolerant_decode(buffer: str) -> DecodedArgument | None:
    try:
        parsed = parse_partial_json(_drop_dangling_escape(buffer))
    except ValueError:
        return None
    value = _code_field(parsed)
    if value is None:
        return None
    return DecodedArgument(value=value, complete=False)


def decode_code_argument(buffer: str) -> DecodedArgument | None:
    """Decode the ``code`` field from a possibly truncated JSON buffer.

    A strict ``json.loads`` of the whole buffer wins; otherwise the open
    strings and containers are closed by ``parse_partial_json`` after any
    unfinished escape at the end is dropped. Returns ``None`` when the field
    has not started yet.
    """
    if not buffer:
        return None
    return _strict_decode(buffer) or _tolerant_decode(buffer)


@dataclass
class AccumulatedArgs:
    call_id: str
    raw_buffer: str = ""
    last_value: str | None = None


@dataclass
class ToolArgsAccumulator:
    """Per-request buffers for streamed tool-call arguments.

    Identity and tool name only arrive on the first fragment of a call, so both
    are remembered per position index.
    """

    _buffers: dict[str, AccumulatedArgs] = field(default_factory=dict)
    _call_id_by_index: dict[int, str] = field(default_factory=dict)
    _name_by_index: dict[int, str] = field(default_factory=dict)

    def resolve(
        self,
        *,
        call_id: str | None,
        name: str | None,
        index: int | None,
    ) -> tuple[str, str | None]:
        position = index if index is not None else 0
        if name:
            self._name_by_index[position] = name
        if call_id:
            self._call_id_by_index[position] = call_id
            resolved_id = call_id
        else:
            resolved_id = self._call_id_by_index.get(position) or f"index:{position}"
        return resolved_id, self._name_by_index.get(position)

    def accept(self, call_id: str, fragment: str) -> str | None:
        state = self._buffers.get(call_id)
        if state is None:
            state = AccumulatedArgs(call_id=call_id)
            self._buffers[call_id] = state
        if fragment:
            state.raw_buffer += fragment

        decoded = decode_code_argument(state.raw_buffer)
        if decoded is None or not decoded.value:
            return None
        if decoded.value == state.last_value:
            return None
        if (
            not decoded.complete
            and state.last_value is not None
            and len(decoded.value) < len(state.last_value)
        ):
            return None

        state.last_value = decoded.value
        return decoded.value

    def next_turn(self) -> None:
        """Forget index bindings and buffers once a model response is complete.

        Position indexes restart at 0 on every model response, so calls from a
        later response must not resolve to, or append to, an earlier one.
        """
        self._buffers.clear()
        self._call_id_by_index.clear()
        self._name_by_index.clear()

    def buffer_for(self, call_id: str) -> str:
        state = self._buffers.get(call_id)
        return state.raw_buffer if state is not None else ""

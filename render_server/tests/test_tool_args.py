from __future__ import annotations

import json

from render_server.features.agent.tool_args import ToolArgsAccumulator, decode_code_argument

_FINAL_CODE = 'class DemoScene(Scene):\n    def construct(self):\n        self.add(Text("a \\\\ b"))\n\tpass\r\n'


def _feed(accumulator: ToolArgsAccumulator, call_id: str, fragments: list[str]) -> list[str]:
    emitted: list[str] = []
    for fragment in fragments:
        value = accumulator.accept(call_id, fragment)
        if value is not None:
            emitted.append(value)
    return emitted


def test_streamed_fragments_emit_partial_then_final_code() -> None:
    accumulator = ToolArgsAccumulator()
    call_id, name = accumulator.resolve(call_id="call-1", name="execute_code", index=0)

    assert accumulator.accept(call_id, '{"co') is None

    second_id, second_name = accumulator.resolve(call_id=None, name=None, index=0)
    assert (second_id, second_name) == ("call-1", "execute_code")
    assert accumulator.accept(second_id, 'de": "x = 1\\n') == "x = 1\n"

    third_id, _ = accumulator.resolve(call_id=None, name=None, index=0)
    assert accumulator.accept(third_id, 'print(x)"}') == "x = 1\nprint(x)"


def test_final_value_does_not_depend_on_fragment_boundaries() -> None:
    payload = json.dumps({"code": _FINAL_CODE})

    for first_cut in range(1, len(payload)):
        for second_cut in (first_cut + 1, (first_cut + len(payload)) // 2):
            if second_cut >= len(payload) or second_cut <= first_cut:
                continue
            accumulator = ToolArgsAccumulator()
            emitted = _feed(
                accumulator,
                "call-1",
                [payload[:first_cut], payload[first_cut:second_cut], payload[second_cut:]],
            )
            assert emitted, (first_cut, second_cut)
            assert emitted[-1] == _FINAL_CODE, (first_cut, second_cut)


def test_character_by_character_stream_converges_to_final_code() -> None:
    payload = json.dumps({"code": _FINAL_CODE})
    accumulator = ToolArgsAccumulator()

    emitted = _feed(accumulator, "call-1", list(payload))

    assert emitted[-1] == _FINAL_CODE
    assert len(emitted) == len(set(emitted))


def test_accept_without_new_fragment_never_repeats_value() -> None:
    accumulator = ToolArgsAccumulator()
    assert accumulator.accept("call-1", '{"code": "print(1)"}') == "print(1)"

    assert accumulator.accept("call-1", "") is None
    assert accumulator.accept("call-1", "") is None
    assert accumulator.buffer_for("call-1") == '{"code": "print(1)"}'


def test_complete_payload_round_trips_escapes() -> None:
    original = 'line one\nsay "hi"\npath C:\\temp\\x\ttab'
    decoded = decode_code_argument(json.dumps({"code": original}))

    assert decoded is not None
    assert decoded.complete is True
    assert decoded.value == original


def test_empty_stream_emits_nothing() -> None:
    accumulator = ToolArgsAccumulator()
    assert _feed(accumulator, "call-1", []) == []
    assert _feed(accumulator, "call-1", ["", ""]) == []
    assert decode_code_argument("") is None


def test_partial_decode_drops_dangling_escape() -> None:
    decoded = decode_code_argument('{"code": "a = 1\\')
    assert decoded is not None
    assert decoded.complete is False
    assert decoded.value == "a = 1"

    unicode_partial = decode_code_argument('{"code": "caf\\u00e')
    assert unicode_partial is not None
    assert unicode_partial.value == "caf"

    unicode_done = decode_code_argument('{"code": "caf\\u00e9')
    assert unicode_done is not None
    assert unicode_done.value == "caf\u00e9"


def test_payload_without_code_field_decodes_to_nothing() -> None:
    assert decode_code_argument('{"description": "x"}') is None
    assert decode_code_argument('{"code": 5}') is None
    assert decode_code_argument('["code"]') is None


def test_partial_values_never_shrink_before_completion() -> None:
    accumulator = ToolArgsAccumulator()
    assert accumulator.accept("call-1", '{"code": "abcdef') == "abcdef"

    # Replaying a shorter partial buffer for the same call must not move backwards.
    accumulator._buffers["call-1"].raw_buffer = '{"code": "abc'
    assert accumulator.accept("call-1", "") is None

    assert accumulator.accept("call-1", '"}') == "abc"


def test_identity_falls_back_to_synthetic_index_key() -> None:
    accumulator = ToolArgsAccumulator()

    assert accumulator.resolve(call_id=None, name="execute_code", index=2) == (
        "index:2",
        "execute_code",
    )
    assert accumulator.resolve(call_id=None, name=None, index=None) == ("index:0", None)

    accumulator.resolve(call_id="call-7", name=None, index=2)
    assert accumulator.resolve(call_id=None, name=None, index=2) == ("call-7", "execute_code")


def test_buffers_are_kept_per_call() -> None:
    accumulator = ToolArgsAccumulator()
    assert accumulator.accept("call-1", '{"code": "a') == "a"
    assert accumulator.accept("call-2", '{"code": "b') == "b"
    assert accumulator.accept("call-1", 'a"}') == "aa"
    assert accumulator.buffer_for("call-2") == '{"code": "b'


def test_partial_decode_keeps_escaped_trailing_backslash() -> None:
    decoded = decode_code_argument('{"code": "path = \\"C:\\\\')
    assert decoded is not None
    assert decoded.complete is False
    assert decoded.value == 'path = "C:\\'


def test_partial_decode_ignores_other_fields() -> None:
    decoded = decode_code_argument('{"code": "x = 1", "note": "draft')
    assert decoded is not None
    assert decoded.value == "x = 1"
    assert decode_code_argument('{"note": "co') is None


def test_next_turn_starts_fresh_buffers_for_index_keyed_calls() -> None:
    accumulator = ToolArgsAccumulator()
    first_id, _ = accumulator.resolve(call_id=None, name="execute_code", index=0)
    assert accumulator.accept(first_id, '{"code": "first"}') == "first"

    accumulator.next_turn()

    second_id, second_name = accumulator.resolve(call_id=None, name="execute_code", index=0)
    assert (second_id, second_name) == ("index:0", "execute_code")
    assert accumulator.buffer_for(second_id) == ""
    assert accumulator.accept(second_id, '{"code": "sec') == "sec"
    assert accumulator.accept(second_id, 'ond"}') == "second"


def test_next_turn_forgets_explicit_ids_bound_to_an_index() -> None:
    accumulator = ToolArgsAccumulator()
    accumulator.resolve(call_id="call-1", name="execute_code", index=0)

    accumulator.next_turn()

    assert accumulator.resolve(call_id=None, name=None, index=0) == ("index:0", None)

from __future__ import annotations

import pytest

from gap_engine.buffer import GapBuffer, LinePosition, OutOfRangeError, sequence_length


def make_buffer(text: bytes, *, gap_at: int | None = None) -> GapBuffer:
    buffer = GapBuffer(text)
    if gap_at is not None:
        buffer.move_gap_to(gap_at)
    return buffer


@pytest.mark.parametrize(
    ("lead", "width"),
    [(0x41, 1), (0xC3, 2), (0xE2, 3), (0xF0, 4), (0x80, 1), (0xBF, 1), (0xFF, 1)],
)
def test_sequence_length_follows_lead_byte(lead: int, width: int) -> None:
    assert sequence_length(lead) == width


def test_two_byte_codepoint_maps_to_byte_two() -> None:
    buffer = make_buffer("é".encode("utf-8"))

    assert buffer.codepoint_to_byte(0) == 0
    assert buffer.codepoint_to_byte(1) == 2


def test_codepoint_to_byte_across_gap() -> None:
    text = "aé€😀b".encode("utf-8")
    expected = [0, 1, 3, 6, 10, 11]

    for gap_at in (0, 3, len(text)):
        buffer = make_buffer(text, gap_at=gap_at)
        assert [buffer.codepoint_to_byte(n) for n in range(6)] == expected
        assert buffer.codepoint_count() == 5


def test_codepoint_to_byte_beyond_count_raises() -> None:
    buffer = make_buffer(b"abc")

    assert buffer.codepoint_to_byte(3) == 3
    with pytest.raises(OutOfRangeError):
        buffer.codepoint_to_byte(4)
    with pytest.raises(OutOfRangeError):
        buffer.codepoint_to_byte(-1)


def test_truncated_sequence_at_end_is_one_unit() -> None:
    buffer = make_buffer(b"a\xe2\x82")

    assert buffer.codepoint_count() == 2
    assert buffer.codepoint_to_byte(2) == 3
    with pytest.raises(OutOfRangeError):
        buffer.codepoint_to_byte(3)


def test_stray_continuation_bytes_are_single_units() -> None:
    buffer = make_buffer(b"\x80\x80a")

    assert buffer.codepoint_count() == 3
    assert buffer.codepoint_to_byte(2) == 2


def test_byte_to_codepoint_floors_inside_a_sequence() -> None:
    buffer = make_buffer("a€b".encode("utf-8"))

    assert buffer.byte_to_codepoint(0) == 0
    assert buffer.byte_to_codepoint(1) == 1
    assert buffer.byte_to_codepoint(2) == 1
    assert buffer.byte_to_codepoint(4) == 2
    assert buffer.byte_to_codepoint(5) == 3


def test_line_start_offsets_scenario() -> None:
    buffer = GapBuffer()
    buffer.insert(0, b"ab\ncd")

    assert list(buffer.line_start_offsets()) == [0, 3]
    assert buffer.byte_to_line_col(4) == (1, 1)
    assert buffer.byte_to_line_col(4) == LinePosition(line=1, col=1)


def test_line_start_offsets_is_restartable_and_recomputed() -> None:
    buffer = make_buffer(b"one\ntwo\n", gap_at=5)
    starts = buffer.line_start_offsets()

    assert list(starts) == [0, 4, 8]
    assert list(starts) == [0, 4, 8]

    buffer.insert(0, b"zero\n")

    assert list(starts) == [0, 5, 9, 13]


def test_line_start_offsets_empty_buffer() -> None:
    assert list(GapBuffer().line_start_offsets()) == [0]


def test_line_iteration_detects_mutation() -> None:
    buffer = make_buffer(b"a\nb\nc")
    iterator = iter(buffer.line_start_offsets())
    next(iterator)

    buffer.delete(0, 1)

    with pytest.raises(RuntimeError):
        next(iterator)


def test_byte_to_line_col_boundaries() -> None:
    buffer = make_buffer(b"ab\n\ncd", gap_at=3)

    assert buffer.byte_to_line_col(0) == (0, 0)
    assert buffer.byte_to_line_col(2) == (0, 2)
    assert buffer.byte_to_line_col(3) == (1, 0)
    assert buffer.byte_to_line_col(4) == (2, 0)
    assert buffer.byte_to_line_col(6) == (2, 2)
    with pytest.raises(OutOfRangeError):
        buffer.byte_to_line_col(7)


def test_line_table_follows_edits() -> None:
    buffer = make_buffer(b"ab\ncd")
    assert buffer.line_count() == 2

    buffer.delete(2, 1)

    assert buffer.line_count() == 1
    assert buffer.byte_to_line_col(3) == (0, 3)


def test_line_lookups() -> None:
    buffer = make_buffer(b"first\nsecond\nthird", gap_at=8)

    assert buffer.line_to_byte(1) == 6
    assert buffer.line_bytes(0) == b"first"
    assert buffer.line_bytes(1) == b"second"
    assert buffer.line_bytes(2) == b"third"
    assert buffer.line_col_to_byte(2, 3) == 16
    with pytest.raises(OutOfRangeError):
        buffer.line_to_byte(3)
    with pytest.raises(OutOfRangeError):
        buffer.line_col_to_byte(0, 6)


def test_queries_leave_gap_in_place() -> None:
    buffer = make_buffer("x€\ny".encode("utf-8"), gap_at=2)

    buffer.codepoint_to_byte(3)
    list(buffer.line_start_offsets())
    buffer.byte_to_line_col(5)

    assert buffer.gap_start == 2


def test_codepoint_queries_rescan_after_edits() -> None:
    buffer = make_buffer("a€".encode("utf-8"))
    assert buffer.codepoint_count() == 2

    buffer.insert(1, "é".encode("utf-8"))

    assert buffer.codepoint_count() == 3
    assert buffer.byte_to_codepoint(3) == 2
    assert buffer.codepoint_to_byte(2) == 3

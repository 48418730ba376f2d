import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pytest_mock import MockerFixture

from vibex import ranges
from vibex.ranges import RangeOptions, RangeSpec, apply_ranges, parse_range

HEX = "0123456789ABCDEF"
DIGITS = "0123456789"


@pytest.mark.unit
def test_trim_ranges_concatenate_in_given_order() -> None:
    assert apply_ranges(HEX, RangeOptions(trim=("0-4", "10-14"))) == "01234ABCDE"


@pytest.mark.unit
def test_trim_ranges_keep_unordered_and_overlapping_slices() -> None:
    assert apply_ranges("abcdefgh", RangeOptions(trim=("4-5", "0-1"))) == "efab"
    assert apply_ranges("abcdefgh", RangeOptions(trim=("0-3", "2-5"))) == "abcdcdef"


@pytest.mark.unit
def test_cut_range_removes_inclusive_slice() -> None:
    assert apply_ranges(DIGITS, RangeOptions(cut=("2-4",))) == "0156789"


@pytest.mark.unit
def test_cut_ranges_are_removed_from_the_highest_offset_down() -> None:
    assert apply_ranges(DIGITS, RangeOptions(cut=("0-1", "5-6"))) == "234789"


@pytest.mark.unit
def test_cut_is_resolved_against_the_trimmed_content() -> None:
    options = RangeOptions(trim=("0-9",), cut=("5-e",))

    assert apply_ranges(HEX, options) == "01234"


@pytest.mark.unit
def test_symbols_stand_for_content_bounds() -> None:
    assert apply_ranges(DIGITS, RangeOptions(trim=("s-e",))) == DIGITS
    assert apply_ranges(DIGITS, RangeOptions(trim=("*-*",))) == DIGITS
    assert apply_ranges(DIGITS, RangeOptions(trim=("s-2",))) == "012"
    assert apply_ranges(DIGITS, RangeOptions(trim=("7-e",))) == "789"


@pytest.mark.unit
def test_quotes_and_parentheses_are_ignored() -> None:
    assert parse_range("'(2-4)'", 10) == RangeSpec(start=2, end=4)
    assert parse_range('"s-e"', 10) == RangeSpec(start=0, end=9)


@pytest.mark.unit
def test_invalid_range_is_discarded_with_a_warning(mocker: MockerFixture) -> None:
    warning = mocker.patch.object(ranges, "logger")
    content = "abcdefghijklmnopqrst"

    with_invalid = apply_ranges(content, RangeOptions(trim=("0-4", "50-10")))
    warning.warning.assert_called_once()
    without = apply_ranges(content, RangeOptions(trim=("0-4",)))

    assert with_invalid == without == "abcde"


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["5-2", "0-10", "a-b", "3", "-1-2", ""])
def test_parse_range_rejects_malformed_or_out_of_bounds(raw: str, mocker: MockerFixture) -> None:
    logger = mocker.patch.object(ranges, "logger")

    assert parse_range(raw, 10) is None
    logger.warning.assert_called_once()


@pytest.mark.unit
def test_empty_options_leave_content_unchanged() -> None:
    assert RangeOptions().is_empty
    assert apply_ranges("  keep me  ", RangeOptions()) == "  keep me  "


@pytest.mark.unit
def test_range_options_accept_a_single_string() -> None:
    assert RangeOptions(trim="s-3").trim == ("s-3",)


@given(
    content=st.text(min_size=1, max_size=200),
    data=st.data(),
)
@settings(max_examples=100)
def test_single_trim_equals_inclusive_slice(content: str, data: st.DataObject) -> None:
    end = data.draw(st.integers(min_value=0, max_value=len(content) - 1))
    start = data.draw(st.integers(min_value=0, max_value=end))

    result = apply_ranges(content, RangeOptions(trim=(f"{start}-{end}",)))

    assert result == content[start : end + 1]


@given(
    content=st.text(min_size=1, max_size=100),
    bounds=st.lists(st.tuples(st.integers(0, 120), st.integers(0, 120)), max_size=6),
)
@settings(max_examples=100)
def test_overlapping_cuts_never_raise_and_never_grow(
    content: str,
    bounds: list[tuple[int, int]],
) -> None:
    cuts = tuple(f"{min(a, b)}-{max(a, b)}" for a, b in bounds)

    result = apply_ranges(content, RangeOptions(cut=cuts))

    assert len(result) <= len(content)



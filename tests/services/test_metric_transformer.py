from __future__ import annotations

import pytest

from script_exporter.services.metric_transformer import (
    MetricLine,
    parse_sample,
    split_sample,
    transform_output,
)

# ---- samples ----


def test_prefix_is_prepended_to_sample_name() -> None:
    result = transform_output('name{l="v"} 123.45\n', "p")
    assert result.text == 'pname{l="v"} 123.45\n'


def test_decimal_comma_is_normalized() -> None:
    result = transform_output('name{l="v"} 123,45\n', "p")
    assert result.text == 'pname{l="v"} 123.45\n'


def test_empty_label_set_is_accepted() -> None:
    assert transform_output("up{} 1").text == "up{} 1\n"


def test_surrounding_whitespace_is_trimmed_but_separator_kept() -> None:
    result = transform_output('   name{a="1"}\t 7   \n')
    assert result.text == 'name{a="1"}\t 7\n'


@pytest.mark.parametrize(
    "value",
    ["0", "-1", "+3", "1.5", ".5", "1e3", "2.5E-4", "NaN", "+Inf", "-Inf", "42 1700000000000"],
)
def test_numeric_values_are_accepted(value: str) -> None:
    line = f"m{{}} {value}"
    assert parse_sample(line) == MetricLine("sample", line)


def test_brace_inside_quoted_label_value() -> None:
    line = 'm{path="/a}b",code="200"} 3'
    assert split_sample(line) == ('m{path="/a}b",code="200"} ', "3")


def test_escaped_quote_inside_label_value() -> None:
    line = r'm{msg="say \"hi\"}"} 1'
    assert parse_sample(line) is not None


# ---- directives ----


def test_directives_pass_through_unprefixed_and_unmodified() -> None:
    raw = "# HELP m Some help, with a comma.\n#TYPE m gauge\n# free comment {} x\n"
    result = transform_output(raw, "p_")
    assert [line.kind for line in result.lines] == ["directive"] * 3
    assert result.text == "# HELP m Some help, with a comma.\n#TYPE m gauge\n# free comment {} x\n"
    assert result.dropped == 0


# ---- dropped lines ----


@pytest.mark.parametrize(
    "line",
    [
        "m 1",  # no label set
        "m{a=\"1\"} abc",  # non-numeric value
        "m{a=\"1\"}1",  # no whitespace before value
        "m{a=\"1\"} ",  # no value
        "m{a=\"1\" 1",  # unterminated label set
        "{a=\"1\"} 1",  # no name
        "9m{} 1",  # name starts with a digit
        "m{} 1,000.5",  # comma normalization leaves two points
        "m{} 1|2",
        "m-x{} 1",
        "m{} \u0661\u0662\u0663",  # non-ASCII digits
        "n{} 1 \u0661\u0662",  # non-ASCII timestamp
        "m{}\u2003 1",  # non-ASCII separator
    ],
)
def test_malformed_samples_are_dropped(line: str) -> None:
    result = transform_output(line)
    assert result.lines == []
    assert result.dropped == 1


def test_prefix_that_breaks_the_name_drops_the_line() -> None:
    result = transform_output("m{} 1", "bad-prefix_")
    assert result.text == ""
    assert result.dropped == 1


def test_blank_lines_are_skipped_not_dropped() -> None:
    result = transform_output("\n   \n\t\nm{} 1\n\n")
    assert result.text == "m{} 1\n"
    assert result.dropped == 0


# ---- stream behavior ----


def test_order_preserved_and_duplicates_kept() -> None:
    raw = "\n".join(
        [
            "# TYPE b gauge",
            "b{} 2",
            "junk",
            "a{} 1",
            "b{} 2",
        ]
    )
    result = transform_output(raw, "x_")
    assert result.text == "# TYPE b gauge\nx_b{} 2\nx_a{} 1\nx_b{} 2\n"
    assert result.dropped == 1


def test_output_line_count_drops_for_malformed_input() -> None:
    raw = "a{} 1\nb 2\nc{} x\nd{} 4\n"
    result = transform_output(raw)
    assert len(result.lines) == 2
    assert len(result.lines) < len(raw.splitlines())


def test_empty_output() -> None:
    result = transform_output("")
    assert result.text == ""
    assert result.dropped == 0


def test_lines_split_on_newline_only() -> None:
    raw = 'm{a="x\u2028y"} 1\nk{a="p\x0cq"} 2\r\nn{a="\x85"} 3\n'
    result = transform_output(raw)
    assert result.text == 'm{a="x\u2028y"} 1\nk{a="p\x0cq"} 2\nn{a="\x85"} 3\n'
    assert result.dropped == 0

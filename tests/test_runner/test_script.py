"""Tests for labelled scripts."""

import pytest

from labcoat.runner import LABEL_END, LABEL_START, format_output, new_script


def render(s: str) -> str:
    return "|:" + s + ":|"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("", ""),
        ("hello world", "hello world"),
        ("[label{{{naked}}}label]", "|:naked:|"),
        ("[label{{{}}}label]", "|::|"),
        ("abc[label{{{naked}}}label]def", "abc|:naked:|def"),
        ("abc [label{{{two words}}}label] def", "abc |:two words:| def"),
        ("abc[label{{{naked}}}label]\ndef", "abc|:naked:|\ndef"),
        ("abc[label{{{new\nline}}}label]def", "abc|:new\nline:|def"),
        ("abc [label{{{no term!", "abc |:no term!:|"),
        ("[label{{{a}}}label]x[label{{{b}}}label]y", "|:a:|x|:b:|y"),
    ],
    ids=[
        "empty str",
        "plain str",
        "naked",
        "empty",
        "simple",
        "spaces",
        "nlsuffix",
        "nllabel",
        "unterminated",
        "two labels",
    ],
)
def test_format_output(text: str, expected: str) -> None:
    """Labels are replaced by the render function's output."""
    assert format_output(text, render) == expected


def test_unterminated_label_swallows_remainder() -> None:
    """A start marker with no end turns the rest of the text into the label."""
    text = "before [label{{{cmd}}}label]\nout\n[label{{{late\nmore output"

    assert format_output(text, render) == "before |:cmd:|\nout\n|:late\nmore output:|"


def test_new_script_labels_each_command() -> None:
    """Each command is preceded by an echo of its label."""
    script = new_script(["uptime", "df -h"])

    assert script == (
        f'echo "{LABEL_START}uptime{LABEL_END}"\n'
        "uptime\n\n"
        f'echo "{LABEL_START}df -h{LABEL_END}"\n'
        "df -h\n\n"
    )


def test_new_script_escapes_double_quotes() -> None:
    """Double quotes inside a command are escaped within the echo."""
    script = new_script(['echo "hi"'])

    assert script.startswith(f'echo "{LABEL_START}echo \\"hi\\"{LABEL_END}"\n')
    assert '\necho "hi"\n' in script


def test_new_script_empty() -> None:
    assert new_script([]) == ""


def test_script_output_renders_labels() -> None:
    """Simulated output of a script renders one label per command."""
    # What bash prints for the script: each echo, then the command's output.
    output = (
        f"{LABEL_START}c1{LABEL_END}\n"
        "one\n"
        f"{LABEL_START}c2{LABEL_END}\n"
        "two\n"
    )

    assert format_output(output, render) == "|:c1:|\none\n|:c2:|\ntwo\n"

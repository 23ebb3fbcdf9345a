"""Tests for the runner output buffer."""

from labcoat.runner import OutputBuffer


def test_writes_concatenate() -> None:
    """Successive writes append in order and report their length."""
    buf = OutputBuffer(lambda: None)

    assert buf.write(b"bacon") == 5
    assert buf.write(b" lettuce") == 8
    assert buf.write(b" tomato") == 7

    assert buf.getvalue() == b"bacon lettuce tomato"
    assert len(buf) == 20


def test_notify_called_once_per_write() -> None:
    """Each non-empty write triggers exactly one notification."""
    calls = []
    buf = OutputBuffer(lambda: calls.append(1))

    buf.write(b"crispy bacon")
    buf.write(b"!")

    assert len(calls) == 2


def test_empty_write_skips_notify() -> None:
    """Empty writes do not notify."""
    calls = []
    buf = OutputBuffer(lambda: calls.append(1))

    assert buf.write(b"") == 0

    assert calls == []
    assert buf.getvalue() == b""


def test_str_replaces_invalid_utf8() -> None:
    """Undecodable bytes render as replacement characters."""
    buf = OutputBuffer(lambda: None)
    buf.write(b"ok \xff")

    assert str(buf) == "ok �"


def test_getvalue_is_snapshot() -> None:
    """Later writes do not change an earlier snapshot."""
    buf = OutputBuffer(lambda: None)
    buf.write(b"one")
    snap = buf.getvalue()
    buf.write(b"two")

    assert snap == b"one"

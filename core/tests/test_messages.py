from __future__ import annotations

from knockweb_core.messages import MessageKind, MessageLog


def test_message_log_filters_by_kind() -> None:
    log = MessageLog()
    log.add_error("boom")
    log.add_warning("careful")
    log.add_message("done")
    log.add_error("again")

    assert log.errors() == ["boom", "again"]
    assert log.warnings() == ["careful"]
    assert log.messages() == ["done"]
    assert len(log) == 4


def test_message_log_get_uses_flag_membership() -> None:
    log = MessageLog()
    log.add_error("boom")
    log.add_warning("careful")
    log.add_message("done")

    picked = log.get(MessageKind.ERROR | MessageKind.INFO)
    assert [m.text for m in picked] == ["boom", "done"]
    assert [m.text for m in log.get()] == ["boom", "careful", "done"]


def test_message_log_has_and_clear() -> None:
    log = MessageLog()
    assert log.has_errors() is False
    log.add_warning("careful")
    assert log.has_warnings() is True
    assert log.has_errors() is False
    assert log.has_messages() is False

    log.clear()
    assert len(log) == 0
    assert log.has_warnings() is False

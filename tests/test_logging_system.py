"""Tests for modbus_bench/logging_system.py"""

import json

import pytest

from modbus_bench.logging_system import LogManager


def test_debug_dropped_unless_debug_mode():
    quiet = LogManager(persist=False)
    quiet.debug("hidden")
    quiet.info("shown")
    assert [e.message for e in quiet.get_recent_events()] == ["shown"]

    verbose = LogManager(persist=False, debug_mode=True)
    verbose.debug("visible")
    assert verbose.get_recent_events()[0].level == "DEBUG"


def test_unknown_level_rejected():
    with pytest.raises(ValueError):
        LogManager(persist=False).log_event("TRACE", "nope")


def test_level_names_case_insensitive():
    log = LogManager(persist=False)
    log.log_event("warning", "careful")
    assert log.get_recent_events()[0].level == "WARNING"


def test_event_log_bounded():
    log = LogManager(max_entries=3, persist=False)
    for i in range(5):
        log.info(f"event {i}")
    assert [e.message for e in log.get_recent_events()] == ["event 2", "event 3", "event 4"]


def test_subscribers_receive_events():
    log = LogManager(persist=False)
    received = []
    log.add_subscriber(received.append)

    log.error("boom")

    assert len(received) == 1
    assert received[0].level == "ERROR"
    assert received[0].format().endswith("[ERROR] boom")


def test_log_once():
    log = LogManager(persist=False)

    assert log.warning_once("disk low") is True
    assert log.warning_once("disk low") is False
    assert log.error_once("disk low") is True

    log.clear_logged_once()
    assert log.warning_once("disk low") is True
    assert len(log.get_recent_events()) == 3


def test_request_log(log_manager):
    entry = log_manager.log_request("coils", unit_id=1, address=10, quantity=2, is_write=True, args=[True, False])

    assert log_manager.get_recent_requests() == [entry]
    assert entry.describe() == "write coils unit=1 addr=10 qty=2 args=[True, False]"
    assert log_manager.get_recent_events()[-1].message.startswith("Request: write coils")


def test_events_persist_and_reload(tmp_path):
    path = tmp_path / "logs" / "events.jsonl"
    log = LogManager(log_file=str(path))
    log.info("first")
    log.warning("second")

    lines = [json.loads(line) for line in path.read_text().splitlines()]
    assert [line['message'] for line in lines] == ["first", "second"]

    reloaded = LogManager(log_file=str(path))
    assert [e.message for e in reloaded.get_recent_events()] == ["first", "second"]


def test_reload_skips_malformed_lines(tmp_path):
    path = tmp_path / "events.jsonl"
    path.write_text('{"timestamp": 1.0, "level": "INFO", "message": "ok"}\nnot json\n{"level": "INFO"}\n')

    log = LogManager(log_file=str(path))

    assert [e.message for e in log.get_recent_events()] == ["ok"]


def test_rotate_log_file(tmp_path):
    path = tmp_path / "events.jsonl"
    log = LogManager(max_entries=2, log_file=str(path))
    log.info("one")
    log.rotate_log_file()
    assert path.exists()

    log.info("two")
    log.info("three")
    log.rotate_log_file()

    backup = tmp_path / "events.jsonl.old"
    assert backup.exists()
    assert not path.exists()

    # Backup history is loaded first
    log.info("four")
    reloaded = LogManager(max_entries=10, log_file=str(path))
    assert [e.message for e in reloaded.get_recent_events()] == ["one", "two", "three", "four"]

"""Tests for the session audit log."""

import re

from interview_recorder.services.storage import AuditLog

_LINE = re.compile(r"^\[\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z\] (START|FINISH): (\S+)$")


def test_start_and_finish_lines(tmp_path):
    log = AuditLog(tmp_path / "logs" / "sessions.log")
    log.session_started("f1")
    log.session_finished("f1")

    lines = log.path.read_text().splitlines()
    assert [_LINE.match(line).groups() for line in lines] == [("START", "f1"), ("FINISH", "f1")]


def test_appends_across_instances(tmp_path):
    path = tmp_path / "sessions.log"
    AuditLog(path).session_started("a")
    AuditLog(path).session_started("b")
    assert len(path.read_text().splitlines()) == 2

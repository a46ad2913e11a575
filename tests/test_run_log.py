"""Tests for the CSV run log."""

import pytest

from sitesnap.models import LogRecord
from sitesnap.output_manager import OutputSinkError
from sitesnap.run_log import RunLog, read_records


def test_start_writes_header(tmp_path):
    log = RunLog(tmp_path / "log.csv")
    log.start()

    assert log.path.read_text(encoding="utf-8") == "FROM,LINK TEXT,TO,SCREENSHOT FILE\n"


def test_rows_are_fully_quoted(tmp_path):
    log = RunLog(tmp_path / "log.csv")
    log.start()
    log.append(LogRecord("ROOT", "ROOT", "https://site.test", "shots/site.test.png"))
    log.append(LogRecord("https://site.test", 'Say "hi", friend', "https://site.test/hi", "ERROR: Timeout"))

    lines = log.path.read_text(encoding="utf-8").splitlines()
    assert lines[1] == '"ROOT","ROOT","https://site.test","shots/site.test.png"'
    assert lines[2] == '"https://site.test","Say ""hi"", friend","https://site.test/hi","ERROR: Timeout"'
    assert log.records_written == 2


def test_start_truncates_previous_run(tmp_path):
    path = tmp_path / "log.csv"
    path.write_text("stale data\n", encoding="utf-8")

    RunLog(path).start()

    assert path.read_text(encoding="utf-8") == "FROM,LINK TEXT,TO,SCREENSHOT FILE\n"


def test_start_failure_raises_output_sink_error(tmp_path):
    with pytest.raises(OutputSinkError):
        RunLog(tmp_path / "missing" / "log.csv").start()


def test_read_records_round_trip(tmp_path):
    log = RunLog(tmp_path / "log.csv")
    log.start()
    record = LogRecord("https://site.test", "About, Us", "https://site.test/about", "ERROR: boom")
    log.append(record)

    records = read_records(log.path)

    assert records == [record]
    assert records[0].is_error


def test_read_records_rejects_other_csv(tmp_path):
    path = tmp_path / "other.csv"
    path.write_text("a,b,c\n1,2,3\n", encoding="utf-8")

    with pytest.raises(ValueError):
        read_records(path)

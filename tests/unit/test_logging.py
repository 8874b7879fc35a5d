"""Unit tests for structured watch logging."""

from __future__ import annotations

import json
import logging

from pumlwatch.core.logging import Verbosity, WatchLogger, WatchStats, setup_logging


class TestWatchStats:
    def test_defaults(self):
        stats = WatchStats()
        assert stats.to_dict() == {
            "files_added": 0,
            "files_removed": 0,
            "files_changed": 0,
            "renders": 0,
            "render_failures": 0,
            "artifacts_deleted": 0,
        }


class TestWatchLogger:
    def test_counts_events(self, tmp_path):
        events = WatchLogger()
        events.file_added(tmp_path / "a.puml")
        events.file_changed(tmp_path / "a.puml")
        events.render_finished(tmp_path / "a.puml", "svg", ok=True, elapsed=0.5)
        events.render_finished(tmp_path / "a.puml", "png", ok=False, elapsed=0.5)
        events.artifact_deleted(tmp_path / "a.png", tmp_path / "a.puml")
        events.file_removed(tmp_path / "a.puml")

        assert events.stats.to_dict() == {
            "files_added": 1,
            "files_removed": 1,
            "files_changed": 1,
            "renders": 2,
            "render_failures": 1,
            "artifacts_deleted": 1,
        }
        assert events.log_path is None

    def test_writes_jsonl(self, tmp_path):
        log_dir = tmp_path / "logs"
        events = WatchLogger(log_dir=log_dir)
        events.file_added(tmp_path / "a.puml")
        events.render_finished(tmp_path / "a.puml", "svg", ok=True, elapsed=0.25)
        events.close()

        lines = events.log_path.read_text().splitlines()
        records = [json.loads(line) for line in lines]

        assert events.log_path.parent == log_dir
        assert [r["event"] for r in records] == ["file_added", "render_finished", "shutdown"]
        assert records[1]["format"] == "svg"
        assert records[1]["ok"] is True
        assert records[2]["renders"] == 1
        assert all("timestamp" in r for r in records)

    def test_close_is_idempotent(self, tmp_path):
        events = WatchLogger(log_dir=tmp_path)
        events.close()
        events.close()

    def test_failed_render_logs_warning(self, tmp_path, caplog):
        events = WatchLogger()
        with caplog.at_level(logging.WARNING, logger="pumlwatch"):
            events.render_finished(tmp_path / "bad.puml", "svg", ok=False, elapsed=0.1)
        assert "bad.puml" in caplog.text


class TestSetupLogging:
    def test_verbosity_levels(self):
        setup_logging(Verbosity.DEBUG)
        assert logging.getLogger("pumlwatch").getEffectiveLevel() == logging.DEBUG
        setup_logging(Verbosity.DEFAULT)
        assert logging.getLogger("pumlwatch").getEffectiveLevel() == logging.INFO

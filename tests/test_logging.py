from __future__ import annotations

import logging
from pathlib import Path

import pytest

from compute_firewall import resolve_log_config
from compute_firewall.observability.logger import _parse_rotation_bytes, logger
from compute_firewall.observability.logging import LogConfig, setup_logging, teardown_logging

pytestmark = [pytest.mark.unit]


class TestParseRotation:
    @pytest.mark.parametrize(
        ("rotation", "expected"),
        [
            ("10 KB", 10 * 1024),
            ("50 MB", 50 * 1024 * 1024),
            ("1 GB", 1024 * 1024 * 1024),
            ("1 day", 50 * 1024 * 1024),
        ],
    )
    def test_units(self, rotation: str, expected: int):
        assert _parse_rotation_bytes(rotation) == expected


class TestSetupLogging:
    def test_file_sink_receives_bound_context(self, tmp_path: Path):
        log_file = tmp_path / "logs" / "cf.log"
        ids = setup_logging(LogConfig(file=str(log_file), console=False))
        try:
            logger.bind(component="firewall", name="tcp-3000").info(
                "Request accepted, operation={op}", op="op-1",
            )
        finally:
            teardown_logging(ids)

        text = log_file.read_text()
        assert "Request accepted, operation=op-1" in text
        assert "component=firewall name=tcp-3000" in text
        assert "test_file_sink_receives_bound_context" in text

    def test_console_only_returns_one_handler(self):
        ids = setup_logging(LogConfig(console=True))
        try:
            assert len(ids) == 1
        finally:
            teardown_logging(ids)

    def test_teardown_removes_handlers(self, tmp_path: Path):
        root = logging.getLogger("compute_firewall")
        before = list(root.handlers)
        ids = setup_logging(LogConfig(file=str(tmp_path / "cf.log"), console=True))
        assert len(root.handlers) == len(before) + 2
        teardown_logging(ids)
        assert root.handlers == before

    def test_setup_from_toml_logging_table(self, tmp_path: Path):
        log_file = tmp_path / "from-toml.log"
        (tmp_path / "compute-firewall.toml").write_text(
            f'[logging]\nlevel = "DEBUG"\nconsole = false\nfile = "{log_file.as_posix()}"\n'
        )
        ids = setup_logging(
            resolve_log_config(project_dir=tmp_path, global_path=tmp_path / "missing.toml")
        )
        try:
            logger.bind(component="http").debug("GET {path}", path="/global/firewalls")
        finally:
            teardown_logging(ids)

        assert len(ids) == 1
        assert "GET /global/firewalls" in log_file.read_text()

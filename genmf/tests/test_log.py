"""Tests for verbosity handling."""
import logging

from genmf.config import Settings
from genmf.log import configure_logging, level_for_verbosity, syslog_reachable
from genmf.runner import main


class TestLevelForVerbosity:

    def test_quiet(self):
        assert level_for_verbosity(0) == logging.WARNING
        assert level_for_verbosity(-3) == logging.WARNING

    def test_default(self):
        assert level_for_verbosity(3) == logging.INFO
        assert level_for_verbosity(5) == logging.INFO

    def test_debug(self):
        assert level_for_verbosity(6) == logging.DEBUG
        assert level_for_verbosity(9) == logging.DEBUG


class TestConfigureLogging:

    def test_single_stderr_handler_without_syslog(self):
        configure_logging(3, Settings(syslog=False))
        root = logging.getLogger("genmf")
        assert len(root.handlers) == 1
        assert root.handlers[0].level == logging.INFO

    def test_reconfigure_replaces_handlers(self):
        configure_logging(3, Settings(syslog=False))
        configure_logging(9, Settings(syslog=False))
        root = logging.getLogger("genmf")
        assert [h.level for h in root.handlers] == [logging.DEBUG]

    def test_unreachable_syslog_skipped(self, tmp_path):
        settings = Settings(syslog=True, syslog_address=str(tmp_path / "no-socket"))
        configure_logging(3, settings)
        assert len(logging.getLogger("genmf").handlers) == 1


class TestSyslogReachable:

    def test_missing_socket(self, tmp_path):
        assert not syslog_reachable(str(tmp_path / "no-socket"))

    def test_plain_file_is_not_a_socket(self, tmp_path):
        p = tmp_path / "log"
        p.write_text("")
        assert not syslog_reachable(str(p))

    def test_unreachable_syslog_keeps_stderr_clean(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("GENMF_SYSLOG", "true")
        monkeypatch.setenv("GENMF_SYSLOG_ADDRESS", str(tmp_path / "no-socket"))
        build_root = tmp_path / "build"
        build_root.mkdir()
        rc = main([
            "-recipe", "c.o", "-Wextra", "-build.path", str(build_root),
            "-source", f"{build_root}/a.c", "-target", f"{build_root}/a.c.o",
        ])
        assert rc == 0
        assert "Logging error" not in capsys.readouterr().err

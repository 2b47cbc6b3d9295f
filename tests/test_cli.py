"""
Tests for the varexport command line.
"""

import json
import logging

import pytest
import requests
from typer.testing import CliRunner

from cli import main as cli_main
from varexport import HttpTransport, TransportError

runner = CliRunner()

# Captured before the autouse fixture stubs it out.
_original_setup_logging = cli_main.setup_logging


@pytest.fixture(autouse=True)
def quiet_cli(monkeypatch):
    for name in ("CUBE_COLLECTOR_HOST", "CUBE_COLLECTOR_PORT", "CUBE_EXPORT_INTERVAL",
                 "CUBE_EXPORT", "CUBE_REQUEST_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli_main, "setup_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr(cli_main.signal, "signal", lambda *args: None)


@pytest.fixture
def sends(monkeypatch):
    calls = []
    monkeypatch.setattr(HttpTransport, "send", lambda self, url, payload: calls.append((url, payload)))
    return calls


@pytest.mark.unit
class TestShow:
    def test_prints_event(self):
        result = runner.invoke(cli_main.app, ["show", "myevents"])

        assert result.exit_code == 0
        events = json.loads(result.output)
        assert events[0]["type"] == "myevents"
        assert "cmdline" in events[0]["data"]


@pytest.mark.unit
class TestOnce:
    def test_success(self, sends):
        result = runner.invoke(cli_main.app, ["once", "myevents", "--host", "cube", "--port", "1180"])

        assert result.exit_code == 0
        assert "Exported variables to http://cube:1180/1.0/event/put" in result.output
        assert sends[0][0] == "http://cube:1180/1.0/event/put"

    def test_failure_exits_nonzero(self, monkeypatch):
        def send(self, url, payload):
            raise TransportError(url, payload, requests.exceptions.ConnectionError("refused"))
        monkeypatch.setattr(HttpTransport, "send", send)

        result = runner.invoke(cli_main.app, ["once", "myevents"])

        assert result.exit_code == 1
        assert "Export failed" in result.output

    def test_invalid_port_from_env(self, monkeypatch, sends):
        monkeypatch.setenv("CUBE_COLLECTOR_PORT", "not-a-port")

        result = runner.invoke(cli_main.app, ["once", "myevents"])

        assert result.exit_code == 1
        assert "Error" in result.output
        assert sends == []

    def test_config_file(self, tmp_path, sends):
        path = tmp_path / "exporter.yaml"
        path.write_text("collector_host: from-file\n")

        result = runner.invoke(cli_main.app, ["once", "myevents", "--config", str(path)])

        assert result.exit_code == 0
        assert sends[0][0] == "http://from-file:1080/1.0/event/put"


@pytest.mark.unit
class TestRun:
    def test_disabled_returns_immediately(self, sends):
        result = runner.invoke(cli_main.app, ["run", "myevents", "--disable", "--interval", "10ms"])

        assert result.exit_code == 0
        assert sends == []

    def test_invalid_interval(self, sends):
        result = runner.invoke(cli_main.app, ["run", "myevents", "--interval", "abc"])

        assert result.exit_code == 1
        assert sends == []


@pytest.mark.unit
class TestSetupLogging:
    def test_writes_log_file(self, tmp_path):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        log_file = tmp_path / "logs" / "varexport.log"
        try:
            _original_setup_logging("DEBUG", str(log_file))
            logging.getLogger("varexport.test").info("hello from test")
            for handler in logging.getLogger().handlers:
                handler.flush()
            assert "hello from test" in log_file.read_text()
        finally:
            for handler in root.handlers:
                if handler not in saved_handlers:
                    handler.close()
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)



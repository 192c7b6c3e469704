"""
Tests for the procauth command line tool.
"""

import json

import pytest
import yaml

from procauth.authz import ProcessAuthorizationHelper, recipient, requester
from procauth.cli.main import main
from procauth.resource import ProcessDefinition, dump_process_definition, load_process_definition


PROFILE = "http://dsf.dev/fhir/StructureDefinition/task-ping"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("PROCAUTH_LOG_LEVEL", raising=False)
    monkeypatch.delenv("PROCAUTH_DEFAULT_RESOURCE_FORMAT", raising=False)


@pytest.fixture
def ping_file(tmp_path):
    """Valid ping process definition written as JSON"""
    definition = ProcessAuthorizationHelper().add(
        ProcessDefinition(url="http://dsf.dev/bpe/Process/ping", version="1.0"),
        "ping", PROFILE + "|1.0",
        [requester.remote_all(), requester.local_role("parent.org", "http://org-roles", "DIC")],
        recipient.local_organization("org.com"))

    path = str(tmp_path / "ping.json")
    dump_process_definition(definition, path)
    return path


@pytest.fixture
def invalid_file(tmp_path):
    """Process definition without authorization rules"""
    path = str(tmp_path / "empty.json")
    dump_process_definition(ProcessDefinition(url="http://dsf.dev/bpe/Process/ping", version="1.0"), path)
    return path


class TestValidate:
    """Test the validate command"""

    def test_valid(self, ping_file, capsys):
        assert main(["validate", ping_file]) == 0
        assert "authorization rules valid" in capsys.readouterr().out

    def test_invalid(self, invalid_file, capsys):
        assert main(["validate", invalid_file]) == 1
        assert "not valid" in capsys.readouterr().out

    def test_json_output(self, ping_file, invalid_file, capsys):
        assert main(["validate", "--json", ping_file]) == 0
        assert json.loads(capsys.readouterr().out)["valid"] is True

        assert main(["validate", "--json", invalid_file]) == 1
        response = json.loads(capsys.readouterr().out)
        assert response["error"] == "validation_failed"
        assert response["http_status"] == 422
        assert response["details"]["file"] == invalid_file

    def test_missing_file(self, tmp_path, capsys):
        assert main(["validate", str(tmp_path / "missing.json")]) == 2
        assert "Unable to load" in capsys.readouterr().err

    def test_not_utf8_file(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_bytes(b'{"resourceType": "ActivityDefinition", "url": "\xff\xfe"}')

        assert main(["validate", str(path)]) == 2
        assert "Unable to load" in capsys.readouterr().err

    def test_malformed_file(self, tmp_path, capsys):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")

        assert main(["validate", str(path)]) == 2
        assert "resource_format_error" in capsys.readouterr().err


class TestShow:
    """Test the show command"""

    def test_lists_subjects(self, ping_file, capsys):
        assert main(["show", ping_file, "--message", "ping", "--profile", PROFILE]) == 0

        out = capsys.readouterr().out
        assert "REMOTE_ALL" in out
        assert "LOCAL_ROLE parent.org http://org-roles|DIC" in out
        assert "LOCAL_ORGANIZATION org.com" in out

    def test_unknown_message(self, ping_file, capsys):
        assert main(["show", ping_file, "--message", "pong", "--profile", PROFILE]) == 0

        out = capsys.readouterr().out
        assert "REMOTE_ALL" not in out
        assert "Requesters:" in out


class TestConvert:
    """Test the convert command"""

    def test_json_to_yaml(self, ping_file, tmp_path):
        output = tmp_path / "ping.yaml"

        assert main(["convert", ping_file, str(output)]) == 0
        assert yaml.safe_load(output.read_text(encoding="utf-8"))["resourceType"] == "ActivityDefinition"
        assert load_process_definition(str(output)) == load_process_definition(ping_file)

    def test_default_format(self, ping_file, tmp_path, monkeypatch):
        """Test outputs without extension use the configured default format"""
        monkeypatch.setenv("PROCAUTH_DEFAULT_RESOURCE_FORMAT", "yaml")
        output = tmp_path / "ping"

        assert main(["convert", ping_file, str(output)]) == 0
        assert yaml.safe_load(output.read_text(encoding="utf-8"))["version"] == "1.0"


class TestOptions:
    """Test global options"""

    def test_invalid_log_level(self, ping_file, capsys):
        assert main(["--log-level", "verbose", "validate", ping_file]) == 2
        assert "Configuration error" in capsys.readouterr().err

    def test_config_file(self, ping_file, tmp_path):
        config = tmp_path / "procauth.yaml"
        config.write_text("log_level: WARNING\n", encoding="utf-8")

        assert main(["--config", str(config), "validate", ping_file]) == 0

    def test_missing_config_file(self, ping_file, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "missing.yaml"), "validate", ping_file]) == 2

    def test_command_required(self):
        with pytest.raises(SystemExit):
            main([])

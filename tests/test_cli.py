import io
import json

import pytest
import yaml

from apps.decider.cli import main
from decision_platform.policy.config import DEFAULT_CATALOG_PATH


@pytest.fixture
def input_file(tmp_path):
    payload = {
        "parsedRequest": {"intent": "time", "actorType": "client", "params": {"duration": 60}},
        "userProfile": {
            "primaryRole": "executor",
            "loadProfile": "B",
            "moneyPolicy": {"requireReturnDate": True, "allowedActors": ["family"]},
            "supportPolicy": {"maxWeekly": 1, "allowedActors": ["family"]},
            "hardRules": [],
            "calendarConnected": False,
        },
        "dynamicState": {"energyLevel": "green"},
        "aggregatedStats": {"dailyCommitments": 0},
    }
    path = tmp_path / "input.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _last_json(text):
    lines = [line for line in text.splitlines() if line.strip()]
    return json.loads(lines[-1])


class TestDecideCommand:
    def test_prints_decision_with_template_text(self, input_file, capsys, catalog):
        rc = main(["decide", str(input_file)])

        out = json.loads(capsys.readouterr().out)
        assert rc == 0
        assert out["result"] == "DEFER"
        assert out["templateKey"] == "defer_need_time"
        assert out["reasonCodes"] == ["CALENDAR_NOT_CONNECTED"]
        assert out["requiresCalendar"] is True
        assert out["templateText"] == catalog.templates["defer_need_time"].text

    def test_reads_stdin(self, input_file, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO(input_file.read_text(encoding="utf-8")))

        rc = main(["decide", "-"])

        assert rc == 0
        assert json.loads(capsys.readouterr().out)["result"] == "DEFER"

    def test_invalid_payload_exits_with_error_envelope(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"parsedRequest": {"intent": "money"}}), encoding="utf-8")

        rc = main(["decide", str(path)])

        err = _last_json(capsys.readouterr().err)
        assert rc == 2
        assert err["error"]["code"] == "validation_error"

    def test_missing_input_file(self, tmp_path, capsys):
        rc = main(["decide", str(tmp_path / "missing.json")])

        assert rc == 2
        assert _last_json(capsys.readouterr().err)["error"]["code"] == "input_error"


    def test_non_utf8_input_file(self, tmp_path, capsys):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"parsedRequest": {"intent": "\xff"}}')

        rc = main(["decide", str(path)])

        assert rc == 2
        assert _last_json(capsys.readouterr().err)["error"]["code"] == "input_error"


class TestCatalogCommands:
    def test_templates_lists_keys(self, capsys):
        rc = main(["templates"])

        out = capsys.readouterr().out
        assert rc == 0
        assert "- allow_default [ALLOW]:" in out
        assert "- money_defer [DEFER]:" in out

    def test_check_catalog_ok(self, capsys):
        assert main(["check-catalog"]) == 0
        assert "catalog ok" in capsys.readouterr().out

    def test_check_catalog_reports_broken_catalog(self, tmp_path, capsys):
        raw = yaml.safe_load(DEFAULT_CATALOG_PATH.read_text(encoding="utf-8"))
        del raw["templates"]["forbid_energy"]
        path = tmp_path / "rules.yaml"
        path.write_text(yaml.safe_dump(raw), encoding="utf-8")

        rc = main(["--catalog", str(path), "check-catalog"])

        err = _last_json(capsys.readouterr().err)
        assert rc == 2
        assert err["error"]["code"] == "config_error"
        assert err["error"]["details"]["missing"] == ["forbid_energy"]

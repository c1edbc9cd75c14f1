"""Tests for validata CLI commands."""

import json

import pytest
from click.testing import CliRunner

from validata.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("VALIDATA_LOCALE", "VALIDATA_STRICT_RULES", "VALIDATA_LOCALE_DIR", "DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def payload(tmp_path):
    def write(data):
        path = tmp_path / "payload.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    return write


class TestRulesParse:
    def test_parse_chain(self, runner):
        result = runner.invoke(cli, ["rules", "parse", "min:18#Too young|required|between:1,10"])
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines == ["  required", "  min 18  # Too young", "  between 1, 10"]

    def test_unknown_rule_dropped(self, runner):
        result = runner.invoke(cli, ["rules", "parse", "frobnicate"])
        assert result.exit_code == 0
        assert "No rules." in result.output

    def test_strict_rejects_unknown_rule(self, runner):
        result = runner.invoke(cli, ["rules", "parse", "frobnicate", "--strict"])
        assert result.exit_code == 1
        assert "Unknown rule 'frobnicate'" in result.output

    def test_list(self, runner):
        result = runner.invoke(cli, ["rules", "list"])
        assert result.exit_code == 0
        assert "gh_gps" in result.output.splitlines()


class TestLocales:
    def test_list(self, runner):
        result = runner.invoke(cli, ["locales", "list"])
        assert result.exit_code == 0
        assert result.output.splitlines() == ["* en", "  fr"]

    def test_show(self, runner):
        result = runner.invoke(cli, ["locales", "show", "--locale", "fr"])
        assert result.exit_code == 0
        assert "Le champ {0} est requis." in result.output


class TestCheck:
    def test_valid_payload(self, runner, payload):
        result = runner.invoke(cli, ["check", "sample_records:SignUp", payload({"email": "john.doe@gmail.com", "age": 20})])
        assert result.exit_code == 0
        assert "Valid." in result.output

    def test_invalid_payload(self, runner, payload):
        result = runner.invoke(
            cli,
            ["check", "sample_records:SignUp", payload({"email": "john.doe@gmail.com", "age": 12}), "--locale", "fr"],
        )
        assert result.exit_code == 1
        assert json.loads(result.output) == {"email": None, "age": "Le champ age doit être d'au moins 18."}

    def test_payload_not_an_object(self, runner, payload):
        result = runner.invoke(cli, ["check", "sample_records:SignUp", payload([1, 2])])
        assert result.exit_code == 1
        assert "expected a JSON object" in result.output

    def test_missing_lookup(self, runner, payload):
        result = runner.invoke(cli, ["check", "sample_records:Account", payload({"email": "a@gmail.com"})])
        assert result.exit_code == 1
        assert "needs a lookup service" in result.output

    def test_bad_record_reference(self, runner, payload):
        result = runner.invoke(cli, ["check", "sample_records", payload({})])
        assert result.exit_code == 2

    def test_not_a_record(self, runner, payload):
        result = runner.invoke(cli, ["check", "sample_records:NOT_A_RECORD", payload({})])
        assert result.exit_code == 1

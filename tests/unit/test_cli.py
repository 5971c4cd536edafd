"""
Unit tests for the survey CLI.

The PostgreSQL store is swapped for an in-memory store, so every command
except init-db runs without a database.
"""

import json

import pytest
from psycopg import OperationalError
from psycopg_pool import PoolTimeout

from survey_stats.cli import survey_cli
from survey_stats.warehouse import StoreUnavailable
from survey_stats.warehouse.connection import DatabaseConnectionPool


@pytest.fixture
def cli_store(memory_store, monkeypatch):
    """Make every CLI command use the in-memory store"""
    monkeypatch.setattr(survey_cli, "create_store", lambda args: memory_store)
    return memory_store


@pytest.fixture
def payload_file(tmp_path, valid_payload):
    path = tmp_path / "payload.json"
    path.write_text(json.dumps(valid_payload))
    return path


def write_payload(tmp_path, payload, name="payload.json"):
    path = tmp_path / name
    path.write_text(json.dumps(payload))
    return str(path)


class TestCommands:
    """Tests for individual CLI commands"""

    def test_no_command_prints_help(self, capsys):
        assert survey_cli.main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_submit(self, cli_store, payload_file, capsys):
        exit_code = survey_cli.main(["submit", "--file", str(payload_file)])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["accepted"] is True
        assert output["record_id"] == 1
        assert cli_store.count() == 1

    def test_submit_duplicate(self, cli_store, payload_file, capsys):
        survey_cli.main(["submit", "--file", str(payload_file)])
        capsys.readouterr()

        exit_code = survey_cli.main(["submit", "--file", str(payload_file)])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 1
        assert output["status_code"] == 409

    def test_submit_non_object_payload(self, cli_store, tmp_path, capsys):
        path = write_payload(tmp_path, ["not", "an", "object"])

        assert survey_cli.main(["submit", "--file", path]) == 1
        assert "JSON object" in capsys.readouterr().out

    def test_validate_valid(self, payload_file, capsys):
        assert survey_cli.main(["validate", "--file", str(payload_file)]) == 0
        assert "Payload is valid" in capsys.readouterr().out

    def test_validate_invalid(self, tmp_path, valid_payload, capsys):
        valid_payload["age"] = 200
        valid_payload["eatOutRating"] = 0
        path = write_payload(tmp_path, valid_payload)

        exit_code = survey_cli.main(["validate", "--file", path])

        output = capsys.readouterr().out
        assert exit_code == 1
        assert "age [age_range]" in output
        assert "eatOutRating [eatOutRating_range]" in output

    def test_validate_with_rules_file(self, tmp_path, valid_payload, capsys):
        rules = tmp_path / "rules.yaml"
        rules.write_text("rules:\n  name:\n    - type: length\n      params:\n        max: 3\n")
        path = write_payload(tmp_path, valid_payload)

        assert survey_cli.main(["validate", "--file", path, "--rules", str(rules)]) == 1
        assert "name_length_0" in capsys.readouterr().out

    def test_validate_with_malformed_rules_file(self, tmp_path, valid_payload, capsys):
        rules = tmp_path / "rules.yaml"
        rules.write_text("rules:\n  name: [unclosed\n")
        path = write_payload(tmp_path, valid_payload)

        assert survey_cli.main(["validate", "--file", path, "--rules", str(rules)]) == 1
        assert "not valid YAML" in capsys.readouterr().out

    def test_stats_empty(self, cli_store, capsys):
        assert survey_cli.main(["stats", "--format", "json"]) == 0
        assert json.loads(capsys.readouterr().out)["status"] == "empty"

    def test_stats_text(self, cli_store, tmp_path, valid_payload, capsys):
        for i, age in enumerate([20, 41]):
            payload = {**valid_payload, "email": f"user{i}@example.com", "age": age}
            survey_cli.main(["submit", "--file", write_payload(tmp_path, payload, f"p{i}.json")])
        capsys.readouterr()

        assert survey_cli.main(["stats"]) == 0

        output = capsys.readouterr().out
        assert "Total number of surveys: 2" in output
        assert "Average age:" in output
        assert "30.5" in output
        assert "Pizza" in output

    def test_recent(self, cli_store, tmp_path, valid_payload, capsys):
        for i in range(3):
            payload = {**valid_payload, "name": f"Respondent {i}", "email": f"user{i}@example.com"}
            survey_cli.main(["submit", "--file", write_payload(tmp_path, payload, f"p{i}.json")])
        capsys.readouterr()

        assert survey_cli.main(["recent", "--limit", "2"]) == 0

        lines = capsys.readouterr().out.strip().splitlines()
        assert lines[2].endswith("Respondent 2")
        assert lines[3].endswith("Respondent 1")
        assert len(lines) == 4

    def test_recent_rejects_bad_limit(self, cli_store, capsys):
        assert survey_cli.main(["recent", "--limit", "0"]) == 1
        assert "--limit" in capsys.readouterr().out

    def test_health(self, cli_store, capsys):
        assert survey_cli.main(["health"]) == 0
        assert json.loads(capsys.readouterr().out) == {"status": "healthy", "database": "connected"}

    def test_health_when_store_down(self, cli_store, capsys):
        cli_store.set_available(False)

        assert survey_cli.main(["health"]) == 1
        assert json.loads(capsys.readouterr().out)["database"] == "disconnected"

    def test_store_unavailable_exits_with_error(self, cli_store, capsys):
        cli_store.set_available(False)

        assert survey_cli.main(["stats"]) == 1
        assert "Error:" in capsys.readouterr().out

    @pytest.mark.parametrize("command", [["stats"], ["recent"], ["init-db"]])
    def test_unreachable_database_exits_with_error(self, command, tmp_path, monkeypatch, capsys):
        """Test that a database that refuses connections ends in exit code 1, not a traceback"""
        def refuse(self, max_retries=3, retry_delay=2.0):
            raise OperationalError("connection refused")

        monkeypatch.setattr(DatabaseConnectionPool, "open", refuse)
        monkeypatch.chdir(tmp_path)

        exit_code = survey_cli.main(
            ["--db-host", "127.0.0.1", "--db-port", "1", "--db-password", "x", *command]
        )

        assert exit_code == 1
        assert "Database unavailable" in capsys.readouterr().out

    def test_create_pool_raises_store_unavailable(self, monkeypatch):
        def time_out(self, max_retries=3, retry_delay=2.0):
            raise PoolTimeout("pool initialization incomplete")

        monkeypatch.setattr(DatabaseConnectionPool, "open", time_out)
        args = survey_cli.build_parser().parse_args(["--db-password", "x", "stats"])

        with pytest.raises(StoreUnavailable) as exc_info:
            survey_cli.create_pool(args)

        assert isinstance(exc_info.value.__cause__, PoolTimeout)

    def test_missing_env_file(self, tmp_path, capsys):
        assert survey_cli.main(["--env-file", str(tmp_path / "missing.env"), "health"]) == 1
        assert "env file not found" in capsys.readouterr().out

    def test_health_without_password(self, tmp_path, monkeypatch, capsys):
        """Test that a store that cannot be opened reports unhealthy instead of crashing"""
        monkeypatch.delenv("DB_PASSWORD", raising=False)
        monkeypatch.chdir(tmp_path)

        assert survey_cli.main(["health"]) == 1
        assert json.loads(capsys.readouterr().out)["status"] == "unhealthy"

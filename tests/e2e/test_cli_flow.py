"""
End-to-end test for the survey CLI.

Tests the complete flow: init-db → submit → stats → recent → health,
against a real PostgreSQL database.
"""

import json

import pytest

from survey_stats.cli import survey_cli


@pytest.mark.e2e
@pytest.mark.integration
def test_cli_end_to_end(clean_db, db_settings, tmp_path, valid_payload, capsys):
    """
    Test the CLI against PostgreSQL.

    Steps:
    1. Create the table (idempotent)
    2. Submit three surveys, one of them a duplicate email
    3. Verify statistics reflect exactly the two accepted surveys
    4. Verify recent submissions and health output
    """
    db_args = [
        "--db-host", db_settings["host"],
        "--db-port", str(db_settings["port"]),
        "--db-name", db_settings["database"],
        "--db-user", db_settings["user"],
        "--db-password", db_settings["password"],
    ]

    assert survey_cli.main([*db_args, "init-db"]) == 0
    assert "ready" in capsys.readouterr().out

    payloads = [
        {**valid_payload, "name": "First", "email": "first@example.com", "age": 22},
        {**valid_payload, "name": "Second", "email": "second@example.com", "age": "50"},
        {**valid_payload, "name": "Copy", "email": "FIRST@example.com"},
    ]
    exit_codes = []
    for i, payload in enumerate(payloads):
        path = tmp_path / f"survey_{i}.json"
        path.write_text(json.dumps(payload))
        exit_codes.append(survey_cli.main([*db_args, "submit", "--file", str(path)]))
    capsys.readouterr()

    assert exit_codes == [0, 0, 1]

    assert survey_cli.main([*db_args, "stats", "--format", "json"]) == 0
    stats = json.loads(capsys.readouterr().out)
    assert stats["status"] == "ok"
    assert stats["total"] == 2
    assert stats["age"]["average"] == 36.0
    assert stats["age_distribution"]["age_19_to_30"]["percentage"] == 50.0
    assert stats["age_distribution"]["over_45"]["percentage"] == 50.0
    assert "email" not in stats["recent_submissions"][0]

    assert survey_cli.main([*db_args, "recent"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[2].endswith("Second")

    assert survey_cli.main([*db_args, "health"]) == 0
    assert json.loads(capsys.readouterr().out)["status"] == "healthy"

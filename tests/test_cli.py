"""Tests for the recordquery CLI."""

import json

import pytest
import yaml

from conftest import SAMPLE_RECORDS
from recordquery import cli


def _run(argv):
    with pytest.raises(SystemExit) as exc:
        cli.main(argv)
    return exc.value.code


@pytest.fixture
def seeded_db(tmp_path, capsys):
    fixtures = tmp_path / "records.yaml"
    fixtures.write_text(yaml.safe_dump({"records": SAMPLE_RECORDS}), encoding="utf-8")
    db = tmp_path / "records.db"
    assert _run(["seed", "--fixtures", str(fixtures), "--db", str(db)]) == 0
    assert f"Seeded {len(SAMPLE_RECORDS)} record(s)" in capsys.readouterr().out
    return db


def test_get_prints_envelope_and_exits_zero(seeded_db, capsys):
    request = {
        "recordType": "customer",
        "idOptions": [{"property": "entityid", "operator": "is", "value": "ACME"}],
        "responseOptions": {"fields": ["companyname"]},
    }
    code = _run(["get", "--request", json.dumps(request), "--db", str(seeded_db)])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == 200
    assert payload["results"][0]["fields"]["companyname"] == "Acme Corp"


def test_related_from_request_file(seeded_db, tmp_path, capsys):
    request_file = tmp_path / "related.json"
    request_file.write_text(
        json.dumps({
            "parentRecordType": "salesorder",
            "idOptions": [{"property": "tranid", "operator": "is", "value": "SO-100"}],
            "childOptions": [{"childRecordType": "invoice", "fieldId": "createdfrom", "sublistId": "item"}],
        }),
        encoding="utf-8",
    )
    code = _run(["related", "--request", str(request_file), "--db", str(seeded_db)])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert [r["key"] for r in payload["results"]] == [7, 9]


def test_not_found_exits_one(seeded_db, capsys):
    request = {"recordType": "customer", "idOptions": [{"property": "entityid", "operator": "is", "value": "NOPE"}]}
    assert _run(["get", "--request", json.dumps(request), "--db", str(seeded_db)]) == 1
    assert json.loads(capsys.readouterr().out)["status"] == 404


def test_remote_uses_client(monkeypatch, capsys):
    calls = {}

    class _Client:
        def get_record(self, request):
            calls["request"] = request
            return {"status": 200, "message": "ok", "results": [], "rejects": []}

    def _from_settings(settings, access_token):
        calls["url"] = settings["restlet_url"]
        calls["token"] = access_token
        return _Client()

    monkeypatch.setattr(cli.RestletClient, "from_settings", staticmethod(_from_settings))
    code = _run([
        "remote", "get",
        "--request", '{"recordType": "customer"}',
        "--token", "t-1",
        "--url", "https://example.test/restlet",
    ])

    assert code == 0
    assert calls == {"url": "https://example.test/restlet", "token": "t-1", "request": {"recordType": "customer"}}
    assert json.loads(capsys.readouterr().out)["status"] == 200


def test_remote_without_url_fails(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert _run(["remote", "related", "--request", "{}", "--token", "t"]) == 1


def test_bad_request_argument_exits_one(tmp_path):
    assert _run(["get", "--request", "not-a-file-or-json", "--db", str(tmp_path / "x.db")]) == 1


def test_unknown_log_level_is_rejected_by_parser(capsys):
    assert _run(["--log-level", "bogus", "get", "--request", "{}"]) == 2
    assert "invalid choice: 'BOGUS'" in capsys.readouterr().err


def test_log_level_is_case_insensitive():
    args = cli.build_parser().parse_args(["--log-level", "audit", "get", "--request", "{}"])
    assert args.log_level == "AUDIT"

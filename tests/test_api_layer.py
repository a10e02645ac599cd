"""Tests for API layer guardrails."""

import ast
import importlib
from pathlib import Path

from fakes import FakeRecord, FakeStore

API_DIR = Path(__file__).resolve().parents[1] / "src" / "recordquery" / "api"
QUERY_DIR = Path(__file__).resolve().parents[1] / "src" / "recordquery" / "query"


def _imported_modules(path: Path):
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield alias.name
        elif isinstance(node, ast.ImportFrom) and node.module:
            yield node.module


def test_api_and_engine_do_not_import_sqlalchemy():
    """Only the store backend and the database package talk to SQLAlchemy."""
    violations = []
    for directory in (API_DIR, QUERY_DIR):
        for path in sorted(directory.glob("*.py")):
            for module in _imported_modules(path):
                if module.startswith("sqlalchemy") or "database" in module or "sqlite_store" in module:
                    violations.append(f"{path.name}: imports {module}")
    assert not violations, "Layer violations:\n" + "\n".join(violations)


def test_engine_keeps_no_module_level_log_buffer():
    """BoundedLogger instances are created per request, never at import time."""
    for path in sorted(QUERY_DIR.glob("*.py")):
        tree = ast.parse(path.read_text(encoding="utf-8"))
        for node in tree.body:
            if isinstance(node, ast.Assign) and isinstance(node.value, ast.Call):
                func = node.value.func
                name = getattr(func, "id", getattr(func, "attr", ""))
                assert name != "BoundedLogger", f"{path.name} builds a BoundedLogger at module level"


def test_api_module_imports_and_serves_a_request():
    """Importing the API pulls in every engine module; one request runs end to end."""
    records_api = importlib.import_module("recordquery.api.records_api")
    store = FakeStore(
        {("entityid", "ACME"): [5]},
        records={5: FakeRecord(5, fields={"companyname": "Acme Corp"})},
    )
    envelope = records_api.get_record(
        {
            "recordType": "customer",
            "idOptions": [{"idProp": "entityid", "searchOperator": "is", "idValue": "ACME"}],
            "responseOptions": {"fields": ["companyname"]},
        },
        store,
    )

    assert envelope.status == 200
    assert envelope.results[0].key == 5
    assert envelope.results[0].fields == {"internalid": 5, "companyname": "Acme Corp"}

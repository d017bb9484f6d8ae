import pytest
from fastapi.testclient import TestClient

from coverpage.config import Settings
from coverpage.web import create_app

from conftest import make_pdf, page_texts


@pytest.fixture
def client(tmp_path, ledger):
    app = create_app(Settings(storage_dir=tmp_path), ledger=ledger)
    return TestClient(app)


FORM = {
    "category": "WP",
    "author": "J. Doe",
    "email": "j.doe@example.org",
    "title": "Economic Growth in South Asia",
    "abstract": "Growth and trade in the region.",
    "jelcode": "O11",
    "keywords": "growth,trade",
    "acknow": "",
}


def _submit(client, data=FORM, pdf=None, name="paper.pdf", content_type="application/pdf"):
    files = {"file": (name, pdf if pdf is not None else make_pdf(3), content_type)}
    return client.post("/submit", data=data, files=files)


def test_index_renders_form(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert 'name="acknow"' in resp.text
    assert "Book Review" in resp.text


def test_categories(client):
    resp = client.get("/categories")
    assert {"code": "PP", "name": "PP Series"} in resp.json()


def test_submit_success(client, ledger):
    resp = _submit(client)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["number"] == "WP-2024-001"
    assert body["pages"] == 5

    stored = (ledger.directory / "WP-2024-001.pdf").read_bytes()
    assert len(page_texts(stored)) == 5


def test_submit_rejects_non_pdf(client, ledger):
    resp = _submit(client, pdf=b"hello", name="notes.txt", content_type="text/plain")
    assert resp.status_code == 400
    body = resp.json()
    assert body == {"success": False, "stage": "validate", "error": body["error"]}
    assert "PDF" in body["error"]
    assert ledger.records() == []


def test_submit_rejects_unknown_category(client):
    resp = _submit(client, data={**FORM, "category": "ZZ"})
    assert resp.status_code == 400
    assert resp.json()["stage"] == "validate"


def test_submit_without_file(client):
    resp = client.post("/submit", data=FORM)
    assert resp.status_code == 400
    assert "select a PDF" in resp.json()["error"]


def test_finalize_and_delete(client):
    number = _submit(client).json()["number"]

    resp = client.post(f"/records/{number}/finalize")
    assert resp.json() == {"success": True, "number": number, "status": "FINALIZED"}

    resp = client.post(f"/records/{number}/delete")
    assert resp.status_code == 502
    assert resp.json()["success"] is False


def test_delete_unfinalized_record(client, ledger):
    number = _submit(client).json()["number"]
    resp = client.post(f"/records/{number}/delete")
    assert resp.status_code == 200
    assert ledger.get(number).status == "DELETED"


def test_remote_ledger_not_configured(tmp_path):
    app = create_app(Settings(ledger="remote", storage_dir=tmp_path))
    resp = _submit(TestClient(app))
    assert resp.status_code == 503
    assert "COVERPAGE_LEDGER_URL" in resp.json()["error"]


def test_list_records(client):
    number = _submit(client).json()["number"]

    body = client.get("/records", params={"category": "wp"}).json()
    assert body["success"] is True
    assert [(r["number"], r["status"], r["title"]) for r in body["records"]] == [
        (number, "UPLOADED", FORM["title"])
    ]
    assert client.get("/records", params={"category": "PP"}).json()["records"] == []
    assert len(client.get("/records").json()["records"]) == 1


def test_list_records_unknown_category(client):
    resp = client.get("/records", params={"category": "ZZ"})
    assert resp.status_code == 400
    assert resp.json()["stage"] == "list"


def test_submit_rejects_unprintable_author(client, ledger):
    resp = _submit(client, data={**FORM, "author": "Ananya Dāsgupta"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["stage"] == "validate"
    assert "author" in body["error"]
    assert ledger.records() == []

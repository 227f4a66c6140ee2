"""
Tests for journal endpoints.
"""
from app.tests.support import auth_headers

ANA = auth_headers("user-a", "ana@example.com")


def test_journal_entries_lifecycle(client):
    created = client.post(
        "/api/journal",
        json={"entry_date": "2024-03-14", "title": "Dia difícil", "content": "Pouco sono.", "tags": ["sono"]},
        headers=ANA,
    )
    assert created.status_code == 201
    entry_id = created.json()["id"]

    listed = client.get("/api/journal", params={"entry_date": "2024-03-14"}, headers=ANA).json()
    assert [e["id"] for e in listed] == [entry_id]
    assert listed[0]["tags"] == ["sono"]

    bruno = auth_headers("user-b", "bruno@example.com")
    assert client.delete(f"/api/journal/{entry_id}", headers=bruno).status_code == 404
    assert client.delete(f"/api/journal/{entry_id}", headers=ANA).status_code == 204
    assert client.get("/api/journal", headers=ANA).json() == []


def test_journal_entry_requires_title(client):
    response = client.post(
        "/api/journal", json={"entry_date": "2024-03-14", "title": "", "content": "x"}, headers=ANA
    )
    assert response.status_code == 422


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").status_code == 200

import pytest


@pytest.fixture
def student(client, headers):
    return client.post("/students", json={"name": "Lucía", "grade": "3º"}, headers=headers).json()


def test_intervention_lifecycle(client, headers, catalog, student):
    r = client.post("/interventions", json={
        "activity_id": catalog["a1"],
        "student_id": student["id"],
        "observations": "  Participó activamente ",
        "barrier_ids": [catalog["b1"]],
        "learning_style_ids": [catalog["s1"]],
    }, headers=headers)
    assert r.status_code == 201, r.text
    intervention = r.json()
    assert intervention["activity_name"] == "Mapa Visual"
    assert intervention["student_name"] == "Lucía"
    assert intervention["observations"] == "Participó activamente"

    listed = client.get("/interventions", params={"student_id": student["id"]}, headers=headers).json()
    assert [i["id"] for i in listed] == [intervention["id"]]
    assert client.get("/interventions", params={"student_id": "otro"}, headers=headers).json() == []

    r = client.patch(f"/interventions/{intervention['id']}", json={"observations": None}, headers=headers)
    assert r.json()["observations"] is None
    assert r.json()["barrier_ids"] == [catalog["b1"]]

    assert client.delete(f"/interventions/{intervention['id']}", headers=headers).status_code == 204
    assert client.get(f"/interventions/{intervention['id']}", headers=headers).status_code == 404


def test_missing_references(client, headers, catalog, student):
    r = client.post("/interventions", json={"activity_id": "nada", "student_id": student["id"]}, headers=headers)
    assert r.status_code == 404
    r = client.post("/interventions", json={"activity_id": catalog["a1"], "student_id": "nadie"}, headers=headers)
    assert r.status_code == 404


def test_comments(client, login, catalog, student, headers):
    intervention = client.post("/interventions", json={
        "activity_id": catalog["a2"],
        "student_id": student["id"],
    }, headers=headers).json()
    colleague = login("marta@example.com", name="Marta", lastname="Ruiz")

    url = f"/interventions/{intervention['id']}/comments"
    assert client.post(url, json={"content": "   "}, headers=colleague).status_code == 400
    r = client.post(url, json={"content": "Buen progreso"}, headers=colleague)
    assert r.status_code == 201
    assert r.json()["author_name"] == "Marta Ruiz"
    client.post(url, json={"content": "De acuerdo"}, headers=headers)

    comments = client.get(url, headers=headers).json()
    assert [c["content"] for c in comments] == ["Buen progreso", "De acuerdo"]
    assert comments[1]["author_name"] == "ana@example.com"

    assert client.patch(f"/interventions/{intervention['id']}", json={"subject": "Arte"}, headers=colleague).status_code == 403

from datetime import date, datetime

from aula.routers.dashboard import last_months, monthly_counts


def test_last_months_cross_year():
    assert last_months(date(2026, 2, 10)) == [(2025, 9), (2025, 10), (2025, 11), (2025, 12), (2026, 1), (2026, 2)]


def test_monthly_counts_uses_spanish_abbreviations():
    stamps = [datetime(2026, 1, 3), datetime(2026, 1, 20), datetime(2025, 11, 30), datetime(2025, 3, 1)]
    counts = monthly_counts(stamps, date(2026, 2, 10))
    assert [(c.month, c.count) for c in counts] == [
        ("Sep", 0), ("Oct", 0), ("Nov", 1), ("Dic", 0), ("Ene", 2), ("Feb", 0),
    ]


def test_dashboard(client, headers, catalog):
    student = client.post("/students", json={"name": "Lucía", "grade": "3º"}, headers=headers).json()
    client.post("/interventions", json={"activity_id": catalog["a3"], "student_id": student["id"]}, headers=headers)

    today = datetime.utcnow().date()
    body = client.get("/dashboard", params={"today": today.isoformat()}, headers=headers).json()

    assert body["counts"] == {"activities": 3, "barriers": 2, "interventions": 1, "students": 1}
    assert {a["name"] for a in body["recent_activities"]} == {"Mapa Visual", "Cuento sonoro", "Circuito"}
    assert body["recent_interventions"][0]["student_name"] == "Lucía"
    assert body["recent_interventions"][0]["activity_name"] == "Circuito"

    barrier_counts = {b["name"]: b["count"] for b in body["barrier_usage"]}
    assert barrier_counts == {"Dislexia": 2, "Déficit de atención": 2}

    styles = body["style_usage"]
    assert [s["count"] for s in styles] == sorted((s["count"] for s in styles), reverse=True)
    assert {s["name"]: s["count"] for s in styles} == {"Visual": 2, "Auditivo": 2, "Kinestésico": 1}
    colors = {s["name"]: s["color"] for s in styles}
    assert colors["Visual"] == "#10b981"
    assert colors["Auditivo"] == "#3b82f6"

    months = body["activities_per_month"]
    assert len(months) == 6
    assert months[-1]["count"] == 3

import io
from datetime import date

from openpyxl import Workbook
from sqlalchemy.orm import sessionmaker

from paytrack.core.dependencies import get_db
from paytrack.db.session import build_engine
from paytrack.main import app


def create_client(api, name, monthly_amount=1000, **extra):
    response = api.post(
        "/api/clients",
        json={"name": name, "monthly_amount": monthly_amount, **extra},
    )
    assert response.status_code == 201
    return response.json()


def toggle(api, client_id, month, year, paid, **extra):
    return api.post(
        "/api/payments/toggle",
        json={"client_id": client_id, "month": month, "year": year, "paid": paid, **extra},
    )


def test_root(api):
    assert api.get("/").json() == {"status": "Backend running successfully"}


def test_client_crud(api):
    created = create_client(api, "Alice", phone="0999", email="alice@example.com")
    client_id = created["id"]

    assert api.get(f"/api/clients/{client_id}").json()["name"] == "Alice"

    response = api.patch(f"/api/clients/{client_id}", json={"monthly_amount": 1500})
    assert response.status_code == 200
    assert response.json()["monthly_amount"] == 1500
    assert response.json()["email"] == "alice@example.com"

    assert api.delete(f"/api/clients/{client_id}").status_code == 204
    assert api.get(f"/api/clients/{client_id}").status_code == 404
    assert api.delete(f"/api/clients/{client_id}").status_code == 404


def test_invalid_client_body_is_rejected(api):
    response = api.post(
        "/api/clients",
        json={"name": "Alice", "monthly_amount": 100, "email": "nope"},
    )

    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"][-1] == "email"


def test_list_clients_with_filters_and_pagination(api):
    ids = [create_client(api, f"Client {index:02d}")["id"] for index in range(25)]
    for client_id in ids[:5]:
        toggle(api, client_id, 5, 2024, True)

    body = api.get("/api/clients", params={"page": 2, "page_size": 10}).json()
    assert body["total"] == 25
    assert [c["name"] for c in body["clients"]] == [f"Client {i:02d}" for i in range(10, 20)]

    body = api.get("/api/clients", params={"paid": "paid", "month": 5, "year": 2024}).json()
    assert body["total"] == 5

    body = api.get("/api/clients", params={"paid": "unpaid", "month": 5, "year": 2024}).json()
    assert body["total"] == 20

    body = api.get("/api/clients", params={"search": "client 0"}).json()
    assert body["total"] == 10


def test_invalid_query_reports_field(api):
    response = api.get("/api/clients", params={"month": 12})

    assert response.status_code == 400
    assert response.json()["field"] == "month"

    response = api.get("/api/clients", params={"page": 0})

    assert response.status_code == 400
    assert response.json()["field"] == "page"


def test_toggle_creates_then_updates(api):
    client_id = create_client(api, "Alice")["id"]

    first = toggle(api, client_id, 3, 2024, True, notes="cash")
    assert first.status_code == 201
    assert first.json()["paid"] is True

    second = toggle(api, client_id, 3, 2024, False)
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["paid"] is False
    assert second.json()["notes"] == "cash"

    cleared = toggle(api, client_id, 3, 2024, False, notes="")
    assert cleared.json()["notes"] is None

    payments = api.get(f"/api/payments/{client_id}").json()
    assert len(payments) == 1


def test_toggle_errors(api):
    assert toggle(api, 999, 3, 2024, True).status_code == 404

    client_id = create_client(api, "Alice")["id"]
    response = toggle(api, client_id, 12, 2024, True)

    assert response.status_code == 400
    assert response.json()["field"] == "month"
    assert api.get("/api/payments").json() == []


def test_delete_client_cascades_to_payments(api):
    alice = create_client(api, "Alice")["id"]
    bob = create_client(api, "Bob")["id"]
    toggle(api, alice, 0, 2024, True)
    toggle(api, bob, 0, 2024, True)

    api.delete(f"/api/clients/{alice}")

    payments = api.get("/api/payments").json()
    assert [p["client_id"] for p in payments] == [bob]


def test_stats(api):
    client_id = create_client(api, "Alice", monthly_amount=1000)["id"]
    for month in range(3):
        toggle(api, client_id, month, 2024, True)

    body = api.get("/api/stats", params={"as_of": "2024-05-20"}).json()

    assert body == {
        "total_clients": 1,
        "total_expected": 12000,
        "total_paid": 3000,
        "outstanding": 9000,
        "overdue_count": 2,
    }


def test_stats_defaults_to_today(api):
    create_client(api, "Alice", monthly_amount=500)

    body = api.get("/api/stats").json()

    assert body["overdue_count"] == date.today().month


def test_export(api):
    client_id = create_client(api, "Alice", monthly_amount=1000)["id"]
    toggle(api, client_id, 0, 2024, True, notes="cash")

    response = api.get("/api/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "client-payments.csv" in response.headers["content-disposition"]
    assert response.text.splitlines()[1] == '"Alice","","",1000,"January",2024,"Yes","cash"'


def test_bulk_import(api):
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["Name", "Monthly Amount", "Phone", "Email"])
    sheet.append(["Alice", 1000, None, None])
    sheet.append(["Broken", -5, None, None])
    buffer = io.BytesIO()
    workbook.save(buffer)

    response = api.post(
        "/api/clients/bulk-import",
        files={"file": ("clients.xlsx", buffer.getvalue(), "application/octet-stream")},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["results"]["success"] == ["Alice"]
    assert body["results"]["errors"][0]["row"] == 3
    assert api.get("/api/clients").json()["total"] == 1


def test_bulk_import_rejects_unknown_file_type(api):
    response = api.post(
        "/api/clients/bulk-import",
        files={"file": ("clients.pdf", b"%PDF", "application/pdf")},
    )

    assert response.status_code == 400
    assert response.json()["field"] == "file"


def test_store_outage_returns_503(api, tmp_path):
    broken_engine = build_engine(f"sqlite:///{tmp_path / 'missing' / 'db.sqlite'}")
    BrokenSession = sessionmaker(bind=broken_engine)

    def broken_db():
        session = BrokenSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = broken_db

    response = api.get("/api/clients")

    assert response.status_code == 503
    broken_engine.dispose()

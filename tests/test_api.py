import io
import json
from decimal import Decimal
from pathlib import Path

import httpx
import pytest
from PIL import Image

import app.core.config as config
from app.auth.dependencies import token_claims
from app.crud.bannersCrud import add_banner
from app.crud.menuCrud import create_menu_item
from app.db.postgresql import get_db
from app.main import app
from app.models import Instructor, Invoice
from app.security.jwt import create_access_token
from app.services import contifico_service

LOGIN = "mutation($data: LoginInput!) { login(data: $data) { accessToken } }"


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.session_factory = session_factory
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()
    app.state.session_factory = None


def bearer(account):
    return {"x-access-token": create_access_token(token_claims(account, "session-idtest"))}


async def login(client, email="admin@giro.ec", password="s3cret-pass"):
    return await client.post(
        "/graphql", json={"query": LOGIN, "variables": {"data": {"email": email, "password": password}}}
    )


def png_bytes(size=(64, 64)):
    buffer = io.BytesIO()
    Image.new("RGB", size, (10, 120, 200)).save(buffer, "PNG")
    return buffer.getvalue()


async def test_check_authorized(client):
    missing = await client.post("/api/auth/check-authorized", json={})
    assert missing.status_code == 400
    assert missing.json() == {"error": "Email requerido"}

    allowed = await client.post("/api/auth/check-authorized", json={"email": "boss@giro.ec"})
    assert allowed.json() == {"isAuthorized": True, "email": "boss@giro.ec"}

    denied = await client.post("/api/auth/check-authorized", json={"email": "otro@giro.ec"})
    assert denied.json()["isAuthorized"] is False


async def test_graphiql_served_outside_production(client):
    response = await client.get("/graphql", headers={"Accept": "text/html"})

    assert response.status_code == 200
    assert "graphiql" in response.text.lower()


async def test_public_banners(client, db):
    await add_banner(db, title="Promo")
    await add_banner(db, title="Apagado", is_active=False)

    response = await client.get("/api/banners")

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert body["data"][0]["title"] == "Promo"


async def test_dashboard_requires_login(client):
    response = await client.get("/dashboard")

    assert response.status_code == 307
    assert response.headers["location"] == "/login"


async def test_login_opens_dashboard(client, admin):
    response = await login(client)
    assert response.json()["data"]["login"]["accessToken"]
    assert "refresh_token" in client.cookies

    dashboard = await client.get("/dashboard")
    assert dashboard.status_code == 200
    assert dashboard.json()["upcomingClasses"] == 0

    back_to_dashboard = await client.get("/login")
    assert back_to_dashboard.status_code == 307
    assert back_to_dashboard.headers["location"] == "/dashboard"


async def test_login_with_wrong_password(client, admin):
    response = await login(client, password="nope")

    body = response.json()
    assert body["data"] is None
    assert "401" in body["errors"][0]["message"]
    assert "access_token" not in client.cookies


async def test_refresh_cookie_issues_new_access_token(client, admin):
    await login(client)
    client.cookies.delete("access_token")

    response = await client.get("/dashboard")

    assert response.status_code == 200
    assert response.headers["x-access-token"]


async def test_revoked_session_cannot_refresh(client, admin):
    await login(client)
    refresh_token = client.cookies["refresh_token"]

    logout = await client.post("/graphql", json={"query": "mutation { logout { success message } }"})
    assert logout.json()["data"]["logout"] == {"success": True, "message": "Sesión cerrada."}

    client.cookies.clear()
    client.cookies.set("refresh_token", refresh_token)
    response = await client.get("/dashboard")
    assert response.status_code == 307
    assert response.headers["location"] == "/login"


async def test_admin_outside_allow_list(client, outsider):
    gated = await client.get("/dashboard", headers=bearer(outsider))
    assert gated.status_code == 307
    assert gated.headers["location"] == "/unauthorized"

    api = await client.get("/api/billing/list", headers=bearer(outsider))
    assert api.status_code == 403

    anonymous = await client.get("/api/billing/list")
    assert anonymous.status_code == 401


async def test_outsider_cannot_log_in(client, outsider):
    response = await login(client, email="intruso@giro.ec")

    assert "403" in response.json()["errors"][0]["message"]


async def test_billing_export_and_list(client, db, admin):
    invoice = Invoice(
        subtotal=Decimal("43.48"), iva_amount=Decimal("6.52"), total=Decimal("50.00"),
        customer_name="María", status="Draft",
    )
    db.add(invoice)
    await db.commit()

    listed = await client.get("/api/billing/list", headers=bearer(admin))
    assert [row["customer_name"] for row in listed.json()["drafts"]] == ["María"]
    assert listed.json()["sent"] == []

    exported = await client.get(f"/api/billing/export?ids={invoice.id}", headers=bearer(admin))
    assert exported.headers["content-type"].startswith("text/csv")
    assert exported.text.splitlines()[1].startswith(f"{invoice.id},María,")


async def test_billing_approve_requires_ids(client, admin):
    response = await client.post(
        "/api/billing/approve",
        json={"invoiceIds": [], "prefix": "001-001-", "start": 1},
        headers=bearer(admin),
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "IDs requeridos"}


async def test_billing_approve_sends_selected_invoices(client, db, admin, monkeypatch):
    monkeypatch.setattr(config, "CONTIFICO_API_KEY", "test-key")
    documents = []

    def handler(request: httpx.Request) -> httpx.Response:
        documents.append(json.loads(request.content)["documento"])
        return httpx.Response(201, json={"id": f"CT-{len(documents)}"})

    contifico = httpx.MockTransport(handler)
    monkeypatch.setattr(
        contifico_service, "new_client", lambda transport=None: httpx.AsyncClient(transport=contifico)
    )
    invoice = Invoice(
        package_name="Pack 10", quantity=1, iva_percentage=Decimal("0.15"),
        subtotal=Decimal("43.48"), iva_amount=Decimal("6.52"), total=Decimal("50.00"),
        customer_name="María", customer_cedula="0102030405", status="Draft",
    )
    db.add(invoice)
    await db.commit()

    response = await client.post(
        "/api/billing/approve",
        json={"invoiceIds": [str(invoice.id)], "prefix": "001-001-", "start": 21},
        headers=bearer(admin),
    )

    body = response.json()
    assert response.status_code == 200
    assert (body["success"], body["approved"], body["errors"]) == (True, 1, 0)
    assert body["results"][0]["document"] == "001-001-000000021"
    assert documents == ["001-001-000000021"]

    await db.refresh(invoice)
    assert (invoice.status, invoice.document_number) == ("Sent", "001-001-000000021")


async def test_purchases_export_for_unknown_member(client, admin):
    response = await client.get("/api/purchases/export?user=ghost@example.com", headers=bearer(admin))

    assert response.status_code == 200
    assert response.headers["content-disposition"] == (
        'attachment; filename="paquetes_clases_agrupados_vacio.csv"'
    )
    assert response.content.startswith("\ufeffTIPO".encode("utf-8"))


async def test_send_notification_validation(client, admin):
    response = await client.post(
        "/api/notifications/send",
        json={"title": "", "body": "Hola", "sendTo": "selected", "userIds": []},
        headers=bearer(admin),
    )

    assert response.status_code == 400
    assert response.json()["error"].startswith("Errores de validación")


async def test_menu_upload(client, db, admin):
    item = await create_menu_item(db, name="Banana Shake", price="4.50")

    missing = await client.post("/api/menu/upload", data={"id": str(item.id)}, headers=bearer(admin))
    assert missing.status_code == 400

    response = await client.post(
        "/api/menu/upload",
        data={"id": str(item.id)},
        files={"file": ("shake.png", png_bytes(), "image/png")},
        headers=bearer(admin),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Imagen subida correctamente"
    assert body["item"]["image"] == f"{item.id}.png"
    assert (Path(config.UPLOAD_DIR) / "menu" / f"{item.id}.png").exists()

    unknown = await client.post(
        "/api/menu/upload",
        data={"id": "6f1c1d64-4e0a-4d3c-9a44-2f7c5a3c8b11"},
        files={"file": ("shake.png", png_bytes(), "image/png")},
        headers=bearer(admin),
    )
    assert unknown.status_code == 404


async def test_instructor_upload(client, db, admin):
    instructor = Instructor(name="Ana Torres")
    db.add(instructor)
    await db.commit()

    invalid = await client.post(
        "/api/instructors/upload",
        files={"file": ("ana.gif", b"GIF89a", "image/gif")},
        headers=bearer(admin),
    )
    assert invalid.status_code == 400

    response = await client.post(
        "/api/instructors/upload",
        data={"id": str(instructor.id)},
        files={"file": ("ana.png", png_bytes((120, 80)), "image/png")},
        headers=bearer(admin),
    )

    assert response.status_code == 200
    url = response.json()["url"]
    assert url.startswith("http://testserver/uploads/instructors/ana-torres-")
    await db.refresh(instructor)
    assert instructor.profile_picture_url == url

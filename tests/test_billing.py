import asyncio
import json
from decimal import Decimal

import httpx
import pytest

import app.core.config as config
from app.crud.billingCrud import (
    BillingConfigError,
    approve_in_batches,
    approve_invoices,
    create_draft_invoices,
    list_sent,
    split_gross_price,
    sync_incomplete_drafts,
    valid_sequence,
)
from app.models import Invoice, Package, Purchase, User
from app.services.contifico_service import build_invoice_payload, document_number


@pytest.fixture
def contifico(monkeypatch):
    """Fake Contífico API that rejects customers whose cédula is "rechazada"."""
    monkeypatch.setattr(config, "CONTIFICO_API_KEY", "test-key")
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        sent.append(payload)
        assert request.headers["Authorization"] == "test-key"
        if payload["cliente"]["cedula"] == "rechazada":
            return httpx.Response(400, text="cliente inválido")
        return httpx.Response(201, json={"id": f"CT-{len(sent)}"})

    return sent, httpx.MockTransport(handler)


async def draft(db, status="Draft", cedula="0102030405", name="María López"):
    subtotal, iva_amount, total = split_gross_price(Decimal("50.00"))
    invoice = Invoice(
        package_name="Pack 10",
        package_price=Decimal("50.00"),
        subtotal=subtotal,
        iva_amount=iva_amount,
        total=total,
        status=status,
        customer_name=name,
        customer_cedula=cedula,
        customer_email="maria@example.com",
    )
    db.add(invoice)
    await db.commit()
    return invoice


def test_split_gross_price():
    assert split_gross_price(Decimal("50.00")) == (Decimal("43.48"), Decimal("6.52"), Decimal("50.00"))
    assert split_gross_price(Decimal("10"), 3) == (Decimal("26.09"), Decimal("3.91"), Decimal("30.00"))


@pytest.mark.parametrize(
    "prefix, start, expected",
    [
        ("001-001-", 1, True),
        ("001-001-", 999999999, True),
        ("001-001-", 1000000000, False),
        ("001-001-", 0, False),
        ("001-001-", "5", False),
        ("001-001-", True, False),
        ("1-1-", 5, False),
        (None, 5, False),
    ],
)
def test_valid_sequence(prefix, start, expected):
    assert valid_sequence(prefix, start) is expected


def test_document_number_and_payload():
    assert document_number("001-001-", 42) == "001-001-000000042"

    subtotal, iva_amount, total = split_gross_price(Decimal("50.00"))
    invoice = Invoice(
        package_name="Pack 10", quantity=1, iva_percentage=Decimal("0.15"),
        subtotal=subtotal, iva_amount=iva_amount, total=total,
        customer_name="María", customer_cedula="0102030405",
    )
    payload = build_invoice_payload(invoice, document="001-001-000000042", product_id="P1", fecha_emision="01/06/2025")

    assert payload["tipo_documento"] == "FAC"
    assert payload["subtotal_12"] == 43.48
    assert payload["subtotal_0"] == 0
    assert payload["iva"] == 6.52
    assert payload["total"] == 50.0
    assert payload["detalles"][0]["porcentaje_iva"] == 15
    assert payload["cliente"]["direccion"] == ""


async def test_create_drafts_skips_simulated_and_test_purchases(db):
    with_cedula = User(email="a@example.com", name="Ana", cedula="0102030405")
    without_cedula = User(email="b@example.com", name="Bea")
    real = Package(name="Pack 10", class_credits=10, price=Decimal("50.00"))
    trial = Package(name="Clase de PRUEBA", class_credits=1, price=Decimal("1.00"))
    db.add_all([with_cedula, without_cedula, real, trial])
    await db.flush()
    db.add_all([
        Purchase(user_id=with_cedula.id, package_id=real.id, credits_remaining=10, authorization_code="AUTH-1"),
        Purchase(user_id=without_cedula.id, package_id=real.id, credits_remaining=10, authorization_code="AUTH-2"),
        Purchase(user_id=with_cedula.id, package_id=real.id, credits_remaining=10, authorization_code="simulated-9"),
        Purchase(user_id=with_cedula.id, package_id=real.id, credits_remaining=10, authorization_code="DEV-1"),
        Purchase(user_id=with_cedula.id, package_id=trial.id, credits_remaining=1, authorization_code="AUTH-3"),
        Purchase(user_id=with_cedula.id, package_id=real.id, credits_remaining=10),
    ])
    await db.commit()

    drafts = await create_draft_invoices(db)

    by_customer = {d.customer_name: d for d in drafts}
    assert set(by_customer) == {"Ana", "Bea"}
    assert by_customer["Ana"].status == "Draft"
    assert by_customer["Ana"].total == Decimal("50.00")
    assert by_customer["Bea"].status == "Draft-Incomplete"
    assert by_customer["Bea"].missing_fields == ["cedula"]

    # Already drafted purchases are not drafted again
    assert len(await create_draft_invoices(db)) == 2

    without_cedula.cedula = "0911111111"
    await db.commit()
    assert await sync_incomplete_drafts(db) == 1
    await db.refresh(by_customer["Bea"])
    assert by_customer["Bea"].status == "Draft"
    assert by_customer["Bea"].customer_cedula == "0911111111"


async def test_approve_consumes_one_number_per_invoice(db, contifico):
    sent, transport = contifico
    first = await draft(db)
    rejected = await draft(db, cedula="rechazada")
    third = await draft(db, name="Luis")

    outcome = await approve_invoices(
        db, [str(third.id), str(rejected.id), str(first.id)], "001-001-", 7, transport=transport
    )

    assert (outcome.approved, outcome.errors) == (2, 1)
    assert [p["documento"] for p in sent] == [
        "001-001-000000007",
        "001-001-000000008",
        "001-001-000000009",
    ]
    for invoice in (first, rejected, third):
        await db.refresh(invoice)
    assert (third.status, third.document_number, third.contifico_id) == ("Sent", "001-001-000000007", "CT-1")
    assert first.document_number == "001-001-000000009"
    assert rejected.status == "Draft"
    assert "Contifico HTTP 400" in rejected.contifico_error
    assert len(await list_sent(db)) == 2


async def test_approve_rejects_bad_requests(db, monkeypatch):
    invoice = await draft(db)

    with pytest.raises(ValueError, match="IDs requeridos"):
        await approve_invoices(db, [], "001-001-", 1)
    with pytest.raises(ValueError, match="Secuencia inválida"):
        await approve_invoices(db, [str(invoice.id)], "001-", 1)

    monkeypatch.setattr(config, "CONTIFICO_API_KEY", None)
    with pytest.raises(BillingConfigError):
        await approve_invoices(db, [str(invoice.id)], "001-001-", 1)


async def test_approve_ignores_non_draft_invoices(db, contifico):
    _, transport = contifico
    incomplete = await draft(db, status="Draft-Incomplete")

    with pytest.raises(ValueError, match="No hay facturas en estado Draft"):
        await approve_invoices(db, [str(incomplete.id)], "001-001-", 1, transport=transport)


async def test_batches_advance_sequence_by_batch_length(db, contifico):
    sent, transport = contifico
    incomplete = await draft(db, status="Draft-Incomplete")
    first = await draft(db)
    second = await draft(db)

    outcome = await approve_in_batches(
        db,
        [str(incomplete.id), str(first.id), str(second.id)],
        "001-001-",
        10,
        batch_size=1,
        transport=transport,
    )

    assert outcome.approved == 2
    assert [p["documento"] for p in sent] == ["001-001-000000011", "001-001-000000012"]


async def test_interrupted_approval_keeps_issued_invoices(db, monkeypatch):
    monkeypatch.setattr(config, "CONTIFICO_API_KEY", "test-key")
    calls = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 2:
            raise asyncio.CancelledError()
        return httpx.Response(201, json={"id": "CT-1"})

    issued = await draft(db)
    pending = await draft(db, name="Luis")

    with pytest.raises(asyncio.CancelledError):
        await approve_invoices(
            db, [str(issued.id), str(pending.id)], "001-001-", 1, transport=httpx.MockTransport(handler)
        )
    await db.rollback()

    await db.refresh(issued)
    await db.refresh(pending)
    assert (issued.status, issued.document_number, issued.contifico_id) == ("Sent", "001-001-000000001", "CT-1")
    assert (pending.status, pending.document_number) == ("Draft", None)


async def test_unexpected_error_is_stored_on_the_invoice(db, contifico, monkeypatch):
    _, transport = contifico
    broken = await draft(db)
    fine = await draft(db, name="Luis")
    original_payload = build_invoice_payload

    def exploding_payload(invoice, **kwargs):
        if invoice.id == broken.id:
            raise KeyError("detalles")
        return original_payload(invoice, **kwargs)

    monkeypatch.setattr("app.services.contifico_service.build_invoice_payload", exploding_payload)

    outcome = await approve_invoices(db, [str(broken.id), str(fine.id)], "001-001-", 1, transport=transport)

    assert (outcome.approved, outcome.errors) == (1, 1)
    await db.refresh(broken)
    await db.refresh(fine)
    assert broken.status == "Draft"
    assert "detalles" in broken.contifico_error
    assert fine.document_number == "001-001-000000002"

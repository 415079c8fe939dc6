from datetime import date, datetime, time, timedelta

import pytest

import app.crud.reservationsCrud as reservations_crud
from app.crud.reservationsCrud import (
    cancel_reservation,
    create_reservation,
    get_available_bikes,
    get_available_classes,
    get_upcoming_reservations,
    join_waitlist,
    leave_waitlist,
    modify_reservation,
    update_reservation_bikes,
)
from app.db.rpc import RpcError
from app.models import User


class RecordedCalls(list):
    reply = {"success": True}


@pytest.fixture
def rpc_calls(monkeypatch):
    """Record stored procedure calls and answer with ``rpc_calls.reply``."""
    calls = RecordedCalls()

    async def fake_rpc(session, name, **params):
        calls.append((name, params))
        if isinstance(calls.reply, Exception):
            raise calls.reply
        return calls.reply

    monkeypatch.setattr(reservations_crud, "call_rpc", fake_rpc)
    return calls


async def test_create_reservation_maps_bike_numbers(db, studio, rpc_calls):
    message = await create_reservation(
        db,
        user_id=str(studio["member"].id),
        class_id=str(studio["class"].id),
        bike_numbers=[3, 1],
    )

    assert message == "Reservación creada exitosamente"
    name, params = rpc_calls[0]
    assert name == "make_reservation"
    assert params["p_user_id"] == str(studio["member"].id)
    assert params["p_bike_ids"] == [str(studio["bikes"][3].id), str(studio["bikes"][1].id)]


async def test_create_reservation_rejects_unknown_bikes(db, studio, rpc_calls):
    with pytest.raises(ValueError, match="Spots no encontrados en esta clase: 7, 9"):
        await create_reservation(
            db,
            user_id=str(studio["member"].id),
            class_id=str(studio["class"].id),
            bike_numbers=[1, 7, 9],
        )
    assert rpc_calls == []


@pytest.mark.parametrize("numbers", [[0], [-2], ["3"], [True]])
async def test_create_reservation_requires_positive_integers(db, studio, rpc_calls, numbers):
    with pytest.raises(ValueError, match="enteros positivos"):
        await create_reservation(
            db, user_id=str(studio["member"].id), class_id=str(studio["class"].id), bike_numbers=numbers
        )


async def test_create_reservation_requires_data(db, rpc_calls):
    with pytest.raises(ValueError, match="Faltan datos requeridos"):
        await create_reservation(db, user_id=None, class_id="x", bike_numbers=[1])


async def test_create_reservation_translates_procedure_errors(db, studio, rpc_calls):
    rpc_calls.reply = RpcError("make_reservation", "insufficient credits for user")

    with pytest.raises(ValueError) as exc:
        await create_reservation(
            db, user_id=str(studio["member"].id), class_id=str(studio["class"].id), bike_numbers=[1]
        )

    assert str(exc.value) == (
        "El usuario no tiene suficientes créditos para esta reservación. (insufficient credits for user)"
    )


async def test_create_reservation_reports_failed_payload(db, studio, rpc_calls):
    rpc_calls.reply = {"success": False, "message": "Clase llena"}

    with pytest.raises(ValueError, match="Clase llena"):
        await create_reservation(
            db, user_id=str(studio["member"].id), class_id=str(studio["class"].id), bike_numbers=[1]
        )


async def test_modify_reservation_maps_bike_numbers(db, studio, rpc_calls):
    reservation_id = "6f1c1d64-4e0a-4d3c-9a44-2f7c5a3c8b11"

    message = await modify_reservation(
        db, reservation_id, new_class_id=str(studio["class"].id), bike_numbers=[2, 3]
    )

    assert message == "Reservación modificada exitosamente"
    assert rpc_calls == [
        (
            "modify_reservation",
            {
                "p_reservation_id": reservation_id,
                "p_new_class_id": str(studio["class"].id),
                "p_new_bike_ids": [str(studio["bikes"][2].id), str(studio["bikes"][3].id)],
            },
        )
    ]


async def test_modify_reservation_rejects_unknown_bikes(db, studio, rpc_calls):
    with pytest.raises(ValueError, match="Spots no encontrados en esta clase: 8"):
        await modify_reservation(
            db,
            "6f1c1d64-4e0a-4d3c-9a44-2f7c5a3c8b11",
            new_class_id=str(studio["class"].id),
            bike_numbers=[1, 8],
        )
    assert rpc_calls == []

    with pytest.raises(ValueError, match="ID de reservación inválido."):
        await modify_reservation(db, "nope", new_class_id=str(studio["class"].id), bike_numbers=[1])


async def test_modify_reservation_translates_procedure_errors(db, studio, rpc_calls):
    reservation_id = "6f1c1d64-4e0a-4d3c-9a44-2f7c5a3c8b11"
    rpc_calls.reply = RpcError("modify_reservation", "too late to modify")

    with pytest.raises(ValueError) as exc:
        await modify_reservation(db, reservation_id, new_class_id=str(studio["class"].id), bike_numbers=[1])
    assert str(exc.value) == "Ya es muy tarde para modificar esta reservación. (too late to modify)"

    rpc_calls.reply = {"success": False, "message": "Spot ocupado"}
    with pytest.raises(ValueError, match="Spot ocupado"):
        await modify_reservation(db, reservation_id, new_class_id=str(studio["class"].id), bike_numbers=[1])


async def test_cancel_reservation(db, rpc_calls):
    reservation_id = "6f1c1d64-4e0a-4d3c-9a44-2f7c5a3c8b11"

    message = await cancel_reservation(db, reservation_id)

    assert message.startswith("Reservación cancelada exitosamente")
    assert rpc_calls == [("cancel_reservation", {"p_reservation_id": reservation_id})]

    rpc_calls.reply = RpcError("cancel_reservation", "reservation already cancelled")
    with pytest.raises(ValueError, match="ya ha sido cancelada"):
        await cancel_reservation(db, reservation_id)

    with pytest.raises(ValueError, match="ID de reservación inválido."):
        await cancel_reservation(db, "nope")


async def test_waitlist(db, studio, rpc_calls):
    rpc_calls.reply = {"success": True, "message": "Posición 2 en la lista de espera"}
    message = await join_waitlist(db, user_id=studio["member"].id, class_id=studio["class"].id)
    assert message == "Posición 2 en la lista de espera"

    rpc_calls.reply = None
    message = await leave_waitlist(db, user_id=studio["member"].id, class_id=studio["class"].id)
    assert message == "Usuario removido de la lista de espera exitosamente."
    assert [name for name, _ in rpc_calls] == ["join_waitlist", "leave_waitlist"]


async def test_update_bikes_refunds_released_credits(db, studio, reserve):
    reservation = await reserve(studio, [1, 2], credits_used=2)

    message = await update_reservation_bikes(db, str(reservation.id), [4])

    assert message == "Spots actualizados exitosamente. Nuevos spots: 4"
    purchase = studio["purchase"]
    await db.refresh(purchase)
    assert purchase.credits_remaining == 9

    bikes = await get_available_bikes(db, str(studio["class"].id), str(reservation.id))
    assert [b.number for b in bikes.current_bikes] == [4]


async def test_update_bikes_rejects_bikes_of_other_members(db, studio, reserve):
    other = User(email="otro@example.com", name="Otro")
    db.add(other)
    await db.commit()
    mine = await reserve(studio, [1])
    await reserve(studio, [2], user=other)

    with pytest.raises(ValueError, match="ya están reservados por otro usuario"):
        await update_reservation_bikes(db, str(mine.id), [1, 2])

    with pytest.raises(ValueError, match="al menos un spot"):
        await update_reservation_bikes(db, str(mine.id), [])


async def test_available_bikes_ignore_cancelled_and_edited_reservation(db, studio, reserve):
    await reserve(studio, [1])
    await reserve(studio, [2], status="cancelled")
    edited = await reserve(studio, [3])

    plain = await get_available_bikes(db, str(studio["class"].id))
    assert [b.number for b in plain.available_bikes] == [2, 4]
    assert plain.current_bikes == []

    editing = await get_available_bikes(db, str(studio["class"].id), str(edited.id))
    assert [b.number for b in editing.available_bikes] == [2, 3, 4]
    assert [b.number for b in editing.current_bikes] == [3]


async def test_available_classes(db, studio, reserve):
    await reserve(studio, [1, 2, 3])
    class_day = studio["class"].date

    classes = await get_available_classes(db, now=datetime.combine(class_day - timedelta(days=1), time(9)))
    assert [(c.name, c.available_spots, c.instructor_name) for c in classes] == [("Rise", 1, "Ana Torres")]

    # Started classes of the day are gone
    assert await get_available_classes(db, now=datetime.combine(class_day, time(7, 30))) == []

    await reserve(studio, [4])
    assert await get_available_classes(db, now=datetime.combine(class_day, time(6))) == []


async def test_upcoming_reservations_put_waitlist_first(db, studio, reserve):
    await reserve(studio, [2, 1])
    await reserve(studio, [], status="waitlist")
    await reserve(studio, [3], status="cancelled")

    rows = await get_upcoming_reservations(db, from_date=date.today())

    assert [r.status for r in rows] == ["waitlist", "confirmed"]
    assert rows[1].bike_numbers == [1, 2]
    assert rows[1].user_shoe_size == "38"
    assert rows[1].instructor_name == "Ana Torres"

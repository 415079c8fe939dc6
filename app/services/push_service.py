"""
Expo push notification sender.

Messages go out in fixed-size batches with a fixed pause between batches.
One ticket is returned per message, in the same order as the messages.
"""
import asyncio
from dataclasses import dataclass
from typing import List, Optional

import httpx

import app.core.config as config
from app.core.logging_config import get_logger
from app.core.timeutils import utcnow

logger = get_logger("services.push")

EXPO_HEADERS = {
    "Accept": "application/json",
    "Accept-encoding": "gzip, deflate",
    "Content-Type": "application/json",
}


@dataclass
class PushTicket:
    status: str
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


def build_message(token: str, title: str, body: str) -> dict:
    return {
        "to": token,
        "sound": "default",
        "title": title,
        "body": body,
        "data": {"timestamp": utcnow().isoformat()},
    }


def _tickets_from_response(response: httpx.Response, expected: int) -> List[PushTicket]:
    try:
        payload = response.json()
    except ValueError:
        payload = {}

    data = payload.get("data") if isinstance(payload, dict) else None
    if not response.is_success or not isinstance(data, list):
        error = f"Expo API error: {response.status_code}"
        return [PushTicket(status="error", message=error) for _ in range(expected)]

    tickets = [
        PushTicket(status=item.get("status", "error"), message=item.get("message"))
        for item in data[:expected]
    ]
    # Expo answers one ticket per message; pad if it did not
    while len(tickets) < expected:
        tickets.append(PushTicket(status="error", message="Sin respuesta de Expo"))
    return tickets


async def send_push_messages(
    messages: List[dict],
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[PushTicket]:
    batch_size = max(1, config.PUSH_BATCH_SIZE)
    tickets: List[PushTicket] = []

    async with httpx.AsyncClient(transport=transport, timeout=30.0) as client:
        for start in range(0, len(messages), batch_size):
            if start:
                await asyncio.sleep(config.PUSH_BATCH_DELAY_SECONDS)
            batch = messages[start:start + batch_size]
            try:
                response = await client.post(config.EXPO_PUSH_URL, json=batch, headers=EXPO_HEADERS)
            except httpx.HTTPError as e:
                logger.error(f"Expo push request failed: {e}")
                tickets.extend(PushTicket(status="error", message=str(e)) for _ in batch)
                continue

            batch_tickets = _tickets_from_response(response, len(batch))
            ok = sum(1 for ticket in batch_tickets if ticket.ok)
            logger.info(
                f"Expo batch {start // batch_size + 1}: HTTP {response.status_code}, "
                f"{ok}/{len(batch)} ok"
            )
            tickets.extend(batch_tickets)

    return tickets

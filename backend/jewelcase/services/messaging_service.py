# Overview: Agent messaging; composes case summaries and simulates the chat gateway.

"""
Messaging Service

There is no real gateway behind this: send_message writes the payload to the
application log, records a MESSAGE_SENT audit entry and acknowledges. Nothing
is queued or retried.
"""
from __future__ import annotations

import re
from urllib.parse import quote

from flask import current_app
from sqlalchemy.orm import Session

from ..models import Agent, Case
from ..validation import NotFoundError, ValidationError
from .audit_service import ACTION_MESSAGE_SENT, append_log_entry
from .case_service import case_to_dict
from .commission_service import calculate_commission
from .transaction import atomic

DEEP_LINK_BASE = "https://wa.me/"
PREVIEW_LENGTH = 100


def format_money(cents: int) -> str:
    """pt-BR currency display: 123456 -> 'R$ 1.234,56'."""
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), 100)
    return f"{sign}R$ {whole:,}".replace(",", ".") + f",{frac:02d}"


def contact_digits(contact: str | None) -> str:
    return re.sub(r"\D", "", contact or "")


def build_deep_link(contact: str, message: str) -> str:
    return f"{DEEP_LINK_BASE}{contact_digits(contact)}?text={quote(message, safe='')}"


def compose_case_message(case: dict) -> str:
    """Delivery summary for the agent holding the case (case as serialized by case_to_dict)."""
    quote_ = calculate_commission(case["total_value_cents"])
    item_lines = "\n".join(
        f"- {item['product_name']} ({item['quantity']}x): {format_money(item['price_at_time_cents'])}"
        for item in case.get("items", [])
    )
    return_date = case.get("return_date") or ""
    # return_date is ISO 'YYYY-MM-DDTHH:MM:SSZ'; show it as DD/MM/YYYY
    if len(return_date) >= 10:
        year, month, day = return_date[:10].split("-")
        return_date = f"{day}/{month}/{year}"

    return (
        "📦 *CASE DELIVERED*\n\n"
        f"Hello {case.get('agent_name') or ''},\n"
        f"Your case *{case['name']}* has been processed.\n\n"
        f"*Items:*\n{item_lines}\n\n"
        f"*Total value:* {format_money(case['total_value_cents'])}\n"
        f"*Your commission ({quote_.rate_percent:g}%):* {format_money(quote_.payout_cents)}\n\n"
        f"📅 *Return date:* {return_date}\n\n"
        "_Please check the items and get in touch with any questions._"
    )


def case_message(session: Session, *, case_id: int) -> dict:
    """Composed message plus deep link for a case's agent."""
    case = session.get(Case, case_id)
    if case is None:
        raise NotFoundError("Case not found")
    if case.agent is None:
        raise ValidationError("Case has no agent assigned")

    message = compose_case_message(case_to_dict(case))
    return {
        "case_id": case.id,
        "agent_id": case.agent_id,
        "to": case.agent.contact,
        "message": message,
        "deep_link": build_deep_link(case.agent.contact, message),
    }


def send_message(
    session: Session,
    *,
    agent_id: int,
    message: str,
    photo: str | None = None,
    pdf: str | None = None,
    case_id: int | None = None,
) -> dict:
    """
    Simulated gateway send.

    Raises:
        ValidationError: empty message
        NotFoundError: unknown agent or case
    """
    if not message or not str(message).strip():
        raise ValidationError("message is required")

    with atomic(session):
        agent = session.get(Agent, agent_id)
        if agent is None:
            raise NotFoundError("Agent not found")
        if case_id is not None and session.get(Case, case_id) is None:
            raise NotFoundError("Case not found")

        logger = current_app.logger
        logger.info("messaging gateway: to=%s agent_id=%s case_id=%s", agent.contact, agent.id, case_id)
        logger.info("messaging gateway: message=%r", message)
        logger.info(
            "messaging gateway: photo=%s pdf=%s",
            "attached" if photo else "none",
            "attached" if pdf else "none",
        )

        append_log_entry(
            session,
            case_id=case_id,
            action=ACTION_MESSAGE_SENT,
            details=f"Automatic send through the gateway to {agent.name}",
        )
        to = agent.contact

    return {
        "success": True,
        "message": "Message queued for the messaging gateway",
        "payload_preview": {
            "to": to,
            "message": message[:PREVIEW_LENGTH] + "...",
            "has_media": bool(photo or pdf),
        },
    }

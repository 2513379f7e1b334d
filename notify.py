"""
notify.py
Outbound WhatsApp messages (Cloud API). Best-effort: every send returns a
bool and failures are logged, never raised.
"""

from __future__ import annotations

import logging

import requests

from config import settings
from models import Catalog, Member
from utils import iso_or_empty

logger = logging.getLogger(__name__)

GRAPH_URL = "https://graph.facebook.com/{version}/{phone_id}/messages"


def receipt_text(gym_name: str, name: str, plan_label: str, amount: int, date_label: str) -> str:
    return (
        f"Hi {name}, thank you for your payment at {gym_name}.\n"
        f"Membership: {plan_label}\n"
        f"Amount: Rs {amount:,}\n"
        f"Date: {date_label}"
    )


def reminder_text(gym_name: str, member: Member, plan_label: str) -> str:
    return (
        f"Hi {member.name}, your {plan_label} membership at {gym_name} "
        f"expires on {iso_or_empty(member.expiry_date)}. Please renew to keep training."
    )


class WhatsAppDispatcher:
    def __init__(
        self,
        token: str | None = None,
        phone_number_id: str | None = None,
        *,
        api_version: str | None = None,
        timeout: float | None = None,
        gym_name: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._token = token if token is not None else settings.WHATSAPP_TOKEN
        self._phone_id = phone_number_id if phone_number_id is not None else settings.WHATSAPP_PHONE_NUMBER_ID
        self._api_version = api_version or settings.WHATSAPP_API_VERSION
        self._timeout = timeout or settings.WHATSAPP_TIMEOUT
        self.gym_name = gym_name or settings.GYM_NAME
        self._session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self._token and self._phone_id)

    def send_text(self, to_phone: str, text: str) -> bool:
        if not self.is_configured:
            logger.info("WhatsApp not configured; skipping message to %s", to_phone)
            return False
        to = "".join(ch for ch in to_phone if ch.isdigit())
        if not to:
            logger.warning("No usable phone number in %r", to_phone)
            return False

        url = GRAPH_URL.format(version=self._api_version, phone_id=self._phone_id)
        headers = {"Authorization": f"Bearer {self._token}", "Content-Type": "application/json"}
        payload = {
            "messaging_product": "whatsapp",
            "to": to,
            "type": "text",
            "text": {"preview_url": False, "body": text},
        }
        try:
            response = self._session.post(url, headers=headers, json=payload, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.warning("WhatsApp request to %s failed: %s", to, exc)
            return False
        if not 200 <= response.status_code < 300:
            logger.warning("WhatsApp API returned HTTP %s: %s", response.status_code, response.text)
            return False
        return True

    def send_receipt(self, name: str, phone: str, plan_label: str, amount: int, date_label: str) -> bool:
        return self.send_text(phone, receipt_text(self.gym_name, name, plan_label, amount, date_label))

    def send_expiry_reminder(self, member: Member, plan_label: str) -> bool:
        return self.send_text(member.phone, reminder_text(self.gym_name, member, plan_label))

    def send_bulk_expiry_reminders(self, members, catalog: Catalog) -> dict:
        sent = failed = 0
        for m in members:
            if self.send_expiry_reminder(m, catalog.plan_label(m.plan_id)):
                sent += 1
            else:
                failed += 1
        logger.info("Expiry reminders: %d sent, %d failed", sent, failed)
        return {"success": sent, "failed": failed, "total": sent + failed}

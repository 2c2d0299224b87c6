"""
Payment Reminders

Builds the WhatsApp reminder a pending client receives. Only the
payload is built here; opening the link is left to the UI.
"""

import re
from decimal import Decimal
from typing import Optional
from urllib.parse import quote

from pydantic import BaseModel

from lavafix.config import AppSettings, get_settings
from lavafix.ledger.projections import pending_clients
from lavafix.models import Client, format_amount


WHATSAPP_BASE_URL = "https://wa.me/"

REMINDER_TEMPLATE = """Estimado/a {name},

Espero que se encuentre bien. Le escribo para recordarle amablemente que tiene un pago pendiente de {amount}.

Agradecemos su pronta atención a este asunto.

Para cualquier consulta o reporte de problemas, puede contactar a:
{contact_name}
Teléfono: {contact_phone}

¡Muchas gracias!"""


class ReminderLink(BaseModel):
    """A ready-to-open WhatsApp deep link."""

    client_id: str
    phone: str
    message: str
    url: str


def build_reminder_message(
    name: str,
    amount: Decimal,
    settings: Optional[AppSettings] = None,
) -> str:
    settings = settings or get_settings().app
    return REMINDER_TEMPLATE.format(
        name=name,
        amount=format_amount(amount, settings.currency_symbol),
        contact_name=settings.support_contact_name,
        contact_phone=settings.support_contact_phone,
    )


def build_whatsapp_link(
    client: Client,
    settings: Optional[AppSettings] = None,
) -> ReminderLink:
    """
    Reminder link for one client.

    phone1 is stripped to digits and prefixed with the country code.
    """
    settings = settings or get_settings().app
    phone = settings.whatsapp_country_code + re.sub(r"\D", "", client.phone1)
    message = build_reminder_message(client.name, client.monthly_amount, settings)
    return ReminderLink(
        client_id=client.id,
        phone=phone,
        message=message,
        url=f"{WHATSAPP_BASE_URL}{phone}?text={quote(message, safe='')}",
    )


def first_pending_reminder(
    clients: list[Client],
    settings: Optional[AppSettings] = None,
) -> Optional[ReminderLink]:
    """
    The "send to everyone" action.

    Browsers only let us open one WhatsApp window per click, so this
    returns the first pending client's link; the rest are sent by hand.
    """
    pending = pending_clients(clients)
    if not pending:
        return None
    return build_whatsapp_link(pending[0], settings)

# agenda/services/notification/whatsapp_link.py
"""
Pre-filled WhatsApp message link for a new booking.

Pure function of the booking; dispatching it is the caller's business.
"""
import re
from datetime import datetime
from typing import Optional
from urllib.parse import quote

from agenda.schemas.booking import Booking
from agenda.schemas.catalog import Business
from agenda.services.catalog.catalog_service import CatalogService

WA_BASE_URL = "https://wa.me"

MESSAGE_TEMPLATE = (
    "Olá {business}! Acabei de realizar um agendamento.\n\n"
    "*Serviço:* {service}\n"
    "*Data:* {date}\n"
    "*Hora:* {time}\n"
    "*Cliente:* {customer}"
)


def phone_digits(phone: Optional[str]) -> str:
    return re.sub(r"\D", "", phone or "")


def booking_message(business: Business, booking: Booking) -> str:
    start = datetime.fromtimestamp(booking.start_time / 1000, tz=CatalogService.business_zone(business))
    return MESSAGE_TEMPLATE.format(
        business=business.name,
        service=booking.service_name,
        date=start.strftime("%d/%m/%Y"),
        time=start.strftime("%H:%M"),
        customer=booking.customer_name,
    )


def build_whatsapp_link(business: Business, booking: Booking) -> Optional[str]:
    """wa.me link to the business's WhatsApp (or phone); None without digits"""
    digits = phone_digits(business.whatsapp) or phone_digits(business.phone)
    if not digits:
        return None
    return f"{WA_BASE_URL}/{digits}?text={quote(booking_message(business, booking), safe='')}"

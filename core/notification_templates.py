"""Email bodies for lead notifications (acknowledgement in en/es/de, staff alert in en)."""

from dataclasses import dataclass
from html import escape

from core.models import Lead, LeadSource, Listing


@dataclass(frozen=True)
class EmailContent:
    subject: str
    html: str
    text: str


_ACK_SUBJECT = {
    "en": "Thank you - {brand}",
    "es": "Gracias - {brand}",
    "de": "Danke - {brand}",
}

_ACK_LISTING_SUBJECT = {
    "en": "Thank you for your interest in {title}",
    "es": "Gracias por tu interés en {title}",
    "de": "Vielen Dank für Ihr Interesse an {title}",
}

_GREETING = {"en": "Hi {name},", "es": "Hola {name},", "de": "Hallo {name},"}

_ACK_BODY = {
    "en": "Thanks for contacting {brand}. Our team will be in touch as soon as possible.",
    "es": "Gracias por contactar con {brand}. Nuestro equipo se pondrá en contacto contigo lo antes posible.",
    "de": "Vielen Dank für Ihre Kontaktaufnahme mit {brand}. Unser Team wird sich so schnell wie möglich bei Ihnen melden.",
}

_ACK_LISTING_BODY = {
    "en": "Thank you for reaching out about {title}. Our team will be in touch soon.",
    "es": "Gracias por tu interés en {title}. Nuestro equipo se pondrá en contacto contigo pronto.",
    "de": "Vielen Dank für Ihr Interesse an {title}. Unser Team wird sich in Kürze bei Ihnen melden.",
}

_SIGN_OFF = {
    "en": "Best regards,\n{brand} team",
    "es": "Un saludo,\n{brand}",
    "de": "Mit freundlichen Grüßen,\n{brand}",
}


def acknowledgement(language: str, lead: Lead, listing: Listing | None, brand: str) -> EmailContent:
    """Thank-you email to the person who submitted the form."""
    lang = language if language in _GREETING else "en"
    greeting = _GREETING[lang].format(name=lead.first_name)
    sign_off = _SIGN_OFF[lang].format(brand=brand)

    if listing is not None:
        subject = _ACK_LISTING_SUBJECT[lang].format(title=listing.title)
        body = _ACK_LISTING_BODY[lang].format(title=listing.title)
        body_html = escape(_ACK_LISTING_BODY[lang]).format(
            title=f"<strong>{escape(listing.title)}</strong>"
        )
    else:
        subject = _ACK_SUBJECT[lang].format(brand=brand)
        body = _ACK_BODY[lang].format(brand=brand)
        body_html = escape(_ACK_BODY[lang]).format(brand=f"<strong>{escape(brand)}</strong>")

    html = (
        f"<p>{escape(greeting)}</p>"
        f"<p>{body_html}</p>"
        f"<p>{escape(sign_off).replace(chr(10), '<br/>')}</p>"
    )
    text = f"{greeting}\n\n{body}\n\n{sign_off}"
    return EmailContent(subject=subject, html=html, text=text)


def owner_alert(lead: Lead, listing: Listing | None, app_url: str, brand: str) -> EmailContent:
    """Staff alert for a new lead."""
    if listing is not None:
        subject = f"New lead for {listing.title}"
        intro_text = f"You have a new lead for {listing.title}."
        intro_html = f"You have a new lead for <strong>{escape(listing.title)}</strong>."
    elif lead.source == LeadSource.SELLER_FORM:
        subject = f"{brand} - New SELLER lead"
        intro_text = "New SELLER lead submitted on the For Sellers page."
        intro_html = escape(intro_text)
    else:
        subject = f"{brand} - New Contact form submission"
        intro_text = "You have a new inquiry from the Contact page."
        intro_html = "You have a new inquiry from the <strong>Contact</strong> page."

    details = [("Name", lead.name), ("Email", lead.email)]
    if lead.phone:
        details.append(("Phone", lead.phone))
    if lead.preferred_language:
        details.append(("Preferred language", lead.preferred_language))
    if lead.source == LeadSource.SELLER_FORM:
        for label, value in (
            ("Neighborhood", lead.seller_neighborhood),
            ("Size", lead.seller_size),
            ("Rooms", lead.seller_rooms),
            ("Occupancy", lead.seller_occupancy_status),
        ):
            if value:
                details.append((label, value))
    if listing is not None and listing.url:
        details.append(("Listing", listing.url))

    crm_link = f"{app_url}/admin/dashboard/leads"
    items = "".join(f"<li><strong>{label}:</strong> {escape(str(value))}</li>" for label, value in details)

    html_parts = [f"<p>{intro_html}</p>", f"<ul>{items}</ul>"]
    if lead.message:
        html_parts.append(
            f"<p><strong>Message:</strong><br/>{escape(lead.message).replace(chr(10), '<br/>')}</p>"
        )
    html_parts.append(f"<p>View in CRM: {escape(crm_link)}</p>")
    html_parts.append(f"<p style=\"margin-top:16px;\">Best regards,<br/>{escape(brand)} team</p>")

    text_lines = [intro_text] + [f"{label}: {value}" for label, value in details]
    if lead.message:
        text_lines.append(f"Message: {lead.message}")
    text_lines.append(f"View in CRM: {crm_link}")

    return EmailContent(subject=subject, html="".join(html_parts), text="\n".join(text_lines))

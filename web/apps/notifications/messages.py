"""Text and HTML bodies of the customer emails.

Every customer-controlled value is HTML-escaped before it lands in the HTML
body; the text body carries it verbatim.
"""

from dataclasses import dataclass
from html import escape

from apps.common.money import format_cents


@dataclass(frozen=True)
class EmailMessage:
    subject: str
    text: str
    html: str


@dataclass(frozen=True)
class MessageLine:
    title: str
    qty: int
    unit_price_cents: int


def order_confirmation(public_id: str, first_name: str, lines: list[MessageLine], total_cents: int,
                       currency: str = "EUR") -> EmailMessage:
    text_lines = "\n".join(
        f"- {line.title} x{line.qty} ({format_cents(line.unit_price_cents)} {currency})" for line in lines
    )
    text = (
        f"Hello {first_name},\n\n"
        f"Thank you for your order {public_id}.\n\n"
        f"Items:\n{text_lines}\n\n"
        f"Total: {format_cents(total_cents)} {currency}\n\n"
        "We will keep you posted about the next steps.\n"
    )
    items_html = "".join(
        f"<li>{escape(line.title)} x{line.qty} ({format_cents(line.unit_price_cents)} {currency})</li>"
        for line in lines
    )
    html = (
        f"<p>Hello {escape(first_name)},</p>"
        f"<p>Thank you for your order <strong>{escape(public_id)}</strong>.</p>"
        f"<p>Items:</p><ul>{items_html}</ul>"
        f"<p>Total: <strong>{format_cents(total_cents)} {currency}</strong></p>"
        "<p>We will keep you posted about the next steps.</p>"
    )
    return EmailMessage(f"Order confirmation {public_id}", text, html)


def payment_link(public_id: str, first_name: str, link: str) -> EmailMessage:
    text = (
        f"Hello {first_name},\n\n"
        f"Here is your payment link for order {public_id}:\n{link}\n\n"
        "Thank you.\n"
    )
    html = (
        f"<p>Hello {escape(first_name)},</p>"
        f"<p>Here is your payment link for order <strong>{escape(public_id)}</strong>:</p>"
        f'<p><a href="{escape(link, quote=True)}">{escape(link)}</a></p>'
        "<p>Thank you.</p>"
    )
    return EmailMessage(f"Payment link for order {public_id}", text, html)

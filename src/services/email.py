"""
Email sending functionality for invoices.
"""

import html
import re
import traceback
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from string import Template

from msgraph.generated.models.body_type import BodyType
from msgraph.generated.models.email_address import EmailAddress
from msgraph.generated.models.item_body import ItemBody
from msgraph.generated.models.message import Message
from msgraph.generated.models.recipient import Recipient
from msgraph.generated.users.item.send_mail.send_mail_post_request_body import (
    SendMailPostRequestBody,
)

from core.config import DEFAULT_SUBJECT, EMAIL_TEMPLATE_PATH, Settings
from core.errors import DeliveryError
from core.graph_client import get_graph_client
from models.config import GlobalConfig, InvoiceConfig
from models.invoice import InvoiceData
from services.invoices import format_hours, format_long_date

TASK_LINE_RE = re.compile(r"^\d+(\.\d+)?hr? - ")


@dataclass
class EmailResult:
    """Outcome of one send attempt."""

    success: bool
    error: str | None = None

    def raise_for_status(self) -> None:
        if not self.success:
            raise DeliveryError(self.error or "Unknown delivery error")


# =============================================================================
# FORMATTING
# =============================================================================


def render_subject(template: str | None, start_date: str, end_date: str, customer: str) -> str:
    """Fill {{startDate}}, {{endDate}} and {{customer}} in a subject template."""
    subject = template or DEFAULT_SUBJECT
    return (
        subject.replace("{{startDate}}", start_date)
        .replace("{{endDate}}", end_date)
        .replace("{{customer}}", customer)
    )


def format_html_work(text: str) -> str:
    """Turn the plain-text invoice body into HTML blocks."""
    parts = []
    for line in text.split("\n"):
        if not line.strip():
            continue
        escaped = html.escape(line)
        if "-----" in line:
            parts.append(f'<div class="week-header">{escaped}</div>')
        elif TASK_LINE_RE.match(line):
            parts.append(f'<div class="task-item">&bull; {escaped}</div>')
        else:
            parts.append(f"<p>{escaped}</p>")
    return "\n    ".join(parts)


def render_email_html(
    customer: str,
    start_date: str,
    end_date: str,
    text: str,
    total_hours: float,
    from_name: str,
    from_email: str,
    invoice_date: date | None = None,
    template_path: Path = EMAIL_TEMPLATE_PATH,
) -> str:
    """Render the HTML body from the email template."""
    template = Template(template_path.read_text(encoding="utf-8"))
    return template.safe_substitute(
        customer=html.escape(customer[:1].upper() + customer[1:]),
        start_date=html.escape(start_date),
        end_date=html.escape(end_date),
        invoice_date=format_long_date(invoice_date or date.today()),
        work_html=format_html_work(text),
        total_hours=format_hours(total_hours),
        from_name=html.escape(from_name),
        from_email=html.escape(from_email),
    )


def _recipients(addresses: list[str]) -> list[Recipient]:
    return [Recipient(email_address=EmailAddress(address=address)) for address in addresses]


# =============================================================================
# SENDING
# =============================================================================


async def send_invoice_email(
    settings: Settings,
    customer: str,
    start_date: str,
    end_date: str,
    text: str,
    total_hours: float,
    recipients: list[str] | None = None,
    cc: list[str] | None = None,
    bcc: list[str] | None = None,
    subject: str | None = None,
    from_name: str | None = None,
    from_email: str | None = None,
    test_mode: bool = False,
    verbose: bool = False,
    graph=None,
) -> EmailResult:
    """
    Send an invoice email through MS Graph.

    In test mode the invoice goes only to the configured test address.
    Failures are returned, not raised.
    """
    sender = from_email or settings.from_email
    sender_name = from_name or settings.from_name or sender

    if graph is None and not settings.graph_configured:
        return EmailResult(
            success=False,
            error="MS Graph credentials not configured. Set MICROSOFT_GRAPH_* in .env",
        )
    if not sender:
        return EmailResult(success=False, error="Sender address not configured. Set INVOICE_FROM_EMAIL in .env")

    if test_mode:
        if not settings.test_email:
            return EmailResult(success=False, error="Test address not configured. Set INVOICE_TEST_EMAIL in .env")
        to_list, cc_list, bcc_list = [settings.test_email], [], []
    else:
        to_list, cc_list, bcc_list = list(recipients or []), list(cc or []), list(bcc or [])
        if not to_list:
            return EmailResult(success=False, error="No recipients configured")

    subject = subject or render_subject(None, start_date, end_date, customer)
    body_html = render_email_html(customer, start_date, end_date, text, total_hours, sender_name, sender)

    message = Message(
        subject=subject,
        body=ItemBody(content_type=BodyType.Html, content=body_html),
        from_=Recipient(email_address=EmailAddress(name=sender_name, address=sender)),
        to_recipients=_recipients(to_list),
        cc_recipients=_recipients(cc_list),
        bcc_recipients=_recipients(bcc_list),
    )
    request_body = SendMailPostRequestBody(message=message, save_to_sent_items=True)

    if verbose:
        print("Email configuration:")
        print(f"  From: {sender_name} <{sender}>")
        print(f"  To: {', '.join(to_list)}")
        if cc_list:
            print(f"  CC: {', '.join(cc_list)}")
        if bcc_list:
            print(f"  BCC: {', '.join(bcc_list)}")
        print(f"  Subject: {subject}")

    try:
        graph = graph or get_graph_client(settings)
        await graph.users.by_user_id(sender).send_mail.post(request_body)
    except Exception as e:
        return EmailResult(success=False, error=str(e) or type(e).__name__)

    if verbose:
        print(f"Sent invoice email to {', '.join(to_list)}")
    return EmailResult(success=True)


async def send_invoice_email_from_config(
    settings: Settings,
    config: InvoiceConfig,
    invoice: InvoiceData,
    global_config: GlobalConfig | None = None,
    test_mode: bool = False,
    verbose: bool = False,
    graph=None,
) -> EmailResult:
    """Send an invoice using a configuration's recipients and subject template."""
    global_config = global_config or GlobalConfig()
    subject = render_subject(
        config.email.subject,
        invoice.start_date_label,
        invoice.end_date_label,
        config.customer,
    )

    return await send_invoice_email(
        settings,
        customer=config.customer,
        start_date=invoice.start_date_label,
        end_date=invoice.end_date_label,
        text=invoice.formatted_text,
        total_hours=invoice.total_hours,
        recipients=config.email.to,
        cc=config.email.cc,
        bcc=config.email.bcc or global_config.default_bcc,
        subject=subject,
        from_name=config.email.from_name,
        from_email=global_config.default_from_email,
        test_mode=test_mode,
        verbose=verbose,
        graph=graph,
    )


async def send_error_email(settings: Settings, error: Exception, graph=None):
    """Send error notification email to the operator."""
    if not settings.error_email or not settings.from_email:
        print("Error email not configured, skipping notification")
        return
    if graph is None and not settings.graph_configured:
        print("MS Graph credentials not configured, skipping error notification")
        return

    subject = "Invoice Scheduler - Script Error"
    body_text = (
        "An error occurred while running the invoice scheduler:\n\n"
        + "".join(traceback.format_exception(type(error), error, error.__traceback__))
    )

    message = Message(
        subject=subject,
        body=ItemBody(content_type=BodyType.Text, content=body_text),
        to_recipients=_recipients([settings.error_email]),
    )
    request_body = SendMailPostRequestBody(message=message, save_to_sent_items=True)

    try:
        graph = graph or get_graph_client(settings)
        await graph.users.by_user_id(settings.from_email).send_mail.post(request_body)
        print(f"Sent error email to {settings.error_email}")
    except Exception as e:
        print(f"Failed to send error email: {e}")

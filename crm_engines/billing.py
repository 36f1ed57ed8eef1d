"""
Module: crm_engines.billing
Responsibility:
    Turn a scheduled project payment into a draft invoice.

Architecture position:
    Engines -- pure calculation layer, zero I/O. The caller stores the
    returned invoice.

Invariants enforced:
    - One invoice line per payment, quantity 1, rate = payment amount.
    - tax = amount * tax_rate / 100, total = amount + tax, unrounded.
    - Invoice numbers are count-based like quote numbers:
      ``<prefix>-<year>-<len(invoices) + 1>`` zero padded.
    - The invoice due date is the payment's due date.

Failure modes:
    - ProjectNotFoundError, ClientNotFoundError, PaymentNotFoundError
      when the referenced record is missing.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal

from crm_kernel.domain.invoices import Invoice, InvoiceItem, InvoiceStatus
from crm_kernel.domain.projects import Client, Project
from crm_kernel.exceptions import ClientNotFoundError, PaymentNotFoundError
from crm_kernel.logging_config import get_logger
from crm_engines.aggregation import find_project
from crm_engines.tracer import traced_engine

logger = get_logger("engines.billing")

_HUNDRED = Decimal("100")


def next_invoice_number(
    invoices: Sequence[Invoice],
    year: int,
    prefix: str = "INV",
    width: int = 4,
) -> str:
    """Next invoice number; counts every existing invoice regardless of year."""
    return f"{prefix}-{year}-{str(len(invoices) + 1).zfill(width)}"


@traced_engine("billing", "1.0", fingerprint_fields=("project_id", "payment_id", "tax_rate"))
def generate_invoice(
    projects: Iterable[Project],
    clients: Iterable[Client],
    invoices: Sequence[Invoice],
    project_id: str,
    payment_id: str,
    as_of: datetime,
    tax_rate: Decimal = Decimal("16"),
    prefix: str = "INV",
    width: int = 4,
    payment_terms: str = "30 days",
    invoice_id: str | None = None,
) -> Invoice:
    """
    Build a draft invoice for one scheduled payment.

    Args:
        projects: Project snapshot containing ``project_id``.
        clients: Client snapshot containing the project's client.
        invoices: Existing invoices; only their count is used.
        project_id: Project owning the payment.
        payment_id: Scheduled payment to bill.
        as_of: Issue date; its year goes into the invoice number.
        tax_rate: Tax percentage.
        invoice_id: Id for the new invoice. Defaults to a random UUID.

    Raises:
        ProjectNotFoundError: if ``project_id`` is unknown.
        ClientNotFoundError: if the project's client is unknown.
        PaymentNotFoundError: if ``payment_id`` is not on the project.
    """
    project = find_project(projects, project_id)

    client = next((c for c in clients if c.client_id == project.client_id), None)
    if client is None:
        raise ClientNotFoundError(project.client_id)

    payment = next(
        (p for p in project.payments if p.payment_id == payment_id), None
    )
    if payment is None:
        raise PaymentNotFoundError(payment_id, project_id)

    tax = payment.amount * Decimal(tax_rate) / _HUNDRED
    invoice = Invoice(
        invoice_id=invoice_id or str(uuid.uuid4()),
        number=next_invoice_number(invoices, as_of.year, prefix, width),
        client_id=client.client_id,
        project_id=project.project_id,
        issue_date=as_of,
        due_date=payment.due_date,
        amount=payment.amount,
        tax=tax,
        total=payment.amount + tax,
        status=InvoiceStatus.DRAFT,
        items=(InvoiceItem(
            item_id="1",
            description=payment.description,
            quantity=Decimal("1"),
            rate=payment.amount,
            amount=payment.amount,
        ),),
        notes=payment.notes,
        payment_terms=payment_terms,
    )

    logger.info("invoice_generated", extra={
        "invoice_number": invoice.number,
        "project_id": project.project_id,
        "payment_id": payment_id,
        "total": str(invoice.total.amount),
    })
    return invoice

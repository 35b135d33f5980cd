"""Invoice rendering through the typst command line."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from timeclonk.core.config import Settings
from timeclonk.core.exceptions import InvoiceRenderError
from timeclonk.core.logging import get_logger
from timeclonk.schemas.invoice import InvoiceItem, PrintInvoice

logger = get_logger(__name__)


def typst_string(value: str) -> str:
    """Quote ``value`` as a typst string literal."""

    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\r", "").replace("\n", "\\n")
    return f'"{escaped}"'


def pad_blocks(payee: str, payer: str) -> tuple[str, str]:
    """Pad the shorter address block with newlines so both have as many lines."""

    payee_lines = payee.count("\n") + 1
    payer_lines = payer.count("\n") + 1
    if payee_lines < payer_lines:
        payee += "\n" * (payer_lines - payee_lines)
    elif payer_lines < payee_lines:
        payer += "\n" * (payee_lines - payer_lines)
    return payee, payer


def _format_number(value: float) -> str:
    return repr(float(value))


def _item_source(item: InvoiceItem) -> str:
    return (
        "\n  (\n"
        f"    item: {typst_string(item.description)},\n"
        "    dur-min: 0,\n"
        f"    hours: {_format_number(item.duration)},\n"
        f"    rate: {_format_number(item.rate)},\n"
        "  ),"
    )


def render_invoice_source(invoice: PrintInvoice, template_import: str) -> str:
    """Typst document that instantiates the invoice template.

    The payee is the biller and the payer the recipient.
    """

    payee, payer = pad_blocks(invoice.payee, invoice.payer)
    items = "".join(_item_source(item) for item in invoice.items)
    due_date = typst_string(invoice.due_date) if invoice.due_date is not None else "none"
    extra_fields = "".join(
        f"({typst_string(field.n)}, {typst_string(field.v)}), " for field in invoice.extra_fields
    )

    return f"""#import {typst_string(template_import)}: *

#let biller = {typst_string(payee)}
#let recipient = {typst_string(payer)}

#let table-data = ({items}
)

#show: invoice.with(
  language: "en",
  banner-image: none,
  invoice-id: {typst_string(invoice.id)},
  issuing-date: {typst_string(invoice.date)},
  due-date: {due_date},
  extraFields: ( {extra_fields}),
  biller: biller,
  hourly-rate: 100,
  recipient: recipient,
  tax: 0,
  items: table-data,
  styling: ( font: none ),
)
"""


class InvoiceRenderer:
    """Writes ``<invoice_dir>/<id>.typ`` and compiles it to a PDF beside it."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def template_import(self) -> str:
        relative = os.path.relpath(self.settings.invoice_template.resolve(), self.settings.invoice_dir.resolve())
        return Path(relative).as_posix()

    def render(self, invoice: PrintInvoice) -> Path:
        invoice_dir = self.settings.invoice_dir
        invoice_dir.mkdir(parents=True, exist_ok=True)
        source_path = invoice_dir / f"{invoice.id}.typ"
        pdf_path = invoice_dir / f"{invoice.id}.pdf"
        source_path.write_text(render_invoice_source(invoice, self.template_import), encoding="utf-8")

        command = [self.settings.typst_binary, "compile", str(source_path), "--root", "."]
        logger.info("rendering invoice", invoice_id=invoice.id, command=command)
        try:
            result = subprocess.run(command, capture_output=True, text=True, check=False)
        except OSError as exc:
            logger.error("typst could not start", invoice_id=invoice.id, error=str(exc))
            raise InvoiceRenderError(f"could not run {self.settings.typst_binary}: {exc}") from exc

        if result.returncode != 0:
            logger.error(
                "typst failed",
                invoice_id=invoice.id,
                returncode=result.returncode,
                stderr=result.stderr.strip(),
            )
            raise InvoiceRenderError(f"typst exited with status {result.returncode}: {result.stderr.strip()}")
        return pdf_path

"""Invoice document model handed to the typesetter."""

from __future__ import annotations

from pydantic import BaseModel, Field

from timeclonk.schemas.project import ExtraField


class InvoiceItem(BaseModel):
    description: str
    # Hours, fractional.
    duration: float
    rate: float


class PrintInvoice(BaseModel):
    # Also the output file name under the invoice directory.
    id: str = Field(pattern=r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
    payer: str = ""
    payee: str = ""
    date: str
    due_date: str | None = None
    items: list[InvoiceItem] = Field(default_factory=list)
    extra_fields: list[ExtraField] = Field(default_factory=list)

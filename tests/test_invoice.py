from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from timeclonk.core.config import Settings, get_settings
from timeclonk.core.exceptions import InvoiceRenderError
from timeclonk.schemas.invoice import InvoiceItem, PrintInvoice
from timeclonk.schemas.project import ExtraField
from timeclonk.services.invoice_service import (
    InvoiceRenderer,
    pad_blocks,
    render_invoice_source,
    typst_string,
)


def _invoice(**fields: object) -> PrintInvoice:
    values: dict[str, object] = {
        "id": "ACME-0007",
        "payer": "Acme Corp\n1 Main St\nSpringfield",
        "payee": 'Jane "JD" Doe',
        "date": "2024-03-01",
        "items": [InvoiceItem(description="Backend work", duration=1.5, rate=90)],
    }
    values.update(fields)
    return PrintInvoice(**values)


@pytest.fixture()
def invoice_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, settings: Settings) -> Settings:
    monkeypatch.setenv("INVOICE_TEMPLATE", str(tmp_path / "invoice.typ"))
    get_settings.cache_clear()
    return get_settings()


def _fake_typst(returncode: int, stderr: str = "") -> Callable[..., subprocess.CompletedProcess[str]]:
    def run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        if returncode == 0:
            Path(command[2]).with_suffix(".pdf").write_bytes(b"%PDF-1.7\n")
        return subprocess.CompletedProcess(command, returncode, stdout="", stderr=stderr)

    return run


def test_typst_string_escapes() -> None:
    assert typst_string('a "b" \\ c\r\nd') == '"a \\"b\\" \\\\ c\\nd"'


def test_pad_blocks_evens_out_line_counts() -> None:
    assert pad_blocks("Jane", "Acme\nMain St") == ("Jane\n", "Acme\nMain St")
    assert pad_blocks("A\nB\nC", "X") == ("A\nB\nC", "X\n\n")
    assert pad_blocks("A", "B") == ("A", "B")


def test_source_instantiates_template() -> None:
    source = render_invoice_source(
        _invoice(extra_fields=[ExtraField(n="PO", v="42")]),
        "../invoice.typ",
    )

    assert source.startswith('#import "../invoice.typ": *\n')
    assert '#let biller = "Jane \\"JD\\" Doe\\n\\n"' in source
    assert '#let recipient = "Acme Corp\\n1 Main St\\nSpringfield"' in source
    assert 'item: "Backend work",' in source
    assert "hours: 1.5," in source
    assert "rate: 90.0," in source
    assert 'invoice-id: "ACME-0007",' in source
    assert 'issuing-date: "2024-03-01",' in source
    assert "due-date: none," in source
    assert 'extraFields: ( ("PO", "42"), ),' in source


def test_source_quotes_due_date() -> None:
    source = render_invoice_source(_invoice(due_date="2024-03-31", items=[]), "invoice.typ")

    assert 'due-date: "2024-03-31",' in source
    assert "#let table-data = (\n)" in source


def test_invoice_id_must_be_a_plain_file_name() -> None:
    with pytest.raises(ValueError):
        _invoice(id="../escape")


def test_render_writes_source_and_returns_pdf(
    invoice_settings: Settings,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(subprocess, "run", _fake_typst(0))

    renderer = InvoiceRenderer(invoice_settings)
    pdf_path = renderer.render(_invoice())

    assert renderer.template_import == "../invoice.typ"
    assert pdf_path == invoice_settings.invoice_dir / "ACME-0007.pdf"
    assert pdf_path.exists()
    source = (invoice_settings.invoice_dir / "ACME-0007.typ").read_text(encoding="utf-8")
    assert source.startswith('#import "../invoice.typ": *')


def test_render_failure_raises(invoice_settings: Settings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(subprocess, "run", _fake_typst(1, stderr="error: unknown variable"))

    with pytest.raises(InvoiceRenderError, match="unknown variable"):
        InvoiceRenderer(invoice_settings).render(_invoice())


def test_missing_typst_binary_raises(invoice_settings: Settings) -> None:
    settings = invoice_settings.model_copy(update={"typst_binary": "/nonexistent/typst"})

    with pytest.raises(InvoiceRenderError):
        InvoiceRenderer(settings).render(_invoice())


def test_invoice_endpoint_requires_login(client: TestClient) -> None:
    response = client.post("/invoice", json=_invoice().model_dump())

    assert response.status_code == 401


def test_invoice_endpoint_returns_pdf(
    client: TestClient,
    invoice_settings: Settings,
    monkeypatch: pytest.MonkeyPatch,
    make_user: Callable[..., int],
    login_headers: Callable[..., dict[str, str]],
) -> None:
    make_user("alice")
    monkeypatch.setattr(subprocess, "run", _fake_typst(0))

    response = client.post("/invoice", json=_invoice().model_dump(), headers=login_headers("alice"))

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")

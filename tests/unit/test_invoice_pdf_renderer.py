"""Unit tests for the invoice PDF renderer"""

import pytest
import re

from billing.models.invoice import NormalizedLineItem
from billing.models.job import Job, Profile
from billing.rendering.invoice_pdf import InvoicePDFRenderer


@pytest.fixture
def job() -> Job:
    return Job(id="J1", subcontractor_id="sub-1", job_type="Electrical wiring", location="Block C")


@pytest.fixture
def profile() -> Profile:
    return Profile(id="sub-1", company_name="Acme Builders", address="12 Jalan Example\nKuala Lumpur")


@pytest.fixture
def renderer() -> InvoicePDFRenderer:
    # Uncompressed so the drawn text can be found in the bytes
    return InvoicePDFRenderer(currency="RM", page_compression=0)


def _items(n: int):
    return [NormalizedLineItem(description=f"Task {i}", quantity=1, unit_price=10) for i in range(n)]


def _page_count(content: bytes) -> int:
    return len(re.findall(rb"/Type\s*/Page(?!s)", content))


@pytest.mark.unit
class TestInvoicePDFRenderer:

    def test_renders_pdf_bytes(self, renderer, job, profile):
        content = renderer.render(job, profile, _items(2), "To Whom It May Concern,", 20.0)
        assert content.startswith(b"%PDF")
        assert content.rstrip().endswith(b"%%EOF")

    def test_contains_invoice_text(self, renderer, job, profile):
        items = [NormalizedLineItem(description="Wiring", quantity=10, unit_price=5)]
        content = renderer.render(job, profile, items, "Dear Sir,", 50.0)

        for text in (
            b"Invoice",
            b"Dear Sir,",
            b"Job ID: J1",
            b"Job Description: Electrical wiring",
            b"Acme Builders",
            b"Wiring",
            b"Total Amount: RM 50.00",
        ):
            assert text in content

    def test_missing_job_type_prints_na(self, renderer, profile):
        job = Job(id="J2", subcontractor_id="sub-1")
        content = renderer.render(job, profile, [], "Hello", 0.0)
        assert b"Job Description: N/A" in content
        assert b"Total Amount: RM 0.00" in content

    def test_long_tables_span_pages(self, renderer, job, profile):
        one_page = renderer.render(job, profile, _items(3), "Hi", 30.0)
        many_pages = renderer.render(job, profile, _items(120), "Hi", 1200.0)

        assert _page_count(one_page) == 1
        assert _page_count(many_pages) > 1
        assert b"Total Amount: RM 1200.00" in many_pages

    def test_default_compression_still_valid(self, job, profile):
        content = InvoicePDFRenderer().render(job, profile, _items(1), "Hi", 10.0)
        assert content.startswith(b"%PDF")

    def test_long_description_is_truncated(self, renderer, job, profile):
        items = [NormalizedLineItem(description="X" * 300, quantity=1, unit_price=1)]
        content = renderer.render(job, profile, items, "Hi", 1.0)
        assert b"X" * 300 not in content
        assert b"..." in content

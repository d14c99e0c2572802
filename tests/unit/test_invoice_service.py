"""Unit tests for the shared invoice pipeline"""

import pytest
from decimal import Decimal
from unittest.mock import MagicMock, patch
from sqlalchemy import select

from billing.access import any_job, owned_by
from billing.exceptions import (
    InvoiceInsertError,
    JobNotFoundError,
    ProfileNotFoundError,
    RenderingError,
)
from billing.models.db_models import Invoice as InvoiceDB, InvoiceSetting as InvoiceSettingDB
from billing.services.invoice_service import InvoiceService


@pytest.fixture
def renderer():
    """Renderer double that records its inputs"""
    mock = MagicMock()
    mock.render.return_value = b"%PDF-1.4 test"
    return mock


@pytest.mark.unit
@pytest.mark.requires_db
class TestGenerateInvoiceDocument:

    @pytest.mark.asyncio
    async def test_builds_document_and_invoice(self, db_session, subcontractor, make_job, sample_line_items, renderer):
        job = await make_job(subcontractor.id, line_items=sample_line_items)
        service = InvoiceService(renderer=renderer)

        document = await service.generate_invoice_document(db_session, job.id, owned_by(subcontractor.id))

        assert document.filename == f"invoice-{job.id}.pdf"
        assert document.media_type == "application/pdf"
        assert document.content == b"%PDF-1.4 test"
        assert document.total_amount == 150
        assert document.invoice is not None and document.invoice.created is True

        kwargs = renderer.render.call_args.kwargs
        assert kwargs["total_amount"] == 150
        assert kwargs["subcontractor"].id == subcontractor.id
        assert kwargs["recipient_text"] == "To Whom It May Concern,"
        assert [i.description for i in kwargs["line_items"]] == ["Wiring", "Fixtures"]

        row = (await db_session.execute(select(InvoiceDB).where(InvoiceDB.job_id == job.id))).scalar_one()
        assert row.total_amount == Decimal("150.00")

    @pytest.mark.asyncio
    async def test_second_request_reuses_invoice(self, db_session, subcontractor, make_job, sample_line_items, renderer):
        job = await make_job(subcontractor.id, line_items=sample_line_items)
        service = InvoiceService(renderer=renderer)

        first = await service.generate_invoice_document(db_session, job.id, any_job)
        second = await service.generate_invoice_document(db_session, job.id, any_job)

        assert second.invoice.created is False
        assert second.invoice.id == first.invoice.id
        rows = (await db_session.execute(select(InvoiceDB).where(InvoiceDB.job_id == job.id))).scalars().all()
        assert len(rows) == 1

    @pytest.mark.asyncio
    async def test_uses_stored_recipient_text(self, db_session, subcontractor, make_job, renderer):
        db_session.add(InvoiceSettingDB(setting_key="invoice_recipient_text", setting_value="Dear Finance Team,"))
        await db_session.commit()
        job = await make_job(subcontractor.id)

        await InvoiceService(renderer=renderer).generate_invoice_document(db_session, job.id, any_job)

        assert renderer.render.call_args.kwargs["recipient_text"] == "Dear Finance Team,"

    @pytest.mark.asyncio
    async def test_blank_recipient_text_falls_back(self, db_session, subcontractor, make_job, renderer):
        db_session.add(InvoiceSettingDB(setting_key="invoice_recipient_text", setting_value="   "))
        await db_session.commit()
        job = await make_job(subcontractor.id)

        await InvoiceService(renderer=renderer).generate_invoice_document(db_session, job.id, any_job)

        assert renderer.render.call_args.kwargs["recipient_text"] == "To Whom It May Concern,"

    @pytest.mark.asyncio
    async def test_out_of_scope_job_is_not_found(self, db_session, subcontractor, other_subcontractor, make_job, renderer):
        job = await make_job(subcontractor.id)

        with pytest.raises(JobNotFoundError):
            await InvoiceService(renderer=renderer).generate_invoice_document(
                db_session, job.id, owned_by(other_subcontractor.id)
            )
        renderer.render.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_job(self, db_session, renderer):
        with pytest.raises(JobNotFoundError):
            await InvoiceService(renderer=renderer).generate_invoice_document(db_session, "nope", any_job)

    @pytest.mark.asyncio
    async def test_missing_profile(self, db_session, subcontractor, make_job, renderer):
        job = await make_job(subcontractor.id)

        with patch(
            "billing.services.invoice_service.DatabaseService.get_profile", return_value=None
        ):
            with pytest.raises(ProfileNotFoundError):
                await InvoiceService(renderer=renderer).generate_invoice_document(db_session, job.id, any_job)

    @pytest.mark.asyncio
    async def test_renderer_failure_becomes_rendering_error(self, db_session, subcontractor, make_job, renderer):
        renderer.render.side_effect = ValueError("font missing")
        job = await make_job(subcontractor.id)

        with pytest.raises(RenderingError) as exc_info:
            await InvoiceService(renderer=renderer).generate_invoice_document(db_session, job.id, any_job)

        assert exc_info.value.public_message == f"Error generating PDF for job {job.id}"
        assert isinstance(exc_info.value.cause, ValueError)


@pytest.mark.unit
@pytest.mark.requires_db
class TestPersistencePolicy:

    @pytest.mark.asyncio
    async def test_best_effort_still_renders(self, db_session, subcontractor, make_job, sample_line_items, renderer):
        job = await make_job(subcontractor.id, line_items=sample_line_items)
        service = InvoiceService(renderer=renderer, strict_persistence=False)

        with patch(
            "billing.services.invoice_service.ensure_invoice",
            side_effect=InvoiceInsertError(job.id, RuntimeError("boom")),
        ):
            document = await service.generate_invoice_document(db_session, job.id, any_job)

        assert document.invoice is None
        assert document.total_amount == 150
        renderer.render.assert_called_once()

    @pytest.mark.asyncio
    async def test_strict_propagates(self, db_session, subcontractor, make_job, renderer):
        job = await make_job(subcontractor.id)
        service = InvoiceService(renderer=renderer, strict_persistence=True)

        with patch(
            "billing.services.invoice_service.ensure_invoice",
            side_effect=InvoiceInsertError(job.id, RuntimeError("boom")),
        ):
            with pytest.raises(InvoiceInsertError):
                await service.generate_invoice_document(db_session, job.id, any_job)

        renderer.render.assert_not_called()

    def test_default_comes_from_settings(self, renderer):
        with patch("billing.services.invoice_service.settings") as mock_settings:
            mock_settings.INVOICE_PERSISTENCE_STRICT = True
            assert InvoiceService(renderer=renderer).strict_persistence is True
            mock_settings.INVOICE_PERSISTENCE_STRICT = False
            assert InvoiceService(renderer=renderer).strict_persistence is False

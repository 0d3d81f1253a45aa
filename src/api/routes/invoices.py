"""Invoice generation and saved-invoice endpoints."""

import sqlite3

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from api.dependencies import get_db, get_pipeline, get_settings, verify_api_key
from api.logging import logged_request
from api.models.responses import ConfigSummary, ErrorCodes, InvoiceResponse
from core.config import Settings
from core.errors import ConfigurationError, InvoiceNotFoundError
from models.config import InvoiceConfigs
from services.configs import get_config_by_id, load_configs
from services.invoices import InvoicePipeline, generate_invoice_from_config
from services.storage import list_invoices, load_invoice, save_invoice

router = APIRouter(prefix="/v1", dependencies=[Depends(verify_api_key)])


def api_error(status_code: int, error: str, code: str, details: list[str] | None = None) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"error": error, "code": code, "details": details or []},
    )


def load_configs_or_422(settings: Settings) -> InvoiceConfigs:
    """Load the configuration file, mapping problems to a 422 response."""
    try:
        return load_configs(settings.config_file)
    except ConfigurationError as e:
        details = [line.strip() for line in str(e).split("\n") if line.strip()]
        raise api_error(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Invoice configuration is invalid",
            ErrorCodes.CONFIG_ERROR,
            details,
        )


@router.get("/configs", response_model=list[ConfigSummary])
async def list_configs_endpoint(request: Request, settings: Settings = Depends(get_settings)):
    """List the invoice configurations."""
    with logged_request(request, "/v1/configs", settings.db_path):
        configs = load_configs_or_422(settings)
        return [ConfigSummary.from_config(config) for config in configs.invoices]


@router.post("/invoices/{config_id}/generate", response_model=InvoiceResponse)
async def generate_invoice_endpoint(
    request: Request,
    config_id: str,
    settings: Settings = Depends(get_settings),
    conn: sqlite3.Connection = Depends(get_db),
    pipeline: InvoicePipeline = Depends(get_pipeline),
):
    """
    Generate and save an invoice for one configuration.

    The invoice is never emailed from here.
    """
    with logged_request(request, "/v1/invoices/generate", settings.db_path, config_id=config_id) as request_log:
        configs = load_configs_or_422(settings)
        try:
            config = get_config_by_id(configs, config_id)
        except ConfigurationError as e:
            raise api_error(status.HTTP_404_NOT_FOUND, str(e), ErrorCodes.NOT_FOUND)

        invoice = await generate_invoice_from_config(config, pipeline)
        if invoice is None:
            raise api_error(
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                f"No commit sources found for customer '{config.customer}'",
                ErrorCodes.NO_COMMIT_SOURCES,
            )

        saved = save_invoice(conn, config.id, invoice)
        request_log.invoice_id = saved.id
        request_log.total_hours = invoice.total_hours
        return InvoiceResponse.from_saved(saved)


@router.get("/invoices", response_model=list[InvoiceResponse])
async def list_invoices_endpoint(
    request: Request,
    config_id: str | None = Query(default=None, description="Only invoices for this configuration"),
    settings: Settings = Depends(get_settings),
    conn: sqlite3.Connection = Depends(get_db),
):
    """Saved invoices, newest first."""
    with logged_request(request, "/v1/invoices", settings.db_path, config_id=config_id):
        return [InvoiceResponse.from_saved(saved) for saved in list_invoices(conn, config_id)]


@router.get("/invoices/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice_endpoint(
    request: Request,
    invoice_id: str,
    settings: Settings = Depends(get_settings),
    conn: sqlite3.Connection = Depends(get_db),
):
    with logged_request(request, "/v1/invoices/{invoice_id}", settings.db_path, invoice_id=invoice_id):
        try:
            saved = load_invoice(conn, invoice_id)
        except InvoiceNotFoundError as e:
            raise api_error(status.HTTP_404_NOT_FOUND, str(e), ErrorCodes.NOT_FOUND)
        return InvoiceResponse.from_saved(saved)

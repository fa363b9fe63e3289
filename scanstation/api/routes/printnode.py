"""
PrintNode proxy route: prints a base64 PDF label on the dispatch printer.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from scanstation.api.errors import bad_request, config_error, upstream_status_error
from scanstation.clients.http import UpstreamStatusError
from scanstation.clients.printnode import PrintNodeClient
from scanstation.config import Settings, get_settings
from scanstation.models.printnode import PrintRequest, PrintResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/printnode")


@router.post("/print", response_model=PrintResponse, operation_id="printLabel")
def print_label(
    body: Optional[PrintRequest] = None,
    settings: Settings = Depends(get_settings),
) -> PrintResponse:
    """
    Send a PDF label to PrintNode.

    Raises:
        400: pdfBase64 missing
        500: PrintNode not configured
    """
    body = body or PrintRequest()
    if not body.pdf_base64:
        raise bad_request("Missing pdfBase64")

    not_configured = config_error(
        "Set PRINTNODE_API_KEY and PRINTNODE_PRINTER_ID in your .env file",
        error="PRINTNODE_NOT_CONFIGURED",
    )
    if not settings.printnode_configured:
        raise not_configured
    try:
        client = PrintNodeClient.from_settings(settings)
    except ValueError:
        logger.error(f"PRINTNODE_PRINTER_ID is not numeric: {settings.printnode_printer_id!r}")
        raise not_configured

    try:
        print_job = client.print_pdf(body.pdf_base64, body.title)
    except UpstreamStatusError as e:
        raise upstream_status_error("PRINTNODE_UPSTREAM", e, e.data)

    return PrintResponse(ok=True, print_job=print_job)

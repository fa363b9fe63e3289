"""
PrintNode client for sending PDF labels to the dispatch printer.
"""

import logging
import re
from typing import Any, Optional

from scanstation.clients.http import (
    fetch_with_timeout,
    parse_body_or_raw,
    raise_for_upstream_status,
)
from scanstation.config import DEFAULT_SOURCE, Settings

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Parcel Label"


class PrintNodeClient:
    """Submits print jobs to one PrintNode printer."""

    def __init__(
        self,
        api_key: str,
        printer_id: int | str,
        base_url: str = "https://api.printnode.com",
        source: str = DEFAULT_SOURCE,
        timeout: float = 20.0,
    ):
        self.api_key = api_key
        self.printer_id = int(printer_id)
        self.base_url = base_url.rstrip("/")
        self.source = source
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "PrintNodeClient":
        return cls(
            api_key=settings.printnode_api_key,
            printer_id=settings.printnode_printer_id,
            base_url=settings.printnode_base_url,
            source=settings.printnode_source,
            timeout=settings.upstream_timeout_seconds,
        )

    def build_job(self, pdf_base64: str, title: Optional[str] = None) -> dict[str, Any]:
        return {
            "printerId": self.printer_id,
            "title": title or DEFAULT_TITLE,
            "contentType": "pdf_base64",
            # Base64 from the browser may be wrapped across lines
            "content": re.sub(r"\s", "", pdf_base64),
            "source": self.source,
        }

    def print_pdf(self, pdf_base64: str, title: Optional[str] = None) -> Any:
        """
        Create a print job and return PrintNode's response (the job ID).

        Raises:
            UpstreamStatusError: On a non-2xx PrintNode response
            UpstreamRequestError: On network errors or timeout
        """
        # PrintNode uses the API key as the basic auth username with no password
        response = fetch_with_timeout(
            "POST",
            f"{self.base_url}/printjobs",
            timeout=self.timeout,
            auth=(self.api_key, ""),
            json=self.build_job(pdf_base64, title),
        )
        if not response.ok:
            logger.error(
                "PrintNode error",
                extra={
                    "json_fields": {
                        "status": response.status_code,
                        "reason": response.reason,
                        "body": response.text[:400],
                    }
                },
            )
        raise_for_upstream_status(response)

        return parse_body_or_raw(response)

from typing import Any, Optional

from pydantic import Field

from scanstation.models.base import CamelModel


class PrintRequest(CamelModel):
    """Body of POST /printnode/print"""

    pdf_base64: Optional[str] = Field(default=None, description="Base64 encoded PDF label")
    title: Optional[str] = Field(default=None, description="Print job title")


class PrintResponse(CamelModel):
    ok: bool = True
    print_job: Any = Field(description="PrintNode response (usually the job ID)")

from typing import Any, Optional

from pydantic import Field

from scanstation.models.base import CamelModel


class ParcelPerfectRequest(CamelModel):
    """Body of POST /pp, forwarded as a form to the ParcelPerfect API"""

    method: Optional[int | str] = Field(
        default=None, description="ParcelPerfect method, e.g. requestQuote"
    )
    class_val: Optional[int | str] = Field(
        default=None, description="ParcelPerfect class, e.g. quote or waybill"
    )
    params: Optional[Any] = Field(
        default=None, description="Method parameters (details and contents)"
    )


class PlaceLookupParams(CamelModel):
    """params object sent with Waybill.getPlace"""

    id: str = Field(description="Caller identifier")
    accnum: str = Field(default="", description="ParcelPerfect account number")
    ppcust: str = Field(default="", description="ParcelPerfect customer code")

"""
Delivery order input model.

Delivery orders come from the order-management layer and are not guaranteed
clean: text is sanitized but empty truck numbers or destinations are kept so
the resolvers can report them as unmatched instead of failing.
"""

import re
import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DOType(str, Enum):
    DO = "DO"
    SDO = "SDO"


class Direction(str, Enum):
    """IMPORT is the going leg, EXPORT the return leg"""

    IMPORT = "IMPORT"
    EXPORT = "EXPORT"


def sanitize_text(value: str, max_length: int = 255) -> str:
    """
    Sanitize a free-text order field.
    - Remove control characters
    - Collapse runs of whitespace
    - Strip and truncate
    """
    if not value:
        return ""

    sanitized = re.sub(r"[\x00-\x1f\x7f]", " ", str(value))
    sanitized = re.sub(r"\s+", " ", sanitized)
    return sanitized.strip()[:max_length]


class DeliveryOrder(BaseModel):
    """A delivery order (DO/SDO) as seen by the fuel engine"""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "doNumber": "6449",
                "doType": "DO",
                "importOrExport": "IMPORT",
                "truckNo": "T664 ECQ",
                "destination": "KOLWEZI",
                "loadingPoint": "DAR",
                "date": "2025-12-04",
            }
        },
    )

    do_number: str = Field(..., alias="doNumber", max_length=50)
    do_type: DOType = Field(default=DOType.DO, alias="doType")
    import_or_export: Direction = Field(..., alias="importOrExport")
    truck_no: str = Field(default="", alias="truckNo")
    destination: str = Field(default="")
    loading_point: str = Field(default="", alias="loadingPoint")
    date: dt.date

    @field_validator("do_number", "truck_no", "destination", "loading_point", mode="before")
    @classmethod
    def clean_text(cls, v):
        if v is None:
            return ""
        return sanitize_text(v)

    @field_validator("do_type", "import_or_export", mode="before")
    @classmethod
    def upper_enum(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def is_import(self) -> bool:
        return self.import_or_export == Direction.IMPORT

    @property
    def is_export(self) -> bool:
        return self.import_or_export == Direction.EXPORT

"""
Base Pydantic Schemas
=====================

Base classes dan common types untuk semua schemas (Pydantic V2).
"""

from pydantic import BaseModel, ConfigDict, model_validator, PlainSerializer
from datetime import datetime
from decimal import Decimal
from typing import Optional, Any
from typing_extensions import Annotated

# Decimal tetap presisi di Python, tapi di JSON dikirim sebagai number
Money = Annotated[Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used='json')]


class BaseSchema(BaseModel):
    """Base schema dengan common fields dan methods."""

    model_config = ConfigDict(
        from_attributes=True,
        extra='ignore',
    )

    @model_validator(mode='before')
    @classmethod
    def strip_whitespace(cls, data: Any) -> Any:
        """Strip whitespace dari string fields sebelum validasi."""
        if isinstance(data, dict):
            return {
                key: value.strip() if isinstance(value, str) else value
                for key, value in data.items()
            }
        return data


class TimestampMixin(BaseModel):
    """Mixin untuk timestamp fields."""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TallyLinkMixin(BaseModel):
    """Mixin untuk field linkage ke Tally."""
    tally_guid: Optional[str] = None
    synced_at: Optional[datetime] = None
    error_message: Optional[str] = None

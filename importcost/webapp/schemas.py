"""
Pydantic models for request/response bodies in the web application.

Product and rate inputs accept either numbers or raw text, since the calculator
coerces field values leniently rather than rejecting them.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

FieldValue = Optional[Union[float, str]]


class ProductCreate(BaseModel):
    """Request model for adding a product."""

    model_config = ConfigDict(extra="ignore")

    price: str = Field("", description="Price text including currency, e.g. '¥ 177,00'")
    quantity: FieldValue = Field(1, description="Unit count")
    weight: FieldValue = Field(100, description="Weight in grams")

    @field_validator("price", mode="before")
    @classmethod
    def price_to_text(cls, v):
        """Accept numeric prices by turning them into text."""
        if v is None:
            return ""
        return str(v)


class ProductUpdate(BaseModel):
    """Request model for a single-field product edit."""

    field: Literal["price", "quantity", "weight"]
    value: FieldValue = None


class RateUpdate(BaseModel):
    """Request model for the exchange-rate and ICMS-rate setters."""

    value: FieldValue = Field(None, description="Raw rate input; blank means 'not provided'")


class FXRateResponse(BaseModel):
    """Response model for the live FX rate endpoint."""

    success: bool
    rate: float
    source: str
    applied: bool = False
    error: Optional[str] = None


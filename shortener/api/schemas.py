"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Field names are snake_case in Python and camelCase on the wire.
"""

from pydantic import BaseModel, ConfigDict, Field


class ShortenRequest(BaseModel):
    """Request model for URL shortening endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    long_url: str = Field(..., alias="longUrl", min_length=1, description="The long URL to shorten")


class ShortenResponse(BaseModel):
    """Response model for URL shortening endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    short_url: str = Field(..., alias="shortUrl", description="The complete short URL")
    short_code: str = Field(..., alias="shortCode", description="The generated short code")
    long_url: str = Field(..., alias="longUrl", description="The original long URL")


class StatsResponse(BaseModel):
    """Response model for statistics endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    short_code: str = Field(..., alias="shortCode")
    long_url: str = Field(..., alias="longUrl")
    clicks: int
    created_at: int = Field(..., alias="createdAt", description="Creation time in epoch milliseconds")

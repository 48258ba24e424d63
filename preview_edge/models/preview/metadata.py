from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PageMetadata(BaseModel):
    """Link-preview metadata derived from a destination page.

    Always fully populated: the extractor fills every field through its
    fallback chain, so an empty page still yields a usable record.
    Serialises with camel-case aliases for the debug endpoint.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    description: str = ""
    image: str = ""
    og_type: str = Field(default="website", alias="ogType")
    og_url: str = Field(alias="ogUrl")
    twitter_card: str = Field(default="summary", alias="twitterCard")
    canonical: str


class ClassificationResult(BaseModel):
    """Outcome of classifying the requesting agent."""

    model_config = ConfigDict(frozen=True)

    is_bot: bool
    user_agent: str
    forced: bool = False

"""Pydantic models for picker API request bodies."""

from pydantic import BaseModel, ConfigDict, Field

from media_picker.domain.media import MediaVariant


class MediaContentRequest(BaseModel):
    """Body of a media content download request."""

    model_config = ConfigDict(populate_by_name=True)

    base_url: str = Field(alias="baseUrl", min_length=1)
    variant: MediaVariant = MediaVariant.ORIGINAL

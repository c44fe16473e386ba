"""Schemas for company writes."""
from typing import List, Optional

from pydantic import BaseModel, Field

from zxsgit.models.company import GalleryImage, MediaItem


class CompanyPayload(BaseModel):
    """
    Create/update body for a company.

    Every field is optional: None leaves the stored value unchanged on update
    (and takes the default on create); an empty list clears media, gallery or
    related users.
    """
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    media: Optional[List[MediaItem]] = None
    gallery: Optional[List[GalleryImage]] = None
    ownerEmail: Optional[str] = None
    ownerName: Optional[str] = None
    relatedUserIds: Optional[List[str]] = None
    relatedUserId: Optional[str] = Field(None, description="Legacy single owner id")

    def wire(self) -> dict:
        """Body sent to the REST service."""
        return self.model_dump(exclude_none=True)

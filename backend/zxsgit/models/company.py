"""Company record with its media and gallery images."""
from typing import List, Optional

from pydantic import BaseModel, Field

from zxsgit.constants import UNKNOWN_OWNER_EMAIL, UNKNOWN_OWNER_NAME
from zxsgit.utils.hashing import generate_id
from zxsgit.utils.validation import now_ms


class MediaItem(BaseModel):
    """Image attached to a company; one of them is the main image."""
    id: str = Field(default_factory=generate_id)
    name: str = ""
    dataUrl: str = ""
    isMain: bool = False

    class Config:
        extra = "allow"


class GalleryImage(BaseModel):
    """Gallery image (a company holds at most five)."""
    id: str = Field(default_factory=generate_id)
    name: str = ""
    dataUrl: str = ""

    class Config:
        extra = "allow"


class Company(BaseModel):
    """Company profile."""
    id: str = Field(default_factory=generate_id)
    name: str
    address: str = ""
    phone: str = ""
    website: str = ""
    description: str = ""
    notes: str = ""
    media: List[MediaItem] = Field(default_factory=list)
    gallery: List[GalleryImage] = Field(default_factory=list)
    ownerEmail: str = UNKNOWN_OWNER_EMAIL
    ownerName: str = UNKNOWN_OWNER_NAME
    # relatedUserId mirrors relatedUserIds[0] for single-owner readers
    relatedUserId: Optional[str] = None
    relatedUserIds: List[str] = Field(default_factory=list)
    createdAt: int = Field(default_factory=now_ms)
    updatedAt: int = Field(default_factory=now_ms)

    class Config:
        extra = "allow"

    @property
    def main_media(self) -> Optional[MediaItem]:
        for item in self.media:
            if item.isMain:
                return item
        return self.media[0] if self.media else None

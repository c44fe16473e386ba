"""Company invariants re-applied on every create and update."""
from typing import List, Optional, Sequence, Tuple

from zxsgit.constants import GALLERY_LIMIT, UNKNOWN_OWNER_EMAIL, UNKNOWN_OWNER_NAME
from zxsgit.models.company import Company, GalleryImage, MediaItem
from zxsgit.schemas.company import CompanyPayload
from zxsgit.utils.validation import now_ms, require_text


def normalize_media(media: Sequence[MediaItem]) -> List[MediaItem]:
    """
    Keep exactly one main image when there are any images.

    The first item flagged main stays main; when none is flagged the first
    item becomes main.
    """
    items = list(media)
    if not items:
        return []
    main_index = next((i for i, item in enumerate(items) if item.isMain), 0)
    return [
        item if item.isMain == (i == main_index) else item.model_copy(update={"isMain": i == main_index})
        for i, item in enumerate(items)
    ]


def cap_gallery(gallery: Sequence[GalleryImage], limit: int = GALLERY_LIMIT) -> Tuple[List[GalleryImage], int]:
    """Truncate the gallery to the limit; returns the kept images and how many were dropped."""
    items = list(gallery)
    return items[:limit], max(0, len(items) - limit)


def normalize_related_users(
    related_user_ids: Optional[Sequence[str]],
    related_user_id: Optional[str],
) -> Optional[Tuple[List[str], Optional[str]]]:
    """
    Resolve the multi-owner list and its single-owner mirror.

    Returns None when the payload carries neither field.
    """
    if related_user_ids is not None:
        ids = list(dict.fromkeys(i for i in related_user_ids if i))
        return ids, ids[0] if ids else None
    if related_user_id is not None:
        return ([related_user_id], related_user_id) if related_user_id else ([], None)
    return None


def gallery_notice(rejected: int) -> Optional[str]:
    if not rejected:
        return None
    noun = "image was" if rejected == 1 else "images were"
    return f"Gallery holds at most {GALLERY_LIMIT} images; {rejected} {noun} rejected"


def with_notice(message: str, rejected: int) -> str:
    """Append the gallery truncation notice to a result message."""
    notice = gallery_notice(rejected)
    return f"{message}. {notice}" if notice else message


def build_company(payload: CompanyPayload) -> Tuple[Company, int]:
    """
    Create a company record from a payload.

    Returns:
        The normalized record and the number of rejected gallery images

    Raises:
        ValidationError: If the name is blank
    """
    name = require_text(payload.name, "Name is required")
    gallery, rejected = cap_gallery(payload.gallery or [])
    related = normalize_related_users(payload.relatedUserIds, payload.relatedUserId) or ([], None)
    timestamp = now_ms()
    company = Company(
        name=name,
        address=payload.address or "",
        phone=payload.phone or "",
        website=payload.website or "",
        description=payload.description or "",
        notes=payload.notes or "",
        media=normalize_media(payload.media or []),
        gallery=gallery,
        ownerEmail=payload.ownerEmail or UNKNOWN_OWNER_EMAIL,
        ownerName=payload.ownerName or UNKNOWN_OWNER_NAME,
        relatedUserIds=related[0],
        relatedUserId=related[1],
        createdAt=timestamp,
        updatedAt=timestamp,
    )
    return company, rejected


def apply_update(company: Company, payload: CompanyPayload) -> Tuple[Company, int]:
    """
    Apply the fields a payload carries onto a company.

    Returns:
        The updated, normalized record and the number of rejected gallery images
    """
    update = {}
    if payload.name is not None and payload.name.strip():
        update["name"] = payload.name.strip()
    for field in ("address", "phone", "website", "description", "notes", "ownerEmail", "ownerName"):
        value = getattr(payload, field)
        if value is not None:
            update[field] = value

    media = payload.media if payload.media is not None else company.media
    gallery, rejected = cap_gallery(payload.gallery if payload.gallery is not None else company.gallery)
    update["media"] = normalize_media(media)
    update["gallery"] = gallery

    related = normalize_related_users(payload.relatedUserIds, payload.relatedUserId)
    if related is not None:
        update["relatedUserIds"], update["relatedUserId"] = related

    update["updatedAt"] = now_ms()
    return company.model_copy(update=update), rejected


def as_payload(company: Company) -> CompanyPayload:
    """Full payload that reproduces a record's editable fields."""
    return CompanyPayload(
        name=company.name,
        address=company.address,
        phone=company.phone,
        website=company.website,
        description=company.description,
        notes=company.notes,
        media=company.media,
        gallery=company.gallery,
        ownerEmail=company.ownerEmail,
        ownerName=company.ownerName,
        relatedUserIds=company.relatedUserIds,
    )

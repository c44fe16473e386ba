"""Company API endpoints."""
from fastapi import APIRouter, Depends

from zxsgit.database import JsonDocumentStore, get_store
from zxsgit.schemas import CompanyPayload
from zxsgit.services import company_rules
from zxsgit.utils.exceptions import AppException, http_error_from, not_found_error
from zxsgit.utils.logger import logger

router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.get("")
async def list_companies(store: JsonDocumentStore = Depends(get_store)) -> dict:
    return {"ok": True, "companies": [c.model_dump() for c in store.load_data().companies]}


@router.get("/{company_id}")
async def get_company(company_id: str, store: JsonDocumentStore = Depends(get_store)) -> dict:
    company = next((c for c in store.load_data().companies if c.id == company_id), None)
    if company is None:
        raise not_found_error("Company")
    return {"ok": True, "company": company.model_dump()}


@router.post("")
async def create_company(payload: CompanyPayload, store: JsonDocumentStore = Depends(get_store)) -> dict:
    """
    Create a company.

    Media get exactly one main image and the gallery is capped; the message
    reports any gallery images that were dropped.
    """
    try:
        company, rejected = company_rules.build_company(payload)
    except AppException as e:
        raise http_error_from(e)

    with store.data() as document:
        document.companies.append(company)

    logger.info(f"Created company {company.id} ({company.name})")
    return {
        "ok": True,
        "message": company_rules.with_notice("Company created", rejected),
        "company": company.model_dump(),
    }


@router.put("/{company_id}")
async def update_company(
    company_id: str,
    payload: CompanyPayload,
    store: JsonDocumentStore = Depends(get_store),
) -> dict:
    """Apply the fields the payload carries to a company."""
    with store.data() as document:
        index = next((i for i, c in enumerate(document.companies) if c.id == company_id), None)
        if index is None:
            raise not_found_error("Company")
        company, rejected = company_rules.apply_update(document.companies[index], payload)
        document.companies[index] = company

    logger.info(
        f"Updated company {company.id}: {len(company.media)} media, "
        f"{len(company.gallery)} gallery, related {company.relatedUserIds}"
    )
    return {
        "ok": True,
        "message": company_rules.with_notice("Company updated", rejected),
        "company": company.model_dump(),
    }


@router.delete("/{company_id}")
async def delete_company(company_id: str, store: JsonDocumentStore = Depends(get_store)) -> dict:
    with store.data() as document:
        remaining = [c for c in document.companies if c.id != company_id]
        if len(remaining) == len(document.companies):
            raise not_found_error("Company")
        document.companies = remaining

    logger.info(f"Deleted company {company_id}")
    return {"ok": True, "message": "Company deleted"}

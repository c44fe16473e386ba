"""Company records with local fallback."""
from typing import Callable, List, Sequence, Tuple

from zxsgit.constants import COMPANIES_KEY, GALLERY_LIMIT, ChangeEvent
from zxsgit.models import Company, GalleryImage, MediaItem
from zxsgit.schemas import CompanyPayload, Result
from zxsgit.services import company_rules
from zxsgit.services.base import EntityService
from zxsgit.utils.exceptions import ForbiddenError, NotFoundError, ValidationError
from zxsgit.utils.logger import logger

# Where the current copy of a record came from
REMOTE = "remote"
LOCAL = "local"


class CompanyService(EntityService):
    """Company CRUD plus the media and gallery edits of the company form."""

    event = ChangeEvent.COMPANIES

    def _load_companies(self) -> List[Company]:
        return self._load(COMPANIES_KEY, Company)

    def _save_companies(self, companies: Sequence[Company]) -> None:
        self._save(COMPANIES_KEY, companies)

    def _cache_company(self, company: Company) -> None:
        companies = self._load_companies()
        for i, cached in enumerate(companies):
            if cached.id == company.id:
                companies[i] = company
                break
        else:
            companies.append(company)
        self._save_companies(companies)

    def _uncache_company(self, company_id: str) -> None:
        companies = self._load_companies()
        remaining = [c for c in companies if c.id != company_id]
        if len(remaining) != len(companies):
            self._save_companies(remaining)

    async def _fetch(self, company_id: str) -> Tuple[Company, str]:
        """
        Current copy of a company and its source.

        A record unknown to the remote store but present in the cache was
        created while offline and is edited locally.

        Raises:
            NotFoundError: If neither store has the company
        """
        result = await self.remote.get_company(company_id)
        if result.ok:
            return result.value, REMOTE
        if not (result.unreachable or isinstance(result.error, NotFoundError)):
            raise result.error
        cached = next((c for c in self._load_companies() if c.id == company_id), None)
        if cached is None:
            raise NotFoundError("Company not found")
        return cached, LOCAL

    def _require_editor(self, company: Company) -> None:
        session = self._require_session()
        if not session.can_edit(company.ownerEmail):
            raise ForbiddenError("Only the owner or an admin can change this company")

    async def list_companies(self) -> Result[List[Company]]:
        async def action() -> Result[List[Company]]:
            result = await self.remote.list_companies()
            if not self._check(result):
                logger.warning("Unable to fetch companies, falling back to local storage")
                return Result.success(self._load_companies())
            message = self._write_through(lambda: self._save_companies(result.value), "Companies loaded")
            return Result.success(result.value, message)

        return await self._run("list_companies", action)

    async def get_company(self, company_id: str) -> Result[Company]:
        async def action() -> Result[Company]:
            company, _ = await self._fetch(company_id)
            return Result.success(company)

        return await self._run("get_company", action)

    async def create_company(self, payload: CompanyPayload) -> Result[Company]:
        """
        Create a company owned by the signed-in user unless the payload names an owner.

        Gallery images beyond the limit are dropped and reported in the message.
        """
        async def action() -> Result[Company]:
            session = self._require_session()
            request = payload.model_copy(
                update={
                    "ownerEmail": payload.ownerEmail or session.email,
                    "ownerName": payload.ownerName or session.name,
                }
            )
            company, rejected = company_rules.build_company(request)
            message = company_rules.with_notice("Company created", rejected)

            async with self.lock:
                result = await self.remote.create_company(company_rules.as_payload(company))
                if self._check(result):
                    company = result.value
                    message = self._write_through(lambda: self._cache_company(company), message)
                else:
                    logger.warning(f"Creating company {company.name} in local storage only")
                    companies = self._load_companies()
                    companies.append(company)
                    self._save_companies(companies)

            self._notify()
            return Result.success(company, message)

        return await self._run("create_company", action)

    async def _edit(
        self,
        company_id: str,
        build: Callable[[Company], Tuple[CompanyPayload, str]],
    ) -> Result[Company]:
        """
        Fetch, change and write back one company under the collection lock.

        Args:
            company_id: Company to change
            build: Turns the current record into the update payload and the result message
        """
        async with self.lock:
            current, source = await self._fetch(company_id)
            self._require_editor(current)
            payload, message = build(current)
            updated, rejected = company_rules.apply_update(current, payload)
            message = company_rules.with_notice(message, rejected)

            if source == REMOTE:
                result = await self.remote.update_company(company_id, company_rules.as_payload(updated))
                if self._check(result):
                    updated = result.value
                    message = self._write_through(lambda: self._cache_company(updated), message)
                else:
                    logger.warning(f"Updating company {company_id} in local storage only")
                    self._cache_company(updated)
            else:
                self._cache_company(updated)

        self._notify()
        return Result.success(updated, message)

    async def update_company(self, company_id: str, payload: CompanyPayload) -> Result[Company]:
        """Apply the fields the payload carries; media and gallery invariants are re-checked."""
        return await self._run(
            "update_company", lambda: self._edit(company_id, lambda current: (payload, "Company updated"))
        )

    async def delete_company(self, company_id: str) -> Result[None]:
        async def action() -> Result[None]:
            message = "Company deleted"
            async with self.lock:
                current, source = await self._fetch(company_id)
                self._require_editor(current)
                if source == REMOTE:
                    result = await self.remote.delete_company(company_id)
                    if self._check(result):
                        message = self._write_through(lambda: self._uncache_company(company_id), message)
                    else:
                        logger.warning(f"Deleting company {company_id} from local storage only")
                        self._uncache_company(company_id)
                else:
                    self._uncache_company(company_id)

            self._notify()
            return Result.success(message=message)

        return await self._run("delete_company", action)

    async def add_media(self, company_id: str, items: Sequence[MediaItem]) -> Result[Company]:
        """Append images; the first image added to an empty list becomes the main image."""
        def build(current: Company) -> Tuple[CompanyPayload, str]:
            if current.main_media is not None:
                added = [item.model_copy(update={"isMain": False}) for item in items]
            else:
                added = [item.model_copy(update={"isMain": i == 0}) for i, item in enumerate(items)]
            return CompanyPayload(media=current.media + added), f"Added {len(added)} image(s)"

        async def action() -> Result[Company]:
            if not items:
                raise ValidationError("Select at least one image")
            return await self._edit(company_id, build)

        return await self._run("add_media", action)

    async def set_main_media(self, company_id: str, media_id: str) -> Result[Company]:
        def build(current: Company) -> Tuple[CompanyPayload, str]:
            if not any(m.id == media_id for m in current.media):
                raise NotFoundError("Image not found")
            media = [m.model_copy(update={"isMain": m.id == media_id}) for m in current.media]
            return CompanyPayload(media=media), "Main image updated"

        return await self._run("set_main_media", lambda: self._edit(company_id, build))

    async def add_gallery_images(self, company_id: str, images: Sequence[GalleryImage]) -> Result[Company]:
        """
        Append gallery images up to the limit.

        With k free slots and n > k images, the first k are added and the
        message reports the n - k rejected ones. A full gallery is an error.
        """
        def build(current: Company) -> Tuple[CompanyPayload, str]:
            remaining = GALLERY_LIMIT - len(current.gallery)
            if remaining <= 0:
                raise ValidationError(f"Gallery holds at most {GALLERY_LIMIT} images")
            accepted = list(images)[:remaining]
            message = company_rules.with_notice(
                f"Added {len(accepted)} image(s) to the gallery", len(images) - len(accepted)
            )
            return CompanyPayload(gallery=current.gallery + accepted), message

        async def action() -> Result[Company]:
            if not images:
                raise ValidationError("Select at least one image")
            return await self._edit(company_id, build)

        return await self._run("add_gallery_images", action)

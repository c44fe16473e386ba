"""User administration with local fallback."""
from typing import List, Optional

from zxsgit.constants import USERS_KEY, ChangeEvent
from zxsgit.models import User
from zxsgit.models.user import seed_admin
from zxsgit.schemas import AdminUserUpdate, Result, SelfUpdate
from zxsgit.services.base import EntityService
from zxsgit.services.merger import dedupe_users, merge_users
from zxsgit.utils.exceptions import ConflictError, NotFoundError
from zxsgit.utils.hashing import hash_password
from zxsgit.utils.logger import logger
from zxsgit.utils.validation import require_email, require_text


class UserCacheService(EntityService):
    """Access to the cached user collection."""

    event = ChangeEvent.USERS

    def _load_users(self) -> List[User]:
        return self._load(USERS_KEY, User)

    def _save_users(self, users: List[User]) -> None:
        self._save(USERS_KEY, users)

    def _cache_user(self, user: User) -> None:
        """Insert or replace a user in the cache, matching by email then id."""
        users = self._load_users()
        for i, cached in enumerate(users):
            if cached.email == user.email or cached.id == user.id:
                users[i] = user
                break
        else:
            users.append(user)
        self._save_users(users)

    @staticmethod
    def _keep_digests(users: List[User], cached: List[User]) -> List[User]:
        """
        Carry cached password digests onto users fetched from the remote store.

        The remote store never returns digests, so without this a cached copy
        of a remote user could no longer sign in offline.
        """
        digests = {u.email: u.passwordHash for u in cached if u.passwordHash}
        return [
            u.model_copy(update={"passwordHash": digests[u.email]})
            if not u.passwordHash and u.email in digests else u
            for u in users
        ]

    @staticmethod
    def _apply_update(
        users: List[User],
        target: User,
        name: Optional[str],
        email: Optional[str],
        role: Optional[str],
        password_hash: Optional[str],
    ) -> User:
        """
        Apply an edit to a user within a collection (in place).

        Raises:
            ConflictError: If the email belongs to someone else or the admin would change
        """
        new_email = email or target.email
        if any(u.email == new_email and u.id != target.id for u in users):
            raise ConflictError("Email already in use")
        new_role = role or target.role
        if target.is_protected_admin and (new_email != target.email or new_role != target.role):
            raise ConflictError("Cannot change the admin account's email or role")

        update = {"name": name or target.name, "email": new_email, "role": new_role}
        if password_hash:
            update["passwordHash"] = password_hash
        updated = target.model_copy(update=update)
        users[users.index(target)] = updated
        return updated


class UserService(UserCacheService):
    """Listing, administration and self-service edits of users."""

    def ensure_admin(self) -> bool:
        """Seed the administrator into the cache if absent; True if it was added."""
        users = self._load_users()
        if any(u.is_protected_admin for u in users):
            return False
        users.append(seed_admin())
        self._save_users(users)
        logger.info("Seeded local admin account")
        return True

    async def list_users(self) -> Result[List[User]]:
        """Merged view of remote and cached users, without credentials."""
        async def action() -> Result[List[User]]:
            message = None
            async with self.lock:
                result = await self.remote.list_users()
                local = self._load_users()
                if self._check(result):
                    users = self._keep_digests(merge_users(result.value, local), local)
                    message = self._write_through(lambda: self._save_users(users), "Users loaded")
                else:
                    logger.warning("Unable to fetch users, falling back to local storage")
                    users = dedupe_users(local)
            return Result.success([u.model_copy(update={"passwordHash": None}) for u in users], message)

        return await self._run("list_users", action)

    async def update_user_as_admin(self, user_id: str, update: AdminUserUpdate) -> Result[User]:
        """Edit another user's name, email, role or password (admins only)."""
        async def action() -> Result[User]:
            self._require_admin()
            name = require_text(update.name, "Name is required") if update.name is not None else None
            email = require_email(update.email) if update.email is not None else None
            password = update.password.get_secret_value() if update.password else None
            password_hash = hash_password(password) if password else None
            request = AdminUserUpdate(name=name, email=email, role=update.role, password=update.password)

            async with self.lock:
                users = self._load_users()
                cached = next((u for u in users if u.id == user_id), None)
                result = await self.remote.update_user(user_id, request)
                message = "User updated"
                if self._check(result):
                    updated = result.value
                    if cached is not None:
                        updated = self._apply_update(users, cached, name, email, update.role, password_hash)
                        message = self._write_through(lambda: self._save_users(users), message)
                    elif updated is None:
                        raise NotFoundError("User not found")
                    else:
                        if password_hash:
                            updated = updated.model_copy(update={"passwordHash": password_hash})
                        message = self._write_through(lambda: self._cache_user(updated), message)
                else:
                    if cached is None:
                        raise NotFoundError("User not found")
                    updated = self._apply_update(users, cached, name, email, update.role, password_hash)
                    self._save_users(users)

            session = self.sessions.current
            previous_email = cached.email if cached is not None else updated.email
            if session is not None and session.email == previous_email:
                self.sessions.update_identity(updated.name, updated.email, updated.role)
            self._notify()
            return Result.success(updated.model_copy(update={"passwordHash": None}), message)

        return await self._run("update_user_as_admin", action)

    async def delete_user(self, user_id: str) -> Result[None]:
        """Delete a user (admins only; the seeded admin is protected)."""
        async def action() -> Result[None]:
            self._require_admin()
            async with self.lock:
                users = self._load_users()
                cached = next((u for u in users if u.id == user_id), None)
                result = await self.remote.delete_user(user_id)
                message = "User deleted"
                remaining = [u for u in users if u.id != user_id]
                if self._check(result):
                    if cached is not None:
                        message = self._write_through(lambda: self._save_users(remaining), message)
                else:
                    if cached is None:
                        raise NotFoundError("User not found")
                    if cached.is_protected_admin:
                        raise ConflictError("Cannot delete admin account")
                    self._save_users(remaining)

            session = self.sessions.current
            if cached is not None and session is not None and session.email == cached.email:
                self.sessions.end()
            self._notify()
            return Result.success(message=message)

        return await self._run("delete_user", action)

    async def update_self(self, update: SelfUpdate) -> Result[User]:
        """Edit the signed-in user's own profile; the session token is rotated."""
        async def action() -> Result[User]:
            session = self._require_session()
            name = require_text(update.name, "Name is required")
            email = require_email(update.email)
            password = update.password.get_secret_value() if update.password else None
            password_hash = hash_password(password) if password else None

            async with self.lock:
                users = self._load_users()
                cached = next((u for u in users if u.email == session.email), None)
                updated = None
                message = "Profile updated"

                listing = await self.remote.list_users()
                if self._check(listing):
                    target = next((u for u in listing.value if u.email == session.email), None)
                    if target is not None:
                        request = AdminUserUpdate(name=name, email=email, password=update.password)
                        result = await self.remote.update_user(target.id, request)
                        if self._check(result):
                            updated = result.value or target

                if cached is not None:
                    remote_applied = updated is not None
                    updated = self._apply_update(users, cached, name, email, None, password_hash)
                    if remote_applied:
                        message = self._write_through(lambda: self._save_users(users), message)
                    else:
                        self._save_users(users)
                elif updated is None:
                    raise NotFoundError("User not found")
                else:
                    if password_hash:
                        updated = updated.model_copy(update={"passwordHash": password_hash})
                    message = self._write_through(lambda: self._cache_user(updated), message)

            self.sessions.rotate(updated.name, updated.email)
            self._notify()
            return Result.success(updated.model_copy(update={"passwordHash": None}), message)

        return await self._run("update_self", action)

    async def push_local_users(self) -> Result[List[User]]:
        """Upload the cached users so the REST service learns offline registrations."""
        async def action() -> Result[List[User]]:
            async with self.lock:
                local = dedupe_users(self._load_users())
                result = await self.remote.sync_users(local)
                if not self._check(result):
                    raise result.error
            self._notify()
            merged = merge_users(result.value, local)
            return Result.success(
                [u.model_copy(update={"passwordHash": None}) for u in merged],
                f"Synced {len(local)} cached user(s)",
            )

        return await self._run("push_local_users", action)
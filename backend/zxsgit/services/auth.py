"""Registration, sign-in and sign-out."""
from zxsgit.models import Session, User
from zxsgit.schemas import LoginRequest, RegisterRequest, Result
from zxsgit.services.merger import dedupe_users
from zxsgit.services.users import UserCacheService
from zxsgit.utils.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from zxsgit.utils.hashing import hash_password, verify_password
from zxsgit.utils.logger import logger
from zxsgit.utils.validation import require_email, require_text


class AuthService(UserCacheService):
    """Opens and closes sessions against the remote store or the local cache."""

    async def register(self, request: RegisterRequest) -> Result[Session]:
        """
        Create a member account and sign it in.

        Args:
            request: Name, email, password and its confirmation

        Returns:
            Result holding the new session
        """
        async def action() -> Result[Session]:
            name = require_text(request.name, "Name is required")
            email = require_email(request.email)
            password = request.password.get_secret_value() if request.password else ""
            confirm = request.confirm.get_secret_value() if request.confirm else ""
            if not password.strip():
                raise ValidationError("Password is required")
            if password != confirm:
                raise ValidationError("Passwords must match")
            password_hash = hash_password(password)

            message = "Account created"
            async with self.lock:
                users = self._load_users()
                if any(u.email == email for u in users):
                    raise ConflictError("Email already registered")

                normalized = RegisterRequest(name=name, email=email, password=request.password)
                result = await self.remote.register(normalized)
                if self._check(result):
                    session, remote_user = result.value
                    if remote_user is not None:
                        fields = remote_user.model_dump(exclude={"passwordHash"})
                    else:
                        fields = {"name": name, "email": email, "role": session.role}
                    user = User(**fields, passwordHash=password_hash)
                    message = self._write_through(lambda: self._cache_user(user), message)
                    self.sessions.adopt(session)
                else:
                    logger.warning(f"Registering {email} in local storage only")
                    user = User(name=name, email=email, passwordHash=password_hash)
                    users.append(user)
                    self._save_users(users)
                    session = self.sessions.start(user)

            self._notify()
            return Result.success(session, message)

        return await self._run("register", action)

    async def login(self, request: LoginRequest) -> Result[Session]:
        """
        Sign in with email and password.

        The remote store is asked first. When it is unreachable, or does not
        know the address (an account registered while offline), the cached
        users are checked instead.
        """
        async def action() -> Result[Session]:
            email = require_email(request.email)
            password = request.password.get_secret_value() if request.password else ""
            if not password.strip():
                raise ValidationError("Email and password required")

            result = await self.remote.login(LoginRequest(email=email, password=request.password))
            if result.ok:
                return Result.success(self.sessions.adopt(result.value), "Signed in")
            if not (result.unreachable or isinstance(result.error, NotFoundError)):
                raise result.error

            user = next((u for u in dedupe_users(self._load_users()) if u.email == email), None)
            if user is None:
                raise NotFoundError("User not found")
            if not verify_password(password, user.passwordHash or ""):
                raise AuthenticationError("Invalid credentials")
            return Result.success(self.sessions.start(user), "Signed in")

        return await self._run("login", action)

    async def logout(self) -> Result[None]:
        self.sessions.end()
        return Result.success(message="Signed out")

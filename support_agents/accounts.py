"""Host user accounts.

Support agents always wrap a user account. The directory below gives the
add-on the account operations it needs from the host: lookups by id,
username or email, and provisioning of new accounts from the "invite new"
form. Accounts are stored in the option store.
"""

import hashlib
import hmac
import logging
import re
import secrets
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .storage.option_store import OptionStore
from .utils.errors import CreationError

logger = logging.getLogger(__name__)

USERS_OPTION = "users"
PASSWORD_ITERATIONS = 120_000

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.@-]{3,60}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def hash_password(password: str, salt: str | None = None) -> str:
    """Hash a password with salted PBKDF2-SHA256."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), PASSWORD_ITERATIONS
    )
    return f"pbkdf2_sha256${PASSWORD_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a hash produced by hash_password()."""
    try:
        algorithm, iterations, salt, expected = password_hash.split("$", 3)
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations)
    )
    return hmac.compare_digest(digest.hex(), expected)


def is_valid_username(username: str) -> bool:
    return bool(username) and bool(USERNAME_PATTERN.match(username))


def is_valid_email(email: str) -> bool:
    return bool(email) and bool(EMAIL_PATTERN.match(email))


class UserAccount(BaseModel):
    """A network user account."""

    id: int = Field(..., ge=1, description="User id")
    username: str = Field(..., description="Login name")
    email: str = Field(..., description="Email address")
    display_name: str = Field(default="", description="Name shown in listings")
    password_hash: str | None = Field(None, description="Salted password hash")
    capabilities: frozenset[str] = Field(
        default_factory=frozenset, description="Capabilities held by this account"
    )
    is_super_admin: bool = Field(default=False, description="Network super admin")
    registered_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Registration time"
    )

    @property
    def label(self) -> str:
        return self.display_name or self.username

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "display_name": self.display_name,
            "password_hash": self.password_hash,
            "capabilities": sorted(self.capabilities),
            "is_super_admin": self.is_super_admin,
            "registered_at": self.registered_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserAccount":
        """Create from dictionary."""
        return cls.model_validate(data)


class UserDirectory:
    """
    User accounts stored in the option store.

    Usernames and emails are matched case-insensitively, as the host does.
    """

    def __init__(self, options: OptionStore):
        self.options = options

    def _raw(self) -> dict[str, Any]:
        data = self.options.get_option(USERS_OPTION, {})
        return dict(data) if isinstance(data, dict) else {}

    def all_users(self) -> list[UserAccount]:
        users = []
        for key, data in self._raw().items():
            try:
                users.append(UserAccount.from_dict(data))
            except PydanticValidationError as e:
                logger.warning(f"Skipping malformed user record {key}: {e}")
        return sorted(users, key=lambda u: u.id)

    def get_user(self, user_id: int) -> UserAccount | None:
        data = self._raw().get(str(user_id))
        if data is None:
            return None
        try:
            return UserAccount.from_dict(data)
        except PydanticValidationError as e:
            logger.warning(f"Malformed user record {user_id}: {e}")
            return None

    def get_user_by_login(self, username: str) -> UserAccount | None:
        wanted = username.strip().lower()
        return next((u for u in self.all_users() if u.username.lower() == wanted), None)

    def get_user_by_email(self, email: str) -> UserAccount | None:
        wanted = email.strip().lower()
        return next((u for u in self.all_users() if u.email.lower() == wanted), None)

    def create_user(
        self,
        username: str,
        email: str,
        password: str | None = None,
        display_name: str = "",
        capabilities: Iterable[str] = (),
        is_super_admin: bool = False,
    ) -> UserAccount:
        """
        Provision a new user account.

        Args:
            username: Login name
            email: Email address
            password: Optional password; without one the user must set it
                when accepting the invite
            display_name: Name shown in listings (defaults to username)
            capabilities: Capabilities held by the account
            is_super_admin: Whether the account is a network super admin

        Returns:
            The created UserAccount

        Raises:
            CreationError: If the account can't be created
        """
        if not is_valid_username(username):
            raise CreationError(f"Invalid username: {username!r}", code="invalid_username")
        if not is_valid_email(email):
            raise CreationError(f"Invalid email address: {email!r}", code="invalid_email")
        if self.get_user_by_login(username):
            raise CreationError(f"Username already exists: {username}", code="existing_user_login")
        if self.get_user_by_email(email):
            raise CreationError(f"Email already registered: {email}", code="existing_user_email")

        raw = self._raw()
        user_id = max((int(key) for key in raw if str(key).isdigit()), default=0) + 1
        user = UserAccount(
            id=user_id,
            username=username,
            email=email,
            display_name=display_name or username,
            password_hash=hash_password(password) if password else None,
            capabilities=frozenset(capabilities),
            is_super_admin=is_super_admin,
        )
        raw[str(user.id)] = user.to_dict()
        if not self.options.save_option(USERS_OPTION, raw):
            raise CreationError(f"Failed to store user account {username}", code="storage_failed")

        logger.info(f"Created user account {user.id} ({username})")
        return user

    def delete_user(self, user_id: int) -> bool:
        raw = self._raw()
        if raw.pop(str(user_id), None) is None:
            return False
        return self.options.save_option(USERS_OPTION, raw)

    def capabilities_of(self, user_id: int | None) -> frozenset[str]:
        """Capabilities held by an account (empty if it doesn't exist)."""
        if user_id is None:
            return frozenset()
        user = self.get_user(user_id)
        return user.capabilities if user else frozenset()

# src/shlfcore/tracking/store.py
"""
Profile persistence.

The profile (with its owned goals and achievements) is the only state the
core writes. :class:`ProfileStore` keeps it in a single JSON file with
atomic write-to-temp-then-rename; :class:`InMemoryProfileStore` keeps a
detached copy in memory.

``commit()`` is best-effort: failures are logged and reported through the
return value, never raised. Nothing the core computes depends on a commit
having succeeded, since derived values are recomputed from the ledger on
the next read.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Protocol, runtime_checkable

from pydantic import ValidationError

from ..exceptions import GoalValidationError, ProfileStorageError, StorageError, UnknownVariantError
from ..models import UserProfile

logger = logging.getLogger(__name__)

STORE_FORMAT_VERSION = 1


@runtime_checkable
class ProfileStorageProtocol(Protocol):
    """Protocol for profile storage backends."""

    def load_profile(self) -> Optional[UserProfile]: ...
    def save_profile(self, profile: UserProfile) -> None: ...
    def commit(self, profile: UserProfile) -> bool: ...
    def delete_profile(self) -> None: ...


def decode_profile(data: dict[str, Any]) -> UserProfile:
    """
    Validate a serialized profile.

    Raises:
        UnknownVariantError: If an enum field holds an unknown discriminant.
        ProfileStorageError: For any other malformed content.
    """
    try:
        profile = UserProfile.model_validate(data)
    except ValidationError as exc:
        for error in exc.errors():
            if error.get("type") == "enum":
                location = ".".join(str(part) for part in error.get("loc", ()))
                raise UnknownVariantError(location, error.get("input")) from exc
        raise ProfileStorageError(f"Invalid profile data: {exc}") from exc

    for goal in profile.goals:
        try:
            goal.check_window()
        except GoalValidationError as exc:
            raise ProfileStorageError(f"Goal {goal.id} has an invalid window: {exc}") from exc
    return profile


def encode_profile(profile: UserProfile) -> dict[str, Any]:
    return profile.model_dump(mode="json")


class _CommittingStore:
    """Best-effort ``commit`` shared by the concrete stores."""

    def save_profile(self, profile: UserProfile) -> None:  # pragma: no cover - abstract
        raise NotImplementedError

    def commit(self, profile: UserProfile) -> bool:
        try:
            self.save_profile(profile)
        except (OSError, StorageError, TypeError, ValueError) as exc:
            logger.error("Failed to commit profile %s: %s", profile.id, exc)
            return False
        return True


class ProfileStore(_CommittingStore):
    """
    JSON file-based profile persistence.

    Args:
        path: Path to the profile JSON file.

    Example:
        >>> store = ProfileStore("~/.local/share/shlfcore/profile.json")
        >>> profile = store.load_profile() or UserProfile()
    """

    def __init__(self, path: str = "~/.local/share/shlfcore/profile.json") -> None:
        self._path = Path(os.path.expanduser(path))

    @classmethod
    def from_config(cls, config: Any) -> ProfileStore:
        """Create a store from a :class:`~shlfcore.config.StorageConfig`."""
        return cls(path=config.profile_path)

    @property
    def path(self) -> Path:
        return self._path

    def load_profile(self) -> Optional[UserProfile]:
        """
        Load the stored profile.

        Returns:
            The profile, or None when nothing has been stored yet.

        Raises:
            ProfileStorageError: If the file exists but cannot be decoded.
            UnknownVariantError: If it names an unknown enum variant.
        """
        if not self._path.exists():
            return None

        try:
            raw = self._path.read_text(encoding="utf-8")
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError) as exc:
            raise ProfileStorageError(f"Failed to read profile from {self._path}: {exc}") from exc

        if not isinstance(data, dict) or "profile" not in data:
            raise ProfileStorageError(f"Malformed profile file: {self._path}")

        profile = decode_profile(data["profile"])
        logger.debug(
            "Loaded profile %s (%d goals, %d achievements) from %s",
            profile.id,
            len(profile.goals),
            len(profile.achievements),
            self._path,
        )
        return profile

    def save_profile(self, profile: UserProfile) -> None:
        """Atomically write the profile to disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        data = {"version": STORE_FORMAT_VERSION, "profile": encode_profile(profile)}
        try:
            tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def delete_profile(self) -> None:
        """Remove the stored profile together with its goals and achievements."""
        if self._path.exists():
            self._path.unlink()
            logger.info("Deleted profile file %s", self._path)


class InMemoryProfileStore(_CommittingStore):
    """
    Profile store that keeps a detached snapshot in memory.

    Saving serializes the profile so later in-memory mutations do not leak
    into the stored copy. ``fail_commits`` makes every save raise, which
    lets callers exercise the best-effort commit path.
    """

    def __init__(self, profile: Optional[UserProfile] = None, fail_commits: bool = False) -> None:
        self._data: Optional[dict[str, Any]] = encode_profile(profile) if profile is not None else None
        self.fail_commits = fail_commits
        self.commit_count = 0

    def load_profile(self) -> Optional[UserProfile]:
        if self._data is None:
            return None
        return decode_profile(self._data)

    def save_profile(self, profile: UserProfile) -> None:
        if self.fail_commits:
            raise ProfileStorageError("In-memory store configured to fail")
        self._data = encode_profile(profile)
        self.commit_count += 1

    def delete_profile(self) -> None:
        self._data = None

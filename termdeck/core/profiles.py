"""Terminal profile registry."""

import logging
import uuid
from typing import Dict, List, Optional

from ..models.profile import TerminalProfile
from .constants import DEFAULT_PROFILE_ID

logger = logging.getLogger(__name__)


def default_profile() -> TerminalProfile:
    """The profile every registry starts with."""
    return TerminalProfile(
        id=DEFAULT_PROFILE_ID,
        name="Default",
        shell='bash',
        shell_path='/bin/bash',
        shell_args=['-l'],
        is_default=True
    )


class ProfileRegistry:
    """In-memory collection of terminal profiles with one default."""

    def __init__(self, profiles: Optional[List[TerminalProfile]] = None):
        self._profiles: Dict[str, TerminalProfile] = {}
        for profile in profiles or [default_profile()]:
            self._profiles[profile.id] = profile
        if not any(p.is_default for p in self._profiles.values()):
            first = next(iter(self._profiles.values()))
            first.is_default = True

    @property
    def default_profile(self) -> TerminalProfile:
        return next(p for p in self._profiles.values() if p.is_default)

    def list_profiles(self) -> List[TerminalProfile]:
        return list(self._profiles.values())

    def get_profile(self, profile_id: Optional[str]) -> TerminalProfile:
        """Get a profile by ID, falling back to the default profile."""
        if profile_id and profile_id in self._profiles:
            return self._profiles[profile_id]
        return self.default_profile

    def has_profile(self, profile_id: str) -> bool:
        return profile_id in self._profiles

    def add_profile(self, name: str, **settings) -> str:
        """Register a new, non-default profile.

        Args:
            name: Display name
            **settings: Any other TerminalProfile field

        Returns:
            The generated profile ID
        """
        settings.pop('id', None)
        settings['is_default'] = False
        profile = TerminalProfile(id=str(uuid.uuid4()), name=name, **settings)
        self._profiles[profile.id] = profile
        logger.debug(f"Added profile {profile.id} ({name})")
        return profile.id

    def update_profile(self, profile_id: str, **updates) -> None:
        """Merge updates into a profile. Unknown IDs are ignored."""
        profile = self._profiles.get(profile_id)
        if not profile:
            return
        updates.pop('id', None)
        make_default = updates.pop('is_default', None)
        merged = profile.model_copy(update=updates)
        self._profiles[profile_id] = TerminalProfile.model_validate(merged.model_dump())
        if make_default:
            self.set_default_profile(profile_id)

    def remove_profile(self, profile_id: str) -> bool:
        """Remove a profile. Returns True if removed.

        The last remaining profile cannot be removed. Removing the default
        promotes the first remaining profile.
        """
        if profile_id not in self._profiles or len(self._profiles) == 1:
            return False
        removed = self._profiles.pop(profile_id)
        if removed.is_default:
            next(iter(self._profiles.values())).is_default = True
        return True

    def set_default_profile(self, profile_id: str) -> None:
        """Make a profile the default. Unknown IDs are ignored."""
        if profile_id not in self._profiles:
            return
        for profile in self._profiles.values():
            profile.is_default = profile.id == profile_id

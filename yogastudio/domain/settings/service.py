"""Settings service - public settings map and admin bulk updates"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...cache import get_public_settings_cached, invalidate_public_settings_cache, set_public_settings_cached
from ...config import SETTINGS_CACHE_TTL
from ...models import User
from ...shared.db import commit_or_raise
from ...shared.validators import validate_email
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


def validate_settings(settings: dict) -> list[str]:
    """Errors for the settings every studio page depends on"""
    errors = []
    site_name = settings.get("site_name")
    if not isinstance(site_name, str) or not site_name.strip():
        errors.append("site_name: Site name is required")

    contact_email = settings.get("contact_email")
    if not isinstance(contact_email, str) or not contact_email.strip():
        errors.append("contact_email: Contact email is required")
    else:
        try:
            validate_email(contact_email)
        except ValueError:
            errors.append("contact_email: Invalid email format")
    return errors


class SettingsService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = SettingsRepository()

    def get_settings_map(self) -> dict:
        return {s.key: s.value for s in self.repo.list_settings(self.db)}

    def get_public_settings(self) -> dict:
        cached = get_public_settings_cached()
        if cached is not None:
            return cached
        settings = self.get_settings_map()
        set_public_settings_cached(settings, SETTINGS_CACHE_TTL)
        return settings

    def list_settings(self):
        return self.repo.list_settings(self.db)

    def update_settings(self, updates: dict, user: User) -> dict:
        """Upsert every key in `updates`; the merged map must stay valid"""
        updates = {key.strip(): value for key, value in updates.items()}
        merged = {**self.get_settings_map(), **updates}
        errors = validate_settings(merged)
        if errors:
            raise HTTPException(status_code=400, detail=errors)

        if "contact_email" in updates:
            updates = {**updates, "contact_email": validate_email(updates["contact_email"])}
        for key, value in updates.items():
            self.repo.upsert(self.db, key, value, user.id)
        commit_or_raise(self.db, "save settings")
        invalidate_public_settings_cache()

        logger.info(f"⚙️ Settings updated by {user.email}: {sorted(updates.keys())}")
        return self.get_settings_map()

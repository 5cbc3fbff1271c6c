"""
Tests for the database management commands.
"""

import pytest

import manage
from marketplace.config import settings
from marketplace.models.user import UserRole


class TestSeed:
    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, user_repository):
        assert await manage.seed_database() == 3
        assert await manage.seed_database() == 0

        admin = await user_repository.get_by_email(settings.seed_admin_email)
        assert admin.roles == frozenset({UserRole.ADMIN})
        assert admin.verify_password(settings.seed_admin_password)

        agent = await user_repository.get_by_email(settings.seed_agent_email)
        assert agent.roles == frozenset({UserRole.AGENT})
        assert await user_repository.count() == 3

    @pytest.mark.asyncio
    async def test_reset_refused_in_production(self, monkeypatch):
        monkeypatch.setattr(settings, "environment", "production")
        with pytest.raises(RuntimeError):
            await manage.reset_database()

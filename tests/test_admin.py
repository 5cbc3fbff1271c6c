"""
Tests for the admin service: dashboard, moderation and statistics.
"""

from datetime import datetime, timezone
import uuid

import pytest

from marketplace.models.user import UserRole
from marketplace.services.admin import AdminService, month_starts, monthly_counts
from marketplace.utils.exceptions import UserNotFoundError
from tests.conftest import MessageFactory, PropertyFactory, RequestFactory


@pytest.fixture
def admin_service(db_session, blob_store) -> AdminService:
    return AdminService(db_session, blob_store)


class TestMonthBuckets:
    def test_month_starts_cross_year_boundary(self):
        starts = month_starts(datetime(2024, 2, 15, 12, 0, tzinfo=timezone.utc), 4)
        assert [(s.year, s.month) for s in starts] == [(2023, 11), (2023, 12), (2024, 1), (2024, 2)]
        assert all(s.day == 1 and s.tzinfo is timezone.utc for s in starts)

    def test_monthly_counts(self):
        starts = month_starts(datetime(2024, 3, 10, tzinfo=timezone.utc), 3)
        timestamps = [
            datetime(2024, 1, 31, 23, 59),
            datetime(2024, 3, 1, tzinfo=timezone.utc),
            datetime(2024, 3, 9, tzinfo=timezone.utc),
            datetime(2023, 12, 31, tzinfo=timezone.utc),
        ]

        assert monthly_counts(timestamps, starts) == [
            {"month": "2024-01", "count": 1},
            {"month": "2024-02", "count": 0},
            {"month": "2024-03", "count": 2},
        ]


class TestDashboard:
    @pytest.mark.asyncio
    async def test_counters(
        self,
        admin_service,
        property_repository,
        message_repository,
        test_request,
        test_property,
        test_client_user,
        test_agent,
        test_admin
    ):
        await PropertyFactory.create_property(property_repository, owner_id=test_agent.id, status="Sold")
        await MessageFactory.create_message(message_repository, test_client_user.id, test_agent.id)

        dashboard = await admin_service.get_dashboard()

        assert dashboard["total_users"] == 3
        assert dashboard["total_properties"] == 2
        assert dashboard["total_requests"] == 1
        assert dashboard["total_messages"] == 1
        assert dashboard["pending_requests"] == 1
        assert dashboard["available_properties"] == 1
        assert dashboard["sold_properties"] == 1
        assert len(dashboard["recent_properties"]) == 2
        assert dashboard["recent_requests"][0]["id"] == str(test_request.id)


class TestUserModeration:
    @pytest.mark.asyncio
    async def test_list_users_sorted_by_email(self, admin_service, test_client_user, test_agent, test_admin):
        users = await admin_service.list_users()
        assert [u.email for u in users] == ["admin@example.com", "agent@example.com", "client@example.com"]

    @pytest.mark.asyncio
    async def test_user_details(self, admin_service, test_agent, test_property, test_client_user, test_request):
        agent_details = await admin_service.get_user_details(test_agent.id)
        assert agent_details["user"]["email"] == "agent@example.com"
        assert [p["id"] for p in agent_details["properties"]] == [str(test_property.id)]
        assert agent_details["requests"] == []

        client_details = await admin_service.get_user_details(test_client_user.id)
        assert [r["id"] for r in client_details["requests"]] == [str(test_request.id)]

        with pytest.raises(UserNotFoundError):
            await admin_service.get_user_details(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_toggle_role(self, admin_service, test_client_user):
        granted = await admin_service.toggle_user_role(test_client_user.id, UserRole.AGENT)
        assert granted.roles == frozenset({UserRole.CLIENT, UserRole.AGENT})

        revoked = await admin_service.toggle_user_role(test_client_user.id, "Agent")
        assert revoked.roles == frozenset({UserRole.CLIENT})

    @pytest.mark.asyncio
    async def test_toggle_role_unknown_user(self, admin_service):
        with pytest.raises(UserNotFoundError):
            await admin_service.toggle_user_role(uuid.uuid4(), UserRole.ADMIN)

    @pytest.mark.asyncio
    async def test_delete_user_cascades(self, admin_service, user_repository, property_repository, test_agent, test_property, test_request):
        await admin_service.delete_user(test_agent.id)

        assert await user_repository.get_by_id(test_agent.id) is None
        assert await property_repository.count() == 0
        assert await admin_service.list_requests() == []


class TestStatistics:
    @pytest.mark.asyncio
    async def test_statistics(
        self,
        admin_service,
        property_repository,
        request_repository,
        message_repository,
        test_property,
        test_client_user,
        test_agent,
        test_admin
    ):
        popular = await PropertyFactory.create_property(property_repository, owner_id=test_agent.id, title="Popular")
        await RequestFactory.create_request(request_repository, popular.id, test_client_user.id)
        await RequestFactory.create_request(request_repository, popular.id, test_admin.id, status="Approved")
        await RequestFactory.create_request(request_repository, test_property.id, test_client_user.id)
        await MessageFactory.create_message(message_repository, test_client_user.id, test_agent.id)

        stats = await admin_service.get_statistics()

        assert stats["properties_by_status"] == {"Available": 2}
        assert stats["requests_by_status"] == {"Pending": 2, "Approved": 1}
        assert stats["users_by_role"] == {"Admin": 1, "Agent": 1, "Client": 1}

        assert len(stats["monthly_requests"]) == 6
        assert stats["monthly_requests"][-1]["count"] == 3
        assert sum(entry["count"] for entry in stats["monthly_messages"]) == 1

        top = stats["top_requested_properties"][0]
        assert top == {"property_id": str(popular.id), "title": "Popular", "request_count": 2}

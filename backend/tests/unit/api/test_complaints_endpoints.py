"""
Unit Tests for Complaint Endpoints
Tests for: submission, listing, detail, admin updates, statistics
"""
import pytest
from httpx import AsyncClient

from app.models import ComplaintCategory, ComplaintPriority, ComplaintStatus, User

API = "/api/complaints"


def complaint_payload(**overrides):
    data = {
        "title": "Broken projector in LT2",
        "description": "The projector in lecture theatre 2 has not worked for a week.",
        "category": "facilities",
    }
    data.update(overrides)
    return data


class TestCategories:

    @pytest.mark.asyncio
    async def test_categories_are_public(self, client: AsyncClient):
        response = await client.get(f"{API}/categories")

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data) == len(ComplaintCategory)
        assert {"value", "label", "description"} <= set(data[0])


class TestCreateComplaint:
    """Complaint submission"""

    @pytest.mark.asyncio
    async def test_create_complaint(self, client: AsyncClient, test_user: User, auth_headers: dict):
        response = await client.post(API, json=complaint_payload(priority="high"), headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["status"] == "pending"
        assert body["data"]["priority"] == "high"
        assert body["data"]["anonymous"] is False

        detail = await client.get(f"{API}/{body['data']['complaint_id']}", headers=auth_headers)
        assert detail.json()["data"]["computer_number"] == test_user.computer_number

    @pytest.mark.asyncio
    async def test_priority_defaults_to_medium(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(API, json=complaint_payload(), headers=auth_headers)

        assert response.json()["data"]["priority"] == "medium"

    @pytest.mark.asyncio
    async def test_anonymous_complaint_without_token(self, client: AsyncClient, admin_auth_headers: dict):
        response = await client.post(API, json=complaint_payload(anonymous=True))

        assert response.status_code == 201
        complaint_id = response.json()["data"]["complaint_id"]

        detail = await client.get(f"{API}/{complaint_id}", headers=admin_auth_headers)
        assert detail.json()["data"]["computer_number"] is None
        assert detail.json()["data"]["anonymous"] is True

    @pytest.mark.asyncio
    async def test_named_complaint_requires_token(self, client: AsyncClient):
        response = await client.post(API, json=complaint_payload())

        assert response.status_code == 401
        assert response.json()["error_code"] == "TOKEN_REQUIRED"

    @pytest.mark.asyncio
    async def test_missing_category_lists_valid_categories(self, client: AsyncClient, auth_headers: dict):
        payload = complaint_payload()
        del payload["category"]

        response = await client.post(API, json=payload, headers=auth_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "MISSING_FIELDS"
        assert "category" in body["details"]["errors"]
        assert set(body["details"]["valid_categories"]) == {c.value for c in ComplaintCategory}

    @pytest.mark.asyncio
    async def test_missing_fields_reported_together(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(API, json={"category": "library"}, headers=auth_headers)

        assert response.status_code == 400
        errors = response.json()["details"]["errors"]
        assert set(errors) == {"title", "description"}

    @pytest.mark.asyncio
    async def test_invalid_category(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(API, json=complaint_payload(category="parking"), headers=auth_headers)

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "INVALID_CATEGORY"
        assert "valid_categories" in body["details"]

    @pytest.mark.asyncio
    async def test_invalid_priority(self, client: AsyncClient, auth_headers: dict):
        response = await client.post(API, json=complaint_payload(priority="critical"), headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["details"]["valid_priorities"] == ["low", "medium", "high", "urgent"]

    @pytest.mark.asyncio
    async def test_student_cannot_file_for_someone_else(
        self, client: AsyncClient, other_user: User, auth_headers: dict
    ):
        response = await client.post(
            API,
            json=complaint_payload(computer_number=other_user.computer_number),
            headers=auth_headers
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_files_for_existing_user(
        self, client: AsyncClient, test_user: User, admin_auth_headers: dict
    ):
        response = await client.post(
            API,
            json=complaint_payload(computer_number=test_user.computer_number),
            headers=admin_auth_headers
        )

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_admin_files_for_unknown_user(self, client: AsyncClient, admin_auth_headers: dict):
        response = await client.post(
            API,
            json=complaint_payload(computer_number="2099999999"),
            headers=admin_auth_headers
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "USER_NOT_FOUND"


class TestListComplaints:

    @pytest.mark.asyncio
    async def test_requires_token(self, client: AsyncClient):
        response = await client.get(API)

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_student_sees_only_own(
        self, client: AsyncClient, make_complaint, test_user: User, other_user: User, auth_headers: dict
    ):
        mine = await make_complaint(test_user)
        await make_complaint(other_user)
        await make_complaint(None)

        response = await client.get(API, headers=auth_headers)

        body = response.json()
        assert [c["complaint_id"] for c in body["data"]] == [mine.complaint_id]
        assert body["pagination"]["total"] == 1
        assert body["filters"]["computer_number"] == test_user.computer_number

    @pytest.mark.asyncio
    async def test_admin_sees_all(
        self, client: AsyncClient, make_complaint, test_user: User, other_user: User, admin_auth_headers: dict
    ):
        await make_complaint(test_user)
        await make_complaint(other_user)
        await make_complaint(None)

        response = await client.get(API, headers=admin_auth_headers)

        assert response.json()["pagination"]["total"] == 3

    @pytest.mark.asyncio
    async def test_filters(self, client: AsyncClient, make_complaint, test_user: User, admin_auth_headers: dict):
        await make_complaint(test_user, category=ComplaintCategory.LIBRARY, priority=ComplaintPriority.URGENT)
        await make_complaint(test_user, category=ComplaintCategory.LIBRARY)
        await make_complaint(test_user, category=ComplaintCategory.TRANSPORT, priority=ComplaintPriority.URGENT)

        response = await client.get(
            API,
            params={"category": "library", "priority": "urgent"},
            headers=admin_auth_headers
        )

        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["category"] == "library"
        assert data[0]["priority"] == "urgent"

    @pytest.mark.asyncio
    async def test_invalid_status_filter(self, client: AsyncClient, admin_auth_headers: dict):
        response = await client.get(API, params={"status": "open"}, headers=admin_auth_headers)

        assert response.status_code == 400
        assert "valid_statuses" in response.json()["details"]

    @pytest.mark.asyncio
    async def test_sort_by_priority_follows_severity(
        self, client: AsyncClient, make_complaint, test_user: User, admin_auth_headers: dict
    ):
        for priority in (ComplaintPriority.HIGH, ComplaintPriority.LOW, ComplaintPriority.URGENT, ComplaintPriority.MEDIUM):
            await make_complaint(test_user, priority=priority)

        response = await client.get(
            API, params={"sort_by": "priority", "sort_order": "desc"}, headers=admin_auth_headers
        )

        assert [c["priority"] for c in response.json()["data"]] == ["urgent", "high", "medium", "low"]

    @pytest.mark.asyncio
    async def test_sort_by_status_follows_lifecycle(
        self, client: AsyncClient, make_complaint, test_user: User, admin_auth_headers: dict
    ):
        for status in (ComplaintStatus.CLOSED, ComplaintStatus.IN_PROGRESS, ComplaintStatus.PENDING,
                       ComplaintStatus.REJECTED, ComplaintStatus.RESOLVED):
            await make_complaint(test_user, status=status)

        response = await client.get(
            API, params={"sort_by": "status", "sort_order": "asc"}, headers=admin_auth_headers
        )

        assert [c["status"] for c in response.json()["data"]] == [
            "pending", "in_progress", "resolved", "rejected", "closed"
        ]

    @pytest.mark.asyncio
    async def test_total_pages(self, client: AsyncClient, make_complaint, test_user: User, auth_headers: dict):
        for _ in range(5):
            await make_complaint(test_user)

        response = await client.get(API, params={"limit": 2, "page": 3}, headers=auth_headers)

        pagination = response.json()["pagination"]
        assert pagination["total_pages"] == 3
        assert pagination["has_next"] is False
        assert len(response.json()["data"]) == 1

    @pytest.mark.asyncio
    async def test_empty_list(self, client: AsyncClient, auth_headers: dict):
        response = await client.get(API, headers=auth_headers)

        body = response.json()
        assert body["data"] == []
        assert body["pagination"]["total_pages"] == 0


class TestGetComplaint:

    @pytest.mark.asyncio
    async def test_owner_reads_detail(
        self, client: AsyncClient, make_complaint, test_user: User, auth_headers: dict
    ):
        complaint = await make_complaint(test_user)

        response = await client.get(f"{API}/{complaint.complaint_id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["title"] == complaint.title

    @pytest.mark.asyncio
    async def test_other_user_denied(
        self, client: AsyncClient, make_complaint, test_user: User, other_auth_headers: dict
    ):
        complaint = await make_complaint(test_user)

        response = await client.get(f"{API}/{complaint.complaint_id}", headers=other_auth_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_complaint(self, client: AsyncClient, auth_headers: dict):
        response = await client.get(f"{API}/9999", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error_code"] == "COMPLAINT_NOT_FOUND"


class TestUpdateComplaint:
    """Admin updates"""

    @pytest.mark.asyncio
    async def test_resolve_stamps_resolved_at(
        self, client: AsyncClient, make_complaint, test_user: User, admin_auth_headers: dict
    ):
        complaint = await make_complaint(test_user)

        response = await client.put(
            f"{API}/{complaint.complaint_id}",
            json={"status": "resolved", "admin_response": "Projector replaced"},
            headers=admin_auth_headers
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "resolved"
        assert data["admin_response"] == "Projector replaced"
        assert data["resolved_at"] is not None

    @pytest.mark.asyncio
    async def test_in_progress_leaves_resolved_at_empty(
        self, client: AsyncClient, make_complaint, test_user: User, admin_auth_headers: dict
    ):
        complaint = await make_complaint(test_user)

        response = await client.put(
            f"{API}/{complaint.complaint_id}",
            json={"status": "in_progress", "priority": "urgent"},
            headers=admin_auth_headers
        )

        data = response.json()["data"]
        assert data["status"] == "in_progress"
        assert data["priority"] == "urgent"
        assert data["resolved_at"] is None

    @pytest.mark.asyncio
    async def test_owner_cannot_update(
        self, client: AsyncClient, make_complaint, test_user: User, auth_headers: dict
    ):
        complaint = await make_complaint(test_user)

        response = await client.put(
            f"{API}/{complaint.complaint_id}",
            json={"status": "closed"},
            headers=auth_headers
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_empty_update(
        self, client: AsyncClient, make_complaint, test_user: User, admin_auth_headers: dict
    ):
        complaint = await make_complaint(test_user)

        response = await client.put(f"{API}/{complaint.complaint_id}", json={}, headers=admin_auth_headers)

        assert response.status_code == 400
        assert response.json()["error_code"] == "NO_UPDATES"

    @pytest.mark.asyncio
    async def test_invalid_status(
        self, client: AsyncClient, make_complaint, test_user: User, admin_auth_headers: dict
    ):
        complaint = await make_complaint(test_user)

        response = await client.put(
            f"{API}/{complaint.complaint_id}",
            json={"status": "done"},
            headers=admin_auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_STATUS"

    @pytest.mark.asyncio
    async def test_update_unknown(self, client: AsyncClient, admin_auth_headers: dict):
        response = await client.put(f"{API}/9999", json={"status": "closed"}, headers=admin_auth_headers)

        assert response.status_code == 404


class TestComplaintStats:

    @pytest.mark.asyncio
    async def test_stats(self, client: AsyncClient, make_complaint, test_user: User, admin_auth_headers: dict):
        await make_complaint(test_user, category=ComplaintCategory.LIBRARY, status=ComplaintStatus.RESOLVED)
        await make_complaint(test_user, category=ComplaintCategory.LIBRARY, priority=ComplaintPriority.URGENT)
        await make_complaint(None, category=ComplaintCategory.CAFETERIA)

        response = await client.get(f"{API}/admin/stats", headers=admin_auth_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["overview"]["total"] == 3
        assert data["overview"]["resolved"] == 1
        assert data["overview"]["pending"] == 2
        assert data["overview"]["urgent_priority"] == 1
        assert data["categories"][0] == {"category": "library", "count": 2, "resolved_count": 1}
        assert sum(day["count"] for day in data["trends"]) == 3

    @pytest.mark.asyncio
    async def test_stats_admin_only(self, client: AsyncClient, auth_headers: dict):
        response = await client.get(f"{API}/admin/stats", headers=auth_headers)

        assert response.status_code == 403

"""Tests for role dispatch."""
import os
import pytest

os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("GENERATION_RETRY_BACKOFF_SECONDS", "0")

from fastapi import HTTPException
from renovatepro.auth import ROLE_ROUTES, Role, get_current_role, is_route_allowed


class TestRouteTable:
    def test_every_role_has_routes(self):
        for role in Role:
            assert ROLE_ROUTES[role]

    def test_visitor_marketing_only(self):
        assert is_route_allowed(Role.VISITOR, "/api/v1/marketing/content")
        assert not is_route_allowed(Role.VISITOR, "/api/v1/wizard")
        assert not is_route_allowed(Role.VISITOR, "/api/v1/admin/cms")

    def test_contractor_dashboard(self):
        assert is_route_allowed(Role.CONTRACTOR, "/api/v1/wizard/abc/generate")
        assert is_route_allowed(Role.CONTRACTOR, "/api/v1/projects")
        assert not is_route_allowed(Role.CONTRACTOR, "/api/v1/admin/contractors")

    def test_admin_console(self):
        assert is_route_allowed(Role.ADMIN, "/api/v1/admin/contractors")
        assert not is_route_allowed(Role.ADMIN, "/api/v1/materials")

    def test_prefix_must_match_whole_segment(self):
        assert not is_route_allowed(Role.CONTRACTOR, "/api/v1/projectsx")


class TestCurrentRole:
    @pytest.mark.asyncio
    async def test_missing_header_is_visitor(self):
        assert await get_current_role(None) == Role.VISITOR

    @pytest.mark.asyncio
    async def test_header_is_case_insensitive(self):
        assert await get_current_role("Admin") == Role.ADMIN

    @pytest.mark.asyncio
    async def test_unknown_role(self):
        with pytest.raises(HTTPException) as exc:
            await get_current_role("superuser")
        assert exc.value.status_code == 400

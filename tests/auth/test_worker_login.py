"""
Tests for worker login and worker token checks.
"""

import pytest
from jose import jwt

from helpdesk.core.config import settings
from tests.utils.factories import create_worker_factory
from tests.utils.helpers import assert_error_envelope, create_auth_headers


class TestWorkerLoginEndpoint:
    """Tests for POST /api/v1/auth/worker-login"""

    @pytest.mark.asyncio
    async def test_should_issue_worker_token(self, test_client, test_worker):
        """Test that valid credentials return a worker access token."""
        response = await test_client.post(
            "/api/v1/auth/worker-login",
            json={"username": "Worker.One", "password": "workerpass1"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token_type"] == "bearer"
        assert data["employee"]["id"] == test_worker.id
        claims = jwt.decode(
            data["access_token"], settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        assert claims["sub"] == str(test_worker.id)
        assert claims["role"] == "worker"
        assert claims["is_worker"] is True

    @pytest.mark.asyncio
    async def test_should_return_401_for_wrong_password(self, test_client, test_worker):
        """Test that a wrong password returns 401."""
        response = await test_client.post(
            "/api/v1/auth/worker-login",
            json={"username": "worker.one", "password": "nope"},
        )

        assert response.status_code == 401
        assert_error_envelope(response.json(), "UNAUTHORIZED")

    @pytest.mark.asyncio
    async def test_should_return_same_401_for_unknown_and_inactive(
        self, test_client, db_session
    ):
        """Test that unknown and inactive workers get the same 401."""
        create_worker_factory(db_session, username="sleepy", password="sleepy123", is_active=False)

        unknown = await test_client.post(
            "/api/v1/auth/worker-login", json={"username": "ghost", "password": "x"}
        )
        inactive = await test_client.post(
            "/api/v1/auth/worker-login", json={"username": "sleepy", "password": "sleepy123"}
        )

        assert unknown.status_code == 401
        assert inactive.status_code == 401
        assert unknown.json()["message"] == inactive.json()["message"]

    @pytest.mark.asyncio
    async def test_deactivated_worker_token_is_rejected(
        self, test_client, test_worker, test_worker_token, db_session
    ):
        """Test that a token stops working once the worker is deactivated."""
        test_worker.is_active = False
        db_session.flush()

        response = await test_client.get(
            "/api/v1/tickets", headers=create_auth_headers(test_worker_token)
        )

        assert response.status_code == 401

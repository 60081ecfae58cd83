"""Tests for manual blocking and unblocking of villa nights."""

import uuid

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


class TestBlockDates:
    async def test_block(self, client: AsyncClient, auth_headers: dict, villa) -> None:
        response = await client.post(
            f"/api/v1/villas/{villa.id}/blocks",
            json={"dates": ["2024-06-03", "2024-06-02"], "reason": "Pool resurfacing"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert [b["blocked_date"] for b in data] == ["2024-06-02", "2024-06-03"]
        assert all(b["booking_id"] is None and b["reason"] == "Pool resurfacing" for b in data)

        availability = await client.get(
            f"/api/v1/villas/{villa.id}/availability",
            params={"check_in": "2024-06-01", "check_out": "2024-06-05"},
        )
        assert availability.json()["available"] is False

    async def test_blocked_night_rejects_bookings(self, client: AsyncClient, auth_headers: dict, villa) -> None:
        await client.post(f"/api/v1/villas/{villa.id}/blocks", json={"dates": ["2024-06-02"]}, headers=auth_headers)

        response = await client.post(
            "/api/v1/bookings",
            json={
                "villa_id": str(villa.id),
                "check_in": "2024-06-01",
                "check_out": "2024-06-04",
                "guest_name": "Marie Dubois",
                "guest_email": "marie@example.com",
            },
        )
        assert response.status_code == 409
        assert response.json()["conflicting_dates"] == ["2024-06-02"]

    async def test_already_blocked(self, client: AsyncClient, auth_headers: dict, villa) -> None:
        url = f"/api/v1/villas/{villa.id}/blocks"
        await client.post(url, json={"dates": ["2024-06-02"]}, headers=auth_headers)

        response = await client.post(url, json={"dates": ["2024-06-01", "2024-06-02"]}, headers=auth_headers)
        assert response.status_code == 409

    async def test_past_date(self, client: AsyncClient, auth_headers: dict, villa) -> None:
        response = await client.post(
            f"/api/v1/villas/{villa.id}/blocks", json={"dates": ["2024-04-01"]}, headers=auth_headers
        )
        assert response.status_code == 422

    async def test_empty_list(self, client: AsyncClient, auth_headers: dict, villa) -> None:
        response = await client.post(f"/api/v1/villas/{villa.id}/blocks", json={"dates": []}, headers=auth_headers)
        assert response.status_code == 422

    async def test_unknown_villa(self, client: AsyncClient, auth_headers: dict) -> None:
        response = await client.post(
            f"/api/v1/villas/{uuid.uuid4()}/blocks", json={"dates": ["2024-06-02"]}, headers=auth_headers
        )
        assert response.status_code == 404

    async def test_requires_auth(self, client: AsyncClient, villa) -> None:
        response = await client.post(f"/api/v1/villas/{villa.id}/blocks", json={"dates": ["2024-06-02"]})
        assert response.status_code in (401, 403)


class TestUnblockDates:
    async def test_unblock(self, client: AsyncClient, auth_headers: dict, villa) -> None:
        await client.post(
            f"/api/v1/villas/{villa.id}/blocks",
            json={"dates": ["2024-06-02", "2024-06-03"]},
            headers=auth_headers,
        )

        response = await client.post(
            f"/api/v1/villas/{villa.id}/unblock",
            json={"dates": ["2024-06-02", "2024-06-03", "2024-06-09"]},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json() == {"villa_id": str(villa.id), "removed": 2}

    async def test_booking_nights_untouched(self, client: AsyncClient, auth_headers: dict, villa) -> None:
        booked = await client.post(
            "/api/v1/bookings",
            json={
                "villa_id": str(villa.id),
                "check_in": "2024-06-01",
                "check_out": "2024-06-03",
                "guest_name": "Marie Dubois",
                "guest_email": "marie@example.com",
            },
        )
        assert booked.status_code == 201

        response = await client.post(
            f"/api/v1/villas/{villa.id}/unblock",
            json={"dates": ["2024-06-01", "2024-06-02"]},
            headers=auth_headers,
        )
        assert response.json()["removed"] == 0

        calendar = await client.get(
            f"/api/v1/villas/{villa.id}/calendar", params={"start": "2024-06-01", "end": "2024-06-30"}
        )
        assert len(calendar.json()["blocked"]) == 2

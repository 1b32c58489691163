"""Tests for request ID selection and echoing."""

import uuid

import pytest
from httpx import AsyncClient


@pytest.mark.parametrize(
    "headers, expected",
    [
        ({"X-GitHub-Delivery": "delivery"}, "delivery"),
        ({"X-Request-ID": "request"}, "request"),
        ({"X-GitHub-Delivery": "delivery", "X-Request-ID": "request"}, "delivery"),
    ],
)
async def test_request_id_taken_from_headers(client: AsyncClient, headers, expected):
    res = await client.get("/-/ready", headers=headers)
    assert res.headers["x-request-id"] == expected


async def test_request_id_generated_when_absent(client: AsyncClient):
    res = await client.get("/-/ready")
    uuid.UUID(res.headers["x-request-id"])


async def test_each_request_gets_its_own_id(client: AsyncClient):
    first = await client.get("/-/ready")
    second = await client.get("/-/ready")
    assert first.headers["x-request-id"] != second.headers["x-request-id"]


async def test_unknown_route_still_tagged(client: AsyncClient):
    res = await client.get("/does-not-exist")
    assert res.status_code == 404
    assert "x-request-id" in res.headers

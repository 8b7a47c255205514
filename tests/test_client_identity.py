"""Tests for client identifier resolution."""

import pytest
from starlette.datastructures import Headers

from app.core.client_identity import UNKNOWN_CLIENT, resolve_client_identifier


@pytest.mark.parametrize(
    "headers, expected",
    [
        ({"x-forwarded-for": "192.168.1.1, 10.0.0.1"}, "192.168.1.1"),
        ({"x-forwarded-for": "  192.168.1.1  "}, "192.168.1.1"),
        ({"x-real-ip": "192.168.1.2"}, "192.168.1.2"),
        ({"cf-connecting-ip": "192.168.1.3"}, "192.168.1.3"),
        ({}, UNKNOWN_CLIENT),
        ({"user-agent": "pytest"}, UNKNOWN_CLIENT),
    ],
)
def test_resolves_from_recognised_headers(headers: dict, expected: str) -> None:
    assert resolve_client_identifier(headers) == expected


def test_forwarded_for_takes_precedence() -> None:
    headers = {
        "x-forwarded-for": "203.0.113.7, 10.0.0.1",
        "x-real-ip": "10.0.0.1",
        "cf-connecting-ip": "198.51.100.2",
    }
    assert resolve_client_identifier(headers) == "203.0.113.7"


def test_real_ip_beats_edge_header() -> None:
    headers = {"x-real-ip": "10.0.0.9", "cf-connecting-ip": "198.51.100.2"}
    assert resolve_client_identifier(headers) == "10.0.0.9"


@pytest.mark.parametrize("forwarded", ["", "   ", ", 10.0.0.1"])
def test_blank_forwarded_for_falls_through(forwarded: str) -> None:
    headers = {"x-forwarded-for": forwarded, "cf-connecting-ip": "198.51.100.2"}
    assert resolve_client_identifier(headers) == "198.51.100.2"


def test_works_with_case_insensitive_request_headers() -> None:
    headers = Headers({"X-Forwarded-For": "192.0.2.10", "X-Real-IP": "10.0.0.1"})
    assert resolve_client_identifier(headers) == "192.0.2.10"


def test_is_deterministic() -> None:
    headers = {"x-real-ip": "192.0.2.44"}
    assert {resolve_client_identifier(dict(headers)) for _ in range(5)} == {"192.0.2.44"}


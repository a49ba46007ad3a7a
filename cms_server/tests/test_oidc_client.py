"""Tests for the token exchange and userinfo calls to the identity provider."""
import logging
from unittest.mock import patch

import httpx
import pytest

from cms_server.errors import BadRequest, UpstreamTokenError, UpstreamUserInfoError
from cms_server.oidc_client import exchange_code, fetch_userinfo


def test_exchange_code_missing_inputs_makes_no_request():
    with patch("cms_server.oidc_client.httpx.post") as mock_post:
        with pytest.raises(BadRequest):
            exchange_code(None, "verifier")
        with pytest.raises(BadRequest):
            exchange_code("code", None)
        with pytest.raises(BadRequest):
            exchange_code("", "")
    mock_post.assert_not_called()


def test_exchange_code_posts_authorization_code_grant():
    with patch("cms_server.oidc_client.httpx.post", return_value=httpx.Response(200, json={"access_token": "at"})) as mock_post:
        assert exchange_code("the-code", "the-verifier") == "at"
    args, kwargs = mock_post.call_args
    assert args[0] == "https://idp.example.test/oauth/v2/token"
    assert kwargs["data"] == {
        "grant_type": "authorization_code",
        "client_id": "test-client-id",
        "client_secret": "test-client-secret",
        "code": "the-code",
        "redirect_uri": "http://localhost:3001/api/auth/zitadel/callback",
        "code_verifier": "the-verifier",
    }
    assert kwargs["timeout"] == 10.0


def test_exchange_code_non_success_logs_body_and_raises(caplog):
    resp = httpx.Response(400, json={"error": "invalid_grant", "error_description": "code expired"})
    with patch("cms_server.oidc_client.httpx.post", return_value=resp):
        with caplog.at_level(logging.ERROR, logger="cms_server.oidc_client"):
            with pytest.raises(UpstreamTokenError) as exc_info:
                exchange_code("c", "v")
    assert "code expired" in caplog.text
    assert exc_info.value.public_message == "Failed to get token"


def test_exchange_code_timeout_is_upstream_error():
    with patch("cms_server.oidc_client.httpx.post", side_effect=httpx.ReadTimeout("timed out")):
        with pytest.raises(UpstreamTokenError):
            exchange_code("c", "v")


def test_exchange_code_without_access_token_raises():
    with patch("cms_server.oidc_client.httpx.post", return_value=httpx.Response(200, json={"token_type": "Bearer"})):
        with pytest.raises(UpstreamTokenError):
            exchange_code("c", "v")


def test_exchange_code_non_json_raises():
    with patch("cms_server.oidc_client.httpx.post", return_value=httpx.Response(200, text="<html>oops</html>")):
        with pytest.raises(UpstreamTokenError):
            exchange_code("c", "v")


def test_fetch_userinfo_sends_bearer_token():
    claims = {"sub": "abc", "email": "u@x.com"}
    with patch("cms_server.oidc_client.httpx.get", return_value=httpx.Response(200, json=claims)) as mock_get:
        assert fetch_userinfo("at-123") == claims
    args, kwargs = mock_get.call_args
    assert args[0] == "https://idp.example.test/oidc/v1/userinfo"
    assert kwargs["headers"]["Authorization"] == "Bearer at-123"


def test_fetch_userinfo_non_success_raises(caplog):
    with patch("cms_server.oidc_client.httpx.get", return_value=httpx.Response(401, text="token revoked")):
        with caplog.at_level(logging.ERROR, logger="cms_server.oidc_client"):
            with pytest.raises(UpstreamUserInfoError) as exc_info:
                fetch_userinfo("at")
    assert "token revoked" in caplog.text
    assert exc_info.value.public_message == "Failed to get user info"


def test_fetch_userinfo_connect_error_raises():
    with patch("cms_server.oidc_client.httpx.get", side_effect=httpx.ConnectError("refused")):
        with pytest.raises(UpstreamUserInfoError):
            fetch_userinfo("at")


def test_fetch_userinfo_non_object_raises():
    with patch("cms_server.oidc_client.httpx.get", return_value=httpx.Response(200, json=["sub"])):
        with pytest.raises(UpstreamUserInfoError):
            fetch_userinfo("at")

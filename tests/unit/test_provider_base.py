"""Tests for the ImageryProvider ABC, URL redaction, and fetch error mapping.

HTTP is never exercised for real: ``httpx.Client`` is patched in the
provider base module.
"""

from __future__ import annotations

import unittest
from unittest.mock import MagicMock, patch

import httpx

from lawn_estimator.core.exceptions import (
    REASON_MISCONFIGURED,
    REASON_REJECTED,
    REASON_TIMEOUT,
    REASON_UNAVAILABLE,
    UpstreamFetchError,
)
from lawn_estimator.models.geo import GeoPoint, ViewportMode
from lawn_estimator.models.imagery import ImageryRequest, ProviderConfig
from lawn_estimator.providers.base import (
    ImageryProvider,
    ProviderAuthError,
    ProviderContractError,
    ProviderError,
    ProviderUnavailableError,
    redact_url,
)
from lawn_estimator.providers.bing import BingMapsImageryProvider

_REQUEST = ImageryRequest(
    mode=ViewportMode.POINT_ZOOM,
    width_px=600,
    height_px=400,
    center=GeoPoint(latitude=47.6, longitude=-122.3),
    zoom=18,
)


def _mock_client(response: MagicMock | None = None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    client.__enter__ = MagicMock(return_value=client)
    client.__exit__ = MagicMock(return_value=False)
    if error is not None:
        client.get.side_effect = error
    else:
        client.get.return_value = response
    return client


def _status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "https://example.test/")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError(f"HTTP {status}", request=request, response=response)


# ---------------------------------------------------------------------------
# ABC enforcement
# ---------------------------------------------------------------------------


class TestABCEnforcement(unittest.TestCase):
    def test_cannot_instantiate_abc(self) -> None:
        with self.assertRaises(TypeError):
            ImageryProvider(ProviderConfig(name="test"))  # type: ignore[abstract]

    def test_complete_subclass_works(self) -> None:
        class _Complete(ImageryProvider):
            def build_request_url(self, request):  # type: ignore[override]
                return "https://example.test/?key=k"

        provider = _Complete(ProviderConfig(name="complete"))
        assert provider.name == "complete"
        assert provider.config.name == "complete"


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------


class TestProviderExceptions(unittest.TestCase):
    def test_provider_error_attributes(self) -> None:
        err = ProviderError(provider="bing", message="bad request")
        assert err.provider == "bing"
        assert err.reason == REASON_REJECTED
        assert err.stage == "fetch_imagery"
        assert str(err) == "[bing] bad request"

    def test_auth_error_is_configuration_error(self) -> None:
        err = ProviderAuthError("bing", "no key")
        assert isinstance(err, UpstreamFetchError)
        assert err.is_configuration_error
        assert err.retryable is False
        assert err.code == "PROVIDER_AUTH_FAILED"

    def test_unavailable_error_is_retryable(self) -> None:
        err = ProviderUnavailableError("bing", "503")
        assert err.reason == REASON_UNAVAILABLE
        assert err.retryable is True


# ---------------------------------------------------------------------------
# redact_url
# ---------------------------------------------------------------------------


class TestRedactUrl(unittest.TestCase):
    def test_masks_named_parameter(self) -> None:
        redacted = redact_url("https://example.test/map?mapSize=1,1&key=abc123", "key")
        assert "abc123" not in redacted
        assert httpx.URL(redacted).params["key"] == "***"
        assert httpx.URL(redacted).params["mapSize"] == "1,1"

    def test_url_without_parameter_unchanged(self) -> None:
        url = "https://example.test/map?mapSize=1,1"
        assert redact_url(url, "key") == url


# ---------------------------------------------------------------------------
# fetch()
# ---------------------------------------------------------------------------


class TestFetch(unittest.TestCase):
    def _provider(self, api_key: str = "secret-key") -> BingMapsImageryProvider:
        return BingMapsImageryProvider(ProviderConfig(name="bing", api_key=api_key, timeout_s=7.0))

    @patch("lawn_estimator.providers.base.httpx.Client")
    def test_success_returns_payload_with_redacted_reference(self, mock_client_cls: MagicMock) -> None:
        response = MagicMock()
        response.content = b"\x89PNG-bytes"
        response.headers = {"content-type": "image/png"}
        mock_client_cls.return_value = _mock_client(response)

        payload = self._provider().fetch(_REQUEST)

        assert payload.content == b"\x89PNG-bytes"
        assert payload.content_type == "image/png"
        assert "secret-key" not in payload.image_reference
        assert httpx.URL(payload.image_reference).params["key"] == "***"
        mock_client_cls.assert_called_once_with(timeout=7.0, follow_redirects=True)

    @patch("lawn_estimator.providers.base.httpx.Client")
    def test_timeout_override(self, mock_client_cls: MagicMock) -> None:
        response = MagicMock(content=b"x", headers={})
        mock_client_cls.return_value = _mock_client(response)
        self._provider().fetch(_REQUEST, timeout_s=2.5)
        mock_client_cls.assert_called_once_with(timeout=2.5, follow_redirects=True)

    @patch("lawn_estimator.providers.base.httpx.Client")
    def test_missing_key_fails_before_any_call(self, mock_client_cls: MagicMock) -> None:
        with self.assertRaises(ProviderAuthError) as ctx:
            self._provider(api_key="").fetch(_REQUEST)
        assert ctx.exception.reason == REASON_MISCONFIGURED
        mock_client_cls.assert_not_called()

    @patch("lawn_estimator.providers.base.httpx.Client")
    def test_timeout_maps_to_unavailable_timeout(self, mock_client_cls: MagicMock) -> None:
        mock_client_cls.return_value = _mock_client(error=httpx.ReadTimeout("slow"))
        with self.assertRaises(ProviderUnavailableError) as ctx:
            self._provider().fetch(_REQUEST)
        assert ctx.exception.reason == REASON_TIMEOUT
        assert ctx.exception.retryable is True

    @patch("lawn_estimator.providers.base.httpx.Client")
    def test_connect_error_maps_to_unavailable(self, mock_client_cls: MagicMock) -> None:
        mock_client_cls.return_value = _mock_client(error=httpx.ConnectError("refused"))
        with self.assertRaises(ProviderUnavailableError) as ctx:
            self._provider().fetch(_REQUEST)
        assert ctx.exception.reason == REASON_UNAVAILABLE

    @patch("lawn_estimator.providers.base.httpx.Client")
    def test_401_maps_to_auth_error(self, mock_client_cls: MagicMock) -> None:
        response = MagicMock()
        response.raise_for_status.side_effect = _status_error(401)
        mock_client_cls.return_value = _mock_client(response)
        with self.assertRaises(ProviderAuthError):
            self._provider().fetch(_REQUEST)

    @patch("lawn_estimator.providers.base.httpx.Client")
    def test_503_maps_to_unavailable(self, mock_client_cls: MagicMock) -> None:
        response = MagicMock()
        response.raise_for_status.side_effect = _status_error(503)
        mock_client_cls.return_value = _mock_client(response)
        with self.assertRaises(ProviderUnavailableError):
            self._provider().fetch(_REQUEST)

    @patch("lawn_estimator.providers.base.httpx.Client")
    def test_400_maps_to_rejected(self, mock_client_cls: MagicMock) -> None:
        response = MagicMock()
        response.raise_for_status.side_effect = _status_error(400)
        mock_client_cls.return_value = _mock_client(response)
        with self.assertRaises(ProviderError) as ctx:
            self._provider().fetch(_REQUEST)
        assert ctx.exception.reason == REASON_REJECTED
        assert not ctx.exception.retryable

    @patch("lawn_estimator.providers.base.httpx.Client")
    def test_non_image_body_is_contract_error(self, mock_client_cls: MagicMock) -> None:
        response = MagicMock(content=b"<html>quota</html>", headers={"content-type": "text/html"})
        mock_client_cls.return_value = _mock_client(response)
        with self.assertRaises(ProviderContractError) as ctx:
            self._provider().fetch(_REQUEST)
        err = ctx.exception
        assert isinstance(err, UpstreamFetchError)
        assert err.category == "contract"
        assert err.code == "PROVIDER_CONTRACT_VIOLATION"
        assert err.stage == "fetch_imagery"
        assert err.retryable is False
        assert "text/html" in str(err)

    @patch("lawn_estimator.providers.base.httpx.Client")
    def test_jpeg_with_parameters_accepted(self, mock_client_cls: MagicMock) -> None:
        response = MagicMock(content=b"\xff\xd8", headers={"content-type": "Image/JPEG; q=1"})
        mock_client_cls.return_value = _mock_client(response)
        assert self._provider().fetch(_REQUEST).content == b"\xff\xd8"

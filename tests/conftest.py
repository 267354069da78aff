"""Shared pytest fixtures for the lawn estimator test suite."""

from __future__ import annotations

import io
from collections.abc import Callable, Sequence

import pytest
from PIL import Image

from lawn_estimator.core.exceptions import PipelineError
from lawn_estimator.geocoding.base import GeocodeResult, Geocoder
from lawn_estimator.models.geo import GeoPoint
from lawn_estimator.models.imagery import ImageryPayload, ImageryRequest, ProviderConfig
from lawn_estimator.providers.base import ImageryProvider

Pixel = tuple[int, int, int]

GREEN: Pixel = (0, 200, 0)
RED: Pixel = (200, 0, 0)
BLACK: Pixel = (0, 0, 0)
WHITE: Pixel = (255, 255, 255)


# ---------------------------------------------------------------------------
# Image fixtures
# ---------------------------------------------------------------------------


def encode_png(pixels: Sequence[Pixel], width: int, height: int, mode: str = "RGB") -> bytes:
    """Encode row-major *pixels* as PNG bytes in the given Pillow *mode*."""
    image = Image.new("RGB", (width, height))
    image.putdata(list(pixels))
    if mode != "RGB":
        image = image.convert(mode)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture()
def png_bytes() -> Callable[..., bytes]:
    """Factory fixture: ``png_bytes(pixels, width, height, mode="RGB")``."""
    return encode_png


@pytest.fixture()
def scenario_png() -> bytes:
    """2x2 image: green, red / black, white (row-major)."""
    return encode_png([GREEN, RED, BLACK, WHITE], 2, 2)


# ---------------------------------------------------------------------------
# Fake collaborators
# ---------------------------------------------------------------------------


class FakeImageryProvider(ImageryProvider):
    """Provider that returns canned bytes (or raises) without any HTTP."""

    def __init__(
        self,
        content: bytes = b"",
        *,
        error: PipelineError | None = None,
        name: str = "fake",
    ) -> None:
        super().__init__(ProviderConfig(name=name, api_key="secret"))
        self.content = content
        self.error = error
        self.requests: list[ImageryRequest] = []

    def build_request_url(self, request: ImageryRequest) -> str:
        return f"https://imagery.test/static/{request.width_px}x{request.height_px}?key=secret"

    def fetch(self, request: ImageryRequest, *, timeout_s: float | None = None) -> ImageryPayload:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return ImageryPayload(
            content=self.content,
            content_type="image/png",
            image_reference=self.build_request_url(request).replace("secret", "***"),
        )


class FakeGeocoder(Geocoder):
    """Geocoder that returns a fixed result (or raises) without any HTTP."""

    def __init__(
        self,
        result: GeocodeResult | None = None,
        *,
        error: PipelineError | None = None,
    ) -> None:
        super().__init__(ProviderConfig(name="fake-geocoder", api_key="secret"))
        self.result = result
        self.error = error
        self.addresses: list[str] = []

    def build_query(self, address: str) -> tuple[str, dict[str, str]]:
        return "https://geocoder.test/search", {"q": address}

    def parse_response(self, data: object, address: str) -> GeocodeResult:
        raise NotImplementedError

    def geocode(self, address: str) -> GeocodeResult:
        self.addresses.append(address)
        if self.error is not None:
            raise self.error
        assert self.result is not None
        return self.result


@pytest.fixture()
def fake_provider(scenario_png: bytes) -> FakeImageryProvider:
    """Provider that serves the 2x2 scenario image."""
    return FakeImageryProvider(scenario_png)


@pytest.fixture()
def fake_geocoder() -> FakeGeocoder:
    return FakeGeocoder(
        GeocodeResult(
            point=GeoPoint(latitude=47.6062, longitude=-122.3321),
            formatted_address="1 Main St, Seattle, WA",
        )
    )


@pytest.fixture()
def make_provider() -> type[FakeImageryProvider]:
    """The fake provider class, for tests that need custom bytes or errors."""
    return FakeImageryProvider


@pytest.fixture()
def make_geocoder() -> type[FakeGeocoder]:
    return FakeGeocoder

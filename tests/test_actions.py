"""Tests for description generation and the submit actions."""

import asyncio
import json
import os
import tempfile

import httpx
import pytest

from adilla import actions
from adilla.config import GeneratorConfig
from adilla.describe.generator import DescriptionGenerator, build_prompt
from adilla.errors import GenerationFailure
from adilla.models import DescriptionRequest
from adilla.store.repository import Store


def _make_request(**overrides) -> DescriptionRequest:
    defaults = {
        "property_type": "House",
        "location": "Nashville",
        "bedrooms": 3,
        "bathrooms": 2.5,
        "square_footage": 1800,
        "amenities": "Pool, Gym",
        "unique_features": "Wine cellar",
    }
    defaults.update(overrides)
    return DescriptionRequest(**defaults)


def _completion(text: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def _generator(handler, **cfg_overrides) -> DescriptionGenerator:
    settings = {"api_key": "test-key", "base_url": "https://llm.test/v1", **cfg_overrides}
    cfg = GeneratorConfig(**settings)
    return DescriptionGenerator(cfg, transport=httpx.MockTransport(handler))


def _run(generator: DescriptionGenerator, coro):
    async def runner():
        try:
            return await coro
        finally:
            await generator.close()

    return asyncio.run(runner())


class TestDescriptionGenerator:
    def test_prompt_contains_attributes(self):
        prompt = build_prompt(_make_request())
        assert "Property Type: House" in prompt
        assert "Bathrooms: 2.5" in prompt
        assert "Bedrooms: 3" in prompt
        assert "Amenities: Pool, Gym" in prompt
        assert "150-200 words" in prompt

    def test_request_accepts_tag_lists(self):
        request = _make_request(amenities=["Pool", "Gym"])
        assert request.amenities == "Pool, Gym"

    def test_generate_posts_prompt(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion("  A charming home.  "))

        generator = _generator(handler, model="test-model")
        text = _run(generator, generator.generate(_make_request()))

        assert text == "A charming home."
        assert seen["url"] == "https://llm.test/v1/chat/completions"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"]["model"] == "test-model"
        assert "Location: Nashville" in seen["body"]["messages"][-1]["content"]

    def test_http_error_raises(self):
        generator = _generator(lambda request: httpx.Response(500, json={"error": "down"}))
        with pytest.raises(GenerationFailure):
            _run(generator, generator.generate(_make_request()))

    def test_empty_output_raises(self):
        generator = _generator(lambda request: httpx.Response(200, json={"choices": []}))
        with pytest.raises(GenerationFailure):
            _run(generator, generator.generate(_make_request()))

    @pytest.mark.parametrize(
        "body",
        [{"choices": ["x"]}, {"choices": [{"message": "x"}]}, {"choices": [{"message": {"content": 3}}]}, ["x"]],
    )
    def test_malformed_output_raises(self, body):
        generator = _generator(lambda request: httpx.Response(200, json=body))
        with pytest.raises(GenerationFailure):
            _run(generator, generator.generate(_make_request()))

    def test_bad_base_url_raises(self):
        generator = _generator(lambda request: httpx.Response(200, json=_completion("x")), base_url="https://[bad")
        with pytest.raises(GenerationFailure):
            _run(generator, generator.generate(_make_request()))

    def test_missing_api_key_raises(self):
        generator = DescriptionGenerator(GeneratorConfig(api_key=""))
        with pytest.raises(GenerationFailure):
            _run(generator, generator.generate(_make_request()))


class TestGenerateAction:
    def test_success(self):
        generator = _generator(lambda request: httpx.Response(200, json=_completion("Lovely.")))
        result = _run(generator, actions.generate_description(generator, _make_request()))
        assert result.description == "Lovely."
        assert result.error is None

    def test_failure_becomes_message(self):
        generator = _generator(lambda request: httpx.Response(503))
        result = _run(generator, actions.generate_description(generator, _make_request()))
        assert result.description is None
        assert result.error == actions.GENERATION_ERROR


@pytest.fixture
def store():
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    s = Store(f"sqlite:///{path}")
    s.connect()
    yield s
    s.close()
    os.unlink(path)


def _raw_listing(**overrides) -> dict:
    defaults = {
        "name": "Sunny Loft",
        "address": "42 River Road",
        "propertyType": "Apartment",
        "location": "Nashville",
        "price": "2400",
        "bedrooms": "2",
        "bathrooms": "1",
        "squareFootage": "1200",
        "amenities": "Pool, Gym",
        "uniqueFeatures": "Exposed brick",
        "description": "Bright loft close to the river walk.",
    }
    defaults.update(overrides)
    return defaults


class TestSubmitActions:
    def test_add_listing(self, store):
        seen = []
        store.subscribe_listings(seen.append)
        result = actions.add_listing(store, _raw_listing())
        assert result.success
        assert result.message == actions.LISTING_ADDED
        assert result.listing.image_url == store.placeholder_image_url
        assert [len(s) for s in seen] == [0, 1]

    def test_add_listing_invalid_persists_nothing(self, store):
        result = actions.add_listing(store, _raw_listing(price="-5", amenities=" , "))
        assert not result.success
        assert set(result.errors) == {"price", "amenities"}
        assert store.list_listings() == []

    def test_add_listing_store_down(self):
        result = actions.add_listing(Store("sqlite:///unused.db"), _raw_listing())
        assert not result.success
        assert result.message == actions.LISTING_STORE_ERROR
        assert result.errors is None

    def test_create_booking(self, store):
        listing = actions.add_listing(store, _raw_listing()).listing
        result = actions.create_booking(
            store,
            {
                "propertyId": listing.id,
                "propertyName": listing.name,
                "userName": "Jo",
                "userPhone": "55512",
            },
        )
        assert result.success
        assert result.booking.property_id == listing.id
        assert store.list_bookings()[0].id == result.booking.id

    def test_create_booking_invalid(self, store):
        result = actions.create_booking(store, {"propertyId": "x", "propertyName": "X", "userName": "Jo", "userPhone": "1234"})
        assert not result.success
        assert result.message == actions.BOOKING_INVALID
        assert list(result.errors) == ["userPhone"]

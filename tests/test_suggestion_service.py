"""
==============================================================================
Suggestion Service Tests
==============================================================================

Tests for the optional AI prefill, with the OpenAI client faked.

==============================================================================
"""

import asyncio
import json
from types import SimpleNamespace

from app.catalog.models import Category
from app.services.suggestion_service import SuggestionService


class FakeCompletions:
    """Stands in for ``client.chat.completions``."""

    def __init__(self, content=None, error=None):
        self._content = content
        self._error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        message = SimpleNamespace(content=self._content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(completions: FakeCompletions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class TestSuggestionService:
    """Tests for product data suggestions."""

    def test_disabled_without_key(self):
        service = SuggestionService(api_key="")
        assert service.enabled is False
        assert asyncio.run(service.suggest("Latte")) is None

    def test_parses_json_reply(self):
        completions = FakeCompletions(json.dumps({
            "precio": 3.456,
            "codigo": "CAF-07",
            "descripcion": "Café con leche y vainilla.",
            "categoria": "Café",
        }))
        service = SuggestionService(client=fake_client(completions), model="test-model")

        suggestion = asyncio.run(service.suggest("Latte de vainilla"))

        assert suggestion.price == 3.46
        assert suggestion.code == "CAF-07"
        assert suggestion.category is Category.COFFEE
        assert completions.calls[0]["model"] == "test-model"
        assert completions.calls[0]["response_format"] == {"type": "json_object"}

    def test_unknown_category_falls_back_to_other(self):
        completions = FakeCompletions(json.dumps({
            "precio": 2,
            "codigo": "X-1",
            "descripcion": "Algo",
            "categoria": "Snacks",
        }))
        service = SuggestionService(client=fake_client(completions))
        assert asyncio.run(service.suggest("Galletas")).category is Category.OTHER

    def test_invalid_reply_returns_none(self):
        service = SuggestionService(client=fake_client(FakeCompletions("not json")))
        assert asyncio.run(service.suggest("Latte")) is None

    def test_client_error_returns_none(self):
        completions = FakeCompletions(error=RuntimeError("boom"))
        service = SuggestionService(client=fake_client(completions))
        assert asyncio.run(service.suggest("Latte")) is None

    def test_blank_name(self):
        completions = FakeCompletions("{}")
        service = SuggestionService(client=fake_client(completions))
        assert asyncio.run(service.suggest("   ")) is None
        assert completions.calls == []

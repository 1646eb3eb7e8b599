"""
==============================================================================
Suggestion Service Module
==============================================================================

Optional AI prefill for the product creation form.

Given a product name, a chat model proposes a price, a short inventory
code, a description and a category. The service is a convenience only: it
returns None when no API key is configured or when anything goes wrong,
and product creation never waits on it.

==============================================================================
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from openai import AsyncOpenAI
from pydantic import BaseModel, Field, ValidationError, field_validator

from app.catalog.models import Category
from app.config import get_settings


# Module logger
logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """\
You help a café owner fill in their product catalog. Answer with a JSON
object with the keys "precio" (number, price in USD), "codigo" (short
inventory code such as CAF-01), "descripcion" (short, appetizing
description in Spanish) and "categoria" (one of: {categories})."""


class ProductSuggestion(BaseModel):
    """Suggested values for a new product."""

    price: float = Field(..., ge=0, alias="precio")
    code: str = Field(..., alias="codigo")
    description: str = Field(..., alias="descripcion")
    category: Category = Field(..., alias="categoria")

    model_config = {"populate_by_name": True}

    @field_validator("category", mode="before")
    @classmethod
    def resolve_category(cls, v):
        if isinstance(v, str):
            return Category.parse(v) or Category.OTHER
        return v

    @field_validator("price")
    @classmethod
    def round_price(cls, v: float) -> float:
        return round(v, 2)


class SuggestionService:
    """
    Product data suggestions from an OpenAI chat model.

    The client is created lazily, so a missing API key never breaks
    application startup.

    Example:
        >>> service = SuggestionService()
        >>> suggestion = await service.suggest("Croissant de almendra")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None
    ) -> None:
        settings = get_settings()
        self._api_key = api_key if api_key is not None else settings.openai_api_key
        self._model = model or settings.suggestion_model
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._client is not None or bool(self._api_key)

    def _get_client(self) -> Optional[AsyncOpenAI]:
        if self._client is None and self._api_key:
            self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client

    async def suggest(self, name: str) -> Optional[ProductSuggestion]:
        """
        Suggest price, code, description and category for a product name.

        Returns:
            ProductSuggestion, or None when suggestions are unavailable
        """
        name = name.strip()
        if not name:
            return None

        client = self._get_client()
        if client is None:
            logger.warning("Product suggestions need an OpenAI API key")
            return None

        try:
            response = await client.chat.completions.create(
                model=self._model,
                temperature=0.7,
                response_format={"type": "json_object"},
                messages=[
                    {
                        "role": "system",
                        "content": SYSTEM_PROMPT.format(categories=", ".join(Category.labels())),
                    },
                    {"role": "user", "content": f'Producto de cafetería: "{name}"'},
                ],
            )
            content = response.choices[0].message.content
            if not content:
                return None
            return ProductSuggestion.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Unusable product suggestion for {name!r}: {e}")
            return None
        except Exception as e:
            logger.error(f"Error generating product data: {e}")
            return None

# Overview: Item scanner; turns photos or pasted text into candidate case line items via a hosted model.

"""
Item scanner

- One model call per scan, no retry, no caching.
- The model is asked for a fixed JSON schema and its answer is validated
  strictly. Anything malformed raises AdapterFailure; it is never treated as
  "no items".
- Matching to the catalog is case-insensitive exact name equality against
  active products. Unmatched items come back with product_id=None.
"""
from __future__ import annotations

import json
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Literal

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator
from sqlalchemy.orm import Session

from ..models import Product
from ..validation import PRODUCT_CATEGORIES, ValidationError
from .products_service import PRODUCT_STATUS_ACTIVE


class AdapterFailure(Exception):
    """Raised when the scanning model call fails or returns unusable output."""
    pass


class ScannedItem(BaseModel):
    name: str = Field(..., min_length=1)
    category: Literal["earring", "ring", "bracelet", "necklace"]
    price: float = Field(..., ge=0, allow_inf_nan=False)
    quantity: int = Field(..., ge=1)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be blank")
        return v

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def price_cents(self) -> int:
        return int((Decimal(str(self.price)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class ScanResult(BaseModel):
    items: List[ScannedItem] = Field(default_factory=list)


SCAN_RESPONSE_SCHEMA = {
    "name": "scanned_items",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "items": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "category": {"type": "string", "enum": list(PRODUCT_CATEGORIES)},
                        "price": {"type": "number"},
                        "quantity": {"type": "integer"},
                    },
                    "required": ["name", "category", "price", "quantity"],
                    "additionalProperties": False,
                },
            },
        },
        "required": ["items"],
        "additionalProperties": False,
    },
}

IMAGE_PROMPT = """Analyze these photos of jewelry and costume jewelry and extract one consolidated list of every visible item.
For each item identify:
- name (e.g. "Gold Hoop Earring")
- category: one of earring, ring, bracelet, necklace
- unit price (number only)
- quantity (if visible, otherwise 1)

Return ONLY the JSON object described by the schema."""

TEXT_PROMPT = """Read the following text and identify the jewelry items it lists, with their prices and quantities.
Allowed categories: earring, ring, bracelet, necklace.
If a quantity is not stated, use 1.

Text:
\"\"\"{text}\"\"\"

Return ONLY the JSON object described by the schema."""


def _image_url(image: str) -> str:
    """Accept raw base64 or a data URI; the model wants a data URI."""
    image = image.strip()
    if image.startswith("data:"):
        return image
    return f"data:image/jpeg;base64,{image}"


def parse_scan_response(content: str | None) -> ScanResult:
    """
    Validate the model reply in pydantic strict mode: booleans and numeric
    strings are rejected, only an integer may stand in for a price.
    """
    if not content:
        raise AdapterFailure("Scanner returned an empty response")
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise AdapterFailure(f"Scanner returned malformed JSON: {e.msg}") from e

    # Tolerate a bare array even though the schema asks for an object
    if isinstance(data, list):
        content = json.dumps({"items": data})

    try:
        return ScanResult.model_validate_json(content, strict=True)
    except PydanticValidationError as e:
        raise AdapterFailure(f"Scanner output failed validation: {e.error_count()} error(s)") from e


class ItemScanner:
    """
    Thin wrapper around the hosted model.

    The OpenAI client is injected so tests (and alternative deployments) can
    pass their own; by default one is built from the API key.
    """

    def __init__(self, *, client=None, api_key: str | None = None, model: str = "gpt-4o-mini"):
        if client is None:
            try:
                client = OpenAI(api_key=api_key or None)
            except OpenAIError as e:
                # Missing API key surfaces here, before any request is made
                raise AdapterFailure(f"Scanner is not configured: {e}") from e
        self.client = client
        self.model = model

    def _complete(self, content) -> ScanResult:
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                temperature=0,
                messages=[{"role": "user", "content": content}],
                response_format={"type": "json_schema", "json_schema": SCAN_RESPONSE_SCHEMA},
            )
        except OpenAIError as e:
            raise AdapterFailure(f"Scanner request failed: {e}") from e

        try:
            message = resp.choices[0].message
        except (AttributeError, IndexError) as e:
            raise AdapterFailure("Scanner returned no choices") from e

        return parse_scan_response(message.content)

    def scan_images(self, images: list[str]) -> list[ScannedItem]:
        if not images:
            raise ValidationError("images must be a non-empty list")
        content = [{"type": "text", "text": IMAGE_PROMPT}]
        content.extend(
            {"type": "image_url", "image_url": {"url": _image_url(img)}} for img in images
        )
        return self._complete(content).items

    def scan_text(self, text: str) -> list[ScannedItem]:
        if not text or not text.strip():
            raise ValidationError("text is required")
        return self._complete(TEXT_PROMPT.format(text=text.strip())).items


def match_to_catalog(session: Session, items: list[ScannedItem]) -> list[dict]:
    """
    Attach catalog product ids by case-insensitive exact name.

    When several active products share a name the lowest id wins.
    """
    products = (
        session.query(Product)
        .filter(Product.status == PRODUCT_STATUS_ACTIVE)
        .order_by(Product.id.asc())
        .all()
    )
    by_name: dict[str, Product] = {}
    for p in products:
        by_name.setdefault(p.name.strip().lower(), p)

    out = []
    for item in items:
        product = by_name.get(item.name.lower())
        out.append({
            "name": item.name,
            "category": item.category,
            "price_cents": item.price_cents,
            "quantity": item.quantity,
            "product_id": product.id if product else None,
            "matched": product is not None,
        })
    return out


def scanned_total_cents(rows: list[dict]) -> int:
    return sum(r["price_cents"] * r["quantity"] for r in rows)

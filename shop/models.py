"""Data models for the catalog.

Each record knows two shapes:
- ``to_dict``/``from_dict``: the in-memory/JSON shape used by the web API
- ``to_row``/``from_row``: the column names stored by the remote service

``from_row`` treats remote replies as untrusted input and raises
``RemoteDataError`` instead of letting malformed rows into the store.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from shop.config import SITE_CONFIG_ID
from shop.exceptions import RemoteDataError

__all__ = [
    "Product",
    "Classification",
    "CollectionData",
    "CategoryData",
    "MaterialData",
    "SocialLink",
    "SiteConfig",
]

logger = logging.getLogger("shop.models")


def _as_row(row: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(row, Mapping):
        raise RemoteDataError(f"Malformed {kind} row: expected object, got {type(row).__name__}")
    return row


def _text(row: Mapping[str, Any], key: str, kind: str, required: bool = True) -> str:
    """Read a text column; ``None`` becomes "" unless the column is required."""
    value = row.get(key)
    if value is None:
        if required:
            raise RemoteDataError(f"Malformed {kind} row: missing '{key}'")
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # ids and prices sometimes come back numeric
        return str(value)
    if not isinstance(value, str):
        raise RemoteDataError(f"Malformed {kind} row: '{key}' must be text")
    return value


@dataclass
class Product:
    """A single catalog item."""

    id: str
    name: str
    category: str
    collection: str
    price: str
    description: str = ""
    material: str = ""
    image_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "collection": self.collection,
            "price": self.price,
            "description": self.description,
            "material": self.material,
            "imageUrl": self.image_url,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Product":
        return cls(
            id=str(data.get("id", "") or ""),
            name=str(data.get("name", "") or ""),
            category=str(data.get("category", "") or ""),
            collection=str(data.get("collection", "") or ""),
            price=str(data.get("price", "") or ""),
            description=str(data.get("description", "") or ""),
            material=str(data.get("material", "") or ""),
            image_url=str(data.get("imageUrl", data.get("image_url", "")) or ""),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "collection": self.collection,
            "price": self.price,
            "description": self.description,
            "material": self.material,
            "image_url": self.image_url,
        }

    @classmethod
    def from_row(cls, row: Any) -> "Product":
        row = _as_row(row, "product")
        return cls(
            id=_text(row, "id", "product"),
            name=_text(row, "name", "product"),
            category=_text(row, "category", "product", required=False),
            collection=_text(row, "collection", "product", required=False),
            price=_text(row, "price", "product", required=False),
            description=_text(row, "description", "product", required=False),
            material=_text(row, "material", "product", required=False),
            image_url=_text(row, "image_url", "product", required=False),
        )


@dataclass
class Classification:
    """A named grouping (collection, category or material)."""

    name: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Classification":
        return cls(
            name=str(data.get("name", "") or ""),
            description=str(data.get("description", "") or ""),
        )

    def to_row(self) -> Dict[str, Any]:
        return self.to_dict()

    @classmethod
    def from_row(cls, row: Any) -> "Classification":
        row = _as_row(row, "classification")
        return cls(
            name=_text(row, "name", "classification"),
            description=_text(row, "description", "classification", required=False),
        )


# Same shape, kept as separate names for readability at call sites
CollectionData = Classification
CategoryData = Classification
MaterialData = Classification


@dataclass
class SocialLink:
    platform: str
    url: str

    def to_dict(self) -> Dict[str, str]:
        return {"platform": self.platform, "url": self.url}


@dataclass
class SiteConfig:
    """Branding shown in the header and footer (one per site)."""

    site_name: str
    logo_url: Optional[str] = None
    footer_text: str = ""
    social_links: List[SocialLink] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "siteName": self.site_name,
            "logoUrl": self.logo_url,
            "footerText": self.footer_text,
            "socialLinks": [link.to_dict() for link in self.social_links],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SiteConfig":
        links = []
        for item in data.get("socialLinks") or []:
            if isinstance(item, Mapping):
                links.append(
                    SocialLink(
                        platform=str(item.get("platform", "") or ""),
                        url=str(item.get("url", "") or ""),
                    )
                )
        logo = data.get("logoUrl")
        return cls(
            site_name=str(data.get("siteName", "") or ""),
            logo_url=str(logo) if logo else None,
            footer_text=str(data.get("footerText", "") or ""),
            social_links=links,
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": SITE_CONFIG_ID,
            "site_name": self.site_name,
            "logo_url": self.logo_url,
            "footer_text": self.footer_text,
            "social_links": [link.to_dict() for link in self.social_links],
        }

    @classmethod
    def from_row(cls, row: Any) -> "SiteConfig":
        row = _as_row(row, "site_config")
        logo = row.get("logo_url")
        if logo is not None and not isinstance(logo, str):
            raise RemoteDataError("Malformed site_config row: 'logo_url' must be text or null")

        raw_links = row.get("social_links") or []
        if not isinstance(raw_links, list):
            raise RemoteDataError("Malformed site_config row: 'social_links' must be a list")
        links = []
        for item in raw_links:
            if (
                isinstance(item, Mapping)
                and isinstance(item.get("platform"), str)
                and isinstance(item.get("url"), str)
            ):
                links.append(SocialLink(platform=item["platform"], url=item["url"]))
            else:
                logger.warning(f"Dropping malformed social link: {item!r}")

        return cls(
            site_name=_text(row, "site_name", "site_config"),
            logo_url=logo or None,
            footer_text=_text(row, "footer_text", "site_config", required=False),
            social_links=links,
        )

"""Read-side catalog queries: filter, search, sort and group products.

Works on the product list held by the store; nothing here mutates state.
"""

import re
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from shop.config import SENTINEL_COLLECTION
from shop.models import Classification, Product

__all__ = [
    "parse_price",
    "filter_products",
    "sort_products",
    "group_by_collection",
    "SORT_KEYS",
]

SORT_KEYS = ("newest", "name", "price_asc", "price_desc")

_SEARCH_COLUMNS = ("name", "description", "material", "category")

_PRICE_RE = re.compile(r"\d[\d.,]*")


def parse_price(price: Optional[str]) -> Optional[float]:
    """Extract the numeric part of a display price ("25.00 €", "12,50€", "1.250,00 €").

    With both separators present the last one is the decimal mark. A single
    separator repeated ("1.250.000") groups thousands.

    Returns:
        The price as float, or None when the text holds no number.
    """
    if not price or not isinstance(price, str):
        return None
    m = _PRICE_RE.search(price.replace(" ", ""))
    if not m:
        return None
    number = m.group().rstrip(".,")
    if "." in number and "," in number:
        decimal = "." if number.rfind(".") > number.rfind(",") else ","
        thousands = "," if decimal == "." else "."
        number = number.replace(thousands, "").replace(decimal, ".")
    else:
        for sep in ".,":
            if number.count(sep) > 1:
                number = number.replace(sep, "")
        number = number.replace(",", ".")
    try:
        return float(number)
    except ValueError:
        return None


def _to_frame(products: Sequence[Product]) -> pd.DataFrame:
    rows: List[Dict[str, Any]] = []
    for position, product in enumerate(products):
        row = product.to_row()
        row["_position"] = position
        row["_price_value"] = parse_price(product.price)
        rows.append(row)
    return pd.DataFrame(
        rows,
        columns=[
            "id", "name", "category", "collection", "price", "description",
            "material", "image_url", "_position", "_price_value",
        ],
    )


def _from_frame(df: pd.DataFrame, products: Sequence[Product]) -> List[Product]:
    return [products[int(pos)] for pos in df["_position"].tolist()]


def filter_products(
    products: Sequence[Product],
    collection: Optional[str] = None,
    category: Optional[str] = None,
    material: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Product]:
    """Filter products, keeping their original order.

    Args:
        products: Products to filter.
        collection: Collection name; None or the sentinel means all.
        category: Exact category name.
        material: Exact material name.
        search: Case-insensitive text matched against name, description,
            material and category.
    """
    if not products:
        return []
    df = _to_frame(products)

    if collection and collection != SENTINEL_COLLECTION:
        df = df[df["collection"] == collection]
    if category:
        df = df[df["category"] == category]
    if material:
        df = df[df["material"] == material]
    if search and search.strip():
        needle = search.strip()
        mask = pd.Series(False, index=df.index)
        for column in _SEARCH_COLUMNS:
            mask |= df[column].fillna("").str.contains(needle, case=False, regex=False)
        df = df[mask]

    return _from_frame(df, products)


def sort_products(products: Sequence[Product], key: str = "newest") -> List[Product]:
    """Sort products by one of ``SORT_KEYS``.

    "newest" keeps store order: the loaded products newest first, then any
    product added since the last load, in the order it was added. Products
    without a parseable price sort last for both price orders.
    """
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key '{key}'. Choices: {', '.join(SORT_KEYS)}")
    if not products or key == "newest":
        return list(products)

    df = _to_frame(products)
    if key == "name":
        df = df.assign(_name_key=df["name"].str.casefold())
        df = df.sort_values(["_name_key", "_position"], kind="mergesort")
    else:
        df = df.sort_values(
            ["_price_value", "_position"],
            ascending=[key == "price_asc", True],
            na_position="last",
            kind="mergesort",
        )
    return _from_frame(df, products)


def group_by_collection(
    products: Sequence[Product], collections: Sequence[Classification]
) -> List[Dict[str, Any]]:
    """Sections for the "all collections" view.

    Returns:
        One ``{"collection": Classification, "products": [...]}`` entry per
        non-sentinel collection that has products, in collection order.
    """
    sections = []
    for collection in collections:
        if collection.name == SENTINEL_COLLECTION:
            continue
        members = [p for p in products if p.collection == collection.name]
        if members:
            sections.append({"collection": collection, "products": members})
    return sections

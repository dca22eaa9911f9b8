"""
Query building for the plant listing.

Translates the optional listing parameters into a MongoDB filter document,
a sort specification and an optional page slice. Values arrive as raw query
strings; anything that does not parse is coerced to a default instead of
being rejected.
"""
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from database import get_collection, get_documents

logger = logging.getLogger('queries')

PLANT_COLLECTION = "plant"
SEARCH_FIELDS = ("name", "description", "scientificName")

# Upper bound for page and limit; keeps (page - 1) * limit inside a BSON int64
MAX_QUERY_INT = 2 ** 31 - 1


def to_number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def to_positive_int(value: Any) -> Optional[int]:
    number = to_number(value)
    if number is None or number < 1:
        return None
    return min(int(number), MAX_QUERY_INT)


@dataclass
class PlantQuery:
    category: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[str] = None
    max_price: Optional[str] = None
    in_stock: Optional[str] = None
    care_level: Optional[str] = None
    sunlight: Optional[str] = None
    watering: Optional[str] = None
    sort_by: str = "name"
    sort_order: str = "asc"
    page: Optional[str] = None
    limit: Optional[str] = None

    @property
    def page_number(self) -> int:
        return to_positive_int(self.page) or 1

    @property
    def page_size(self) -> Optional[int]:
        return to_positive_int(self.limit)


def search_filter(term: str) -> Dict[str, Any]:
    """Case-insensitive substring match on any of the searchable text fields."""
    pattern = re.escape(term)
    return {"$or": [{field: {"$regex": pattern, "$options": "i"}} for field in SEARCH_FIELDS]}


def build_filter(query: PlantQuery) -> Dict[str, Any]:
    filter_dict: Dict[str, Any] = {}

    if query.category:
        filter_dict["categories"] = query.category

    if query.search:
        filter_dict.update(search_filter(query.search))

    min_price = to_number(query.min_price)
    max_price = to_number(query.max_price)
    if min_price is not None or max_price is not None:
        price: Dict[str, float] = {}
        if min_price is not None:
            price["$gte"] = min_price
        if max_price is not None:
            price["$lte"] = max_price
        filter_dict["price"] = price

    if query.in_stock is not None:
        filter_dict["inStock"] = str(query.in_stock).strip().lower() == "true"

    if query.care_level:
        filter_dict["careLevel"] = query.care_level
    if query.sunlight:
        filter_dict["sunlight"] = query.sunlight
    if query.watering:
        filter_dict["watering"] = query.watering

    return filter_dict


def build_sort(query: PlantQuery) -> List[Tuple[str, int]]:
    direction = -1 if query.sort_order == "desc" else 1
    sort_field = query.sort_by or "name"
    sort = [(sort_field, direction)]
    if sort_field != "_id":
        sort.append(("_id", 1))
    return sort


def pagination_meta(page: int, limit: Optional[int], total: int) -> Dict[str, Any]:
    if limit:
        total_pages = math.ceil(total / limit)
        return {
            "currentPage": page,
            "totalPages": total_pages,
            "totalItems": total,
            "itemsPerPage": limit,
            "hasNextPage": page < total_pages,
            "hasPrevPage": page > 1,
        }
    return {
        "currentPage": page,
        "totalPages": 1,
        "totalItems": total,
        "itemsPerPage": total,
        "hasNextPage": False,
        "hasPrevPage": False,
    }


def find_plants(query: PlantQuery) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    """Run the listing query; returns the page of documents and its pagination block."""
    collection = get_collection(PLANT_COLLECTION)
    filter_dict = build_filter(query)
    sort = build_sort(query)
    page = query.page_number
    limit = query.page_size

    logger.debug(f"Listing plants filter={filter_dict} sort={sort} page={page} limit={limit}")

    cursor = collection.find(filter_dict).sort(sort)
    if limit:
        docs = list(cursor.skip((page - 1) * limit).limit(limit))
        total = collection.count_documents(filter_dict)
    else:
        docs = list(cursor)
        total = len(docs)

    return docs, pagination_meta(page, limit, total)


def find_by_category(category: str) -> List[Dict[str, Any]]:
    return get_documents(PLANT_COLLECTION, {"categories": category})


def search_plants(term: str) -> List[Dict[str, Any]]:
    return get_documents(PLANT_COLLECTION, search_filter(term))

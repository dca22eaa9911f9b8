"""
Category aggregations over the plant collection.
"""
import logging
from typing import Any, Dict, List, Optional

from database import get_collection
from queries import PLANT_COLLECTION, to_positive_int
from schemas import CategoryCount, CategoryStats

logger = logging.getLogger('aggregations')

DEFAULT_POPULAR_LIMIT = 10


def _category_counts(sort: Dict[str, int], limit: Optional[int] = None) -> List[Dict[str, Any]]:
    pipeline: List[Dict[str, Any]] = [
        {"$unwind": "$categories"},
        {"$group": {"_id": "$categories", "count": {"$sum": 1}}},
        {"$sort": sort},
    ]
    if limit:
        pipeline.append({"$limit": limit})

    rows = get_collection(PLANT_COLLECTION).aggregate(pipeline)
    return [
        CategoryCount(name=row["_id"], count=row["count"]).model_dump(by_alias=True)
        for row in rows
    ]


def list_categories() -> List[Dict[str, Any]]:
    """Every category in use, alphabetically, with its plant count."""
    return _category_counts({"_id": 1})


def popular_categories(limit: Any = DEFAULT_POPULAR_LIMIT) -> List[Dict[str, Any]]:
    """Categories ranked by plant count, most populated first."""
    top = to_positive_int(limit) or DEFAULT_POPULAR_LIMIT
    return _category_counts({"count": -1, "_id": 1}, top)


def category_stats(category: str) -> Optional[Dict[str, Any]]:
    """Summary statistics for one category, or None when no plant carries it."""
    pipeline = [
        {"$match": {"categories": category}},
        {
            "$group": {
                "_id": None,
                "totalPlants": {"$sum": 1},
                "inStock": {"$sum": {"$cond": ["$inStock", 1, 0]}},
                "outOfStock": {"$sum": {"$cond": ["$inStock", 0, 1]}},
                "avgPrice": {"$avg": "$price"},
                "minPrice": {"$min": "$price"},
                "maxPrice": {"$max": "$price"},
                "careLevels": {"$addToSet": "$careLevel"},
                "sunlightLevels": {"$addToSet": "$sunlight"},
                "wateringLevels": {"$addToSet": "$watering"},
            }
        },
    ]

    rows = list(get_collection(PLANT_COLLECTION).aggregate(pipeline))
    if not rows:
        logger.info(f"No plants found for category '{category}'")
        return None

    row = rows[0]
    stats = CategoryStats(
        category=category,
        total_plants=row["totalPlants"],
        in_stock=row["inStock"],
        out_of_stock=row["outOfStock"],
        avg_price=row.get("avgPrice"),
        min_price=row.get("minPrice"),
        max_price=row.get("maxPrice"),
        care_levels=sorted(v for v in row.get("careLevels", []) if v),
        sunlight_levels=sorted(v for v in row.get("sunlightLevels", []) if v),
        watering_levels=sorted(v for v in row.get("wateringLevels", []) if v),
    )
    return stats.model_dump(by_alias=True)

"""
Database Schemas for the Plant Catalog

Each Pydantic model represents a MongoDB collection or an aggregation result.
The collection name is the lowercase class name: class Plant -> "plant".
Field names are snake_case in Python and camelCase on the wire and in MongoDB.

Use these models in your API for validation before writing to MongoDB.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

PLANT_CATEGORIES = (
    'Indoor', 'Outdoor', 'Succulent', 'Air Purifying', 'Flowering',
    'Herb', 'Home Decor', 'Low Maintenance', 'Hanging', 'Climbing',
    'Medicinal', 'Fragrant', 'Pet Safe', 'Large', 'Small',
    'Desktop', 'Statement Plant', 'Tropical', 'Colorful', 'Edible',
    'Cactus', 'Fast Growing', 'Annual', 'Shade Loving', 'Premium',
    'Unique', 'Rare', 'Ground Cover', 'Desert', 'Trailing',
    'Winter Blooming', 'Prayer Plant', 'Tall', 'Low Light',
    'Mediterranean', 'Elegant',
)

CareLevel = Literal["Easy", "Medium", "Hard"]
SunlightLevel = Literal["Low", "Medium", "Bright"]
WateringLevel = Literal["Low", "Medium", "High"]

IMAGE_URL_PATTERN = r"^https?://.+"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _unique_categories(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return values
    for value in values:
        if value not in PLANT_CATEGORIES:
            raise ValueError("Invalid category")
    # Collapse duplicates, keeping first-seen order
    return list(dict.fromkeys(values))


# -----------------
# Core Collections
# -----------------

class Plant(CamelModel):
    name: str = Field(..., min_length=1, max_length=100, description="Common plant name")
    price: float = Field(..., ge=0, allow_inf_nan=False, description="Unit price")
    categories: List[str] = Field(..., min_length=1, description="One or more catalog categories")
    in_stock: bool = Field(True, description="Stock availability")
    image: str = Field(..., pattern=IMAGE_URL_PATTERN, description="Absolute http(s) image URL")
    description: Optional[str] = Field(None, max_length=500, description="Marketing description")
    scientific_name: Optional[str] = Field(None, description="Botanical name")
    care_level: CareLevel = Field("Medium", description="Care difficulty")
    sunlight: SunlightLevel = Field("Medium", description="Light requirement")
    watering: WateringLevel = Field("Medium", description="Watering requirement")

    strip_text = field_validator("name", "scientific_name", mode="before")(_strip)
    unique_categories = field_validator("categories")(_unique_categories)


class PlantUpdate(CamelModel):
    """Partial update: only the supplied fields are validated and written."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    categories: Optional[List[str]] = Field(None, min_length=1)
    in_stock: Optional[bool] = None
    image: Optional[str] = Field(None, pattern=IMAGE_URL_PATTERN)
    description: Optional[str] = Field(None, max_length=500)
    scientific_name: Optional[str] = None
    care_level: Optional[CareLevel] = None
    sunlight: Optional[SunlightLevel] = None
    watering: Optional[WateringLevel] = None

    strip_text = field_validator("name", "scientific_name", mode="before")(_strip)
    unique_categories = field_validator("categories")(_unique_categories)


# ------------------
# Aggregation Models
# ------------------

class CategoryCount(CamelModel):
    name: str
    count: int = Field(..., ge=0)


class CategoryStats(CamelModel):
    category: str
    total_plants: int
    in_stock: int
    out_of_stock: int
    avg_price: Optional[float] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    care_levels: List[str] = Field(default_factory=list)
    sunlight_levels: List[str] = Field(default_factory=list)
    watering_levels: List[str] = Field(default_factory=list)

import os
import logging
from typing import Optional

from fastapi import FastAPI, Query
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

import database
from aggregations import category_stats, list_categories, popular_categories
from config import config
from database import create_document, delete_document, get_collection, get_document, update_document
from queries import PLANT_COLLECTION, PlantQuery, find_by_category, find_plants, search_plants
from responses import (
    catalog_error_handler,
    not_found,
    plant_to_dict,
    server_error,
    success,
    unexpected_error_handler,
    validation_error_handler,
)
from schemas import Plant, PlantUpdate

logger = logging.getLogger('plants_api')

app = FastAPI(title="Plant Catalog API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StarletteHTTPException, catalog_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(Exception, unexpected_error_handler)


# Seed helpers (idempotent)

def _seed_payload():
    return [
        {
            "name": "Snake Plant",
            "price": 499,
            "categories": ["Indoor", "Air Purifying", "Low Maintenance", "Low Light"],
            "image": "https://images.unsplash.com/photo-1593482892290-f54927ae1bb6?q=80&w=1200&auto=format&fit=crop",
            "description": "Upright sword-shaped leaves that tolerate low light and irregular watering.",
            "scientificName": "Dracaena trifasciata",
            "careLevel": "Easy",
            "sunlight": "Low",
            "watering": "Low",
        },
        {
            "name": "Monstera Deliciosa",
            "price": 1299,
            "categories": ["Indoor", "Tropical", "Statement Plant", "Large"],
            "image": "https://images.unsplash.com/photo-1614594975525-e45190c55d0b?q=80&w=1200&auto=format&fit=crop",
            "description": "Split-leaf tropical climber that makes a bold centrepiece.",
            "scientificName": "Monstera deliciosa",
            "careLevel": "Medium",
            "sunlight": "Bright",
            "watering": "Medium",
        },
        {
            "name": "Golden Pothos",
            "price": 299,
            "categories": ["Indoor", "Hanging", "Trailing", "Fast Growing"],
            "image": "https://images.unsplash.com/photo-1572688484438-313a6e50c333?q=80&w=1200&auto=format&fit=crop",
            "description": "Forgiving trailing vine with heart-shaped variegated leaves.",
            "scientificName": "Epipremnum aureum",
            "careLevel": "Easy",
            "sunlight": "Medium",
            "watering": "Medium",
        },
        {
            "name": "Aloe Vera",
            "price": 249,
            "categories": ["Succulent", "Medicinal", "Desktop", "Small"],
            "image": "https://images.unsplash.com/photo-1596547609652-9cf5d8d76921?q=80&w=1200&auto=format&fit=crop",
            "description": "Soothing gel-filled leaves; thrives on a sunny windowsill.",
            "scientificName": "Aloe barbadensis miller",
            "careLevel": "Easy",
            "sunlight": "Bright",
            "watering": "Low",
        },
        {
            "name": "Calathea Medallion",
            "price": 799,
            "categories": ["Indoor", "Prayer Plant", "Pet Safe", "Shade Loving"],
            "image": "https://images.unsplash.com/photo-1637967886160-fd78dc3ce3f5?q=80&w=1200&auto=format&fit=crop",
            "description": "Patterned leaves that fold upward at night.",
            "scientificName": "Goeppertia veitchiana",
            "careLevel": "Hard",
            "sunlight": "Low",
            "watering": "High",
            "inStock": False,
        },
        {
            "name": "Lavender",
            "price": 349,
            "categories": ["Outdoor", "Fragrant", "Flowering", "Mediterranean"],
            "image": "https://images.unsplash.com/photo-1499002238440-d264edd596ec?q=80&w=1200&auto=format&fit=crop",
            "description": "Aromatic purple spikes loved by pollinators.",
            "scientificName": "Lavandula angustifolia",
            "careLevel": "Medium",
            "sunlight": "Bright",
            "watering": "Low",
        },
    ]


def ensure_seeded() -> dict:
    created = {"plants": 0}
    if database.db is None:
        return created
    try:
        if get_collection(PLANT_COLLECTION).count_documents({}) == 0:
            for payload in _seed_payload():
                create_document(PLANT_COLLECTION, Plant(**payload))
                created["plants"] += 1
            logger.info(f"Seeded {created['plants']} demo plants")
    except Exception as e:
        # Best-effort; don't crash on seed failure
        logger.warning(f"Seeding demo plants failed: {str(e)}", exc_info=True)
    return created

# ---------
# Root/Test
# ---------

@app.get("/")
def read_root():
    return {"message": "Plant Catalog API is running"}

@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }

    try:
        if database.db is not None:
            response["database"] = "✅ Available"
            response["connection_status"] = "Connected"
            try:
                collections = database.db.list_collection_names()
                response["collections"] = collections[:10]
                response["database"] = "✅ Connected & Working"
            except Exception as e:
                response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
        else:
            response["database"] = "⚠️  Available but not initialized"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:50]}"

    response["database_url"] = "✅ Set" if config.DATABASE_URL else "❌ Not Set"
    response["database_name"] = "✅ Set" if config.DATABASE_NAME else "❌ Not Set"
    return response

@app.get("/api/health")
def health():
    return success({
        "status": "ok",
        "database": "connected" if database.db is not None else "unavailable",
        "version": app.version,
    })

# ---------------
# Plant Endpoints
# ---------------

@app.get("/api/plants")
def list_plants(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    in_stock: Optional[str] = Query(None, alias="inStock"),
    care_level: Optional[str] = Query(None, alias="careLevel"),
    sunlight: Optional[str] = None,
    watering: Optional[str] = None,
    sort_by: str = Query("name", alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder"),
):
    query = PlantQuery(
        category=category,
        search=search,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        care_level=care_level,
        sunlight=sunlight,
        watering=watering,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    try:
        docs, pagination = find_plants(query)
    except Exception as e:
        logger.error(f"Error fetching plants: {str(e)}", exc_info=True)
        raise server_error("Failed to fetch plants", e)
    return success([plant_to_dict(d) for d in docs], pagination=pagination)

@app.get("/api/plants/categories/{category}")
def plants_by_category(category: str):
    try:
        docs = find_by_category(category)
    except Exception as e:
        logger.error(f"Error fetching plants by category: {str(e)}", exc_info=True)
        raise server_error("Failed to fetch plants by category", e)
    return success([plant_to_dict(d) for d in docs], count=len(docs))

@app.get("/api/plants/search/{term}")
def plants_search(term: str):
    try:
        docs = search_plants(term)
    except Exception as e:
        logger.error(f"Error searching plants: {str(e)}", exc_info=True)
        raise server_error("Failed to search plants", e)
    return success([plant_to_dict(d) for d in docs], count=len(docs), searchTerm=term)

@app.get("/api/plants/{plant_id}")
def get_plant(plant_id: str):
    try:
        doc = get_document(PLANT_COLLECTION, plant_id)
    except Exception as e:
        logger.error(f"Error fetching plant: {str(e)}", exc_info=True)
        raise server_error("Failed to fetch plant", e)
    if not doc:
        raise not_found("Plant not found")
    return success(plant_to_dict(doc))

@app.post("/api/plants", status_code=201)
def create_plant(payload: Plant):
    try:
        inserted_id = create_document(PLANT_COLLECTION, payload)
        saved = get_document(PLANT_COLLECTION, inserted_id)
    except Exception as e:
        logger.error(f"Error creating plant: {str(e)}", exc_info=True)
        raise server_error("Failed to create plant", e)
    logger.info(f"Created plant {inserted_id} ({payload.name})")
    return success(plant_to_dict(saved), message="Plant created successfully")

@app.put("/api/plants/{plant_id}")
def update_plant(plant_id: str, payload: PlantUpdate):
    try:
        updated = update_document(PLANT_COLLECTION, plant_id, payload)
    except Exception as e:
        logger.error(f"Error updating plant: {str(e)}", exc_info=True)
        raise server_error("Failed to update plant", e)
    if not updated:
        raise not_found("Plant not found")
    return success(plant_to_dict(updated), message="Plant updated successfully")

@app.delete("/api/plants/{plant_id}")
def delete_plant(plant_id: str):
    try:
        deleted = delete_document(PLANT_COLLECTION, plant_id)
    except Exception as e:
        logger.error(f"Error deleting plant: {str(e)}", exc_info=True)
        raise server_error("Failed to delete plant", e)
    if not deleted:
        raise not_found("Plant not found")
    logger.info(f"Deleted plant {plant_id}")
    return success(plant_to_dict(deleted), message="Plant deleted successfully")

@app.patch("/api/plants/{plant_id}/toggle-stock")
def toggle_stock(plant_id: str):
    try:
        doc = get_document(PLANT_COLLECTION, plant_id)
        if doc is None:
            raise not_found("Plant not found")
        updated = update_document(PLANT_COLLECTION, plant_id, {"inStock": not doc.get("inStock", True)})
    except StarletteHTTPException:
        raise
    except Exception as e:
        logger.error(f"Error toggling stock: {str(e)}", exc_info=True)
        raise server_error("Failed to toggle stock status", e)
    if not updated:
        raise not_found("Plant not found")
    status = "In Stock" if updated.get("inStock") else "Out of Stock"
    return success(plant_to_dict(updated), message=f"Stock status updated to {status}")

# ------------------
# Category Endpoints
# ------------------

@app.get("/api/categories")
def get_categories():
    try:
        categories = list_categories()
    except Exception as e:
        logger.error(f"Error fetching categories: {str(e)}", exc_info=True)
        raise server_error("Failed to fetch categories", e)
    return success(categories, totalCategories=len(categories))

@app.get("/api/categories/popular")
def get_popular_categories(limit: Optional[str] = None):
    try:
        categories = popular_categories(limit)
    except Exception as e:
        logger.error(f"Error fetching popular categories: {str(e)}", exc_info=True)
        raise server_error("Failed to fetch popular categories", e)
    return success(categories)

@app.get("/api/categories/{category}/stats")
def get_category_stats(category: str):
    try:
        stats = category_stats(category)
    except Exception as e:
        logger.error(f"Error fetching category stats: {str(e)}", exc_info=True)
        raise server_error("Failed to fetch category statistics", e)
    if stats is None:
        raise not_found("Category not found")
    return success(stats)

# ---------------
# Seed demo data
# ---------------

@app.post("/api/seed")
def seed_demo():
    """Seed sample plants if the collection is empty."""
    created = ensure_seeded()
    return success({"seeded": created})

# Auto-seed on startup if empty (idempotent)

@app.on_event("startup")
async def startup_event():
    if config.SEED_DEMO_DATA:
        ensure_seeded()

if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", config.PORT))
    uvicorn.run(app, host="0.0.0.0", port=port)

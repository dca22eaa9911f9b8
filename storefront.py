"""
Storefront client for the plant catalog.

This module provides the HTTP client used by the storefront, the client-side
re-filter applied over already fetched plants, and the in-memory cart and
favorites. Nothing here is persisted; cart and favorites live only as long as
the Storefront instance.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from config import config

logger = logging.getLogger('storefront')

NOTIFY_SUCCESS = "success"
NOTIFY_ERROR = "error"
NOTIFY_INFO = "info"


class CatalogAPIError(Exception):
    """Exception raised for failed catalog API calls"""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 details: Optional[List[str]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details or []


class CatalogClient:
    """Thin wrapper over the catalog HTTP API."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or config.STOREFRONT_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self.session = session or requests.Session()

    def request(self, endpoint: str, method: str = "GET",
                params: Optional[Dict[str, Any]] = None,
                json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Send a request and return the decoded envelope.

        Raises:
            CatalogAPIError: on transport failures and non-2xx responses
        """
        url = f"{self.base_url}{endpoint}"
        try:
            logger.debug(f"Making {method} request to {endpoint}")
            response = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"API request failed: {str(e)}")
            raise CatalogAPIError(f"Request failed: {str(e)}")

        if not response.ok:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {}
            message = (error_data.get("message") or error_data.get("error")
                       or f"HTTP error! status: {response.status_code}")
            logger.error(f"API request failed: {response.status_code} {message}")
            raise CatalogAPIError(message, response.status_code, error_data.get("details"))

        try:
            return response.json()
        except ValueError as e:
            raise CatalogAPIError(f"Invalid JSON response: {str(e)}", response.status_code)

    # Plants API

    def get_plants(self, **filters: Any) -> Dict[str, Any]:
        params = {k: _query_value(v) for k, v in filters.items() if v is not None and v != ""}
        return self.request("/plants", params=params)

    def get_plant(self, plant_id: str) -> Dict[str, Any]:
        return self.request(f"/plants/{plant_id}")

    def create_plant(self, plant: Dict[str, Any]) -> Dict[str, Any]:
        return self.request("/plants", method="POST", json=plant)

    def update_plant(self, plant_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self.request(f"/plants/{plant_id}", method="PUT", json=changes)

    def delete_plant(self, plant_id: str) -> Dict[str, Any]:
        return self.request(f"/plants/{plant_id}", method="DELETE")

    def toggle_plant_stock(self, plant_id: str) -> Dict[str, Any]:
        return self.request(f"/plants/{plant_id}/toggle-stock", method="PATCH")

    def get_plants_by_category(self, category: str) -> Dict[str, Any]:
        return self.request(f"/plants/categories/{category}")

    def search_plants(self, term: str) -> Dict[str, Any]:
        return self.request(f"/plants/search/{term}")

    # Categories API

    def get_categories(self) -> Dict[str, Any]:
        return self.request("/categories")

    def get_popular_categories(self, limit: int = 10) -> Dict[str, Any]:
        return self.request("/categories/popular", params={"limit": limit})

    def get_category_stats(self, category: str) -> Dict[str, Any]:
        return self.request(f"/categories/{category}/stats")

    def get_health(self) -> Dict[str, Any]:
        return self.request("/health")

    def is_api_available(self) -> bool:
        try:
            self.get_health()
            return True
        except CatalogAPIError:
            return False


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


# -------------------
# Client-side filters
# -------------------

@dataclass
class PlantFilters:
    search_term: str = ""
    selected_categories: List[str] = field(default_factory=list)
    in_stock_only: bool = False


def _contains(text: Optional[str], needle: str) -> bool:
    return bool(text) and needle in text.lower()


def matches_search(plant: Dict[str, Any], term: str) -> bool:
    if not term:
        return True
    needle = term.lower()
    return (
        _contains(plant.get("name"), needle)
        or any(_contains(cat, needle) for cat in plant.get("categories", []))
        or _contains(plant.get("scientificName"), needle)
        or _contains(plant.get("description"), needle)
    )


def filter_plants(plants: List[Dict[str, Any]], filters: PlantFilters) -> List[Dict[str, Any]]:
    """
    Re-filter an already fetched plant list.

    Search matches name, any category, scientific name or description. Selected
    categories are OR-ed together; search, categories and the stock flag are
    AND-ed.
    """
    filtered = []
    for plant in plants:
        if not matches_search(plant, filters.search_term):
            continue
        if filters.selected_categories and not any(
                cat in plant.get("categories", []) for cat in filters.selected_categories):
            continue
        if filters.in_stock_only and not plant.get("inStock"):
            continue
        filtered.append(plant)
    return filtered


class PlantFilterState:
    """Filter state over a source list; ``filtered_plants`` is recomputed on every read."""

    def __init__(self, plants: Optional[List[Dict[str, Any]]] = None):
        self.plants = plants or []
        self.filters = PlantFilters()

    @property
    def filtered_plants(self) -> List[Dict[str, Any]]:
        return filter_plants(self.plants, self.filters)

    def update_search_term(self, search_term: str) -> None:
        self.filters.search_term = search_term

    def update_categories(self, selected_categories: List[str]) -> None:
        self.filters.selected_categories = list(selected_categories)

    def toggle_in_stock_only(self) -> None:
        self.filters.in_stock_only = not self.filters.in_stock_only

    def clear_filters(self) -> None:
        self.filters = PlantFilters()


# --------------------
# Cart, favorites, UI
# --------------------

@dataclass
class CartItem:
    plant: Dict[str, Any]
    quantity: int = 1


class Cart:
    def __init__(self):
        self.items: List[CartItem] = []

    def add(self, plant: Dict[str, Any], quantity: int = 1) -> None:
        for item in self.items:
            if item.plant.get("id") == plant.get("id"):
                item.quantity += quantity
                return
        self.items.append(CartItem(plant, quantity))

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


class Favorites:
    def __init__(self):
        self.plant_ids: List[str] = []

    def toggle(self, plant: Dict[str, Any]) -> bool:
        """Flip membership; returns True when the plant is now a favorite."""
        plant_id = plant.get("id")
        if plant_id in self.plant_ids:
            self.plant_ids.remove(plant_id)
            return False
        self.plant_ids.append(plant_id)
        return True

    def __contains__(self, plant_id: str) -> bool:
        return plant_id in self.plant_ids

    def __len__(self) -> int:
        return len(self.plant_ids)


@dataclass
class Notification:
    message: str
    type: str = NOTIFY_INFO


class Storefront:
    """View state for the storefront: catalog data, filters, cart and favorites."""

    def __init__(self, client: Optional[CatalogClient] = None):
        self.client = client or CatalogClient()
        self.filters = PlantFilterState()
        self.categories: List[Dict[str, Any]] = []
        self.cart = Cart()
        self.favorites = Favorites()
        self.notification: Optional[Notification] = None

    @property
    def plants(self) -> List[Dict[str, Any]]:
        return self.filters.plants

    def notify(self, message: str, type: str = NOTIFY_INFO) -> Notification:
        self.notification = Notification(message, type)
        return self.notification

    def dismiss_notification(self) -> None:
        self.notification = None

    def load(self) -> bool:
        """Fetch plants and categories side by side; failures become an error notification."""
        with ThreadPoolExecutor(max_workers=2) as executor:
            plants_future = executor.submit(self.client.get_plants)
            categories_future = executor.submit(self.client.get_categories)

        ok = True
        try:
            self.filters.plants = plants_future.result().get("data") or []
        except CatalogAPIError as e:
            logger.error(f"Error loading plants: {str(e)}")
            self.notify(f"Failed to load plants: {str(e)}", NOTIFY_ERROR)
            ok = False
        try:
            self.categories = categories_future.result().get("data") or []
        except CatalogAPIError as e:
            logger.error(f"Error loading categories: {str(e)}")
            self.notify(f"Failed to load categories: {str(e)}", NOTIFY_ERROR)
            ok = False
        return ok

    def add_plant(self, plant: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            created = self.client.create_plant(plant).get("data")
            if not created:
                raise CatalogAPIError("Plant was not returned by the API")
        except CatalogAPIError as e:
            logger.error(f"Error adding plant: {str(e)}")
            details = f" ({'; '.join(e.details)})" if e.details else ""
            self.notify(f"Failed to add plant: {str(e)}{details}", NOTIFY_ERROR)
            return None
        self.filters.plants = self.filters.plants + [created]
        self.notify(f"{created.get('name')} added successfully!", NOTIFY_SUCCESS)
        return created

    def add_to_cart(self, plant: Dict[str, Any], quantity: int = 1) -> None:
        self.cart.add(plant, quantity)
        self.notify(f"{plant.get('name')} added to cart!", NOTIFY_SUCCESS)

    def toggle_favorite(self, plant: Dict[str, Any]) -> bool:
        is_favorite = self.favorites.toggle(plant)
        if is_favorite:
            self.notify(f"{plant.get('name')} added to favorites!", NOTIFY_SUCCESS)
        else:
            self.notify(f"{plant.get('name')} removed from favorites", NOTIFY_INFO)
        return is_favorite

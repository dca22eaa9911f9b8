from unittest.mock import MagicMock

import pytest
import requests

from storefront import (
    NOTIFY_ERROR,
    NOTIFY_SUCCESS,
    Cart,
    CatalogAPIError,
    CatalogClient,
    Favorites,
    PlantFilters,
    PlantFilterState,
    Storefront,
    filter_plants,
)

PLANTS = [
    {"id": "p1", "name": "Snake Plant", "categories": ["Indoor", "Low Light"], "inStock": True,
     "scientificName": "Dracaena trifasciata", "description": "Hardy and upright"},
    {"id": "p2", "name": "Monstera", "categories": ["Indoor", "Tropical"], "inStock": False,
     "scientificName": "Monstera deliciosa", "description": "Split leaves"},
    {"id": "p3", "name": "Lavender", "categories": ["Outdoor", "Fragrant"], "inStock": True,
     "description": "Purple flowers"},
    {"id": "p4", "name": "Aloe Vera", "categories": ["Succulent", "Medicinal"], "inStock": True},
]


def names(plants):
    return [p["name"] for p in plants]


def test_filter_without_criteria_returns_everything():
    assert filter_plants(PLANTS, PlantFilters()) == PLANTS


def test_filter_search_matches_name_category_scientific_name_and_description():
    assert names(filter_plants(PLANTS, PlantFilters(search_term="snake"))) == ["Snake Plant"]
    assert names(filter_plants(PLANTS, PlantFilters(search_term="tropic"))) == ["Monstera"]
    assert names(filter_plants(PLANTS, PlantFilters(search_term="DELICIOSA"))) == ["Monstera"]
    assert names(filter_plants(PLANTS, PlantFilters(search_term="purple"))) == ["Lavender"]


def test_filter_selected_categories_is_a_union():
    filters = PlantFilters(selected_categories=["Tropical", "Outdoor"])
    assert names(filter_plants(PLANTS, filters)) == ["Monstera", "Lavender"]


def test_filter_categories_intersect_with_search_and_stock():
    filters = PlantFilters(selected_categories=["Indoor", "Outdoor"])
    assert names(filter_plants(PLANTS, filters)) == ["Snake Plant", "Monstera", "Lavender"]

    filters.in_stock_only = True
    assert names(filter_plants(PLANTS, filters)) == ["Snake Plant", "Lavender"]

    filters.search_term = "lav"
    assert names(filter_plants(PLANTS, filters)) == ["Lavender"]


def test_filter_state_recomputes_from_source_list():
    state = PlantFilterState(list(PLANTS))
    state.toggle_in_stock_only()
    assert "Monstera" not in names(state.filtered_plants)

    state.update_search_term("aloe")
    assert names(state.filtered_plants) == ["Aloe Vera"]

    state.plants = state.plants + [{"id": "p5", "name": "Aloe Juvenna", "categories": ["Succulent"],
                                    "inStock": True}]
    assert names(state.filtered_plants) == ["Aloe Vera", "Aloe Juvenna"]

    state.update_categories(["Medicinal"])
    assert names(state.filtered_plants) == ["Aloe Vera"]

    state.clear_filters()
    assert len(state.filtered_plants) == 5


def test_cart_accumulates_quantity_per_plant():
    cart = Cart()
    cart.add(PLANTS[0])
    cart.add(PLANTS[0], quantity=2)
    cart.add(PLANTS[1])
    assert len(cart.items) == 2
    assert cart.item_count == 4


def test_favorites_toggle():
    favorites = Favorites()
    assert favorites.toggle(PLANTS[0]) is True
    assert "p1" in favorites
    assert len(favorites) == 1
    assert favorites.toggle(PLANTS[0]) is False
    assert "p1" not in favorites


def _response(status_code, payload):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = payload
    return response


def test_client_drops_empty_params_and_encodes_booleans():
    session = MagicMock()
    session.request.return_value = _response(200, {"success": True, "data": []})
    client = CatalogClient(base_url="http://api.test/api/", session=session)

    client.get_plants(category="Indoor", search="", inStock=True, limit=None)

    session.request.assert_called_once_with(
        "GET", "http://api.test/api/plants",
        params={"category": "Indoor", "inStock": "true"}, json=None, timeout=client.timeout,
    )


def test_client_raises_with_envelope_message():
    session = MagicMock()
    session.request.return_value = _response(
        400, {"success": False, "error": "Validation error", "details": ["name: Plant name is required"]})
    client = CatalogClient(base_url="http://api.test/api", session=session)

    with pytest.raises(CatalogAPIError) as excinfo:
        client.create_plant({})
    assert str(excinfo.value) == "Validation error"
    assert excinfo.value.status_code == 400
    assert excinfo.value.details == ["name: Plant name is required"]


def test_client_falls_back_to_status_message():
    session = MagicMock()
    response = _response(502, None)
    response.json.side_effect = ValueError("no json")
    session.request.return_value = response
    client = CatalogClient(base_url="http://api.test/api", session=session)

    with pytest.raises(CatalogAPIError, match="HTTP error! status: 502"):
        client.get_categories()


def test_client_wraps_transport_errors():
    session = MagicMock()
    session.request.side_effect = requests.exceptions.ConnectionError("refused")
    client = CatalogClient(base_url="http://api.test/api", session=session)

    with pytest.raises(CatalogAPIError, match="Request failed"):
        client.get_plant("p1")
    assert client.is_api_available() is False


def test_storefront_load_merges_both_fetches():
    client = MagicMock()
    client.get_plants.return_value = {"success": True, "data": PLANTS}
    client.get_categories.return_value = {"success": True, "data": [{"name": "Indoor", "count": 2}]}

    storefront = Storefront(client)
    assert storefront.load() is True
    assert storefront.plants == PLANTS
    assert storefront.categories == [{"name": "Indoor", "count": 2}]
    assert storefront.notification is None


def test_storefront_load_failure_becomes_notification():
    client = MagicMock()
    client.get_plants.side_effect = CatalogAPIError("Failed to fetch plants")
    client.get_categories.return_value = {"success": True, "data": [{"name": "Indoor", "count": 2}]}

    storefront = Storefront(client)
    assert storefront.load() is False
    assert storefront.notification.type == NOTIFY_ERROR
    assert "Failed to fetch plants" in storefront.notification.message
    assert storefront.categories == [{"name": "Indoor", "count": 2}]

    storefront.dismiss_notification()
    assert storefront.notification is None


def test_storefront_add_plant():
    client = MagicMock()
    created = {"id": "p9", "name": "Basil", "categories": ["Herb"], "inStock": True}
    client.create_plant.return_value = {"success": True, "data": created}

    storefront = Storefront(client)
    assert storefront.add_plant({"name": "Basil"}) == created
    assert storefront.plants == [created]
    assert storefront.notification.type == NOTIFY_SUCCESS


def test_storefront_add_plant_validation_failure():
    client = MagicMock()
    client.create_plant.side_effect = CatalogAPIError(
        "Validation error", 400, ["price: Price is required"])

    storefront = Storefront(client)
    assert storefront.add_plant({"name": "Basil"}) is None
    assert storefront.plants == []
    assert "price: Price is required" in storefront.notification.message


def test_storefront_cart_and_favorites_notify():
    storefront = Storefront(MagicMock())
    storefront.add_to_cart(PLANTS[0], quantity=2)
    assert storefront.cart.item_count == 2
    assert storefront.notification.message == "Snake Plant added to cart!"

    assert storefront.toggle_favorite(PLANTS[1]) is True
    assert storefront.notification.message == "Monstera added to favorites!"
    assert storefront.toggle_favorite(PLANTS[1]) is False
    assert storefront.notification.message == "Monstera removed from favorites"


def test_storefront_add_plant_without_data_notifies():
    client = MagicMock()
    client.create_plant.return_value = {"success": True}

    storefront = Storefront(client)
    assert storefront.add_plant({"name": "Basil"}) is None
    assert storefront.plants == []
    assert storefront.notification.type == NOTIFY_ERROR
    assert "Plant was not returned by the API" in storefront.notification.message

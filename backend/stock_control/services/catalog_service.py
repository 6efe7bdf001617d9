# Overview: Product and location master data; uniqueness of business keys is checked here.

from __future__ import annotations

from typing import Iterable, Optional

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Location, Product
from ..validation import ModelValidationPolicy, validate_payload


PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"code", "name", "category", "unit"},
    required_on_create={"code", "name", "category", "unit"},
)

LOCATION_POLICY = ModelValidationPolicy(
    writable_fields={"name", "address"},
    required_on_create={"name"},
)


def _check_unit(patch: dict, units: Iterable[str]) -> None:
    if "unit" in patch and patch["unit"] not in units:
        raise ValidationError(f"Invalid unit: {patch['unit']}. Must be one of {', '.join(units)}")


def _find_duplicate(records: list[dict], field: str, value: str, exclude_id: Optional[str] = None):
    for record in records:
        if record["id"] != exclude_id and record.get(field) == value:
            return record
    return None


# -- Products --

def list_products(store) -> list[dict]:
    return store.products.get_all()


def get_product(store, product_id: str) -> dict:
    product = store.products.get(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


def create_product(store, payload: dict, *, units: Iterable[str]) -> dict:
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    _check_unit(patch, units)
    if _find_duplicate(store.products.get_all(), "code", patch["code"]):
        raise ConflictError(f"Product code {patch['code']} already exists")
    return store.products.create(patch)


def update_product(store, product_id: str, payload: dict, *, units: Iterable[str]) -> dict:
    """
    Partial update. Transfers already created keep their snapshot of the
    old code/name/unit.
    """
    get_product(store, product_id)
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    _check_unit(patch, units)
    if "code" in patch and _find_duplicate(store.products.get_all(), "code", patch["code"], product_id):
        raise ConflictError(f"Product code {patch['code']} already exists")
    return store.products.update(product_id, patch)


def delete_product(store, product_id: str) -> None:
    get_product(store, product_id)
    store.products.delete(product_id)


# -- Locations --

def list_locations(store) -> list[dict]:
    return store.locations.get_all()


def get_location(store, location_id: str) -> dict:
    location = store.locations.get(location_id)
    if location is None:
        raise NotFoundError("Location", location_id)
    return location


def create_location(store, payload: dict) -> dict:
    patch = validate_payload(model=Location, payload=payload, policy=LOCATION_POLICY, partial=False)
    if _find_duplicate(store.locations.get_all(), "name", patch["name"]):
        raise ConflictError(f"Location {patch['name']} already exists")
    return store.locations.create(patch)


def update_location(store, location_id: str, payload: dict) -> dict:
    get_location(store, location_id)
    patch = validate_payload(model=Location, payload=payload, policy=LOCATION_POLICY, partial=True)
    if "name" in patch and _find_duplicate(store.locations.get_all(), "name", patch["name"], location_id):
        raise ConflictError(f"Location {patch['name']} already exists")
    return store.locations.update(location_id, patch)


def delete_location(store, location_id: str) -> None:
    """Transfers referencing the location keep the raw id."""
    get_location(store, location_id)
    store.locations.delete(location_id)

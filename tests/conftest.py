"""Pytest configuration and fixtures."""

from collections.abc import Generator
from pathlib import Path

import pytest

from stockledger.application.services import reset_services
from stockledger.config import reset_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Point settings at a per-test data dir and drop cached singletons."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("LEDGER_BACKEND", "sqlite")
    reset_settings()
    reset_services()
    yield
    reset_settings()
    reset_services()


@pytest.fixture
def reference_rows() -> dict[str, list[dict]]:
    """Reference tables of a small two-branch bakery."""
    return {
        "branches": [
            {"id": "1", "name": "HEAD OFFICE"},
            {"id": "2", "name": "Downtown"},
            {"id": "3", "name": "Airport"},
        ],
        "materials": [
            {"id": "flour", "name": "Flour", "unit": "kg", "unit_price": 2.0, "minimum_stock": 150},
            {"id": "sugar", "name": "Sugar", "unit": "kg", "unit_price": 3.0, "minimum_stock": 10},
        ],
        "products": [
            {"id": "bread", "name": "Bread", "unit": "loaf", "price": 5.0},
            {"id": "cake", "name": "Cake", "unit": "piece", "price": None},
        ],
        "product_recipes": [
            {
                "id": "r1",
                "product_id": "bread",
                "name": "Bread",
                "yield": 10,
                "unit_cost": 1.5,
                "selling_price": 4.5,
                "material_cost": 15.0,
            },
            {
                "id": "r2",
                "product_id": "cake",
                "name": "Cake",
                "yield": 4,
                "unit_cost": 8.0,
                "selling_price": 10.0,
                "material_cost": 32.0,
            },
        ],
    }


@pytest.fixture
def ledger_tables(reference_rows) -> dict[str, list[dict]]:
    """Movement, sales and cost tables of a bakery over the first week of 2024."""
    return {
        **reference_rows,
        "inventory": [
            {"id": 1, "material_id": "flour", "branch_id": 2, "quantity": 100,
             "opening_stock": 100, "created_at": "2024-01-01T08:00:00"},
            {"id": 2, "material_id": "sugar", "branch_id": 3, "quantity": 50,
             "created_at": "2023-12-30T08:00:00"},
        ],
        "procurement_supplied": [
            {"id": 1, "material_id": "flour", "branch_id": 2, "quantity": 50,
             "running_balance": 150, "created_at": "2024-01-03T10:00:00"},
        ],
        "material_usage": [
            {"id": 1, "material_id": "flour", "branch_id": 2, "quantity": 30,
             "running_balance": 120, "cost": 6, "created_at": "2024-01-05T10:00:00"},
        ],
        "damaged_materials": [
            {"id": 1, "material_id": "sugar", "branch_id": 3, "quantity": 5,
             "running_balance": 45, "cost": 15, "created_at": "2024-01-04T09:00:00"},
        ],
        "product_inventory": [
            {"id": 1, "product_id": "bread", "branch_id": 2, "quantity": 20,
             "created_at": "2024-01-01T06:00:00"},
        ],
        "production": [
            {"id": 1, "product_id": "bread", "branch_id": 2, "yield": 40,
             "running_balance": 60, "created_at": "2024-01-02T06:00:00"},
        ],
        "product_damages": [
            {"id": 1, "product_id": "bread", "branch_id": 2, "quantity": 2,
             "running_balance": 58, "cost": 3, "created_at": "2024-01-04T15:00:00"},
        ],
        "complimentary_products": [
            {"id": 1, "product_id": "bread", "branch_id": 2, "quantity": 1,
             "cost": 1.5, "created_at": "2024-01-04T16:00:00"},
        ],
        "imprest_supplied": [
            {"id": 1, "branch_id": 3, "cost": 10, "created_at": "2024-01-02T11:00:00"},
        ],
        "sales": [
            {"id": 1, "branch_id": 2, "total_amount": 50, "created_at": "2024-01-03T12:00:00"},
            {"id": 2, "branch_id": 3, "total_amount": 20, "created_at": "2024-01-04T12:00:00"},
        ],
        "sale_items": [
            {"id": 1, "sale_id": 1, "product_id": "bread", "quantity": 10, "unit_price": 5,
             "unit_cost": 1.5, "subtotal": 50, "total_cost": 15},
            {"id": 2, "sale_id": 2, "product_id": "bread", "quantity": 4, "unit_price": 5,
             "unit_cost": 1.5, "subtotal": 20, "total_cost": 6},
        ],
    }



"""
Tests for admin form coercion and request schemas.
"""

import re

import pytest
from pydantic import ValidationError

from jowhara.forms import coerce_float, coerce_int, drop_blank, slugify
from jowhara.modules.catalog.schemas import BrandCreate, CategoryCreate, CategoryUpdate
from jowhara.modules.inventory.schemas import InventoryAdjustmentRequest
from jowhara.modules.orders.schemas import OrderCreateRequest
from jowhara.modules.orders.service import build_order_payload, new_order_number
from jowhara.modules.products.schemas import ProductCreate, ProductUpdate


class TestForms:
    @pytest.mark.parametrize(
        "name, slug",
        [
            ("Rose & Oud Perfume", "rose-oud-perfume"),
            ("  Musk  ", "musk"),
            ("Éclat 24/7", "clat-24-7"),
            ("already-a-slug", "already-a-slug"),
        ],
    )
    def test_slugify(self, name, slug):
        assert slugify(name) == slug

    def test_coerce_int(self):
        assert coerce_int("12", 0) == 12
        assert coerce_int("abc", 5) == 5
        assert coerce_int(None, 5) == 5
        assert coerce_int("0", 5) == 5
        assert coerce_int(0, 0) == 0

    def test_coerce_float_treats_zero_as_unset(self):
        assert coerce_float("9.5", None) == 9.5
        assert coerce_float("0", None) is None
        assert coerce_float("abc", None) is None

    def test_drop_blank(self):
        assert drop_blank(["a.jpg", " ", "", " b.jpg "]) == ["a.jpg", "b.jpg"]
        assert drop_blank(None) == []


class TestProductCreate:
    def test_minimal_product_defaults(self):
        product = ProductCreate(name="Rose Oud")

        assert product.slug == "rose-oud"
        assert product.price == 0.0
        assert product.gender_category == "Unisex"
        assert product.status == "active"
        assert product.stock_quantity == 0
        assert product.low_stock_threshold == 5
        assert product.track_inventory is True
        assert product.allow_backorder is False
        assert product.featured is False
        assert product.images == []
        assert product.tags == []

    def test_malformed_numbers_are_coerced(self):
        product = ProductCreate(
            name="Rose Oud",
            price="abc",
            compare_price="0",
            cost_price="12.5",
            stock_quantity="many",
            low_stock_threshold="",
            sort_order="3",
        )

        assert product.price == 0.0
        assert product.compare_price is None
        assert product.cost_price == 12.5
        assert product.stock_quantity == 0
        assert product.low_stock_threshold == 5
        assert product.sort_order == 3

    def test_zero_low_stock_threshold_falls_back(self):
        product = ProductCreate(name="Rose Oud", low_stock_threshold=0, stock_quantity="0")

        assert product.low_stock_threshold == 5
        assert product.stock_quantity == 0

    def test_explicit_slug_kept_and_blanks_dropped(self):
        product = ProductCreate(
            name="Rose Oud",
            slug="custom",
            images=["", "a.jpg"],
            tags=[" oud ", " "],
            sku="  ",
            category_id="",
        )

        assert product.slug == "custom"
        assert product.images == ["a.jpg"]
        assert product.tags == ["oud"]
        assert product.sku is None
        assert product.category_id is None

    def test_name_required(self):
        with pytest.raises(ValidationError):
            ProductCreate(name="")

    def test_invalid_gender_rejected(self):
        with pytest.raises(ValidationError):
            ProductCreate(name="Rose", gender_category="Kids")

    def test_update_only_sent_fields(self):
        update = ProductUpdate(price="19.9", featured=True)

        assert update.model_dump(exclude_unset=True) == {"price": 19.9, "featured": True}


class TestCatalogSchemas:
    def test_category_slug_and_sort_order(self):
        category = CategoryCreate(name="Eau de Parfum", sort_order="x")

        assert category.slug == "eau-de-parfum"
        assert category.sort_order == 0
        assert category.active is True

    def test_brand_defaults(self):
        brand = BrandCreate(name="Amouage")

        assert brand.slug == "amouage"
        assert brand.featured is False

    def test_category_update_coerces_sort_order(self):
        assert CategoryUpdate(sort_order="7").sort_order == 7
        assert CategoryUpdate().model_dump(exclude_unset=True) == {}


class TestOrderPayload:
    def _request(self, **overrides):
        data = {
            "customer_name": "Amina",
            "customer_phone": "+212600000000",
            "items": [
                {"product_id": "p1", "product_name": "Rose Oud", "quantity": 2, "unit_price": 45.5},
                {"product_id": "p2", "product_name": "Musk", "quantity": 1, "unit_price": 20},
            ],
            **overrides,
        }
        return OrderCreateRequest(**data)

    def test_totals(self):
        order, items = build_order_payload(
            self._request(tax_amount=10, shipping_amount=5, discount_amount=11)
        )

        assert [item["total_price"] for item in items] == [91.0, 20.0]
        assert order["subtotal"] == 111.0
        assert order["total_amount"] == 115.0
        assert "items" not in order

    def test_order_number_generated(self):
        order, _ = build_order_payload(self._request())
        assert re.fullmatch(r"JW-\d{8}-[0-9A-F]{6}", order["order_number"])

    def test_order_number_kept(self):
        order, _ = build_order_payload(self._request(order_number="JW-CUSTOM"))
        assert order["order_number"] == "JW-CUSTOM"

    def test_order_numbers_differ(self):
        assert new_order_number() != new_order_number()

    def test_items_required(self):
        with pytest.raises(ValidationError):
            self._request(items=[])

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            self._request(
                items=[{"product_id": "p1", "product_name": "Rose", "quantity": 0, "unit_price": 1}]
            )


class TestInventoryAdjustment:
    def test_zero_change_rejected(self):
        with pytest.raises(ValidationError):
            InventoryAdjustmentRequest(product_id="p1", quantity_change=0, change_type="adjustment")

    def test_negative_change_allowed(self):
        request = InventoryAdjustmentRequest(product_id="p1", quantity_change=-3, change_type="sale")
        assert request.quantity_change == -3
        assert request.variant_id is None

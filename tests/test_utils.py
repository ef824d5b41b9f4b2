from decimal import Decimal

import pytest
from fastapi import HTTPException

from storefront.config import settings
from storefront.models.product import Product, ProductStatus
from storefront.models.stock import StockMovementType
from storefront.database import engine_options, normalize_url
from storefront.utils.hashing import get_password_hash, password_too_long, verify_password
from storefront.utils.pricing import money, line_total, subtotal_of, tax_for, shipping_for
from storefront.utils.stock import apply_stock_change, stock_status, sync_status


def test_money_rounds_half_up():
    assert money("2.005") == Decimal("2.01")
    assert money(1) == Decimal("1.00")
    assert money(None) == Decimal("0.00")


def test_line_and_subtotal():
    assert line_total("19.99", 3) == Decimal("59.97")
    assert subtotal_of([(Decimal("299.99"), 1), (Decimal("29.99"), 2)]) == Decimal("359.97")
    assert subtotal_of([]) == Decimal("0.00")


def test_tax_and_shipping(monkeypatch):
    monkeypatch.setattr(settings, "TAX_RATE", Decimal("8.25"))
    monkeypatch.setattr(settings, "SHIPPING_FLAT_RATE", Decimal("4.99"))
    monkeypatch.setattr(settings, "FREE_SHIPPING_THRESHOLD", Decimal("50"))

    assert tax_for(Decimal("100.00")) == Decimal("8.25")
    assert shipping_for(Decimal("49.99")) == Decimal("4.99")
    assert shipping_for(Decimal("50.00")) == Decimal("0.00")


def test_no_threshold_always_charges_flat_rate(monkeypatch):
    monkeypatch.setattr(settings, "SHIPPING_FLAT_RATE", Decimal("7"))
    monkeypatch.setattr(settings, "FREE_SHIPPING_THRESHOLD", Decimal("0"))
    assert shipping_for(Decimal("10000")) == Decimal("7.00")


def test_password_hashing():
    hashed = get_password_hash("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("battery staple", hashed)
    assert not verify_password("anything", "not-a-bcrypt-hash")


def _product(**kwargs):
    fields = {"quantity": 10, "low_stock_alert": 5, "track_quantity": True, "status": ProductStatus.ACTIVE}
    fields.update(kwargs)
    return Product(name="Widget", slug="widget", price=Decimal("1.00"), **fields)


@pytest.mark.parametrize("quantity, expected", [(0, "out_of_stock"), (5, "low_stock"), (6, "in_stock")])
def test_stock_status(quantity, expected):
    assert stock_status(_product(quantity=quantity)) == expected


def test_sync_status_only_touches_live_tracked_products():
    sold_out = _product(quantity=0)
    sync_status(sold_out)
    assert sold_out.status == ProductStatus.OUT_OF_STOCK

    draft = _product(quantity=0, status=ProductStatus.DRAFT)
    sync_status(draft)
    assert draft.status == ProductStatus.DRAFT

    untracked = _product(quantity=0, track_quantity=False)
    sync_status(untracked)
    assert untracked.status == ProductStatus.ACTIVE


def test_apply_stock_change_records_movement(db_session, product):
    movement = apply_stock_change(db_session, product, -50, movement_type=StockMovementType.OUT, reason="Sold")
    db_session.commit()

    assert product.quantity == 0
    assert product.status == ProductStatus.OUT_OF_STOCK
    assert movement.quantity == -50
    assert movement.product_id == product.id


def test_apply_stock_change_refuses_negative_stock(db_session, product):
    with pytest.raises(HTTPException) as exc:
        apply_stock_change(db_session, product, -51, movement_type=StockMovementType.OUT)
    assert exc.value.status_code == 400
    assert product.quantity == 50


def test_untracked_product_is_always_in_stock():
    assert stock_status(_product(quantity=0, track_quantity=False)) == "in_stock"


def test_database_url_normalisation():
    assert normalize_url("postgres://u:p@db/shop") == "postgresql://u:p@db/shop"
    assert normalize_url("sqlite:///./shop.db") == "sqlite:///./shop.db"
    assert engine_options("sqlite://") == {"connect_args": {"check_same_thread": False}}
    assert engine_options("postgresql://u:p@db/shop") == {"pool_pre_ping": True}


def test_password_length_limit_is_in_bytes():
    assert not password_too_long("a" * 72)
    assert password_too_long("a" * 73)
    assert password_too_long("€" * 25)

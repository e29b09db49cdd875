"""Shared fixtures: a throwaway SQLite database, upload dir and seeded catalog."""

from __future__ import annotations

import os
import tempfile
from decimal import Decimal
from pathlib import Path

import pytest

_TEST_ROOT = Path(tempfile.mkdtemp(prefix="pricelist-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_ROOT / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = str(_TEST_ROOT / "uploads")
os.environ["APP_TIMEZONE"] = "UTC"

from pricelist.config import reset_settings_cache  # noqa: E402

reset_settings_cache()


@pytest.fixture(autouse=True)
def database():
    """Recreate every table before each test."""

    from pricelist.infrastructure import database as database_module

    database_module.Base.metadata.drop_all(bind=database_module.engine, checkfirst=True)
    database_module.initialize_database()
    yield database_module
    reset_settings_cache()


@pytest.fixture()
def session(database):
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def session_factory(database):
    return database.SessionLocal


@pytest.fixture()
def override_settings(monkeypatch):
    """Return a helper that sets environment-backed settings for one test."""

    def apply(**values: object) -> None:
        for key, value in values.items():
            monkeypatch.setenv(key.upper(), str(value))
        reset_settings_cache()

    return apply


@pytest.fixture()
def catalog(session):
    """Seed one vendor and a handful of products."""

    from pricelist.infrastructure.models import ProductModel, VendorModel

    vendor = VendorModel(name="Acme Supply", code="ACME", is_active=True)
    retired_vendor = VendorModel(name="Old Supply", code="OLD", is_active=False)
    widget = ProductModel(
        sku="A1",
        model="WID-100",
        name="Widget",
        cost=Decimal("8.00"),
        price=Decimal("15.00"),
    )
    gadget = ProductModel(
        sku="B2",
        model="GAD-200",
        name="Gadget",
        cost=Decimal("20.00"),
        price=Decimal("30.00"),
    )
    gizmo = ProductModel(sku="C3", model="GIZ-300", name="Gizmo", cost=Decimal("5.00"))
    session.add_all([vendor, retired_vendor, widget, gadget, gizmo])
    session.commit()
    return {
        "vendor_id": vendor.id,
        "retired_vendor_id": retired_vendor.id,
        "widget_id": widget.id,
        "gadget_id": gadget.id,
        "gizmo_id": gizmo.id,
    }


@pytest.fixture()
def make_csv(tmp_path):
    """Return a helper writing CSV lines to a file under ``tmp_path``."""

    def write(lines: list[str], name: str = "prices.csv") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return write


@pytest.fixture()
def stage_import(session):
    """Return a helper that uploads CSV lines, maps them and runs validation."""

    from pricelist.application.use_cases.price_imports import (
        run_price_import_validation,
        submit_column_mapping,
        upload_price_import,
    )

    def stage(
        lines: list[str],
        fields: dict[str, str] | None = None,
        *,
        decimal_format: str = "dollars",
        skip_rows: int = 1,
        validate: bool = True,
        **upload_options,
    ) -> int:
        result = upload_price_import(
            session,
            filename="prices.csv",
            file_bytes=("\n".join(lines) + "\n").encode("utf-8"),
            uploaded_by=7,
            **upload_options,
        )
        import_id = result.price_import.id
        if fields is None:
            return import_id
        submit_column_mapping(
            session,
            import_id=import_id,
            fields=fields,
            decimal_format=decimal_format,
            skip_rows=skip_rows,
        )
        if validate:
            run_price_import_validation(session, import_id=import_id)
        return import_id

    return stage

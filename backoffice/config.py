"""Configuration loading and composition root for the billing back office."""

from __future__ import annotations

import copy
import logging
import os

import yaml

from backoffice.data.db import get_engine, get_session, init_db
from backoffice.adapters.outbound.sqlalchemy_repos import (
    SqlAlchemyBillingRowRepository,
    SqlAlchemyInvoiceRepository,
)
from domain.billing_service import BillingService
from domain.grouping import parse_grouping
from domain.models import GroupingMode
from domain.overrides import OverrideSet

CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.yaml")

DEFAULTS = {
    "database": {"url": None},
    "billing": {
        "default_grouping": "NONE",
        "allow_zero_price_override": False,
        "invoice_prefix": "INV",
    },
    "logging": {"level": "INFO"},
}


def _merge(base: dict, override: dict) -> dict:
    result = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str | None = None) -> dict:
    """Load YAML config merged over DEFAULTS.

    Resolution: *path*, then $BILLING_CONFIG, then the bundled config.yaml.
    $DATABASE_URL overrides ``database.url``.
    """
    path = path or os.environ.get("BILLING_CONFIG") or CONFIG_PATH
    loaded = {}
    if os.path.exists(path):
        with open(path) as f:
            loaded = yaml.safe_load(f) or {}
    config = _merge(DEFAULTS, loaded)
    if os.environ.get("DATABASE_URL"):
        config["database"]["url"] = os.environ["DATABASE_URL"]
    # validate early; raises ValueError on an unknown mode
    parse_grouping(config["billing"]["default_grouping"])
    return config


def configure_logging(config: dict) -> None:
    level = str(config.get("logging", {}).get("level", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_billing_service(session, config: dict) -> BillingService:
    """Wire the SQLAlchemy adapters into a BillingService."""
    return BillingService(
        invoices=SqlAlchemyInvoiceRepository(
            session, prefix=config["billing"]["invoice_prefix"]
        ),
        rows=SqlAlchemyBillingRowRepository(session),
    )


def build_overrides(config: dict, price_overrides=None, qty_overrides=None, default_price=None) -> OverrideSet:
    """Unpack flat request override maps using the configured zero-price policy."""
    return OverrideSet.from_flat(
        price_overrides,
        qty_overrides,
        global_default_price=default_price,
        allow_zero_price=bool(config["billing"]["allow_zero_price_override"]),
    )


def default_grouping(config: dict) -> GroupingMode:
    return parse_grouping(config["billing"]["default_grouping"])


def open_session(config: dict):
    """Create the schema if needed and return a session on the configured database."""
    engine = init_db(get_engine(config["database"]["url"]))
    return get_session(engine)

"""Shared fixtures: configuration reset and sample ICDC invoice texts."""

import logging
from decimal import Decimal

import pytest

from config import ConfigurationManager
from src.utils.logger import LOGGER_NAMESPACE
from src.extractor.models import PackType, ProductCategory, ProductLineRaw
from src.quantity.models import ResolutionMethod, ResolvedLineItem
from src.utils.parse_context import ParseContext


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from settings.yaml without in-memory overrides."""
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture(autouse=True)
def restore_app_logger():
    """Undo handler and level changes made by setup_logger() in a test."""
    app_logger = logging.getLogger(LOGGER_NAMESPACE)
    saved = (list(app_logger.handlers), app_logger.level, app_logger.propagate)
    yield
    for handler in app_logger.handlers:
        if handler not in saved[0]:
            handler.close()
    app_logger.handlers[:] = saved[0]
    app_logger.setLevel(saved[1])
    app_logger.propagate = saved[2]


@pytest.fixture
def context():
    return ParseContext()


# Compact layout: one line per product, no separators, glued summary line.
COMPACT_INVOICE = """\
ICDC Number: ICDC010706250123456
Invoice Date: 06-Jun-2025
Name of the Licensee: SRI LAKSHMI WINES
Retail Shop Excise Tax: 12,500.00
15016 (12)KING FISHER PREMIUM LAGER BEERBeerG12 / 650 ml1000
20110 (48)OFFICER'S CHOICE WHISKYIMLG48 / 180 ml180
Total (Cases/Btls):18 / 0100 / 0118 / 0
Invoice Value: 1,30,944.00
MRP Rounding Off: 56.00
Net Invoice Value: 1,31,000.00
Retail Shop Excise Turnover Tax: 12,100.00
Special Excise Cess: 5,000.00
TCS: 1,482.00
Total Amount: 1,49,582.00
Page 1 of 1
"""

# Table layout: separate cases and bottles columns, printed total disagrees.
TABLE_INVOICE = """\
ICDC Number: ICDC010706250999999
Invoice Date: 10/06/2025
1 5016 (12) KING FISHER PREMIUM LAGER BEER Beer G 12 / 650 ml 100 0
2 0110 (48) OFFICERS CHOICE WHISKY IML G 48 / 180 ml 18 5
Invoice Value: 50,000.00
TCS: 500.00
Total Amount: 51,000.00
"""

# Block layout: brand header, name lines, detail line; label split over lines.
BLOCK_INVOICE = """\
ICDC Number: ICDC010706250555555
Invoice Date: 06-Jun-2025
15016 (12)
KING FISHER PREMIUM
LAGER BEER
BeerG12/650ml6800
20110 (48)
OFFICERS CHOICE WHISKY
IMLG48/180ml180
Total (Cases/Btls):18 / 0680 / 0698 / 0
Invoice
Value:
1,30,944.00
"""

NO_PRODUCT_TEXT = """\
ICDC Number: ICDC010706250000000
Invoice Date: 06-Jun-2025
Invoice Value: 100.00
"""

CATALOG_ROWS = [
    {
        "id": 1, "brand_number": "5016", "size_ml": 650, "pack_quantity": 12,
        "pack_type": "G", "product_type": "Beer",
        "brand_name": "KING FISHER PREMIUM LAGER BEER", "standard_mrp": "160.00",
    },
    {
        "id": 2, "brand_number": "0110", "size_ml": 180, "pack_quantity": 48,
        "pack_type": "G", "product_type": "IML",
        "brand_name": "OFFICER'S CHOICE WHISKY", "standard_mrp": "120.00",
    },
    {
        "id": 3, "brand_number": "7001", "size_ml": 750, "pack_quantity": 12,
        "pack_type": "G", "product_type": "IML",
        "brand_name": "ROYAL STAG", "standard_mrp": "900.00",
    },
]


@pytest.fixture
def compact_invoice():
    return COMPACT_INVOICE


@pytest.fixture
def table_invoice():
    return TABLE_INVOICE


@pytest.fixture
def block_invoice():
    return BLOCK_INVOICE


@pytest.fixture
def no_product_text():
    return NO_PRODUCT_TEXT


@pytest.fixture
def catalog_rows():
    return [dict(row) for row in CATALOG_ROWS]


def make_raw_line(
    brand_number="5016",
    size_ml=650,
    pack_quantity=12,
    quantity_token="1000",
    category=ProductCategory.BEER,
    pack_type=PackType.GLASS,
    serial=1,
    bottles_token=None,
    line_number=10,
):
    return ProductLineRaw(
        serial=serial,
        brand_number=brand_number,
        product_name="TEST PRODUCT",
        product_category=category,
        pack_type=pack_type,
        pack_quantity=pack_quantity,
        size_ml=size_ml,
        quantity_token=quantity_token,
        source_line_number=line_number,
        grammar="compact",
        bottles_token=bottles_token,
    )


def make_item(item_id=1, cases=10, bottles=0, **line_kwargs):
    return ResolvedLineItem(
        item_id=item_id,
        line=make_raw_line(**line_kwargs),
        cases=cases,
        bottles=bottles,
        resolution_confidence=0.6,
        resolution_method=ResolutionMethod.DEFAULT_SPLIT,
    )


@pytest.fixture
def raw_line_factory():
    return make_raw_line


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def money():
    return lambda text: Decimal(text)

"""
Brand Catalog Snapshot.

An immutable, indexed view over a list of MasterBrandRecord rows. The
parser receives one snapshot per call and never writes to it.

Supported Formats:
    - In-memory records or dictionaries
    - JSON files (a list of rows, or {"records": [...]})

Author: ML Engineering Team
"""

import json
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Tuple, Union

from src.utils.logger import get_logger
from src.utils.exceptions import CatalogError, ConfigurationError
from .models import MasterBrandRecord

# Initialize module logger
logger = get_logger(__name__)


class BrandCatalog:
    """
    Indexed catalog snapshot.

    Example:
        >>> catalog = BrandCatalog.from_dicts([
        ...     {"id": 7, "brand_number": "5016", "size_ml": 650,
        ...      "pack_quantity": 12, "pack_type": "G", "standard_mrp": "160"}
        ... ])
        >>> catalog.exact(("5016", 650, 12, "G"))[0].id
        7
    """

    def __init__(self, records: Iterable[MasterBrandRecord] = ()) -> None:
        self._records: Tuple[MasterBrandRecord, ...] = tuple(records)
        self._by_key: Dict[Tuple[str, int, int, str], List[MasterBrandRecord]] = defaultdict(list)
        self._by_brand: Dict[str, List[MasterBrandRecord]] = defaultdict(list)

        for record in self._records:
            self._by_key[record.key].append(record)
            self._by_brand[record.brand_number].append(record)

        duplicates = sum(1 for rows in self._by_key.values() if len(rows) > 1)
        if duplicates:
            logger.warning(f"Catalog has {duplicates} duplicated brand keys")

    @classmethod
    def from_dicts(cls, rows: Iterable[Union[Dict[str, Any], MasterBrandRecord]]) -> 'BrandCatalog':
        """Build a catalog from dictionaries (or records, passed through)."""
        return cls(
            row if isinstance(row, MasterBrandRecord) else MasterBrandRecord.from_dict(row)
            for row in rows
        )

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> 'BrandCatalog':
        """
        Load a catalog snapshot from a JSON file.

        Raises:
            ConfigurationError: If the file is missing or has the wrong shape.
            InvalidCatalogRecordError: If a row is malformed.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(str(path), "Catalog file not found")

        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(str(path), str(e))

        if isinstance(data, dict):
            data = data.get('records')
        if not isinstance(data, list):
            raise CatalogError(f"Catalog must be a list of records: {path}")

        catalog = cls.from_dicts(data)
        logger.info(f"Loaded {len(catalog)} catalog records from {path.name}")
        return catalog

    def exact(self, key: Tuple[str, int, int, str]) -> List[MasterBrandRecord]:
        """All records with exactly this (brand, size, pack qty, pack type)."""
        return list(self._by_key.get(key, ()))

    def for_brand(self, brand_number: str) -> List[MasterBrandRecord]:
        """All records of a brand number."""
        return list(self._by_brand.get(brand_number, ()))

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MasterBrandRecord]:
        return iter(self._records)

"""
Ground Truth Loader Module.

This module loads hand-checked line item fixtures used to evaluate the
parser on a corpus of real invoices.

Supported Formats:
    - JSON: a list of {source_file, items: [{brand_number, size_ml,
      cases, bottles}, ...]} records, or {"records": [...]}
    - CSV / Excel: one row per item with the columns source_file,
      brand_number, size_ml, cases, bottles (rows are grouped by file)

Author: ML Engineering Team
"""

import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from openpyxl import load_workbook

from src.utils.logger import get_logger
from src.utils.exceptions import ConfigurationError

# Initialize module logger
logger = get_logger(__name__)


class GroundTruthLoader:
    """
    Loads ground truth records from JSON, CSV or Excel files.

    Attributes:
        data: Loaded records, one per invoice
        file_path: Path to ground truth file

    Example:
        >>> loader = GroundTruthLoader("data/ground_truth.json")
        >>> record = loader.get_by_filename("ICDC_JUNE_06.pdf")
        >>> record['items'][0]
        {'brand_number': '5016', 'size_ml': 650, 'cases': 100, 'bottles': 0}
    """

    REQUIRED_ITEM_FIELDS = ['brand_number', 'size_ml', 'cases', 'bottles']

    def __init__(self, file_path: Optional[Union[str, Path]] = None) -> None:
        self.file_path = Path(file_path) if file_path else None
        self.data: List[Dict[str, Any]] = []
        self._file_index: Dict[str, int] = {}

        if self.file_path:
            self.load(self.file_path)

    @classmethod
    def from_records(cls, records: List[Dict[str, Any]]) -> 'GroundTruthLoader':
        """Build a loader around in-memory records."""
        loader = cls()
        loader.data = [normalize_record(record) for record in records]
        loader._build_index()
        return loader

    def load(self, file_path: Union[str, Path]) -> List[Dict[str, Any]]:
        """
        Load ground truth from file.

        Args:
            file_path: Path to ground truth file.

        Returns:
            List of normalized ground truth records.

        Raises:
            ConfigurationError: If the file is missing or the format is
                not supported.
        """
        path = Path(file_path)

        if not path.exists():
            raise ConfigurationError(str(path), "Ground truth file not found")

        extension = path.suffix.lower()

        if extension == '.json':
            records = self._load_json(path)
        elif extension == '.csv':
            records = self._group_rows(self._load_csv(path))
        elif extension == '.xlsx':
            records = self._group_rows(self._load_excel(path))
        else:
            raise ConfigurationError("ground_truth", f"Unsupported format: {extension}")

        self.data = [normalize_record(record) for record in records]
        self._build_index()

        logger.info(f"Loaded {len(self.data)} ground truth records from {path.name}")
        return self.data

    def _load_json(self, path: Path) -> List[Dict[str, Any]]:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if isinstance(data, dict):
            if 'records' in data:
                return data['records']
            # Keyed by filename
            return [{**value, 'source_file': key} for key, value in data.items()]

        return data

    def _load_csv(self, path: Path) -> List[Dict[str, Any]]:
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return [dict(row) for row in csv.DictReader(f)]

    def _load_excel(self, path: Path) -> List[Dict[str, Any]]:
        workbook = load_workbook(path, read_only=True)
        sheet = workbook.active

        rows = []
        headers = None
        for row_idx, row in enumerate(sheet.iter_rows(values_only=True)):
            if row_idx == 0:
                headers = [str(cell).strip() if cell else f'col_{i}' for i, cell in enumerate(row)]
            else:
                rows.append({headers[i]: cell for i, cell in enumerate(row) if i < len(headers)})

        workbook.close()
        return rows

    @staticmethod
    def _group_rows(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        grouped: Dict[str, Dict[str, Any]] = {}
        for row in rows:
            source_file = row.get('source_file')
            if not source_file:
                continue
            record = grouped.setdefault(source_file, {'source_file': source_file, 'items': []})
            record['items'].append({key: row.get(key) for key in GroundTruthLoader.REQUIRED_ITEM_FIELDS})
        return list(grouped.values())

    def _build_index(self) -> None:
        self._file_index = {}
        for idx, record in enumerate(self.data):
            filename = record.get('source_file')
            if filename:
                self._file_index[filename] = idx
                self._file_index[Path(filename).name] = idx

    def get_by_filename(self, filename: str) -> Optional[Dict[str, Any]]:
        """
        Get ground truth record by source filename.

        Args:
            filename: Source file name (with or without path).

        Returns:
            Ground truth record or None.
        """
        if not filename:
            return None
        if filename in self._file_index:
            return self.data[self._file_index[filename]]
        normalized = Path(filename).name
        if normalized in self._file_index:
            return self.data[self._file_index[normalized]]
        return None

    def validate(self) -> Dict[str, Any]:
        """
        Check every record for a source file and complete items.

        Returns:
            Dictionary with validation counts and error messages.
        """
        results = {
            'total_records': len(self.data),
            'valid_records': 0,
            'invalid_records': 0,
            'errors': []
        }

        for idx, record in enumerate(self.data):
            problems = []
            if not record.get('source_file'):
                problems.append("missing source_file")
            for item_idx, item in enumerate(record.get('items', [])):
                missing = [f for f in self.REQUIRED_ITEM_FIELDS if item.get(f) is None]
                if missing:
                    problems.append(f"item {item_idx} missing {', '.join(missing)}")

            if problems:
                results['invalid_records'] += 1
                results['errors'].append(f"record {idx}: {'; '.join(problems)}")
            else:
                results['valid_records'] += 1

        logger.info(
            f"Ground truth validation: {results['valid_records']}/{results['total_records']} valid"
        )
        return results

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self.data)


def normalize_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Coerce a ground truth record to canonical types.

    Brand numbers become zero-padded strings and quantities become ints,
    so fixtures typed by hand compare cleanly with parser output.
    """
    items = []
    for item in record.get('items', []):
        items.append({
            'brand_number': _as_brand(item.get('brand_number')),
            'size_ml': _as_int(item.get('size_ml')),
            'cases': _as_int(item.get('cases')),
            'bottles': _as_int(item.get('bottles')),
        })
    normalized = dict(record)
    normalized['items'] = items
    return normalized


def _as_brand(value: Any) -> Optional[str]:
    if value is None or value == '':
        return None
    if isinstance(value, float):
        value = int(value)
    return str(value).strip().zfill(4)


def _as_int(value: Any) -> Optional[int]:
    if value is None or value == '':
        return None
    return int(float(value))

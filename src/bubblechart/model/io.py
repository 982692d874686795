"""
Input/Output (JSON)
Loads and saves bubble datasets as a JSON array of
``{"id", "name", "value", "isCenter"}`` objects.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Iterable

from bubblechart.model.body import BubbleRecord, DatasetError, validate_records

logger = logging.getLogger(__name__)


def load_dataset(filepath: str | os.PathLike[str]) -> tuple[BubbleRecord, ...]:
    """
    Read and validate a dataset file.

    Raises:
        DatasetError: If the file cannot be read, is not a JSON array of
            objects, or violates the record invariants.
    """
    logger.info(f"Loading dataset from: {filepath}")
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to read dataset '{filepath}': {e}")
        raise DatasetError([f"cannot read '{filepath}': {e}"]) from e

    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise DatasetError([f"'{filepath}' must contain a JSON array of objects"])

    records = validate_records(BubbleRecord.from_dict(item) for item in payload)
    logger.info(f"Loaded {len(records)} records.")
    return records


def dump_dataset(records: Iterable[BubbleRecord], filepath: str | os.PathLike[str]) -> None:
    records = validate_records(records)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump([r.to_dict() for r in records], f, indent=2, ensure_ascii=False)
    logger.info(f"Dataset saved to: {filepath}")

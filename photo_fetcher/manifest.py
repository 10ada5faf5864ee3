"""Manifest loading and per-record validation."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union

from .errors import ManifestError

logger = logging.getLogger(__name__)

PRODUCT_NUMBER_FIELD = "ManufacturerProductNumber"
PHOTO_URL_FIELD = "PhotoUrl"
IMAGE_EXTENSION = ".jpg"


def sanitize_product_number(product_number: str) -> str:
    """Replace path separators so the product number is usable as a file name."""
    return product_number.replace("/", "-")


@dataclass(frozen=True)
class ValidRecord:
    """A manifest record carrying both required fields."""

    index: int
    product_number: str  # already sanitized
    photo_url: str

    @property
    def image_name(self) -> str:
        # Always .jpg, whatever the server actually returns
        return f"{self.product_number}{IMAGE_EXTENSION}"


@dataclass(frozen=True)
class InvalidRecord:
    """A manifest record that is skipped (not a failure)."""

    index: int
    reason: str


FilterResult = Union[ValidRecord, InvalidRecord]


def _field(raw: dict, name: str) -> Optional[str]:
    value = raw.get(name)
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


def filter_record(raw: Any, index: int) -> FilterResult:
    """
    Classify a raw manifest entry.

    Args:
        raw: Entry as decoded from the manifest
        index: Position of the entry in the manifest

    Returns:
        ValidRecord with the sanitized product number, or InvalidRecord
    """
    if not isinstance(raw, dict):
        return InvalidRecord(index=index, reason="record is not an object")

    product_number = _field(raw, PRODUCT_NUMBER_FIELD)
    photo_url = _field(raw, PHOTO_URL_FIELD)

    if product_number is None:
        return InvalidRecord(index=index, reason=f"missing {PRODUCT_NUMBER_FIELD}")
    if photo_url is None:
        return InvalidRecord(index=index, reason=f"missing {PHOTO_URL_FIELD}")

    return ValidRecord(
        index=index,
        product_number=sanitize_product_number(product_number),
        photo_url=photo_url,
    )


def load_manifest(manifest_path: Union[str, Path]) -> List[Any]:
    """
    Load the manifest JSON array.

    Args:
        manifest_path: Path to the manifest file

    Returns:
        List of raw records in manifest order

    Raises:
        ManifestError: If the file cannot be read or is not a JSON array
    """
    path = Path(manifest_path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except OSError as e:
        raise ManifestError(f"Cannot read manifest {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"Manifest {path} is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ManifestError(
            f"Manifest {path} must contain a JSON array, got {type(data).__name__}"
        )

    logger.info(f"Loaded {len(data)} records from {path}")
    return data

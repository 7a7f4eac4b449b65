import logging
from typing import Optional, Sequence, Tuple
from models.inventory_models import Part
from models.errors import DuplicatePartNoError, ValidationError

logger = logging.getLogger(__name__)


def has_duplicate_part_no(
    product_parts: Sequence[Part],
    candidate_part_no: str,
    exclude_id: Optional[str] = None
) -> bool:
    """
    Check whether candidate_part_no is already used in the product

    Comparison is case-insensitive. The part with exclude_id (the one being
    edited) is skipped so an unchanged part number is not its own duplicate.
    """
    candidate = candidate_part_no.lower()
    return any(
        part.part_no.lower() == candidate and part.id != exclude_id
        for part in product_parts
    )


def parse_quantity(value) -> int:
    """Whole number from an int, an integral float or a digit string; blank is 0"""
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise ValidationError(f"Invalid quantity: '{value}'")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"Quantity must be a whole number: '{value}'")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid quantity: '{value}'")


def clean_part_fields(name, part_no, vendor, quantity) -> Tuple[str, str, str, int]:
    """
    Validate user-entered part fields

    Business Rules:
    - Name, part number and vendor are required (after trimming)
    - Quantity must be a whole number and cannot be negative

    Returns the trimmed values with quantity coerced to int.
    """
    name = (name or "").strip()
    part_no = (part_no or "").strip()
    vendor = (vendor or "").strip()

    if not name or not part_no or not vendor:
        raise ValidationError("Please fill all required fields")

    quantity = parse_quantity(quantity)

    if quantity < 0:
        raise ValidationError("Quantity cannot be negative")

    return name, part_no, vendor, quantity


def ensure_unique_part_no(
    product_parts: Sequence[Part],
    part_no: str,
    exclude_id: Optional[str] = None
) -> None:
    """Raise DuplicatePartNoError when part_no is taken in the product"""
    if has_duplicate_part_no(product_parts, part_no, exclude_id):
        logger.warning(f"VALIDATE: Duplicate part number rejected - {part_no}")
        raise DuplicatePartNoError(part_no)

"""
Input validation utilities for the archive CLI.

Provides validation for record ids, list limits and snapshot paths before
they reach the archive.
"""

from uuid import UUID


class ValidationError(ValueError):
    """Raised when input validation fails."""
    pass


def validate_record_id(record_id: str, field_name: str = "record_id") -> UUID:
    """
    Validate and parse a record id.

    Args:
        record_id: The record id as typed by the user
        field_name: Name of the field (for error messages)

    Returns:
        The parsed UUID

    Raises:
        ValidationError: If the value is empty or not a UUID

    Examples:
        >>> validate_record_id("5b0e4d6a-2a55-4c7c-9f0f-0d6e3a1c9b11")
        UUID('5b0e4d6a-2a55-4c7c-9f0f-0d6e3a1c9b11')
        >>> validate_record_id("not-a-uuid")  # doctest: +SKIP
        ValidationError: record_id must be a UUID
    """
    if not record_id or not isinstance(record_id, str):
        raise ValidationError(f"{field_name} must be a non-empty string")

    record_id = record_id.strip()

    if not record_id:
        raise ValidationError(f"{field_name} cannot be empty or whitespace-only")

    try:
        return UUID(record_id)
    except ValueError:
        raise ValidationError(f"{field_name} must be a UUID, got '{record_id}'") from None


def validate_limit(limit: int, field_name: str = "limit", max_limit: int = 10000) -> int:
    """
    Validate a limit parameter for listings.

    Args:
        limit: The limit value to validate
        field_name: Name of the field (for error messages)
        max_limit: Maximum allowed limit value

    Returns:
        The validated limit value

    Raises:
        ValidationError: If validation fails

    Examples:
        >>> validate_limit(100)
        100
        >>> validate_limit(0)  # doctest: +SKIP
        ValidationError: limit must be a positive integer
    """
    if not isinstance(limit, int) or isinstance(limit, bool):
        raise ValidationError(f"{field_name} must be an integer, got {type(limit).__name__}")

    if limit <= 0:
        raise ValidationError(f"{field_name} must be a positive integer, got {limit}")

    if limit > max_limit:
        raise ValidationError(f"{field_name} exceeds maximum of {max_limit}")

    return limit


def validate_file_path(file_path: str, field_name: str = "file_path") -> str:
    """
    Validate a snapshot or config file path.

    Args:
        file_path: The file path to validate
        field_name: Name of the field (for error messages)

    Returns:
        The validated file path (stripped of whitespace)

    Raises:
        ValidationError: If validation fails

    Examples:
        >>> validate_file_path("/data/archive.json")
        '/data/archive.json'
        >>> validate_file_path("../../../etc/passwd")  # doctest: +SKIP
        ValidationError: file_path contains path traversal characters
    """
    if not file_path or not isinstance(file_path, str):
        raise ValidationError(f"{field_name} must be a non-empty string")

    file_path = file_path.strip()

    if not file_path:
        raise ValidationError(f"{field_name} cannot be empty or whitespace-only")

    if ".." in file_path:
        raise ValidationError(f"{field_name} contains path traversal characters (..)")

    if "\x00" in file_path:
        raise ValidationError(f"{field_name} contains null bytes")

    if len(file_path) > 4096:  # Linux PATH_MAX
        raise ValidationError(f"{field_name} exceeds maximum length of 4096 characters")

    return file_path

"""Parsing boundary between untyped data store rows and domain models."""

from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ValidationError
from structlog import get_logger

from frontdesk.errors import FrontDeskValidationError, RecordParseError

logger = get_logger(__name__)

RowModelT = TypeVar("RowModelT", bound="RowModel")
PayloadT = TypeVar("PayloadT", bound=BaseModel)


def _format_errors(error: ValidationError) -> dict[str, str]:
    """Flatten pydantic errors into a field -> message mapping."""
    errors: dict[str, str] = {}
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "__root__"
        message = str(item["msg"])
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors


class RowModel(BaseModel):
    """Base for models read from the data store.

    Unknown columns are ignored; missing or malformed required columns
    reject the row with RecordParseError.
    """

    class Config:
        extra = "ignore"
        populate_by_name = True

    @classmethod
    def from_row(cls: type[RowModelT], row: dict[str, Any]) -> RowModelT:
        """Map a raw data store row to a validated model.

        Args:
            row: Row as returned by the data store

        Returns:
            Parsed model instance

        Raises:
            RecordParseError: If the row is missing required fields or malformed
        """
        if not isinstance(row, dict):
            raise RecordParseError(f"Expected a {cls.__name__} row, got {type(row).__name__}")
        try:
            return cls.model_validate(row)
        except ValidationError as e:
            raise RecordParseError(
                f"Malformed {cls.__name__} row {row.get('id')!r}: {_format_errors(e)}"
            ) from e

    @classmethod
    def from_rows(cls: type[RowModelT], rows: list[dict[str, Any]]) -> list[RowModelT]:
        """Parse a list of rows, skipping (and logging) rows that cannot be parsed."""
        parsed = []
        for row in rows:
            try:
                parsed.append(cls.from_row(row))
            except RecordParseError as e:
                logger.warning(
                    "Skipping malformed row",
                    model=cls.__name__,
                    error=str(e),
                )
        return parsed


def parse_payload(model: type[PayloadT], data: Any) -> PayloadT:
    """Validate caller input into a payload model.

    Args:
        model: Payload model class
        data: Either an instance of the model or a mapping of field values

    Returns:
        Validated payload

    Raises:
        FrontDeskValidationError: If the input fails validation
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise FrontDeskValidationError(_format_errors(e)) from e


def coerce_price(value: Any) -> Any:
    """Treat missing or non-numeric prices as zero."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Trim optional text, storing blanks as null."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None

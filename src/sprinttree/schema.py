"""Attribute schema: which columns are numeric and which are categorical."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from sprinttree.exceptions import InvalidSchemaError

type AttributeKind = Literal["numeric", "categorical"]

CLASS_COLUMN: int = 0


class AttributeSchema(BaseModel):
    """Declares the class count and the kind of every attribute column.

    Column 0 always holds the integer class label and must not appear in
    `attributes`. Every other column of a dataset must be declared exactly once.

    Attributes:
        n_classes (int): Number of classes; labels lie in `[0, n_classes)`.
        attributes (Mapping[int, AttributeKind]): Read-only column index to kind
            mapping for every non-class column.

    Examples:
        >>> schema = AttributeSchema(n_classes=2, attributes={1: "numeric", 2: "categorical"})
        >>> schema.columns
        [1, 2]
        >>> schema.is_numeric(2)
        False
    """

    model_config = ConfigDict(frozen=True)

    n_classes: int = Field(ge=1, description="Number of classes; labels lie in [0, n_classes).")
    attributes: Mapping[int, AttributeKind] = Field(
        description="Mapping of column index (excluding the class column 0) to 'numeric' or 'categorical'.",
    )

    @field_validator("attributes", mode="after")
    @classmethod
    def _freeze_attributes(cls, value: Mapping[int, AttributeKind]) -> Mapping[int, AttributeKind]:
        """Wrap the validated mapping in a read-only view owned by the schema."""
        return MappingProxyType(dict(value))

    @field_serializer("attributes")
    def _serialize_attributes(self, value: Mapping[int, AttributeKind]) -> dict[int, AttributeKind]:
        return dict(value)

    @classmethod
    def from_kinds(cls, kinds: Sequence[AttributeKind], *, n_classes: int) -> AttributeSchema:
        """Build a schema whose attribute columns are numbered 1, 2, ... in order.

        Args:
            kinds (Sequence[AttributeKind]): Kind of each attribute column,
                starting with column 1.
            n_classes (int): Number of classes.

        Returns:
            AttributeSchema: The schema.
        """
        return cls(n_classes=n_classes, attributes={index: kind for index, kind in enumerate(kinds, start=1)})

    @property
    def columns(self) -> list[int]:
        """Attribute column indices in ascending order."""
        return sorted(self.attributes)

    @property
    def width(self) -> int:
        """Row width implied by the schema, class column included."""
        return len(self.attributes) + 1

    def kind(self, column: int) -> AttributeKind:
        """Return the declared kind of `column`.

        Args:
            column (int): Attribute column index.

        Returns:
            AttributeKind: `"numeric"` or `"categorical"`.

        Raises:
            InvalidSchemaError: If the column is not declared.
        """
        try:
            return self.attributes[column]
        except KeyError:
            raise InvalidSchemaError(f"Column {column} has no schema entry", columns=[column]) from None

    def is_numeric(self, column: int) -> bool:
        """Return whether `column` is declared numeric."""
        return self.kind(column) == "numeric"

    def check_width(self, n_columns: int) -> None:
        """Verify that the schema describes rows of exactly `n_columns` fields.

        Args:
            n_columns (int): Row width, class column included.

        Raises:
            InvalidSchemaError: If the class column is declared as an attribute,
                no attribute column is declared, a dataset column has no entry,
                or an entry names a column the rows do not have.
        """
        if CLASS_COLUMN in self.attributes:
            raise InvalidSchemaError("Class column 0 cannot be used as a split column", columns=[CLASS_COLUMN])
        if not self.attributes:
            raise InvalidSchemaError("Schema declares no attribute columns")

        declared = set(self.attributes)
        expected = set(range(1, n_columns))
        missing = expected - declared
        if missing:
            raise InvalidSchemaError(f"Schema omits columns {sorted(missing)}", columns=list(missing))
        unknown = declared - expected
        if unknown:
            raise InvalidSchemaError(
                f"Schema references columns {sorted(unknown)} outside a row of width {n_columns}",
                columns=list(unknown),
            )

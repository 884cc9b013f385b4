"""Tests for AttributeSchema construction, lookup and width checks."""

from __future__ import annotations

import pytest
from pydantic import ValidationError
from pytest_check import check

from sprinttree.exceptions import InvalidSchemaError
from sprinttree.schema import CLASS_COLUMN, AttributeSchema


class TestAttributeSchemaConstruction:
    """Tests for building schemas."""

    def test_from_kinds_numbers_columns_from_one(self) -> None:
        """Verify from_kinds assigns column 1 to the first kind."""
        # Act
        schema = AttributeSchema.from_kinds(["categorical", "numeric", "numeric"], n_classes=3)

        # Assert
        with check:
            assert schema.attributes == {1: "categorical", 2: "numeric", 3: "numeric"}
        with check:
            assert schema.n_classes == 3
        with check:
            assert schema.width == 4

    def test_columns_are_sorted(self) -> None:
        """Verify columns lists attribute indices in ascending order regardless of insertion order."""
        schema = AttributeSchema(n_classes=2, attributes={3: "numeric", 1: "categorical", 2: "numeric"})

        with check:
            assert schema.columns == [1, 2, 3]

    @pytest.mark.parametrize(
        "payload",
        [
            {"n_classes": 0, "attributes": {1: "numeric"}},
            {"n_classes": 2, "attributes": {1: "ordinal"}},
        ],
        ids=["zero-classes", "unknown-kind"],
    )
    def test_invalid_fields_raise_validation_error(self, payload: dict[str, object]) -> None:
        """Verify pydantic rejects a non-positive class count and unknown kinds.

        Args:
            payload (dict[str, object]): Field values to validate.
        """
        with pytest.raises(ValidationError):
            AttributeSchema.model_validate(payload)

    def test_schema_is_frozen(self) -> None:
        """Verify a schema cannot be mutated after construction."""
        schema = AttributeSchema(n_classes=2, attributes={1: "numeric"})

        with pytest.raises(ValidationError):
            schema.n_classes = 5  # type: ignore[misc]

    def test_attributes_are_read_only(self) -> None:
        """Verify the attribute mapping rejects writes and is detached from the caller's dict."""
        # Arrange
        kinds = {1: "numeric"}
        schema = AttributeSchema(n_classes=2, attributes=kinds)

        # Act
        kinds[1] = "categorical"

        # Assert
        with pytest.raises(TypeError):
            schema.attributes[1] = "categorical"  # type: ignore[index]
        with check:
            assert schema.kind(1) == "numeric"
        with check:
            assert schema.model_dump() == {"n_classes": 2, "attributes": {1: "numeric"}}


class TestAttributeSchemaLookup:
    """Tests for kind lookups."""

    def test_kind_and_is_numeric(self) -> None:
        """Verify kind and is_numeric reflect the declared kinds."""
        schema = AttributeSchema(n_classes=2, attributes={1: "numeric", 2: "categorical"})

        with check:
            assert schema.kind(1) == "numeric"
        with check:
            assert schema.kind(2) == "categorical"
        with check:
            assert schema.is_numeric(1)
        with check:
            assert not schema.is_numeric(2)

    def test_kind_of_undeclared_column_raises(self) -> None:
        """Verify looking up a column without an entry raises InvalidSchemaError."""
        schema = AttributeSchema(n_classes=2, attributes={1: "numeric"})

        with pytest.raises(InvalidSchemaError) as exc_info:
            schema.kind(7)

        with check:
            assert exc_info.value.columns == [7]


class TestCheckWidth:
    """Tests for check_width: the schema must cover exactly the non-class columns."""

    def test_matching_width_passes(self) -> None:
        """Verify a schema covering columns 1..k accepts rows of width k + 1."""
        schema = AttributeSchema(n_classes=2, attributes={1: "numeric", 2: "categorical"})

        schema.check_width(3)

    def test_class_column_declared_raises(self) -> None:
        """Verify declaring column 0 as an attribute is rejected."""
        schema = AttributeSchema(n_classes=2, attributes={CLASS_COLUMN: "numeric", 1: "numeric"})

        with pytest.raises(InvalidSchemaError, match="Class column 0") as exc_info:
            schema.check_width(2)

        with check:
            assert exc_info.value.columns == [CLASS_COLUMN]

    def test_no_attributes_raises(self) -> None:
        """Verify a schema without attribute columns is rejected."""
        schema = AttributeSchema(n_classes=2, attributes={})

        with pytest.raises(InvalidSchemaError, match="no attribute columns"):
            schema.check_width(1)

    def test_missing_column_raises(self) -> None:
        """Verify a row column without a schema entry is rejected."""
        schema = AttributeSchema(n_classes=2, attributes={1: "numeric"})

        with pytest.raises(InvalidSchemaError, match="omits") as exc_info:
            schema.check_width(4)

        with check:
            assert exc_info.value.columns == [2, 3]

    def test_unknown_column_raises(self) -> None:
        """Verify an entry for a column beyond the row width is rejected."""
        schema = AttributeSchema(n_classes=2, attributes={1: "numeric", 2: "numeric", 5: "categorical"})

        with pytest.raises(InvalidSchemaError, match="outside a row") as exc_info:
            schema.check_width(3)

        with check:
            assert exc_info.value.columns == [5]

"""Tests for Dataset: typed field resolution, access and class statistics."""

from __future__ import annotations

import numpy as np
import polars as pl
import pytest
from pytest_check import check

from sprinttree.dataset import Dataset
from sprinttree.exceptions import InvalidSchemaError, UnparsableFieldError
from sprinttree.schema import AttributeSchema

MIXED_SCHEMA = AttributeSchema(n_classes=3, attributes={1: "numeric", 2: "categorical"})


class TestFromRows:
    """Tests for resolving raw rows into a typed dataset."""

    def test_resolves_text_and_python_scalars(self) -> None:
        """Verify labels become ints, numeric fields floats and categorical fields strings."""
        # Arrange
        rows = [["0", " 1.5 ", "M"], [2, 7, "F"], [1.0, "-0.25", 3]]

        # Act
        dataset = Dataset.from_rows(rows, MIXED_SCHEMA)

        # Assert
        with check:
            assert len(dataset) == 3
        with check:
            assert dataset.labels.tolist() == [0, 2, 1]
        with check:
            assert dataset.column(1).dtype == np.float64
        with check:
            assert dataset.column(1).tolist() == [1.5, 7.0, -0.25]
        with check:
            assert dataset.column(2).tolist() == ["M", "F", "3"]

    def test_empty_rows_produce_empty_dataset(self) -> None:
        """Verify an empty row list is accepted and yields zero rows."""
        dataset = Dataset.from_rows([], MIXED_SCHEMA)

        with check:
            assert len(dataset) == 0
        with check:
            assert dataset.width == 3

    @pytest.mark.parametrize(
        ("raw_value", "reason"),
        [
            ("abc", "not a number"),
            ("", "not a number"),
            (None, "missing value"),
            ("inf", "not a finite number"),
            (float("nan"), "not a finite number"),
        ],
        ids=["text", "blank", "none", "infinite", "nan"],
    )
    def test_unparsable_numeric_field_raises(self, raw_value: object, reason: str) -> None:
        """Verify a numeric field that cannot become a finite float is reported, not zeroed.

        Args:
            raw_value (object): The offending field value.
            reason (str): Expected failure reason.
        """
        # Arrange
        rows = [[0, 1.0, "A"], [1, raw_value, "B"]]

        # Act
        with pytest.raises(UnparsableFieldError) as exc_info:
            Dataset.from_rows(rows, MIXED_SCHEMA)

        # Assert
        with check:
            assert exc_info.value.row == 1
        with check:
            assert exc_info.value.column == 1
        with check:
            assert exc_info.value.reason == reason

    @pytest.mark.parametrize(
        "raw_label",
        ["x", 3, -1, True, 1.5, None],
        ids=["text", "too-large", "negative", "bool", "fractional", "none"],
    )
    def test_invalid_label_raises(self, raw_label: object) -> None:
        """Verify labels must be integers in [0, n_classes).

        Args:
            raw_label (object): The offending label value.
        """
        with pytest.raises(UnparsableFieldError) as exc_info:
            Dataset.from_rows([[raw_label, 1.0, "A"]], MIXED_SCHEMA)

        with check:
            assert exc_info.value.column == 0
        with check:
            assert exc_info.value.row == 0

    def test_missing_categorical_field_raises(self) -> None:
        """Verify a None categorical field is rejected."""
        with pytest.raises(UnparsableFieldError, match="missing value"):
            Dataset.from_rows([[0, 1.0, None]], MIXED_SCHEMA)

    def test_row_of_wrong_width_raises(self) -> None:
        """Verify a row with more or fewer fields than the schema describes is rejected."""
        with pytest.raises(InvalidSchemaError, match="Row 1 has 2 fields"):
            Dataset.from_rows([[0, 1.0, "A"], [1, 2.0]], MIXED_SCHEMA)


class TestFromPolars:
    """Tests for resolving a Polars DataFrame by column position."""

    def test_string_frame_is_parsed(self) -> None:
        """Verify an all-text frame (as read from CSV) resolves per schema."""
        # Arrange
        df = pl.DataFrame({
            "column_1": ["2", "0"],
            "column_2": [" 0.455", "0.35"],
            "column_3": ["M", "I"],
        })

        # Act
        dataset = Dataset.from_polars(df, MIXED_SCHEMA)

        # Assert
        with check:
            assert dataset.labels.tolist() == [2, 0]
        with check:
            assert dataset.column(1).tolist() == [0.455, 0.35]
        with check:
            assert dataset.column(2).tolist() == ["M", "I"]

    def test_typed_frame_is_accepted(self) -> None:
        """Verify a frame with native numeric dtypes resolves without parsing."""
        df = pl.DataFrame({"label": [1, 0], "length": [0.5, 0.25], "sex": ["F", "M"]})

        dataset = Dataset.from_polars(df, MIXED_SCHEMA)

        with check:
            assert dataset.row(0) == (1, 0.5, "F")

    @pytest.mark.parametrize(
        ("values", "bad_row", "reason"),
        [
            (["1.0", None], 1, "missing value"),
            (["1.0", "n/a"], 1, "not a number"),
            ([float("inf"), 1.0], 0, "not a finite number"),
        ],
        ids=["null", "text", "infinite"],
    )
    def test_bad_numeric_column_raises(self, values: list[object], bad_row: int, reason: str) -> None:
        """Verify the first bad numeric value is reported with its position.

        Args:
            values (list[object]): Values of the numeric column.
            bad_row (int): Row expected in the error.
            reason (str): Expected failure reason.
        """
        # Arrange
        df = pl.DataFrame({"label": [0, 1], "length": values, "sex": ["F", "M"]}, strict=False)

        # Act
        with pytest.raises(UnparsableFieldError) as exc_info:
            Dataset.from_polars(df, MIXED_SCHEMA)

        # Assert
        with check:
            assert exc_info.value.row == bad_row
        with check:
            assert exc_info.value.column == 1
        with check:
            assert exc_info.value.reason == reason

    def test_null_categorical_raises(self) -> None:
        """Verify nulls in a categorical column are rejected."""
        df = pl.DataFrame({"label": [0, 1], "length": [1.0, 2.0], "sex": ["F", None]})

        with pytest.raises(UnparsableFieldError, match="missing value"):
            Dataset.from_polars(df, MIXED_SCHEMA)

    def test_frame_width_mismatch_raises(self) -> None:
        """Verify a frame with an extra column is rejected."""
        df = pl.DataFrame({"label": [0], "length": [1.0], "sex": ["F"], "extra": [1]})

        with pytest.raises(InvalidSchemaError):
            Dataset.from_polars(df, MIXED_SCHEMA)


class TestAccess:
    """Tests for row access, iteration and take."""

    def test_rows_round_trip_through_iteration(self) -> None:
        """Verify iteration yields rows as tuples of Python scalars in order."""
        rows = [(0, 1.5, "A"), (1, 2.0, "B")]
        dataset = Dataset.from_rows(rows, MIXED_SCHEMA)

        with check:
            assert list(dataset) == rows
        with check:
            assert dataset.column(0) is dataset.labels

    def test_take_selects_in_order_and_copies(self) -> None:
        """Verify take returns rows in the requested order backed by fresh storage."""
        # Arrange
        dataset = Dataset.from_rows([(0, 1.0, "A"), (1, 2.0, "B"), (2, 3.0, "C")], MIXED_SCHEMA)

        # Act
        subset = dataset.take([2, 0])

        # Assert
        with check:
            assert list(subset) == [(2, 3.0, "C"), (0, 1.0, "A")]
        with check:
            assert not np.shares_memory(subset.labels, dataset.labels)
        with check:
            assert not np.shares_memory(subset.column(1), dataset.column(1))

    def test_take_empty_selection(self) -> None:
        """Verify an empty selection yields an empty dataset with the same schema."""
        dataset = Dataset.from_rows([(0, 1.0, "A")], MIXED_SCHEMA)

        subset = dataset.take(np.array([], dtype=np.intp))

        with check:
            assert len(subset) == 0
        with check:
            assert subset.schema == dataset.schema

    def test_mismatched_column_lengths_raise(self) -> None:
        """Verify direct construction rejects columns shorter than the labels."""
        with pytest.raises(ValueError, match="Column 1 has 1 values, expected 2"):
            Dataset(
                schema=MIXED_SCHEMA,
                labels=np.array([0, 1]),
                columns={1: np.array([1.0]), 2: np.array(["A", "B"], dtype=object)},
            )


class TestClassStatistics:
    """Tests for class_counts and majority_class."""

    def test_class_counts_include_absent_classes(self) -> None:
        """Verify counts cover every declared class, including ones with no rows."""
        dataset = Dataset.from_rows([(2, 1.0, "A"), (2, 2.0, "B"), (0, 3.0, "C")], MIXED_SCHEMA)

        with check:
            assert dataset.class_counts().tolist() == [1, 0, 2]

    @pytest.mark.parametrize(
        ("labels", "expected"),
        [
            ([2, 2, 0], 2),
            ([1, 2, 2, 1], 1),
            ([2, 0], 0),
        ],
        ids=["clear-majority", "tie-goes-lowest", "tie-of-two-singletons"],
    )
    def test_majority_class_ties_go_to_lowest_index(self, labels: list[int], expected: int) -> None:
        """Verify the most frequent class wins and ties go to the lowest class index.

        Args:
            labels (list[int]): Row labels.
            expected (int): Expected majority class.
        """
        dataset = Dataset.from_rows([(label, float(i), "A") for i, label in enumerate(labels)], MIXED_SCHEMA)

        with check:
            assert dataset.majority_class() == expected


class TestCheckSchema:
    """Tests for check_schema: the build/classify schema must describe the dataset."""

    def test_same_schema_passes(self) -> None:
        """Verify the schema the dataset was loaded with is accepted."""
        dataset = Dataset.from_rows([(0, 1.0, "A")], MIXED_SCHEMA)

        dataset.check_schema(MIXED_SCHEMA)

    def test_kind_mismatch_raises(self) -> None:
        """Verify a schema that flips a column's kind is rejected."""
        dataset = Dataset.from_rows([(0, 1.0, "A")], MIXED_SCHEMA)
        flipped = AttributeSchema(n_classes=3, attributes={1: "categorical", 2: "categorical"})

        with pytest.raises(InvalidSchemaError) as exc_info:
            dataset.check_schema(flipped)

        with check:
            assert exc_info.value.columns == [1]

    def test_missing_column_raises(self) -> None:
        """Verify a schema that omits a dataset column is rejected."""
        dataset = Dataset.from_rows([(0, 1.0, "A")], MIXED_SCHEMA)

        with pytest.raises(InvalidSchemaError, match="omits"):
            dataset.check_schema(AttributeSchema(n_classes=3, attributes={1: "numeric"}))

    def test_too_few_classes_raises(self) -> None:
        """Verify a schema declaring fewer classes than the labels need is rejected."""
        dataset = Dataset.from_rows([(2, 1.0, "A")], MIXED_SCHEMA)
        narrow = AttributeSchema(n_classes=2, attributes={1: "numeric", 2: "categorical"})

        with pytest.raises(InvalidSchemaError, match="declares 2 classes"):
            dataset.check_schema(narrow)

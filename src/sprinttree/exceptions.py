"""Custom exceptions for sprinttree.

Every error raised by the package subclasses `SprintTreeError`, which is itself
a `ValueError`, so callers can catch all input problems in one place:

- EmptyDatasetError: Raised when a tree is built or evaluated on zero rows.
- InvalidSchemaError: Raised when an attribute schema does not describe the
  dataset it is used with.
- UnparsableFieldError: Raised when a numeric field or class label cannot be
  resolved to a number while loading rows.

All errors are terminal for the call that raised them: no partial tree or
partial confusion matrix is ever returned.
"""

from __future__ import annotations


class SprintTreeError(ValueError):
    """Base exception for all sprinttree input errors.

    Catching this exception will catch every validation failure raised while
    loading, building, or classifying.
    """


class EmptyDatasetError(SprintTreeError):
    """Raised when an operation that needs rows receives an empty dataset.

    Attributes:
        operation (str): Name of the operation that was called, e.g.
            `"build_tree"` or `"classify"`.

    Examples:
        >>> err = EmptyDatasetError("build_tree")
        >>> err.operation
        'build_tree'
    """

    operation: str

    def __init__(self, operation: str) -> None:
        """Initialize EmptyDatasetError.

        Args:
            operation (str): Name of the operation that received no rows.
        """
        super().__init__(f"{operation} requires at least one row, got an empty dataset")
        self.operation = operation


class InvalidSchemaError(SprintTreeError):
    """Raised when an attribute schema is inconsistent with a dataset.

    Attributes:
        columns (list[int]): Column indices the problem refers to. May be
            empty when the problem is not tied to specific columns.

    Examples:
        >>> err = InvalidSchemaError("class column used as attribute", columns=[0])
        >>> err.columns
        [0]
    """

    columns: list[int]

    def __init__(self, message: str, *, columns: list[int] | None = None) -> None:
        """Initialize InvalidSchemaError.

        Args:
            message (str): Description of the schema problem.
            columns (list[int] | None): Offending column indices, if any.
        """
        super().__init__(message)
        self.columns = sorted(columns) if columns else []

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including the message and offending columns.
        """
        return f"{self.__class__.__name__}(message={str(self)!r}, columns={self.columns!r})"


class UnparsableFieldError(SprintTreeError):
    """Raised when a field cannot be resolved to the type its schema declares.

    Attributes:
        row (int): Zero-based row index of the offending field.
        column (int): Column index of the offending field.
        value (object): The raw value that failed to resolve.
        reason (str): Short explanation of why resolution failed.

    Examples:
        >>> err = UnparsableFieldError(row=3, column=2, value="abc", reason="not a number")
        >>> (err.row, err.column, err.value)
        (3, 2, 'abc')
    """

    row: int
    column: int
    value: object
    reason: str

    def __init__(self, *, row: int, column: int, value: object, reason: str) -> None:
        """Initialize UnparsableFieldError.

        Args:
            row (int): Zero-based row index of the offending field.
            column (int): Column index of the offending field.
            value (object): The raw value that failed to resolve.
            reason (str): Short explanation of why resolution failed.
        """
        super().__init__(f"Cannot resolve field at row {row}, column {column} ({value!r}): {reason}")
        self.row = row
        self.column = column
        self.value = value
        self.reason = reason

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including position, raw value and reason.
        """
        return (
            f"{self.__class__.__name__}(row={self.row!r}, column={self.column!r}, "
            f"value={self.value!r}, reason={self.reason!r})"
        )

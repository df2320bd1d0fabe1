"""Custom exceptions for mapper_cover.

This module provides specialized exceptions that give helpful, actionable error
messages when a cover cannot be built or queried.

Usage Guidelines
----------------
Choose the appropriate exception type based on when and why the error occurs:

- **ValidationError**: Input arrays or parameters don't meet requirements.
  Use when user-provided values are invalid, have wrong shapes, or violate
  constraints.

- **DimensionMismatchError**: A point set and a set of bounds (or two covers,
  or two parallel arrays) disagree on dimensionality. Bounds matrices are
  ``(n_bins, 2 * n_dims)`` wide, so the point dimension must equal half the
  bounds width.

- **InvalidGridParameterError**: Grid parameters would produce degenerate or
  non-finite bin geometry (overlap outside ``[0, 1)``, non-positive interval
  counts, lengths or step sizes, grid coordinates out of range).

- **MalformedCandidateTableError**: A candidate-neighbor table has the wrong
  structure.

- **DataError**: Data quality issues like NaN, Inf, or inverted bounds.

All exceptions inherit from **MapperCoverError**, allowing users to catch
any package-specific error with a single except clause.

Examples
--------
>>> from mapper_cover.exceptions import DimensionMismatchError, MapperCoverError
>>>
>>> try:
...     raise DimensionMismatchError(
...         "dimension of points != dimension of bounds matrix / 2",
...         expected="points with 2 columns",
...         got="points with 3 columns",
...     )
... except MapperCoverError as e:
...     print(e)
...
"""


class MapperCoverError(Exception):
    """Base exception for all mapper_cover errors.

    Examples
    --------
    >>> try:
    ...     # Any mapper_cover operation
    ...     pass
    ... except MapperCoverError:
    ...     # Handle any package error
    ...     pass
    """

    pass


class ValidationError(MapperCoverError):
    """Raised when input validation fails.

    This exception indicates that user-provided data doesn't meet the
    required format, shape, or constraints. The error message should
    explain what was expected, what was received, and how to fix it.

    Parameters
    ----------
    message : str
        Description of what went wrong
    expected : str, optional
        What was expected (for structured error messages)
    got : str, optional
        What was actually received
    hint : str, optional
        Actionable suggestion for fixing the error
    example : str, optional
        Code snippet showing correct usage

    Examples
    --------
    >>> raise ValidationError(
    ...     "Bounds matrix has an odd number of columns",
    ...     expected="shape (n_bins, 2 * n_dims)",
    ...     got="shape (4, 3)",
    ...     hint="Stack the minimums first, then the maximums",
    ... )
    """

    def __init__(
        self,
        message: str,
        expected: str | None = None,
        got: str | None = None,
        hint: str | None = None,
        example: str | None = None,
    ):
        """Initialize ValidationError with structured message components."""
        parts = [message]

        if expected is not None:
            parts.append(f"\nExpected: {expected}")

        if got is not None:
            parts.append(f"Got: {got}")

        if hint is not None:
            parts.append(f"\nHint: {hint}")

        if example is not None:
            parts.append(f"\nExample:\n{example}")

        super().__init__("\n".join(parts))


class DimensionMismatchError(ValidationError):
    """Raised when paired inputs disagree on dimensionality.

    The most common case is a point array whose number of columns differs
    from the number of columns of a bounds matrix divided by two.

    Examples
    --------
    >>> raise DimensionMismatchError(
    ...     "dimension of points != dimension of bounds matrix / 2",
    ...     expected="points.shape[1] == 1",
    ...     got="points.shape[1] == 2",
    ... )
    """


class InvalidGridParameterError(ValidationError):
    """Raised when grid parameters describe degenerate bin geometry.

    An overlap fraction of 1 divides by zero when deriving the interval
    length, and zero or negative lengths produce empty or inverted bins.
    These are rejected before any bounds are computed.

    Examples
    --------
    >>> raise InvalidGridParameterError(
    ...     "Invalid overlap fraction",
    ...     expected="0 <= overlap < 1",
    ...     got="overlap = 1.0",
    ... )
    """


class MalformedCandidateTableError(ValidationError):
    """Raised when a candidate-neighbor table has the wrong structure.

    Tables must be two dimensional with the bin's own id in the first
    column. The own-id check is only performed by
    :func:`mapper_cover.adjacency.check_candidate_table`.
    """


class DataError(MapperCoverError):
    """Raised when input data has problems (NaN, Inf, inverted bounds).

    This exception indicates issues with the actual data values rather
    than structural validation issues.

    Parameters
    ----------
    message : str
        Description of the data problem
    data_name : str, optional
        Name of the problematic data variable
    hint : str, optional
        Actionable suggestion for fixing the data issue

    Examples
    --------
    >>> raise DataError(
    ...     "Found NaN values in bounds",
    ...     data_name="bounds",
    ...     hint="Check the grid parameters used to derive the bounds",
    ... )
    """

    def __init__(
        self, message: str, data_name: str | None = None, hint: str | None = None
    ) -> None:
        """Initialize DataError with optional data name and hint.

        Parameters
        ----------
        message : str
            Description of the data problem
        data_name : str, optional
            Name of the problematic data variable
        hint : str, optional
            Actionable suggestion for fixing the data issue
        """
        if data_name is not None:
            message = f"{message} (data: {data_name})"
        if hint is not None:
            message = f"{message}\n\nHint: {hint}"
        super().__init__(message)

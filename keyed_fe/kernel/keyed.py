# keyed_fe/kernel/keyed.py
"""
KEYED MATRICES: Linear Algebra Addressed by Key
===============================================

PURPOSE:
--------
A KeyedMatrix is a dense numpy matrix whose rows and columns are looked up by
opaque, hashable keys instead of integer positions:

    K[NodalDegreeOfFreedom(n1, X), NodalDegreeOfFreedom(n2, X)] = -3.0

The key -> position maps are built ONCE at construction, so every access is a
dict lookup plus an array index. The key lists themselves are immutable
tuples; copies share them and only duplicate the numeric storage.

The important operation for the solver is restrict(): it builds a new matrix
over any subset of the row keys and any subset of the column keys, in the
order given, copying values by key. Partitioning the global stiffness matrix
into K_FF / K_FC / K_CF / K_CC is four calls to restrict().

KeyedVector is the one-dimensional counterpart used for force and
displacement vectors.
"""

import numpy as np
from typing import Any, Callable, Dict, Hashable, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..errors import UnsupportedFreedomError


def _build_index(keys: Sequence[Hashable], axis: str) -> Dict[Hashable, int]:
    index = {key: i for i, key in enumerate(keys)}
    if len(index) != len(keys):
        seen = set()
        duplicates = [k for k in keys if k in seen or seen.add(k)]
        raise ValueError(f"{axis} keys must be unique, duplicated: {duplicates}")
    return index


class KeyedVector:
    """
    A vector whose entries are addressed by key.

    Parameters:
    -----------
    keys : Sequence[Hashable]
        One unique key per entry, in storage order
    initial_value : float
        Value assigned to every entry when no data is given
    data : array-like, optional
        Values in the same order as keys
    """

    def __init__(
        self,
        keys: Sequence[Hashable],
        initial_value: float = 0.0,
        data: Optional[Iterable[float]] = None,
    ):
        self._keys = tuple(keys)
        self._index = _build_index(self._keys, "Vector")
        if data is None:
            self._data = np.full(len(self._keys), initial_value, dtype=float)
        else:
            self._data = np.array(data, dtype=float)
            if self._data.shape != (len(self._keys),):
                raise ValueError(
                    f"Vector data shape {self._data.shape} doesn't match {len(self._keys)} keys"
                )

    @property
    def keys(self) -> Tuple[Hashable, ...]:
        return self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key) -> bool:
        return key in self._index

    def _position(self, key) -> int:
        try:
            return self._index[key]
        except KeyError:
            raise UnsupportedFreedomError(f"Key {key!r} is not in this vector") from None

    def __getitem__(self, key) -> float:
        return float(self._data[self._position(key)])

    def __setitem__(self, key, value: float) -> None:
        self._data[self._position(key)] = value

    def add(self, key, value: float) -> None:
        """Accumulate value into the entry for key."""
        self._data[self._position(key)] += value

    def items(self) -> Iterator[Tuple[Hashable, float]]:
        for key, value in zip(self._keys, self._data):
            yield key, float(value)

    def to_array(self) -> np.ndarray:
        return self._data.copy()

    def values_for(self, keys: Iterable[Hashable]) -> np.ndarray:
        """Gather the values for keys, in that order."""
        return self._data[[self._position(k) for k in keys]]

    def restrict(self, keys: Sequence[Hashable]) -> "KeyedVector":
        keys = tuple(keys)
        return KeyedVector(keys, data=self.values_for(keys))

    def copy(self) -> "KeyedVector":
        return KeyedVector(self._keys, data=self._data.copy())

    def _aligned(self, other: "KeyedVector") -> np.ndarray:
        if len(other) != len(self):
            raise ValueError("Vectors must be defined over the same keys")
        return other.values_for(self._keys)

    def __add__(self, other: "KeyedVector") -> "KeyedVector":
        return KeyedVector(self._keys, data=self._data + self._aligned(other))

    def __sub__(self, other: "KeyedVector") -> "KeyedVector":
        return KeyedVector(self._keys, data=self._data - self._aligned(other))

    def __repr__(self):
        body = ", ".join(f"{k!r}: {v:g}" for k, v in self.items())
        return f"{type(self).__name__}({{{body}}})"


class KeyedMatrix:
    """
    A (possibly rectangular) matrix addressed by row keys and column keys.

    Parameters:
    -----------
    row_keys : Sequence[Hashable]
        One unique key per row, in storage order
    column_keys : Sequence[Hashable], optional
        One unique key per column. Defaults to row_keys (square matrix).
    initial_value : float
        Value assigned to every element when no data is given
    data : array-like, optional
        Values, shape (len(row_keys), len(column_keys))

    Examples:
    ---------
    >>> K = KeyedMatrix(["a", "b"])
    >>> K["a", "b"] = 2.0
    >>> K["a", "b"]
    2.0
    >>> K.restrict(["b"], ["a", "b"]).to_array()
    array([[0., 0.]])
    """

    def __init__(
        self,
        row_keys: Sequence[Hashable],
        column_keys: Optional[Sequence[Hashable]] = None,
        initial_value: float = 0.0,
        data: Optional[Any] = None,
    ):
        self._row_keys = tuple(row_keys)
        self._column_keys = self._row_keys if column_keys is None else tuple(column_keys)
        self._row_index = _build_index(self._row_keys, "Row")
        self._column_index = (
            self._row_index if column_keys is None
            else _build_index(self._column_keys, "Column")
        )

        shape = (len(self._row_keys), len(self._column_keys))
        if data is None:
            self._data = np.full(shape, initial_value, dtype=float)
        else:
            self._data = np.array(data, dtype=float)
            if self._data.size == 0:
                self._data = self._data.reshape(shape)
            if self._data.shape != shape:
                raise ValueError(f"Matrix data shape {self._data.shape} doesn't match keys {shape}")

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------
    @property
    def row_keys(self) -> Tuple[Hashable, ...]:
        return self._row_keys

    @property
    def column_keys(self) -> Tuple[Hashable, ...]:
        return self._column_keys

    @property
    def shape(self) -> Tuple[int, int]:
        return self._data.shape

    def has_row(self, key) -> bool:
        return key in self._row_index

    def has_column(self, key) -> bool:
        return key in self._column_index

    def row_keys_where(self, predicate: Callable[[Hashable], bool]) -> List[Hashable]:
        """Row keys satisfying predicate, in row order."""
        return [k for k in self._row_keys if predicate(k)]

    def column_keys_where(self, predicate: Callable[[Hashable], bool]) -> List[Hashable]:
        """Column keys satisfying predicate, in column order."""
        return [k for k in self._column_keys if predicate(k)]

    def _row(self, key) -> int:
        try:
            return self._row_index[key]
        except KeyError:
            raise UnsupportedFreedomError(f"Row key {key!r} is not in this matrix") from None

    def _column(self, key) -> int:
        try:
            return self._column_index[key]
        except KeyError:
            raise UnsupportedFreedomError(f"Column key {key!r} is not in this matrix") from None

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------
    def __getitem__(self, keys: Tuple[Hashable, Hashable]) -> float:
        row_key, column_key = keys
        return float(self._data[self._row(row_key), self._column(column_key)])

    def __setitem__(self, keys: Tuple[Hashable, Hashable], value: float) -> None:
        row_key, column_key = keys
        self._data[self._row(row_key), self._column(column_key)] = value

    def at(self, row_key, column_key) -> float:
        return self[row_key, column_key]

    def add(self, row_key, column_key, value: float) -> None:
        """Accumulate value into the element at (row_key, column_key)."""
        self._data[self._row(row_key), self._column(column_key)] += value

    def items(self) -> Iterator[Tuple[Tuple[Hashable, Hashable], float]]:
        for i, row_key in enumerate(self._row_keys):
            for j, column_key in enumerate(self._column_keys):
                yield (row_key, column_key), float(self._data[i, j])

    def to_array(self) -> np.ndarray:
        return self._data.copy()

    # ------------------------------------------------------------------
    # Derived matrices
    # ------------------------------------------------------------------
    def _like(self, row_keys, column_keys, data) -> "KeyedMatrix":
        return type(self)(row_keys, column_keys, data=data)

    def restrict(self, row_keys: Sequence[Hashable], column_keys: Sequence[Hashable]) -> "KeyedMatrix":
        """
        New matrix over a subset of rows and columns, in the order given.

        Values are copied by key, so the subsets may be in any order
        relative to this matrix.
        """
        rows = [self._row(k) for k in row_keys]
        cols = [self._column(k) for k in column_keys]
        return self._like(row_keys, column_keys, self._data[np.ix_(rows, cols)])

    def copy(self) -> "KeyedMatrix":
        """Deep copy of the values, shallow copy of the (immutable) keys."""
        return self._like(self._row_keys, self._column_keys, self._data.copy())

    def transpose(self) -> "KeyedMatrix":
        return self._like(self._column_keys, self._row_keys, self._data.T.copy())

    def dot(self, vector: KeyedVector) -> KeyedVector:
        """Keyed matrix-vector product; the vector must cover every column key."""
        return KeyedVector(self._row_keys, data=self._data @ vector.values_for(self._column_keys))

    def __repr__(self):
        return f"{type(self).__name__}(shape={self.shape}, rows={list(self._row_keys)}, columns={list(self._column_keys)})"

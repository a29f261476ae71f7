"""
Row accessor handed to mapping functions.

A ``Record`` gives positional and named access to the fields of the row
the cursor is currently positioned on.  Column lookup by name is case
insensitive, like SQL Server's default collation for identifiers.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Sequence, Tuple, Union


class Record:
    """Fields of a single result row.

    Attribute access (``record.Name``) only reaches columns whose names
    do not collide with the methods and properties below; a column named
    ``values`` or ``keys`` must be read as ``record["values"]``.
    Subscription is the form that works for every column.
    """

    __slots__ = ("_names", "_ordinals", "_values")

    def __init__(self, names: Sequence[str], values: Sequence[Any]) -> None:
        self._names: Tuple[str, ...] = tuple(names)
        self._values: Tuple[Any, ...] = tuple(values)
        # First occurrence wins when a select list repeats a column name
        self._ordinals: Dict[str, int] = {}
        for i, name in enumerate(self._names):
            self._ordinals.setdefault(name.lower(), i)

    @property
    def field_count(self) -> int:
        return len(self._values)

    def ordinal(self, name: str) -> int:
        try:
            return self._ordinals[name.lower()]
        except KeyError:
            raise KeyError(f"No column named {name!r}; columns are {list(self._names)}") from None

    def __getitem__(self, key: Union[int, str]) -> Any:
        if isinstance(key, str):
            return self._values[self.ordinal(key)]
        return self._values[key]

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError as exc:
            raise AttributeError(str(exc)) from None

    def get(self, name: str, default: Any = None) -> Any:
        if name.lower() not in self._ordinals:
            return default
        return self[name]

    def is_null(self, key: Union[int, str]) -> bool:
        return self[key] is None

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._ordinals

    def keys(self) -> List[str]:
        return list(self._names)

    def values(self) -> List[Any]:
        return list(self._values)

    def as_dict(self) -> Dict[str, Any]:
        return dict(zip(self._names, self._values))

    def __repr__(self) -> str:
        fields = ", ".join(f"{n}={v!r}" for n, v in zip(self._names, self._values))
        return f"Record({fields})"

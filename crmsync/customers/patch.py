"""Partial-update payloads for ``PUT /users/{id}``.

A patch is a mapping from known dotted field paths to new values. Paths are
checked against the customer shape when they are set, so a typo in a form
field name fails at the edit site instead of being sent to the server.
"""

from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import TypeAdapter, ValidationError

from crmsync.customers.models import Customer

PATCHABLE_FIELDS: dict[str, type] = {
    "name.title": str,
    "name.first": str,
    "name.last": str,
    "email": str,
    "phone": str,
    "cell": str,
    "gender": str,
    "location.street.number": int,
    "location.street.name": str,
    "location.city": str,
    "location.state": str,
    "location.country": str,
    "location.postcode": str,
}

_ADAPTERS: dict[str, TypeAdapter[Any]] = {
    path: TypeAdapter(field_type) for path, field_type in PATCHABLE_FIELDS.items()
}


class PatchError(ValueError):
    """Raised when a patch names an unknown field or carries a bad value."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


def _read_path(customer: Customer, path: str) -> Any:
    value: Any = customer
    for part in path.split("."):
        value = getattr(value, part)
    return value


class CustomerPatch(Mapping[str, Any]):
    """Validated set of field changes for one customer."""

    def __init__(self, changes: Mapping[str, Any] | None = None) -> None:
        self._changes: dict[str, Any] = {}
        for path, value in (changes or {}).items():
            self.set(path, value)

    def __getitem__(self, path: str) -> Any:
        return self._changes[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._changes)

    def __len__(self) -> int:
        return len(self._changes)

    def __repr__(self) -> str:
        return f"CustomerPatch({self._changes!r})"

    def set(self, path: str, value: Any) -> "CustomerPatch":
        """Record a new value for ``path``; returns self for chaining.

        Raises:
            PatchError: If the path is not patchable or the value does not
                validate against the field type
        """
        adapter = _ADAPTERS.get(path)
        if adapter is None:
            raise PatchError(f"Field '{path}' cannot be patched", path=path)

        try:
            self._changes[path] = adapter.validate_python(value)
        except ValidationError as e:
            raise PatchError(f"Invalid value for '{path}': {value!r}", path=path) from e

        return self

    def discard(self, path: str) -> None:
        """Drop a pending change; unknown paths are ignored."""
        self._changes.pop(path, None)

    @classmethod
    def diff(cls, original: Customer, edited: Customer) -> "CustomerPatch":
        """Build a patch holding only the fields that differ between two records."""
        if original.id != edited.id:
            raise PatchError(
                f"Cannot diff different customers: {original.id} != {edited.id}"
            )

        patch = cls()
        for path in PATCHABLE_FIELDS:
            new_value = _read_path(edited, path)
            if _read_path(original, path) != new_value:
                patch.set(path, new_value)
        return patch

    def to_payload(self) -> dict[str, Any]:
        """Expand the dotted paths into the nested JSON request body."""
        payload: dict[str, Any] = {}
        for path, value in self._changes.items():
            *parents, leaf = path.split(".")
            node = payload
            for part in parents:
                node = node.setdefault(part, {})
            node[leaf] = value
        return payload

    def apply(self, customer: Customer) -> Customer:
        """Return a copy of ``customer`` with the changes applied."""
        data = customer.model_dump()
        for path, value in self._changes.items():
            *parents, leaf = path.split(".")
            node = data
            for part in parents:
                node = node[part]
            node[leaf] = value
        return Customer.model_validate(data)

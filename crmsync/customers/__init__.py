"""Customer records, patches and the mutation collaborator."""

from crmsync.customers.enums import SortField, Span
from crmsync.customers.models import (
    Customer,
    CustomerCreate,
    MutationResult,
    UsersPage,
)
from crmsync.customers.patch import PATCHABLE_FIELDS, CustomerPatch, PatchError
from crmsync.customers.service import CustomerMutations, MutationRejectedError

__all__ = [
    "PATCHABLE_FIELDS",
    "Customer",
    "CustomerCreate",
    "CustomerMutations",
    "CustomerPatch",
    "MutationRejectedError",
    "MutationResult",
    "PatchError",
    "SortField",
    "Span",
    "UsersPage",
]

"""Customer mutations with list resynchronisation.

Editors and delete dialogs call this service instead of the client. After
every acknowledged write, each attached list controller is told to refetch,
so no list keeps showing a row the server has changed or removed.
"""

from typing import TYPE_CHECKING, Protocol

from crmsync.customers.models import Customer, CustomerCreate, MutationResult
from crmsync.customers.patch import CustomerPatch
from crmsync.observability.logging import get_logger
from crmsync.observability.metrics import MUTATION_COUNT

if TYPE_CHECKING:
    from crmsync.client.client import UsersApiClient

logger = get_logger(__name__)


class MutationListener(Protocol):
    """Anything that resynchronises after a successful write."""

    def notify_mutation_succeeded(self) -> object: ...


class MutationRejectedError(Exception):
    """Raised when the API answers a write with ``success: false``."""

    def __init__(self, message: str, operation: str, customer_id: str | None = None):
        self.operation = operation
        self.customer_id = customer_id
        super().__init__(message)


class CustomerMutations:
    """Create, update and delete customers, then refresh attached lists."""

    def __init__(self, client: "UsersApiClient"):
        self._client = client
        self._listeners: list[MutationListener] = []

    def attach(self, listener: MutationListener) -> None:
        """Refresh ``listener`` after every successful mutation."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def detach(self, listener: MutationListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def create(self, payload: CustomerCreate) -> MutationResult:
        """Create a customer. The new id is in ``result.uuid``."""
        result = await self._client.create_user(payload)
        return self._acknowledge("create", result, result.uuid)

    async def update(self, customer_id: str, patch: CustomerPatch) -> MutationResult:
        """Send a partial update for one customer."""
        result = await self._client.update_user(customer_id, patch)
        return self._acknowledge("update", result, customer_id, fields=sorted(patch))

    async def save_edits(self, original: Customer, edited: Customer) -> MutationResult | None:
        """Diff an edited copy against the original and send only the changes.

        Returns:
            The API acknowledgement, or None when nothing changed
        """
        patch = CustomerPatch.diff(original, edited)
        if not patch:
            logger.debug("customer_update_skipped_no_changes", customer_id=original.id)
            return None
        return await self.update(original.id, patch)

    async def delete(self, customer_id: str) -> MutationResult:
        """Delete one customer."""
        result = await self._client.delete_user(customer_id)
        return self._acknowledge("delete", result, customer_id)

    def _acknowledge(
        self,
        operation: str,
        result: MutationResult,
        customer_id: str | None,
        fields: list[str] | None = None,
    ) -> MutationResult:
        if not result.success:
            MUTATION_COUNT.labels(operation=operation, outcome="rejected").inc()
            logger.warning(
                "customer_mutation_rejected",
                operation=operation,
                customer_id=customer_id,
                message=result.message,
            )
            raise MutationRejectedError(
                result.message or f"Customer {operation} was rejected",
                operation=operation,
                customer_id=customer_id,
            )

        MUTATION_COUNT.labels(operation=operation, outcome="success").inc()
        logger.info(
            "customer_mutated",
            operation=operation,
            customer_id=customer_id,
            fields=fields,
            refreshed_views=len(self._listeners),
        )
        for listener in list(self._listeners):
            listener.notify_mutation_succeeded()
        return result

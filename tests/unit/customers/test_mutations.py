"""Tests for CustomerMutations."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from crmsync.client.errors import ApiError
from crmsync.customers.models import CustomerCreate, MutationResult
from crmsync.customers.patch import CustomerPatch
from crmsync.customers.service import CustomerMutations, MutationRejectedError
from crmsync.listing.controller import ListSyncController
from tests.factories import CustomerFactory, GatedUsersSource, make_page


class RecordingListener:
    """Stands in for a list controller."""

    def __init__(self) -> None:
        self.refreshes = 0

    def notify_mutation_succeeded(self) -> None:
        self.refreshes += 1


@pytest.fixture
def client() -> MagicMock:
    client = MagicMock()
    client.create_user = AsyncMock(
        return_value=MutationResult(success=True, uuid="new-1", message="User created")
    )
    client.update_user = AsyncMock(return_value=MutationResult(success=True, message="User updated"))
    client.delete_user = AsyncMock(return_value=MutationResult(success=True, message="User deleted"))
    return client


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def mutations(client: MagicMock, listener: RecordingListener) -> CustomerMutations:
    service = CustomerMutations(client)
    service.attach(listener)
    return service


class TestSuccessfulMutations:
    """Successful writes refresh every attached list."""

    async def test_create_refreshes(self, mutations, client, listener) -> None:
        payload = CustomerCreate(
            email="grace@example.com",
            login={"username": "grace"},
            name={"first": "Grace", "last": "Hopper"},
        )
        result = await mutations.create(payload)

        assert result.uuid == "new-1"
        client.create_user.assert_awaited_once_with(payload)
        assert listener.refreshes == 1

    async def test_update_refreshes(self, mutations, client, listener) -> None:
        patch = CustomerPatch({"phone": "555-0100"})
        await mutations.update("u-1", patch)

        client.update_user.assert_awaited_once_with("u-1", patch)
        assert listener.refreshes == 1

    async def test_delete_refreshes_all_views(self, mutations, client, listener) -> None:
        second = RecordingListener()
        mutations.attach(second)
        mutations.attach(second)

        await mutations.delete("u-1")

        client.delete_user.assert_awaited_once_with("u-1")
        assert listener.refreshes == 1
        assert second.refreshes == 1

    async def test_detached_view_not_refreshed(self, mutations, listener) -> None:
        mutations.detach(listener)
        await mutations.delete("u-1")
        assert listener.refreshes == 0


class TestSaveEdits:
    """Tests for diff-based updates."""

    async def test_sends_only_changed_fields(self, mutations, client) -> None:
        original = CustomerFactory.create(uuid="u-7", city="London")
        edited = CustomerPatch({"location.city": "Leeds"}).apply(original)

        await mutations.save_edits(original, edited)

        customer_id, patch = client.update_user.await_args.args
        assert customer_id == "u-7"
        assert patch.to_payload() == {"location": {"city": "Leeds"}}

    async def test_unchanged_record_not_sent(self, mutations, client, listener) -> None:
        original = CustomerFactory.create()

        assert await mutations.save_edits(original, original.model_copy(deep=True)) is None
        client.update_user.assert_not_awaited()
        assert listener.refreshes == 0


class TestFailedMutations:
    """Failed writes never refresh."""

    async def test_rejected_ack_raises(self, mutations, client, listener) -> None:
        client.delete_user.return_value = MutationResult(success=False, message="User is locked")

        with pytest.raises(MutationRejectedError, match="User is locked") as exc_info:
            await mutations.delete("u-1")

        assert exc_info.value.operation == "delete"
        assert exc_info.value.customer_id == "u-1"
        assert listener.refreshes == 0

    async def test_api_error_propagates(self, mutations, client, listener) -> None:
        client.update_user.side_effect = ApiError("User not found", status_code=404)

        with pytest.raises(ApiError):
            await mutations.update("missing", CustomerPatch({"cell": "1"}))

        assert listener.refreshes == 0


class TestClosedViews:
    """A view closed without being detached does not disturb later writes."""

    async def test_closed_controller_is_skipped(self, client) -> None:
        source = GatedUsersSource(responder=lambda call: make_page(2, total=2))
        closed = ListSyncController(source, view_name="closed")
        live = ListSyncController(source, view_name="live")
        service = CustomerMutations(client)
        service.attach(closed)
        service.attach(live)
        closed.close()

        result = await service.delete("u-1")
        await live.settle()

        assert result.success is True
        assert len(source.calls) == 1
        assert live.result.total_count == 2
        await live.aclose()

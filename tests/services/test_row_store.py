import pytest
from sqlalchemy.exc import IntegrityError

from studio_cms.errors import RowNotFoundError, RowStoreError
from studio_cms.models import ContactMessage, ImageCategory, Service


class TestRowStore:
    async def test_insert_applies_defaults(self, store) -> None:
        message = await store.insert(ContactMessage, {
            "name": "Ana",
            "email": "ana@example.com",
            "message": "Do you cover weddings in Lisbon?",
        })

        assert message.id
        assert message.status == "pending"
        assert message.created_at is not None

    async def test_require_missing_row(self, store) -> None:
        with pytest.raises(RowNotFoundError) as exc_info:
            await store.require(Service, "nope")

        assert exc_info.value.code == "not_found"
        assert exc_info.value.to_dict() == {"error": "not_found", "detail": "services row nope does not exist"}

    async def test_constraint_violation_becomes_row_store_error(self, store) -> None:
        await store.insert(ImageCategory, {"name": "Portraits"})

        with pytest.raises(RowStoreError) as exc_info:
            await store.insert(ImageCategory, {"name": "Portraits"})

        assert exc_info.value.code == IntegrityError.__name__
        assert "image_categories" in exc_info.value.message

    async def test_store_usable_after_failure(self, store) -> None:
        await store.insert(ImageCategory, {"name": "Portraits"})
        with pytest.raises(RowStoreError):
            await store.insert(ImageCategory, {"name": "Portraits"})

        await store.insert(ImageCategory, {"name": "Events"})

        assert await store.count(ImageCategory) == 2

    async def test_update_and_delete(self, store, make_service) -> None:
        service = await make_service()

        updated = await store.update(Service, service.id, {"title": "Weddings"})
        assert updated.title == "Weddings"

        await store.delete(Service, service.id)
        assert await store.get(Service, service.id) is None

    async def test_select_with_order_and_limit(self, store, make_service) -> None:
        await make_service(order=2)
        second = await make_service(order=1)
        first = await make_service(order=0)

        rows = await store.select(Service, order_by=Service.order.asc(), limit=2)

        assert [row.id for row in rows] == [first.id, second.id]

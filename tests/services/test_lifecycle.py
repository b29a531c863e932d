import httpx
import pytest

from studio_cms.errors import RowNotFoundError, RowStoreError
from studio_cms.models import HeroImage, ImageCategory, PortfolioImage, Service
from studio_cms.services.lifecycle import (
    HERO_IMAGE_ASSETS,
    SERVICE_ASSETS,
    asset_urls,
    delete_category,
    delete_record_with_assets,
    delete_service,
    stale_asset_urls,
    update_portfolio_image,
    update_record_with_assets,
)

from conftest import cloudinary_url


class TestAssetUrls:
    def test_scalars_and_lists(self) -> None:
        service = Service(
            image="https://x/cover.jpg",
            gallery_images=["https://x/1.jpg", "", "https://x/2.jpg"],
            page_gallery_images=None,
        )

        assert asset_urls(service, SERVICE_ASSETS) == ["https://x/cover.jpg", "https://x/1.jpg", "https://x/2.jpg"]


class TestStaleAssetUrls:
    def test_only_patched_fields_count(self) -> None:
        current = {"url": "https://x/a.jpg", "thumbnail_url": "https://x/a-thumb.jpg"}

        assert stale_asset_urls(current, {"url": "https://x/b.jpg"}) == ["https://x/a.jpg"]
        assert stale_asset_urls(current, {"title": "new"}) == []

    def test_cleared_field(self) -> None:
        assert stale_asset_urls({"image": "https://x/a.jpg"}, {"image": None}) == ["https://x/a.jpg"]

    def test_unchanged_field(self) -> None:
        assert stale_asset_urls({"image": "https://x/a.jpg"}, {"image": "https://x/a.jpg"}) == []

    def test_list_keeps_retained_entries(self) -> None:
        current = {"gallery_images": ["https://x/1.jpg", "https://x/2.jpg", "https://x/3.jpg"]}
        patch = {"gallery_images": ["https://x/3.jpg", "https://x/4.jpg"]}

        assert stale_asset_urls(current, patch) == ["https://x/1.jpg", "https://x/2.jpg"]

    def test_list_cleared(self) -> None:
        current = {"gallery_images": ["https://x/1.jpg"]}

        assert stale_asset_urls(current, {"gallery_images": None}) == ["https://x/1.jpg"]


class TestDeleteService:
    async def test_removes_children_service_and_assets(
        self, store, media, cloudinary_api, make_service, make_portfolio_image
    ) -> None:
        service = await make_service(
            image=cloudinary_url("services/cover"),
            gallery_images=[cloudinary_url("services/gallery/1"), cloudinary_url("services/gallery/2")],
            page_gallery_images=[cloudinary_url("services/page/1")],
        )
        other = await make_service()
        await make_portfolio_image(
            service_id=service.id,
            thumbnail_url=cloudinary_url("portfolio/photo-1-thumb"),
        )
        await make_portfolio_image(service_id=service.id)
        survivor = await make_portfolio_image(service_id=other.id)

        result = await delete_service(store, media, service.id)

        assert result.children_deleted == 2
        assert result.assets_requested == 7
        assert result.assets_deleted == 7
        assert await store.get(Service, service.id) is None
        assert await store.count(PortfolioImage, PortfolioImage.service_id == service.id) == 0
        assert await store.get(PortfolioImage, survivor.id) is not None
        assert await store.get(Service, other.id) is not None
        assert sorted(cloudinary_api.deleted_keys) == [
            "portfolio/photo-1",
            "portfolio/photo-1-thumb",
            "portfolio/photo-2",
            "services/cover",
            "services/gallery/1",
            "services/gallery/2",
            "services/page/1",
        ]

    async def test_child_assets_are_deleted_before_service_assets(
        self, store, media, cloudinary_api, make_service, make_portfolio_image
    ) -> None:
        service = await make_service(image=cloudinary_url("services/cover"))
        await make_portfolio_image(service_id=service.id)

        await delete_service(store, media, service.id)

        assert cloudinary_api.deleted_keys == ["portfolio/photo-1", "services/cover"]

    async def test_repeated_urls_are_counted_once(
        self, store, media, cloudinary_api, make_service, make_portfolio_image
    ) -> None:
        cover = cloudinary_url("services/cover")
        service = await make_service(
            image=cover,
            gallery_images=[cover, cloudinary_url("services/cover", version="v2")],
            page_gallery_images=[cloudinary_url("portfolio/shared")],
        )
        await make_portfolio_image(service_id=service.id, image_url=cloudinary_url("portfolio/shared"))

        result = await delete_service(store, media, service.id)

        assert result.assets_requested == 2
        assert result.assets_deleted == 2
        assert sorted(cloudinary_api.deleted_keys) == ["portfolio/shared", "services/cover"]

    async def test_service_without_children_or_images(self, store, media, cloudinary_api, make_service) -> None:
        service = await make_service()

        result = await delete_service(store, media, service.id)

        assert result.children_deleted == 0
        assert result.assets_requested == 0
        assert cloudinary_api.requests == []
        assert await store.get(Service, service.id) is None

    async def test_unreachable_media_host_still_deletes_rows(
        self, store, media, cloudinary_api, make_service, make_portfolio_image
    ) -> None:
        cloudinary_api.fail_with = httpx.ConnectError("unreachable")
        service = await make_service(image=cloudinary_url("services/cover"))
        await make_portfolio_image(service_id=service.id)

        result = await delete_service(store, media, service.id)

        assert result.assets_deleted == 0
        assert result.assets_requested == 2
        assert await store.get(Service, service.id) is None
        assert await store.count(PortfolioImage, PortfolioImage.service_id == service.id) == 0

    async def test_child_delete_failure_keeps_service(
        self, store, media, make_service, make_portfolio_image, monkeypatch
    ) -> None:
        service = await make_service()
        child = await make_portfolio_image(service_id=service.id)

        async def _failing_delete_where(model, *criteria):
            raise RowStoreError("permission denied for table portfolio_images", code="42501")

        monkeypatch.setattr(store, "delete_where", _failing_delete_where)

        with pytest.raises(RowStoreError) as exc_info:
            await delete_service(store, media, service.id)

        assert exc_info.value.code == "42501"
        assert await store.get(Service, service.id) is not None
        assert await store.get(PortfolioImage, child.id) is not None

    async def test_children_left_behind_keeps_service(
        self, store, media, make_service, make_portfolio_image, monkeypatch
    ) -> None:
        service = await make_service()
        await make_portfolio_image(service_id=service.id)

        async def _silent_delete_where(model, *criteria):
            return 0

        monkeypatch.setattr(store, "delete_where", _silent_delete_where)

        with pytest.raises(RowStoreError) as exc_info:
            await delete_service(store, media, service.id)

        assert exc_info.value.code == "cascade_incomplete"
        assert await store.get(Service, service.id) is not None

    async def test_missing_service(self, store, media) -> None:
        with pytest.raises(RowNotFoundError):
            await delete_service(store, media, "does-not-exist")


class TestRecordLifecycle:
    async def test_delete_hero_image_with_assets(self, store, media, cloudinary_api) -> None:
        hero = await store.insert(HeroImage, {
            "url": cloudinary_url("hero/main"),
            "thumbnail_url": cloudinary_url("hero/main-thumb"),
        })

        deleted = await delete_record_with_assets(store, media, HeroImage, hero.id, HERO_IMAGE_ASSETS)

        assert deleted == 2
        assert await store.get(HeroImage, hero.id) is None

    async def test_update_deletes_replaced_asset_after_write(self, store, media, cloudinary_api) -> None:
        hero = await store.insert(HeroImage, {"url": cloudinary_url("hero/old")})

        updated = await update_record_with_assets(
            store, media, HeroImage, hero.id, {"url": cloudinary_url("hero/new")}, HERO_IMAGE_ASSETS
        )

        assert updated.url == cloudinary_url("hero/new")
        assert cloudinary_api.deleted_keys == ["hero/old"]

    async def test_failed_update_keeps_assets(self, store, media, cloudinary_api, monkeypatch) -> None:
        hero = await store.insert(HeroImage, {"url": cloudinary_url("hero/old")})

        async def _failing_update(model, row_id, patch):
            raise RowStoreError("connection reset", code="08006")

        monkeypatch.setattr(store, "update", _failing_update)

        with pytest.raises(RowStoreError):
            await update_record_with_assets(
                store, media, HeroImage, hero.id, {"url": cloudinary_url("hero/new")}, HERO_IMAGE_ASSETS
            )

        assert cloudinary_api.requests == []

    async def test_service_gallery_update(self, store, media, cloudinary_api, make_service) -> None:
        service = await make_service(
            gallery_images=[cloudinary_url("g/1"), cloudinary_url("g/2")],
        )

        await update_record_with_assets(
            store, media, Service, service.id,
            {"gallery_images": [cloudinary_url("g/2"), cloudinary_url("g/3")]},
            SERVICE_ASSETS,
        )

        assert cloudinary_api.deleted_keys == ["g/1"]

    async def test_portfolio_image_replacement_drops_thumbnail(
        self, store, media, cloudinary_api, make_portfolio_image
    ) -> None:
        image = await make_portfolio_image(
            image_url=cloudinary_url("portfolio/old"),
            thumbnail_url=cloudinary_url("portfolio/old-thumb"),
        )

        updated = await update_portfolio_image(store, media, image.id, {"image_url": cloudinary_url("portfolio/new")})

        assert updated.thumbnail_url is None
        assert sorted(cloudinary_api.deleted_keys) == ["portfolio/old", "portfolio/old-thumb"]

    async def test_portfolio_image_metadata_update_keeps_assets(
        self, store, media, cloudinary_api, make_portfolio_image
    ) -> None:
        image = await make_portfolio_image(thumbnail_url=cloudinary_url("portfolio/thumb"))

        updated = await update_portfolio_image(store, media, image.id, {"title": "Golden hour"})

        assert updated.title == "Golden hour"
        assert updated.thumbnail_url == cloudinary_url("portfolio/thumb")
        assert cloudinary_api.requests == []


class TestDeleteCategory:
    async def test_detaches_images(self, store, make_portfolio_image) -> None:
        category = await store.insert(ImageCategory, {"name": "Weddings"})
        first = await make_portfolio_image(category_id=category.id)
        second = await make_portfolio_image(category_id=category.id)
        unrelated = await make_portfolio_image()

        detached = await delete_category(store, category.id)

        assert detached == 2
        assert await store.get(ImageCategory, category.id) is None
        for image_id in (first.id, second.id, unrelated.id):
            image = await store.get(PortfolioImage, image_id)
            assert image is not None
            assert image.category_id is None

    async def test_missing_category(self, store) -> None:
        with pytest.raises(RowNotFoundError):
            await delete_category(store, "does-not-exist")

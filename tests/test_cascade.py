"""
Tests for cascade deletion of users, properties and images.
"""

import uuid

import pytest
from sqlalchemy import func, select

from marketplace.models.user import User, UserRole, UserRoleAssignment
from marketplace.repositories.image import ImageRepository
from marketplace.repositories.message import MessageRepository
from marketplace.repositories.property import PropertyRepository
from marketplace.repositories.request import RequestRepository
from marketplace.repositories.user import UserRepository
from marketplace.services.authorization import AuthorizationPolicy
from marketplace.services.cascade import CascadeDeleteService
from marketplace.services.identity import IdentityContext
from marketplace.services.storage import LocalBlobStore
from marketplace.utils.exceptions import (
    ImageNotFoundError,
    InsufficientPermissionsError,
    PropertyNotFoundError,
    UserNotFoundError,
)
from tests.conftest import (
    ImageFactory,
    MessageFactory,
    PropertyFactory,
    RequestFactory,
    UserFactory,
    actor_for,
)


class ExplodingBlobStore(LocalBlobStore):
    """Blob store whose deletes always fail."""

    def delete(self, url: str) -> bool:
        raise OSError("disk unavailable")


@pytest.fixture
def cascade(db_session, blob_store) -> CascadeDeleteService:
    return CascadeDeleteService(db_session, blob_store)


async def count_rows(db_session, model) -> int:
    result = await db_session.execute(select(func.count()).select_from(model))
    return result.scalar()


class TestDeleteUser:
    @pytest.mark.asyncio
    async def test_admin_deletes_owner_with_everything_they_own(
        self,
        cascade: CascadeDeleteService,
        blob_store: LocalBlobStore,
        user_repository: UserRepository,
        property_repository: PropertyRepository,
        image_repository: ImageRepository,
        request_repository: RequestRepository,
        message_repository: MessageRepository
    ):
        """A owns P with image I; B filed R on P. Deleting A leaves only B."""
        user_a = await UserFactory.create_user(user_repository, email="a@example.com", roles=(UserRole.AGENT,))
        user_b = await UserFactory.create_user(user_repository, email="b@example.com")
        property_p = await PropertyFactory.create_property(property_repository, owner_id=user_a.id)
        image_i = await ImageFactory.create_image(image_repository, blob_store, property_p.id)
        request_r = await RequestFactory.create_request(request_repository, property_p.id, user_b.id)
        message = await MessageFactory.create_message(message_repository, user_b.id, user_a.id)
        image_path = blob_store.path_for(image_i.url)
        assert image_path.exists()

        await cascade.delete_user(user_a.id)

        assert await user_repository.get_by_id(user_a.id) is None
        assert await property_repository.get_by_id(property_p.id) is None
        assert await image_repository.get_by_id(image_i.id) is None
        assert await request_repository.get_by_id(request_r.id) is None
        assert await message_repository.get_by_id(message.id) is None
        assert not image_path.exists()

        survivor = await user_repository.get_by_id(user_b.id)
        assert survivor is not None
        assert survivor.roles == frozenset({UserRole.CLIENT})

    @pytest.mark.asyncio
    async def test_no_orphans_remain(
        self,
        cascade,
        db_session,
        blob_store,
        user_repository,
        property_repository,
        image_repository,
        request_repository,
        message_repository
    ):
        owner = await UserFactory.create_user(user_repository, roles=(UserRole.AGENT, UserRole.CLIENT))
        other = await UserFactory.create_user(user_repository)
        other_property = await PropertyFactory.create_property(property_repository, owner_id=other.id)

        for _ in range(2):
            owned = await PropertyFactory.create_property(property_repository, owner_id=owner.id)
            await ImageFactory.create_image(image_repository, blob_store, owned.id)
            await RequestFactory.create_request(request_repository, owned.id, other.id)
        await RequestFactory.create_request(request_repository, other_property.id, owner.id)
        await MessageFactory.create_message(message_repository, owner.id, other.id)
        await MessageFactory.create_message(message_repository, other.id, owner.id)

        await cascade.delete_user(owner.id)

        assert await property_repository.count() == 1
        assert await image_repository.count() == 0
        assert await request_repository.count() == 0
        assert await message_repository.count() == 0
        assert await count_rows(db_session, UserRoleAssignment) == 1
        assert await count_rows(db_session, User) == 1

    @pytest.mark.asyncio
    async def test_unknown_user(self, cascade):
        with pytest.raises(UserNotFoundError):
            await cascade.delete_user(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_file_failures_do_not_block_deletion(
        self,
        db_session,
        blob_store,
        test_agent,
        test_property,
        test_image,
        image_repository,
        user_repository
    ):
        service = CascadeDeleteService(db_session, ExplodingBlobStore(str(blob_store.root_dir)))

        await service.delete_user(test_agent.id)

        assert await user_repository.get_by_id(test_agent.id) is None
        assert await image_repository.count() == 0

    @pytest.mark.asyncio
    async def test_row_failure_rolls_back_everything(
        self,
        cascade,
        test_agent,
        test_property,
        test_request,
        user_repository,
        property_repository,
        request_repository,
        monkeypatch
    ):
        async def fail(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(cascade.message_repo, "delete_many", fail)

        with pytest.raises(RuntimeError):
            await cascade.delete_user(test_agent.id)

        assert await user_repository.exists(test_agent.id)
        assert await property_repository.exists(test_property.id)
        assert await request_repository.exists(test_request.id)

    @pytest.mark.asyncio
    async def test_self_deletion_invalidates_session(self, cascade, db_session, test_client_user):
        identity = IdentityContext(db_session, test_client_user)

        await cascade.delete_user(test_client_user.id, identity=identity)

        assert not identity.is_authenticated
        assert identity.actor() is None
        assert identity.current_user_roles() == frozenset()


class TestDeleteProperty:
    @pytest.mark.asyncio
    async def test_removes_images_files_and_requests(
        self,
        cascade,
        blob_store,
        test_agent,
        test_property,
        test_image,
        test_request,
        property_repository,
        image_repository,
        request_repository
    ):
        path = blob_store.path_for(test_image.url)

        await cascade.delete_property(test_property.id, actor_for(test_agent))

        assert await property_repository.get_by_id(test_property.id) is None
        assert await image_repository.count() == 0
        assert await request_repository.count() == 0
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_missing_file_is_fine(self, cascade, blob_store, test_agent, test_property, test_image, image_repository):
        blob_store.path_for(test_image.url).unlink()

        await cascade.delete_property(test_property.id, actor_for(test_agent))

        assert await image_repository.count() == 0

    @pytest.mark.asyncio
    async def test_unknown_property(self, cascade, test_agent):
        with pytest.raises(PropertyNotFoundError):
            await cascade.delete_property(uuid.uuid4(), actor_for(test_agent))

    @pytest.mark.asyncio
    async def test_strict_ownership(self, db_session, blob_store, test_property, test_client_user, property_repository):
        service = CascadeDeleteService(db_session, blob_store, AuthorizationPolicy(property_ownership_required=True))

        with pytest.raises(InsufficientPermissionsError):
            await service.delete_property(test_property.id, actor_for(test_client_user))
        assert await property_repository.exists(test_property.id)


class TestDeleteImage:
    @pytest.mark.asyncio
    async def test_owner_deletes_image(self, cascade, blob_store, test_agent, test_property, test_image, image_repository):
        path = blob_store.path_for(test_image.url)

        await cascade.delete_image(test_image.id, test_property.id, actor_for(test_agent))

        assert await image_repository.get_by_id(test_image.id) is None
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_image_of_another_property(
        self,
        cascade,
        test_agent,
        test_image,
        property_repository,
        image_repository
    ):
        other = await PropertyFactory.create_property(property_repository, owner_id=test_agent.id)

        with pytest.raises(ImageNotFoundError):
            await cascade.delete_image(test_image.id, other.id, actor_for(test_agent))
        assert await image_repository.exists(test_image.id)

    @pytest.mark.asyncio
    async def test_non_owner_is_forbidden(self, cascade, test_client_user, test_property, test_image, image_repository):
        with pytest.raises(InsufficientPermissionsError):
            await cascade.delete_image(test_image.id, test_property.id, actor_for(test_client_user))
        assert await image_repository.exists(test_image.id)

    @pytest.mark.asyncio
    async def test_admin_deletes_image(self, cascade, test_admin, test_property, test_image, image_repository):
        await cascade.delete_image(test_image.id, test_property.id, actor_for(test_admin))
        assert await image_repository.count() == 0


class TestLocalBlobStore:
    @pytest.mark.asyncio
    async def test_save_and_delete(self, blob_store):
        url = await blob_store.save(b"data", "../../evil name.jpg")

        assert url.startswith("/uploads/properties/")
        path = blob_store.path_for(url)
        assert path.read_bytes() == b"data"
        assert blob_store.root_dir in path.parents

        assert blob_store.delete(url) is True
        assert blob_store.delete(url) is False

    def test_refuses_paths_outside_store(self, blob_store):
        assert blob_store.path_for("/uploads/../../etc/passwd") is None
        assert blob_store.path_for("https://cdn.example.com/x.jpg") is None
        assert blob_store.delete("/elsewhere/x.jpg") is False

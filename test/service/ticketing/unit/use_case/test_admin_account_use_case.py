import pytest

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import NotFoundError
from src.service.ticketing.app.command.delete_admin_use_case import DeleteAdminUseCase
from src.service.ticketing.app.command.delete_event_use_case import DeleteEventUseCase
from src.service.ticketing.app.command.update_admin_use_case import UpdateAdminUseCase
from src.service.ticketing.domain.entity.admin_entity import AdminEntity
from test.service.ticketing.unit.helpers import UnitOfWorkMock


def _admin() -> AdminEntity:
    return AdminEntity(id=7, username='root', email='root@test.com', password_hash='hash')


@pytest.fixture
def uow() -> UnitOfWorkMock:
    uow = UnitOfWorkMock()
    uow.admins.get_by_id.return_value = _admin()
    uow.admins.update.side_effect = lambda *, admin: admin
    return uow


@pytest.mark.unit
class TestUpdateAdmin:
    async def test_email_is_normalised_and_username_kept(self, uow: UnitOfWorkMock):
        """
        Given: admin 7 named root
        When: their email is changed to a mixed-case address
        Then: the stored email is lower-cased and the username is untouched
        """
        # Act
        admin = await UpdateAdminUseCase(uow=uow).execute(
            admin_id=7, email=' New.Root@Test.com '
        )

        # Assert
        assert admin.email == 'new.root@test.com'
        assert admin.username == 'root'
        uow.commit.assert_awaited_once()

    async def test_unknown_admin(self, uow: UnitOfWorkMock):
        uow.admins.get_by_id.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await UpdateAdminUseCase(uow=uow).execute(admin_id=8, email='x@test.com')

        assert exc_info.value.kind == ErrorKind.ACCOUNT_NOT_FOUND
        uow.admins.update.assert_not_awaited()


@pytest.mark.unit
class TestDeleteAdmin:
    async def test_delete_commits(self, uow: UnitOfWorkMock):
        uow.admins.delete.return_value = True

        await DeleteAdminUseCase(uow=uow).execute(admin_id=7)

        uow.admins.delete.assert_awaited_once_with(admin_id=7)
        uow.commit.assert_awaited_once()

    async def test_unknown_admin(self, uow: UnitOfWorkMock):
        uow.admins.delete.return_value = False

        with pytest.raises(NotFoundError) as exc_info:
            await DeleteAdminUseCase(uow=uow).execute(admin_id=8)

        assert exc_info.value.kind == ErrorKind.ACCOUNT_NOT_FOUND
        uow.commit.assert_not_awaited()


@pytest.mark.unit
class TestDeleteAllEvents:
    async def test_reports_how_many_events_were_deleted(self, uow: UnitOfWorkMock):
        uow.events.delete_all_without_tickets_taken.return_value = 2

        deleted = await DeleteEventUseCase(uow=uow).execute_all()

        assert deleted == 2
        uow.commit.assert_awaited_once()

"""Permission sets: union of grants, object/field checks, denial logging."""

import pytest

from salesdesk.models import PermissionSet, SecurityEvent
from salesdesk.permissions import (
    ACCOUNT,
    CREATE_ON_ANY_ACCOUNT,
    SALES_SUMMARY_ACCESS,
    SALES_TRANSACTION,
    SALES_TRANSACTION_FIELDS,
    USER,
)
from salesdesk.services import permission_service
from salesdesk.services.permission_service import PermissionChecker, PermissionDeniedError


def test_user_without_sets_has_nothing(db_session, make_user):
    user = make_user("nobody")

    access = permission_service.load_user_access(user.id)

    assert access.grants == set()
    assert access.readable_objects == set()
    assert access.readable_fields == set()


def test_default_sets(db_session, rep_a, sales_admin):
    assert permission_service.get_user_grants(rep_a.id) == {SALES_SUMMARY_ACCESS}
    assert permission_service.get_user_grants(sales_admin.id) == {SALES_SUMMARY_ACCESS, CREATE_ON_ANY_ACCOUNT}

    checker = PermissionChecker(rep_a.id)
    assert checker.can_read_object(SALES_TRANSACTION)
    assert checker.can_create_object(SALES_TRANSACTION)
    assert not checker.can_create_object(ACCOUNT)
    assert all(checker.can_read_field(SALES_TRANSACTION, f) for f in SALES_TRANSACTION_FIELDS)
    assert all(checker.can_edit_field(SALES_TRANSACTION, f) for f in SALES_TRANSACTION_FIELDS)
    assert checker.can_read_field(USER, "name")
    assert not checker.can_edit_field(USER, "name")


def test_access_is_union_of_sets(db_session, make_user):
    user = make_user("combo", sets=["sales_summary_access", "sales_admin"])

    assert CREATE_ON_ANY_ACCOUNT in permission_service.get_user_grants(user.id)
    assert permission_service.get_user_permission_set_names(user.id) == ["sales_admin", "sales_summary_access"]


def test_install_default_permission_sets_is_idempotent(db_session, setup_permissions):
    assert permission_service.install_default_permission_sets() == 0
    assert permission_service.initialize_grants() == 0
    assert db_session.query(PermissionSet).count() == 2


def test_require_read_denies_missing_field_and_logs(db_session, make_user):
    db_session.add(PermissionSet(name="partial", label="Partial"))
    db_session.commit()
    permission_service.set_object_permission("partial", SALES_TRANSACTION, can_read=True, can_create=False)
    permission_service.set_field_permission("partial", SALES_TRANSACTION, "account_id", can_read=True, can_edit=False)
    user = make_user("partial_user", sets=["partial"])
    checker = PermissionChecker(user.id, ip_address="10.0.0.1")

    checker.require_read(SALES_TRANSACTION, ("account_id",))
    with pytest.raises(PermissionDeniedError, match="sales_transaction.sale_date"):
        checker.require_read(SALES_TRANSACTION, SALES_TRANSACTION_FIELDS)

    event = db_session.query(SecurityEvent).one()
    assert event.event_type == "PERMISSION_DENIED"
    assert event.user_id == user.id
    assert event.resource == "sales_transaction.sale_date"
    assert event.ip_address == "10.0.0.1"
    assert event.success is False


def test_require_grant(db_session, rep_a):
    checker = PermissionChecker(rep_a.id)

    checker.require_grant(SALES_SUMMARY_ACCESS)
    with pytest.raises(PermissionDeniedError):
        checker.require_grant(CREATE_ON_ANY_ACCOUNT)


def test_require_create_checks_field_edit(db_session, make_user):
    db_session.add(PermissionSet(name="read_only", label="Read Only"))
    db_session.commit()
    permission_service.set_object_permission("read_only", SALES_TRANSACTION, can_read=True, can_create=True)
    user = make_user("reader", sets=["read_only"])

    with pytest.raises(PermissionDeniedError, match="edit"):
        PermissionChecker(user.id).require_create(SALES_TRANSACTION, SALES_TRANSACTION_FIELDS)


def test_unknown_object_rejected(db_session, setup_permissions):
    with pytest.raises(ValueError):
        permission_service.set_object_permission("sales_summary_access", "invoice", can_read=True, can_create=False)


def test_list_users_with_grant(db_session, make_user, manager, rep_a, rep_b, sales_admin):
    make_user("outsider")
    make_user("former_rep", sets=["sales_summary_access"], is_active=False)
    make_user("double", name="Dana Double", sets=["sales_summary_access", "sales_admin"])

    users = permission_service.list_users_with_grant(SALES_SUMMARY_ACCESS)

    assert [u.username for u in users] == ["rep_a", "rep_b", "double", "manager", "sales_admin"]


def test_unassign_permission_set(db_session, rep_a):
    assert permission_service.unassign_permission_set(rep_a.id, "sales_summary_access")
    assert not permission_service.unassign_permission_set(rep_a.id, "sales_summary_access")
    assert permission_service.get_user_grants(rep_a.id) == set()


def test_unknown_grant_rejected(db_session, setup_permissions):
    with pytest.raises(ValueError, match="Unknown grant"):
        permission_service.grant_to_permission_set("sales_summary_access", "delete-everything")

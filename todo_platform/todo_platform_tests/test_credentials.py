"""
Unit tests for the credential store.
"""
import pytest
from unittest.mock import Mock, patch
from sqlalchemy.exc import OperationalError

from todo_platform.todo_platform.todo_service.auth import verify_password
from todo_platform.todo_platform.todo_service.credentials import CredentialStore
from todo_platform.todo_platform.todo_service.errors import (
    AuthenticationFailed,
    ConflictError,
    NotFound,
    StoreError,
    ValidationError,
)
from todo_platform.todo_platform.todo_service.identifiers import new_id
from todo_platform.todo_platform.todo_service.models import User, UserToken


@pytest.fixture
def store(db_session):
    return CredentialStore(db_session)


@pytest.fixture
def user(store):
    return store.create("andrew@example.com", "userOnePass")


@pytest.mark.parametrize("email,password", [
    ("a@b.com", "123abc"),
    ("somebody@something.com", "a-much-longer-password"),
    ("  padded@example.com  ", "sixsix"),
])
def test_create_hashes_password(store, db_session, email, password):
    user = store.create(email, password)

    stored = db_session.get(User, user.id)
    assert stored.email == email.strip()
    assert stored.password_hash != password
    assert verify_password(password, stored.password_hash)
    assert stored.tokens == []


def test_create_keeps_email_case(store):
    user = store.create("Mixed.Case@Example.com", "123abc")
    assert user.email == "Mixed.Case@Example.com"


@pytest.mark.parametrize("email,password,message", [
    (None, "123abc", "email is required"),
    ("   ", "123abc", "email is required"),
    ("invalidemail.com", "123abc", "not a valid email"),
    ("a@b.com", None, "password is required"),
    ("a@b.com", "somep", "at least 6 characters"),
])
def test_create_validation_errors(store, db_session, email, password, message):
    with pytest.raises(ValidationError) as exc_info:
        store.create(email, password)

    assert message in str(exc_info.value)
    assert db_session.query(User).count() == 0


def test_create_duplicate_email_conflicts(store, user, db_session):
    with pytest.raises(ConflictError) as exc_info:
        store.create("andrew@example.com", "anotherPass")

    assert str(exc_info.value) == "Email already exists"
    assert db_session.query(User).count() == 1


def test_verify_credentials_success(store, user):
    verified = store.verify_credentials("andrew@example.com", "userOnePass")
    assert verified.id == user.id


def test_verify_credentials_wrong_password_and_unknown_email_look_alike(store, user):
    with pytest.raises(AuthenticationFailed) as wrong_password:
        store.verify_credentials("andrew@example.com", "wrongPass")
    with pytest.raises(AuthenticationFailed) as unknown_email:
        store.verify_credentials("nobody@example.com", "userOnePass")

    assert type(wrong_password.value) is type(unknown_email.value)
    assert str(wrong_password.value) == str(unknown_email.value)
    assert wrong_password.value.detail == unknown_email.value.detail


def test_verify_credentials_is_exact_on_email(store, user):
    with pytest.raises(AuthenticationFailed):
        store.verify_credentials("Andrew@example.com", "userOnePass")


def test_verify_credentials_rejects_non_strings(store, user):
    with pytest.raises(AuthenticationFailed):
        store.verify_credentials(None, None)


def test_add_token_and_find_by_active_token(store, user):
    store.add_token(user.id, "token-one")
    store.add_token(user.id, "token-two")

    assert store.find_by_active_token("token-one").id == user.id
    assert store.find_by_active_token("token-two", user_id=user.id).id == user.id
    assert [t.token for t in store.get(user.id).tokens] == ["token-one", "token-two"]
    assert store.get(user.id).tokens[0].purpose == "auth"


def test_find_by_active_token_checks_owner(store, user):
    store.add_token(user.id, "token-one")

    with pytest.raises(AuthenticationFailed) as exc_info:
        store.find_by_active_token("token-one", user_id=new_id())
    assert exc_info.value.reason == "revoked_token"


def test_find_by_active_token_unknown(store, user):
    with pytest.raises(AuthenticationFailed):
        store.find_by_active_token("never-issued")


def test_add_token_unknown_user(store):
    with pytest.raises(NotFound):
        store.add_token(new_id(), "token-one")


def test_remove_token_is_idempotent(store, user, db_session):
    store.add_token(user.id, "token-one")
    store.add_token(user.id, "token-two")

    store.remove_token(user.id, "token-one")
    store.remove_token(user.id, "token-one")

    remaining = db_session.query(UserToken).filter(UserToken.user_id == user.id).all()
    assert [t.token for t in remaining] == ["token-two"]
    with pytest.raises(AuthenticationFailed):
        store.find_by_active_token("token-one")


def test_remove_token_unknown_user(store):
    with pytest.raises(NotFound):
        store.remove_token(new_id(), "token-one")


def test_remove_token_only_touches_owner(store, user):
    other = store.create("jen@example.com", "userTwoPass")
    store.add_token(other.id, "other-token")

    store.remove_token(user.id, "other-token")

    assert store.find_by_active_token("other-token").id == other.id


def test_set_password_rehashes(store, user):
    old_hash = store.get(user.id).password_hash

    store.set_password(user.id, "brandNewPass")

    with pytest.raises(AuthenticationFailed):
        store.verify_credentials("andrew@example.com", "userOnePass")
    assert store.verify_credentials("andrew@example.com", "brandNewPass").id == user.id
    assert store.get(user.id).password_hash != old_hash


def test_set_password_validates(store, user):
    with pytest.raises(ValidationError):
        store.set_password(user.id, "short")


def test_unrelated_update_does_not_rehash(store, user, db_session):
    old_hash = store.get(user.id).password_hash

    store.add_token(user.id, "token-one")
    store.remove_token(user.id, "token-one")

    assert db_session.get(User, user.id).password_hash == old_hash


def test_delete_removes_token_set(store, user, db_session):
    store.add_token(user.id, "token-one")
    user_id = user.id

    store.delete(user_id)

    assert db_session.get(User, user_id) is None
    assert db_session.query(UserToken).count() == 0
    with pytest.raises(NotFound):
        store.get(user_id)


def test_get_malformed_id(store):
    with pytest.raises(NotFound):
        store.get("123abx")


def test_store_failure_becomes_store_error():
    db = Mock()
    db.get.return_value = User(id=new_id(), email="a@b.com", password_hash="x")
    db.commit.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))

    with pytest.raises(StoreError):
        CredentialStore(db).add_token(new_id(), "token-one")
    db.rollback.assert_called_once()


def test_create_with_first_token(store, db_session):
    issued = []

    def issue_token(user_id):
        issued.append(user_id)
        return f"token-for-{user_id}"

    user = store.create("a@b.com", "123abc", issue_token=issue_token)

    assert issued == [user.id]
    assert [t.token for t in db_session.get(User, user.id).tokens] == [f"token-for-{user.id}"]
    assert store.find_by_active_token(f"token-for-{user.id}").id == user.id


def test_create_failure_stores_neither_user_nor_token(store, db_session):
    with patch.object(db_session, "commit", side_effect=OperationalError("INSERT", {}, Exception("disk I/O error"))):
        with pytest.raises(StoreError):
            store.create("a@b.com", "123abc", issue_token=lambda user_id: "first-token")

    assert db_session.query(User).count() == 0
    assert db_session.query(UserToken).count() == 0
    # Nothing is left behind to block a second attempt
    assert store.create("a@b.com", "123abc").email == "a@b.com"


def test_verify_credentials_trims_email(store):
    user = store.create(" pad@b.com ", "123abc")

    assert store.verify_credentials(" pad@b.com ", "123abc").id == user.id
    assert store.verify_credentials("pad@b.com", "123abc").id == user.id
    assert store.find_by_email("\tpad@b.com\n").id == user.id


def test_verify_credentials_failure_names_known_user(store, user):
    with pytest.raises(AuthenticationFailed) as wrong_password:
        store.verify_credentials("andrew@example.com", "wrongPass")
    with pytest.raises(AuthenticationFailed) as unknown_email:
        store.verify_credentials("nobody@example.com", "userOnePass")

    assert wrong_password.value.user.id == user.id
    assert unknown_email.value.user is None

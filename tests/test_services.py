import pytest

from errors import AuthenticationFailed, DuplicateIdentity, NotFoundOrUnauthorized, ValidationError
import services


@pytest.mark.parametrize(
    "value, expected",
    [
        (42, 42), ("42", 42), (" 42 ", 42), ("-5", -5), ("+7", 7), (0, 0), ("0", 0), (12.0, 12),
        (4.5, 4), ("4.5", 4), (-4.5, -4), ("-4.5", -4), ("7.", 7), (2 ** 63 - 1, 2 ** 63 - 1),
    ],
)
def test_coerce_score_truncates_numbers(value, expected):
    assert services.coerce_score(value) == expected


@pytest.mark.parametrize(
    "value",
    ["abc", "", "12abc", ".5", "1e3", True, None, [], {}, float("nan"), float("inf")],
)
def test_coerce_score_rejects_non_numbers(value):
    with pytest.raises(ValidationError):
        services.coerce_score(value)


def test_register_requires_all_fields(memory_store, issuer):
    with pytest.raises(ValidationError, match="All fields are required"):
        services.register_user(memory_store, issuer, "alice", "", "secret1")
    with pytest.raises(ValidationError):
        services.register_user(memory_store, issuer, None, "a@x.com", "secret1")


def test_register_enforces_password_length(memory_store, issuer):
    with pytest.raises(ValidationError, match="at least 6"):
        services.register_user(memory_store, issuer, "alice", "a@x.com", "12345")
    assert memory_store.find_by_username("alice") is None


def test_register_then_duplicate(memory_store, issuer):
    user, token = services.register_user(memory_store, issuer, "alice", "a@x.com", "secret1")
    assert issuer.verify(token).subject_id == user.id
    assert user.password_hash != "secret1"

    with pytest.raises(DuplicateIdentity):
        services.register_user(memory_store, issuer, "alice", "other@x.com", "secret1")
    with pytest.raises(DuplicateIdentity):
        services.register_user(memory_store, issuer, "alice2", "a@x.com", "secret1")


def test_login_failures_are_indistinguishable(memory_store, issuer):
    services.register_user(memory_store, issuer, "alice", "a@x.com", "secret1")

    with pytest.raises(AuthenticationFailed) as wrong_password:
        services.authenticate_user(memory_store, issuer, "alice", "wrong-password")
    with pytest.raises(AuthenticationFailed) as unknown_user:
        services.authenticate_user(memory_store, issuer, "nobody", "anything")

    assert wrong_password.value.message == unknown_user.value.message
    assert wrong_password.value.status_code == unknown_user.value.status_code


def test_login_success_returns_verifiable_token(memory_store, issuer):
    registered, _ = services.register_user(memory_store, issuer, "alice", "a@x.com", "secret1")
    user, token = services.authenticate_user(memory_store, issuer, "alice", "secret1")
    identity = issuer.verify(token)
    assert identity.subject_id == registered.id == user.id
    assert identity.username == "alice"


def test_add_score_validates_input(memory_store, issuer):
    user, _ = services.register_user(memory_store, issuer, "alice", "a@x.com", "secret1")
    with pytest.raises(ValidationError):
        services.add_score(memory_store, user, "", 10)
    with pytest.raises(ValidationError):
        services.add_score(memory_store, user, "alice", None)
    with pytest.raises(ValidationError):
        services.add_score(memory_store, user, "alice", "abc")
    assert services.list_scores(memory_store, user) == []


def test_update_validates_before_touching_store(memory_store, issuer):
    user, _ = services.register_user(memory_store, issuer, "alice", "a@x.com", "secret1")
    record = services.add_score(memory_store, user, "alice", "42")
    with pytest.raises(ValidationError):
        services.update_score(memory_store, user, record.id, "alice", "nope")
    assert services.list_scores(memory_store, user)[0].score == 42

    with pytest.raises(NotFoundOrUnauthorized):
        services.update_score(memory_store, user, "999", "alice", 1)


@pytest.mark.parametrize("value", [10 ** 20, -(10 ** 20), 2 ** 63, -(2 ** 63) - 1, "1" * 25, "9" * 5000, 1e20])
def test_coerce_score_rejects_values_outside_64_bits(value):
    with pytest.raises(ValidationError, match="out of range"):
        services.coerce_score(value)


def test_register_rejects_nul_in_password(memory_store, issuer):
    with pytest.raises(ValidationError, match="NUL"):
        services.register_user(memory_store, issuer, "alice", "a@x.com", "secret\x00x")
    assert memory_store.find_by_username("alice") is None

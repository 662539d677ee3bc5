from datetime import timedelta

import pytest

from patauth.errors import InvalidOptionsError
from patauth.token.types import PersonalAccessToken, TokenOptions, utcnow


def make_token(**overrides):
    base = dict(user_id=1, token="d" * 64, abilities="read:posts,write:comments")
    base.update(overrides)
    return PersonalAccessToken(**base)


def test_expiry_is_strict():
    now = utcnow()
    token = make_token(expires_at=now)
    assert not token.is_expired(now)
    assert token.is_expired(now + timedelta(microseconds=1))


def test_no_expiry_never_expires():
    assert not make_token().is_expired(utcnow() + timedelta(days=3650))


def test_naive_expiry_is_read_as_utc():
    naive = (utcnow() - timedelta(minutes=1)).replace(tzinfo=None)
    assert make_token(expires_at=naive).is_expired()


def test_ability_checks():
    token = make_token(abilities="read:*,write:comments")
    assert token.can("read:posts")
    assert token.can("read:posts:drafts")
    assert token.can("write:comments")
    assert not token.can("write:posts")
    assert not token.can("read")


def test_ability_checks_custom_delimiter():
    token = make_token(abilities="read.*")
    assert token.can("read.posts", delimiter=".")
    assert not token.can("read:posts", delimiter=".")


def test_dict_round_trip_preserves_timestamps():
    token = make_token(id=3, name="ci", expires_at=utcnow() + timedelta(hours=1), last_used_at=utcnow())
    restored = PersonalAccessToken.from_dict(token.to_dict())
    assert restored == token


@pytest.mark.parametrize("user_id", [0, -5, True, "12"])
def test_options_reject_bad_user_ids(user_id):
    with pytest.raises(InvalidOptionsError):
        TokenOptions(user_id=user_id).validate()


def test_options_reject_comma_in_ability():
    with pytest.raises(InvalidOptionsError):
        TokenOptions(user_id=1, abilities=["read,write"]).validate()

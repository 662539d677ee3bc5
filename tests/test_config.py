from datetime import timedelta

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from patauth.config import Config, SigningMethod
from patauth.errors import InvalidConfigurationError


def test_default_config_is_valid():
    cfg = Config()
    cfg.validate()
    assert cfg.token_length == 32
    assert cfg.ability_delimiter == ":"
    assert cfg.token_ttl == timedelta(hours=24)


def test_default_signing_keys_differ_per_instance():
    assert Config().signing_key != Config().signing_key


def test_token_length_below_minimum():
    with pytest.raises(InvalidConfigurationError) as exc:
        Config(token_length=10).validate()
    assert "16" in str(exc.value)


def test_token_length_at_minimum():
    Config(token_length=16).validate()


def test_empty_signing_key():
    with pytest.raises(InvalidConfigurationError):
        Config(signing_key="").validate()


def test_unsupported_signing_method():
    with pytest.raises(InvalidConfigurationError):
        Config(signing_method="ES256").validate()


def test_rs256_requires_key_pair():
    with pytest.raises(InvalidConfigurationError):
        Config(signing_method=SigningMethod.RS256).validate()


def test_rs256_with_key_pair():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    cfg = Config(
        signing_method="RS256",
        private_key=private_key,
        public_key=private_key.public_key(),
    )
    cfg.validate()


def test_rs256_rejects_non_rsa_keys():
    with pytest.raises(InvalidConfigurationError):
        Config(signing_method=SigningMethod.RS256, private_key="pem", public_key="pem").validate()


def test_negative_expiry_rejected():
    with pytest.raises(InvalidConfigurationError):
        Config(expire_at=timedelta(seconds=-1)).validate()


@pytest.mark.parametrize("expire_at", [None, timedelta(0)])
def test_unlimited_lifetime(expire_at):
    cfg = Config(expire_at=expire_at)
    cfg.validate()
    assert cfg.token_ttl is None


@pytest.mark.parametrize("delimiter", ["", ","])
def test_bad_ability_delimiter(delimiter):
    with pytest.raises(InvalidConfigurationError):
        Config(ability_delimiter=delimiter).validate()


def test_prefix_cannot_contain_separator():
    with pytest.raises(InvalidConfigurationError):
        Config(token_prefix="pk|").validate()

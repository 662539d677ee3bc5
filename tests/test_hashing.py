import re
import secrets

from patauth.token.hashing import digests_match, hash_token


def test_hash_is_deterministic():
    secret = secrets.token_hex(32)
    assert hash_token(secret) == hash_token(secret)


def test_hash_is_fixed_length_lowercase_hex():
    for secret in ["", "a", "pk_" + "f" * 200]:
        assert re.fullmatch(r"[0-9a-f]{64}", hash_token(secret))


def test_no_collisions_across_sample():
    secrets_sample = {secrets.token_hex(16) for _ in range(2000)}
    digests = {hash_token(s) for s in secrets_sample}
    assert len(digests) == len(secrets_sample)


def test_known_digest():
    assert hash_token("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_digests_match():
    digest = hash_token("secret")
    assert digests_match(digest, hash_token("secret"))
    assert not digests_match(digest, hash_token("other"))

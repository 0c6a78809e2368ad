from datetime import timedelta

import pytest
from jose import jwt

from app.config import Settings
from app.services.token_service import TokenIssuer
from app.utils.errors import InvalidToken

config = Settings(JWT_SECRET="unit-secret")
issuer = TokenIssuer(config)


def test_issue_then_verify_returns_identity():
    assert issuer.verify(issuer.issue(42)) == 42


def test_default_lifetime_is_seven_days():
    claims = jwt.get_unverified_claims(issuer.issue(7))

    assert claims["exp"] - claims["iat"] == int(timedelta(days=7).total_seconds())
    assert claims["sub"] == "7"


def test_expired_token_is_rejected():
    token = issuer.issue(42, lifetime=timedelta(seconds=-1))

    with pytest.raises(InvalidToken):
        issuer.verify(token)


def test_tampered_signature_is_rejected():
    header, payload, signature = issuer.issue(42).split(".")
    middle = len(signature) // 2
    flipped = "A" if signature[middle] != "A" else "B"
    tampered = ".".join([header, payload, signature[:middle] + flipped + signature[middle + 1:]])

    with pytest.raises(InvalidToken):
        issuer.verify(tampered)


def test_tampered_payload_is_rejected():
    other_payload = issuer.issue(99).split(".")[1]
    header, _, signature = issuer.issue(42).split(".")

    with pytest.raises(InvalidToken):
        issuer.verify(".".join([header, other_payload, signature]))


def test_token_signed_with_another_secret_is_rejected():
    foreign = TokenIssuer(Settings(JWT_SECRET="someone-else")).issue(42)

    with pytest.raises(InvalidToken):
        issuer.verify(foreign)


@pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c"])
def test_malformed_tokens_are_rejected(token):
    with pytest.raises(InvalidToken):
        issuer.verify(token)


def test_state_and_access_tokens_are_not_interchangeable():
    state = issuer.issue_state()
    issuer.verify_state(state)

    with pytest.raises(InvalidToken):
        issuer.verify(state)
    with pytest.raises(InvalidToken):
        issuer.verify_state(issuer.issue(42))


BASE64URL = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


@pytest.mark.parametrize("identity", [1, 7, 42, 1000, 31337, 99999])
def test_any_bit_flip_in_the_last_character_is_rejected(identity):
    token = issuer.issue(identity)
    last = token[-1]
    mutations = {chr(ord(last) ^ (1 << bit)) for bit in range(7)}
    # low bits of the sextet fall in the padding of a 32-byte signature
    mutations |= {BASE64URL[BASE64URL.index(last) ^ (1 << bit)] for bit in range(6)}

    for char in mutations - {last}:
        with pytest.raises(InvalidToken):
            issuer.verify(token[:-1] + char)


def test_non_canonical_signature_tail_is_rejected():
    token = issuer.issue(42)
    padding_flip = BASE64URL[BASE64URL.index(token[-1]) ^ 1]

    with pytest.raises(InvalidToken):
        issuer.verify(token[:-1] + padding_flip)

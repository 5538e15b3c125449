import hashlib

import pytest

from validcode.auth import RequestAuthenticator, sign, verify
from validcode.errors import AuthError, AuthFailure


SECRET = 's3cret'
WINDOW = 300_000
NOW = 1_700_000_000_000


def _auth() -> RequestAuthenticator:
    return RequestAuthenticator(SECRET, WINDOW, clock=lambda: NOW)


def test_sign_is_sha256_of_timestamp_then_secret():
    assert sign(NOW, SECRET) == hashlib.sha256(f'{NOW}{SECRET}'.encode()).hexdigest()


@pytest.mark.parametrize('offset', [0, 1, -1, WINDOW, -WINDOW])
def test_fresh_signed_credential_is_accepted(offset):
    ts = NOW + offset
    assert verify(str(ts), sign(ts, SECRET), SECRET, NOW, WINDOW)


@pytest.mark.parametrize('offset', [WINDOW + 1, -(WINDOW + 1)])
def test_correct_signature_one_ms_outside_window_is_rejected(offset):
    ts = NOW + offset
    with pytest.raises(AuthError) as exc:
        _auth().check(str(ts), sign(ts, SECRET))
    assert exc.value.reason is AuthFailure.stale_timestamp


@pytest.mark.parametrize('timestamp,signature', [
    (None, sign(NOW, SECRET)),
    ('', sign(NOW, SECRET)),
    (str(NOW), None),
    (str(NOW), ''),
    (None, None),
])
def test_missing_header_rejects(timestamp, signature):
    with pytest.raises(AuthError) as exc:
        _auth().check(timestamp, signature)
    assert exc.value.reason is AuthFailure.missing_header
    assert _auth().verify(timestamp, signature) is False


def test_wrong_secret_is_rejected():
    with pytest.raises(AuthError) as exc:
        _auth().check(str(NOW), sign(NOW, 'other'))
    assert exc.value.reason is AuthFailure.signature_mismatch


def test_signature_for_other_timestamp_is_rejected():
    assert not _auth().verify(str(NOW), sign(NOW - 1, SECRET))


@pytest.mark.parametrize('timestamp', ['yesterday', '-5', '1.5', '\u00b2', '\u0661\u0662'])
def test_non_numeric_timestamp_is_rejected(timestamp):
    with pytest.raises(AuthError) as exc:
        _auth().check(timestamp, sign(timestamp, SECRET))
    assert exc.value.reason is AuthFailure.malformed_timestamp
    assert verify(timestamp, sign(timestamp, SECRET), SECRET, NOW, WINDOW) is False


def test_uppercase_hex_signature_is_accepted():
    assert _auth().verify(str(NOW), sign(NOW, SECRET).upper())


def test_zero_window_accepts_only_exact_time():
    auth = RequestAuthenticator(SECRET, 0, clock=lambda: NOW)
    assert auth.verify(str(NOW), sign(NOW, SECRET))
    assert not auth.verify(str(NOW + 1), sign(NOW + 1, SECRET))

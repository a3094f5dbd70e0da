from datetime import timedelta

import pytest
from cryptography.fernet import Fernet, InvalidToken
from jose import ExpiredSignatureError, jwt

from careerflow.app.core.security import (
    authenticate_user,
    create_access_token,
    decrypt_data,
    encrypt_data,
    get_password_hash,
    verify_password,
)


def test_password_hash_roundtrip():
    hashed = get_password_hash("s3cret-password")

    assert hashed != "s3cret-password"
    assert verify_password("s3cret-password", hashed)
    assert not verify_password("wrong-password", hashed)


def test_create_access_token(test_settings):
    token = create_access_token({"sub": "testuser"}, test_settings)
    payload = jwt.decode(token, test_settings.secret_key, algorithms=[test_settings.algorithm])

    assert payload["sub"] == "testuser"
    assert "exp" in payload


def test_create_access_token_expired(test_settings):
    token = create_access_token(
        {"sub": "testuser"},
        test_settings,
        expires_delta=timedelta(minutes=-1),
    )
    with pytest.raises(ExpiredSignatureError):
        jwt.decode(token, test_settings.secret_key, algorithms=[test_settings.algorithm])


def test_authenticate_user(db_session, test_user):
    assert authenticate_user(db_session, "testuser", "testpassword").id == test_user.id
    assert authenticate_user(db_session, "testuser", "wrongpassword") is None
    assert authenticate_user(db_session, "nobody", "testpassword") is None


def test_authenticate_inactive_user(db_session, test_user):
    test_user.is_active = False
    db_session.commit()

    assert authenticate_user(db_session, "testuser", "testpassword") is None


def test_encrypt_decrypt(test_settings):
    encrypted = encrypt_data("sk-live-key")

    assert encrypted != "sk-live-key"
    assert decrypt_data(encrypted) == "sk-live-key"


def test_decrypt_with_other_key(test_settings):
    foreign = Fernet(Fernet.generate_key()).encrypt(b"sk-live-key").decode()
    with pytest.raises(InvalidToken):
        decrypt_data(foreign)


def test_encrypt_with_explicit_settings(test_settings):
    rotated = test_settings.model_copy(update={"encryption_key": Fernet.generate_key().decode()})
    encrypted = encrypt_data("sk-live-key", settings=rotated)

    assert decrypt_data(encrypted, settings=rotated) == "sk-live-key"
    with pytest.raises(InvalidToken):
        decrypt_data(encrypted, settings=test_settings)

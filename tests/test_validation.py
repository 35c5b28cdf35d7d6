import pytest

from questify.core.errors import ValidationError
from questify.core.validation import is_valid_email, validate_login, validate_registration


@pytest.mark.parametrize(
    ("email", "password", "message"),
    [
        ("", "secret", "Email is required"),
        ("  ", "secret", "Email is required"),
        ("a@b.co", " ", "Password is required"),
        ("not-an-email", "secret", "Please enter a valid email address"),
    ],
)
def test_login_validation_messages(email, password, message):
    with pytest.raises(ValidationError) as excinfo:
        validate_login(email, password)
    assert excinfo.value.message == message


def test_valid_login_passes():
    validate_login("student@school.edu", "secret")


@pytest.mark.parametrize(
    ("fields", "message"),
    [
        (("", "a@b.co", "secret1", "secret1"), "Name is required"),
        (("Ann", "a@b", "secret1", "secret1"), "Please enter a valid email address"),
        (("Ann", "a@b.co", "12345", "12345"), "Password must be at least 6 characters"),
        (("Ann", "a@b.co", "secret1", "secret2"), "Passwords do not match"),
    ],
)
def test_registration_validation_messages(fields, message):
    with pytest.raises(ValidationError) as excinfo:
        validate_registration(*fields)
    assert excinfo.value.message == message


def test_email_pattern():
    assert is_valid_email("x.y@example.org")
    assert not is_valid_email("x y@example.org")
    assert not is_valid_email("x@example")


def test_email_with_trailing_newline_is_rejected():
    assert not is_valid_email("a@b.c\n")
    assert is_valid_email("a@b.c")

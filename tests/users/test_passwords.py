import string

import pytest

from hrms.users.passwords import SYMBOLS, PasswordPolicy, generate_password


def test_strong_password_passes():
    assert PasswordPolicy().validate("Str0ng#Pass") == []


@pytest.mark.parametrize(
    "password, fragment",
    [
        ("Sh0r#t", "at least 8 characters"),
        ("alllower1#", "uppercase"),
        ("ALLUPPER1#", "lowercase"),
        ("NoDigits#!", "number"),
        ("NoSymbol123", "special character"),
    ],
)
def test_each_rule_is_reported(password, fragment):
    errors = PasswordPolicy().validate(password)
    assert any(fragment in e for e in errors)


def test_too_long_password():
    errors = PasswordPolicy().validate("Aa1#" * 33)
    assert any("must not exceed 128" in e for e in errors)


def test_password_must_not_equal_or_contain_email():
    policy = PasswordPolicy()
    assert "Password cannot be the same as your email address." in policy.validate("Jo@x.io1A", email="jo@x.io1a")
    assert "Password cannot contain your email address." in policy.validate("Xjo@x.io!9", email="JO@x.io")


def test_password_must_not_contain_employee_code():
    errors = PasswordPolicy().validate("#1oijodo20240001", employee_code="OIJODO20240001")
    assert "Password cannot contain your Employee ID." in errors


def test_generated_password_satisfies_policy():
    for _ in range(50):
        password = generate_password()
        assert len(password) == 12
        assert any(c in string.ascii_uppercase for c in password)
        assert any(c in string.ascii_lowercase for c in password)
        assert any(c in string.digits for c in password)
        assert any(c in SYMBOLS for c in password)
        assert PasswordPolicy().validate(password) == []


def test_generate_password_rejects_tiny_lengths():
    with pytest.raises(ValueError):
        generate_password(3)

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pytest

from freecrm.contexts.two_factor.adapters.outbound.security.two_factor import (
    StandardOtpAuthUriBuilder,
)


def test_build_uri_renders_key_uri_format_with_percent_encoding() -> None:
    """
    Verify URI layout, explicit SHA1/6/30 parameters and `%20` space encoding.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Issuer and account are percent-encoded with no safe characters.
    Raises:
        AssertionError: If rendered URI differs.
    Side Effects:
        None.
    """
    uri = StandardOtpAuthUriBuilder().build_uri(
        secret="JBSWY3DPEHPK3PXP",
        account_label="alice@example.com",
        issuer="Free CRM",
    )

    assert uri == (
        "otpauth://totp/Free%20CRM:alice%40example.com"
        "?secret=JBSWY3DPEHPK3PXP&issuer=Free%20CRM&algorithm=SHA1&digits=6&period=30"
    )


def test_build_uri_is_parseable_and_escapes_reserved_characters() -> None:
    uri = StandardOtpAuthUriBuilder().build_uri(
        secret="jbswy3dpehpk3pxp",
        account_label="ops:team & co",
        issuer="Acme/CRM",
    )

    parsed = urlparse(uri)
    query = parse_qs(parsed.query)
    assert parsed.scheme == "otpauth"
    assert parsed.netloc == "totp"
    assert parsed.path == "/Acme%2FCRM:ops%3Ateam%20%26%20co"
    assert query == {
        "secret": ["JBSWY3DPEHPK3PXP"],
        "issuer": ["Acme/CRM"],
        "algorithm": ["SHA1"],
        "digits": ["6"],
        "period": ["30"],
    }


@pytest.mark.parametrize(
    ("secret", "account_label", "issuer", "field"),
    [
        ("", "alice", "Free CRM", "secret"),
        ("JBSWY3DPEHPK3PXP", " ", "Free CRM", "account_label"),
        ("JBSWY3DPEHPK3PXP", "alice", "", "issuer"),
    ],
)
def test_build_uri_rejects_empty_inputs(
    secret: str,
    account_label: str,
    issuer: str,
    field: str,
) -> None:
    with pytest.raises(ValueError, match=field):
        StandardOtpAuthUriBuilder().build_uri(
            secret=secret,
            account_label=account_label,
            issuer=issuer,
        )

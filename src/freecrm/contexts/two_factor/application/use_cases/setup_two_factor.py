from __future__ import annotations

from dataclasses import dataclass

from freecrm.contexts.two_factor.application.ports import (
    OtpAuthUriBuilder,
    QrCodeRenderer,
    TotpSecretGenerator,
)

_DEFAULT_ISSUER = "Free CRM"
_URI_PREFIX = "otpauth://totp/"
_QR_DATA_URL_PREFIX = "data:image/png;base64,"


@dataclass(frozen=True, slots=True)
class TwoFactorSetupResult:
    """
    TwoFactorSetupResult — material the UI shows once to enroll an authenticator app.

    Related:
      - src/freecrm/contexts/two_factor/application/use_cases/start_two_factor_enrollment.py
    """

    secret: str
    uri: str
    qr_code_data_url: str

    def __post_init__(self) -> None:
        """
        Validate URI scheme and QR data URL prefix.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            QR payload beyond the prefix is opaque.
        Raises:
            ValueError: If any field is empty or has the wrong prefix.
        Side Effects:
            None.
        """
        if not self.secret:
            raise ValueError("TwoFactorSetupResult.secret must be non-empty")
        if not self.uri.startswith(_URI_PREFIX):
            raise ValueError(f"TwoFactorSetupResult.uri must start with '{_URI_PREFIX}'")
        if not self.qr_code_data_url.startswith(_QR_DATA_URL_PREFIX):
            raise ValueError(
                f"TwoFactorSetupResult.qr_code_data_url must start with '{_QR_DATA_URL_PREFIX}'"
            )

    def __repr__(self) -> str:
        return "TwoFactorSetupResult(secret=***, uri=***, qr_code_data_url=***)"


class SetupTwoFactorUseCase:
    """
    SetupTwoFactorUseCase — generate a secret and render its provisioning URI and QR code.

    Pure composition: nothing is persisted; the caller encrypts and stores the secret.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-policy-v1.md
    Related:
      - src/freecrm/contexts/two_factor/application/ports/totp_secret_generator.py
      - src/freecrm/contexts/two_factor/application/ports/otpauth_uri_builder.py
      - src/freecrm/contexts/two_factor/application/ports/qr_code_renderer.py
    """

    def __init__(
        self,
        *,
        secret_generator: TotpSecretGenerator,
        uri_builder: OtpAuthUriBuilder,
        qr_renderer: QrCodeRenderer,
        issuer: str = _DEFAULT_ISSUER,
    ) -> None:
        """
        Initialize setup dependencies.

        Args:
            secret_generator: Secret source.
            uri_builder: Provisioning URI builder.
            qr_renderer: QR code collaborator.
            issuer: Issuer label shown in authenticator apps.
        Returns:
            None.
        Assumptions:
            Dependencies are initialized and non-null.
        Raises:
            ValueError: If a dependency is missing or issuer is blank.
        Side Effects:
            None.
        """
        if secret_generator is None:  # type: ignore[truthy-bool]
            raise ValueError("SetupTwoFactorUseCase requires secret_generator")
        if uri_builder is None:  # type: ignore[truthy-bool]
            raise ValueError("SetupTwoFactorUseCase requires uri_builder")
        if qr_renderer is None:  # type: ignore[truthy-bool]
            raise ValueError("SetupTwoFactorUseCase requires qr_renderer")
        normalized_issuer = issuer.strip()
        if not normalized_issuer:
            raise ValueError("SetupTwoFactorUseCase requires non-empty issuer")

        self._secret_generator = secret_generator
        self._uri_builder = uri_builder
        self._qr_renderer = qr_renderer
        self._issuer = normalized_issuer

    def setup(self, *, account_label: str) -> TwoFactorSetupResult:
        """
        Produce enrollment material for one account.

        Args:
            account_label: Account label shown in authenticator apps.
        Returns:
            TwoFactorSetupResult: Secret, otpauth URI and QR data URL.
        Assumptions:
            Each call yields a fresh secret.
        Raises:
            ValueError: If account label is empty.
            TwoFactorGenerationError: If randomness is unavailable.
        Side Effects:
            Reads OS CSPRNG.
        """
        secret = self._secret_generator.generate_secret()
        uri = self._uri_builder.build_uri(
            secret=secret,
            account_label=account_label,
            issuer=self._issuer,
        )
        qr_code_data_url = self._qr_renderer.render_data_url(uri=uri)
        return TwoFactorSetupResult(
            secret=secret,
            uri=uri,
            qr_code_data_url=qr_code_data_url,
        )

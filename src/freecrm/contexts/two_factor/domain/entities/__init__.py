from .two_factor_enrollment import TwoFactorEnrollment, TwoFactorEnrollmentState

__all__ = [
    "TwoFactorEnrollment",
    "TwoFactorEnrollmentState",
]

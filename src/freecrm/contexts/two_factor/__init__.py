"""
Two-factor authentication bounded context: TOTP, backup codes and encrypted secret storage.
"""

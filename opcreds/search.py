"""Search key derivation for vault lookups."""

from __future__ import annotations


def build_search_key(issuer_name: str, credential_name: str) -> str:
    """Lowercase both names and join them with a single space.

    No other normalization: surrounding or repeated whitespace and punctuation
    are kept as they appear in the manifest.
    """
    return f"{issuer_name.lower()} {credential_name.lower()}"

"""
Root-level shared test fixtures.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from opcreds.config import reset_config
from opcreds.vault import InMemoryVault, VaultItem

SAMPLE_MANIFEST = """\
[[issuers]]
issuer = "GitLab"

[[issuers.credentials]]
name = "cli PAT"
value = "XYZ"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove OP_CREDS_* env vars and reset the config singleton."""
    for key in ["OP_CREDS_OP_PATH", "OP_CREDS_ACCOUNT", "OP_CREDS_LOG_LEVEL"]:
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def write_manifest(tmp_path: Path):
    """Write manifest text to a temp file and return its path."""

    def _write(text: str = SAMPLE_MANIFEST, name: str = "creds.toml") -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write


@pytest.fixture
def api_credential_item() -> VaultItem:
    """An API Credential item shaped like `op item get --format json` output."""
    return VaultItem.model_validate(
        {
            "id": "abc123",
            "title": "GitLab CLI PAT",
            "category": "API_CREDENTIAL",
            "fields": [
                {"id": "notesPlain", "type": "STRING", "label": "notesPlain", "purpose": "NOTES"},
                {"id": "username", "type": "STRING", "label": "username"},
                {"id": "credential", "type": "CONCEALED", "label": "credential", "value": "old"},
                {"id": "type", "type": "MENU", "label": "type"},
                {
                    "id": "extra",
                    "type": "CONCEALED",
                    "label": "backup",
                    "section": {"id": "add more"},
                },
            ],
        }
    )


@pytest.fixture
def login_item() -> VaultItem:
    """A login item whose password lives in a section."""
    return VaultItem.model_validate(
        {
            "id": "def456",
            "title": "AWS Console root",
            "category": "LOGIN",
            "fields": [
                {"id": "username", "type": "STRING", "label": "username"},
                {
                    "id": "password",
                    "type": "CONCEALED",
                    "label": "password",
                    "section": {"id": "Login", "label": "Login"},
                },
                {"id": "otp", "type": "CONCEALED", "label": "one-time password"},
            ],
        }
    )


@pytest.fixture
def memory_vault(api_credential_item: VaultItem, login_item: VaultItem) -> InMemoryVault:
    return InMemoryVault({"Work": [api_credential_item, login_item]})

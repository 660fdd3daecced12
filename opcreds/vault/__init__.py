"""
1Password access — the only I/O path of this tool.

Public API:
    VaultClient               → protocol: find_item(vault, query), update_field(item_id, field_id, value)
    OpCli                     → production client, shells out to `op`
    InMemoryVault             → scripted client for tests
    VaultItem, ItemField, ... → item models
"""

from __future__ import annotations

from opcreds.vault.client import OpCli, VaultClient
from opcreds.vault.memory import InMemoryVault
from opcreds.vault.models import FieldSection, FieldType, ItemField, VaultItem, VaultListEntry

__all__ = [
    "FieldSection",
    "FieldType",
    "InMemoryVault",
    "ItemField",
    "OpCli",
    "VaultClient",
    "VaultItem",
    "VaultListEntry",
]

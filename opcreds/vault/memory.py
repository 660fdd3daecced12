"""In-memory VaultClient with scripted items, for tests."""

from __future__ import annotations

from dataclasses import dataclass, field

from opcreds.errors import (
    AuthenticationError,
    ItemNotFoundError,
    UpdateError,
    VaultNotFoundError,
)
from opcreds.vault.client import first_title_match
from opcreds.vault.models import VaultItem


@dataclass
class FieldUpdate:
    item_id: str
    field_id: str
    value: str = field(repr=False)
    section_id: str | None = None


class InMemoryVault:
    """Same lookup semantics as OpCli: first listed item whose lowercased title contains the query."""

    def __init__(
        self,
        vaults: dict[str, list[VaultItem]] | None = None,
        *,
        signed_in: bool = True,
    ):
        self.vaults: dict[str, list[VaultItem]] = {
            name: list(items) for name, items in (vaults or {}).items()
        }
        self.signed_in = signed_in
        self.updates: list[FieldUpdate] = []
        self.lookups: list[tuple[str, str]] = []
        # item id -> cause reported by update_field
        self.update_failures: dict[str, str] = {}

    def add_item(self, vault: str, item: VaultItem) -> None:
        self.vaults.setdefault(vault, []).append(item)

    def _require_session(self) -> None:
        if not self.signed_in:
            raise AuthenticationError("not signed in to 1Password", cause="session expired")

    def _item(self, item_id: str) -> VaultItem | None:
        for items in self.vaults.values():
            for item in items:
                if item.id == item_id:
                    return item
        return None

    def find_item(self, vault: str, query: str) -> VaultItem:
        self._require_session()
        self.lookups.append((vault, query))
        if vault not in self.vaults:
            raise VaultNotFoundError(f"Vault {vault!r} not found")
        item = first_title_match(self.vaults[vault], query)
        if item is None:
            raise ItemNotFoundError(f"No item in vault {vault!r} matches {query!r}")
        return item.model_copy(deep=True)

    def update_field(
        self, item_id: str, field_id: str, new_value: str, *, section_id: str | None = None
    ) -> None:
        self._require_session()
        if item_id in self.update_failures:
            raise UpdateError(f"Cannot update item {item_id}", cause=self.update_failures[item_id])
        item = self._item(item_id)
        if item is None:
            raise UpdateError(f"Item {item_id} not found")
        for f in item.fields:
            if f.id == field_id and (f.section.id if f.section else None) == section_id:
                f.value = new_value
                break
        else:
            raise UpdateError(f"Field {field_id!r} not found on item {item_id}")
        self.updates.append(FieldUpdate(item_id, field_id, new_value, section_id))

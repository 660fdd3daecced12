"""
op CLI client — locate vault items and overwrite field values.

Every call is a blocking `subprocess.run` with no timeout; op's own session
(OP_SESSION_*, OP_SERVICE_ACCOUNT_TOKEN or the desktop app integration) is
inherited from the environment.
"""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Sequence
from typing import Protocol, TypeVar

from pydantic import TypeAdapter, ValidationError

from opcreds.config import get_config
from opcreds.errors import (
    AmbiguousMatchError,
    AuthenticationError,
    ItemNotFoundError,
    OpCommandError,
    OpCredsError,
    OpNotFoundError,
    UpdateError,
    VaultNotFoundError,
)
from opcreds.vault.models import VaultItem, VaultListEntry

logger = logging.getLogger(__name__)

OP_INSTALL_HINT = "https://developer.1password.com/docs/cli/get-started/"

# Lowercased fragments of op's stderr, checked in this order
_VAULT_MISSING = ("isn't a vault", "vault not found", "no vault matched")
_AUTH_FAILED = (
    "not currently signed in",
    "account is not signed in",
    "session expired",
    "authorization",
    "signin",
    "sign in",
)
_AMBIGUOUS = ("more than one item matches",)
_ITEM_MISSING = ("isn't an item",)

_ListAdapter = TypeAdapter(list[VaultListEntry])

T = TypeVar("T", VaultItem, VaultListEntry)


class VaultClient(Protocol):
    """The two vault capabilities the updater depends on."""

    def find_item(self, vault: str, query: str) -> VaultItem: ...

    def update_field(
        self, item_id: str, field_id: str, new_value: str, *, section_id: str | None = None
    ) -> None: ...


def first_title_match(items: Sequence[T], query: str) -> T | None:
    """Return the first item whose lowercased title contains ``query``.

    Order is whatever the vault listing returned; extra matches are ignored
    (a warning is logged).
    """
    matches = [item for item in items if query in item.title.lower()]
    if len(matches) > 1:
        logger.warning(
            "%d items match %r, using the first: %s",
            len(matches),
            query,
            ", ".join(m.title for m in matches),
        )
    return matches[0] if matches else None


def classify_op_error(
    stderr: str, *, default: type[OpCredsError] = OpCommandError, action: str = "op"
) -> OpCredsError:
    """Map op's stderr to the most specific error type."""
    cause = stderr.strip() or "no error output"
    lowered = cause.lower()
    if any(s in lowered for s in _VAULT_MISSING):
        return VaultNotFoundError(f"{action}: vault not found", cause=cause)
    if any(s in lowered for s in _AUTH_FAILED):
        return AuthenticationError(f"{action}: not signed in to 1Password", cause=cause)
    if any(s in lowered for s in _AMBIGUOUS):
        return AmbiguousMatchError(f"{action}: more than one item matches", cause=cause)
    if any(s in lowered for s in _ITEM_MISSING):
        return ItemNotFoundError(f"{action}: item not found", cause=cause)
    return default(f"{action} failed", cause=cause)


class OpCli:
    """VaultClient backed by the 1Password `op` command."""

    def __init__(self, op_path: str | None = None, account: str | None = None):
        cfg = get_config()
        self.op_path = op_path or cfg.op_path
        self.account = cfg.account if account is None else account

    def _run(
        self,
        args: list[str],
        *,
        stdin: str | None = None,
        default_error: type[OpCredsError] = OpCommandError,
        classify: bool = True,
    ) -> str:
        """Run op and return stdout. Raises on a non-zero exit."""
        cmd = [self.op_path, *args]
        if self.account:
            cmd += ["--account", self.account]
        action = f"op {' '.join(args[:2])}"
        logger.debug("Running %s", " ".join(cmd))

        try:
            # op reads item templates from a piped stdin, so never hand it ours
            if stdin is None:
                proc = subprocess.run(
                    cmd, stdin=subprocess.DEVNULL, capture_output=True, text=True
                )
            else:
                proc = subprocess.run(cmd, input=stdin, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise OpNotFoundError(
                f"op CLI not found at {self.op_path!r}", cause=f"install it: {OP_INSTALL_HINT}"
            ) from e

        if proc.returncode != 0:
            if not classify:
                raise default_error(
                    f"{action} exited with {proc.returncode}",
                    cause=proc.stderr.strip() or "no error output",
                )
            raise classify_op_error(proc.stderr, default=default_error, action=action)
        return proc.stdout

    @staticmethod
    def _decode(stdout: str, action: str) -> object:
        try:
            return json.loads(stdout) if stdout.strip() else None
        except json.JSONDecodeError as e:
            raise OpCommandError(f"{action} returned invalid JSON", cause=str(e)) from e

    def list_items(self, vault: str) -> list[VaultListEntry]:
        """List every item in a vault (ids and titles only)."""
        stdout = self._run(["item", "list", "--vault", vault, "--format", "json"])
        data = self._decode(stdout, "op item list")
        try:
            return _ListAdapter.validate_python(data or [])
        except ValidationError as e:
            raise OpCommandError("op item list returned unexpected data", cause=str(e)) from e

    def get_item_template(self, item_id: str) -> dict:
        """Fetch the raw item JSON, the same shape `op item edit` accepts."""
        stdout = self._run(
            ["item", "get", item_id, "--format", "json"], default_error=ItemNotFoundError
        )
        data = self._decode(stdout, "op item get")
        if not isinstance(data, dict):
            raise OpCommandError("op item get returned unexpected data", cause=repr(data)[:200])
        return data

    def get_item(self, item_id: str) -> VaultItem:
        data = self.get_item_template(item_id)
        try:
            return VaultItem.model_validate(data)
        except ValidationError as e:
            raise OpCommandError("op item get returned unexpected data", cause=str(e)) from e

    def find_item(self, vault: str, query: str) -> VaultItem:
        """Locate the first item in ``vault`` whose title contains ``query``."""
        entry = first_title_match(self.list_items(vault), query)
        if entry is None:
            raise ItemNotFoundError(f"No item in vault {vault!r} matches {query!r}")
        logger.info("Matched %r to %s (id: %s)", query, entry.title, entry.id)
        return self.get_item(entry.id)

    def update_field(
        self, item_id: str, field_id: str, new_value: str, *, section_id: str | None = None
    ) -> None:
        """Overwrite one field's value, piping the edited template to `op item edit`.

        Field ids are only unique within a section, so the field is matched on
        ``(section_id, field_id)``; ``None`` means top-level. The value is sent
        on stdin and never appears in the process arguments.
        """
        try:
            template = self.get_item_template(item_id)
        except OpCredsError as e:
            raise UpdateError(f"Cannot read item {item_id} before editing", cause=str(e)) from e

        for field in template.get("fields") or []:
            if field.get("id") == field_id and _section_id(field) == section_id:
                field["value"] = new_value
                break
        else:
            raise UpdateError(
                f"Field {field_id!r} not found on item {item_id}",
                cause=f"section {section_id!r}" if section_id else None,
            )

        self._run(
            ["item", "edit", item_id],
            stdin=json.dumps(template),
            default_error=UpdateError,
            classify=False,
        )
        logger.info("Updated field %r on item %s", field_id, item_id)


def _section_id(field: dict) -> str | None:
    section = field.get("section")
    return section.get("id") if isinstance(section, dict) else None

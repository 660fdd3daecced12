"""
Credential updater — run every manifest entry against the vault.

Each credential moves PENDING -> LOCATED -> FIELD_SELECTED -> UPDATED, or to
FAILED at whichever step raised. Credentials are processed one at a time in
manifest order. By default the first failure stops the run; with
``keep_going`` it is recorded and the next credential is processed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from opcreds.errors import OpCredsError
from opcreds.fields import select_field
from opcreds.manifest import Credential, Issuer, Manifest
from opcreds.search import build_search_key
from opcreds.vault.client import VaultClient
from opcreds.vault.models import ItemField, VaultItem

logger = logging.getLogger(__name__)


class CredentialState(str, Enum):
    PENDING = "pending"
    LOCATED = "located"
    FIELD_SELECTED = "field_selected"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass
class CredentialOutcome:
    issuer: str
    credential: str
    search_key: str
    state: CredentialState = CredentialState.PENDING
    item: VaultItem | None = None
    field: ItemField | None = None
    error: OpCredsError | None = None

    @property
    def field_name(self) -> str | None:
        return self.field.display_name if self.field else None


@dataclass
class RunReport:
    vault: str
    dry_run: bool = False
    outcomes: list[CredentialOutcome] = field(default_factory=list)

    @property
    def updated(self) -> list[CredentialOutcome]:
        return [o for o in self.outcomes if o.state is CredentialState.UPDATED]

    @property
    def failed(self) -> list[CredentialOutcome]:
        return [o for o in self.outcomes if o.state is CredentialState.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failed


def update_credential(
    client: VaultClient,
    vault: str,
    issuer: Issuer,
    cred: Credential,
    *,
    dry_run: bool = False,
) -> CredentialOutcome:
    """Process one credential.

    Never raises OpCredsError: a failure leaves the outcome FAILED with the
    error, issuer/credential context attached, in ``outcome.error``.
    """
    outcome = CredentialOutcome(
        issuer=issuer.issuer,
        credential=cred.name,
        search_key=build_search_key(issuer.issuer, cred.name),
    )
    try:
        outcome.item = client.find_item(vault, outcome.search_key)
        outcome.state = CredentialState.LOCATED

        outcome.field = select_field(outcome.item.fields)
        outcome.state = CredentialState.FIELD_SELECTED

        if dry_run:
            logger.info("Dry run: skipping update of %s", outcome.item)
            return outcome

        client.update_field(
            outcome.item.id,
            outcome.field.id,
            cred.value,
            section_id=outcome.field.section.id if outcome.field.section else None,
        )
        outcome.state = CredentialState.UPDATED
        return outcome
    except OpCredsError as e:
        outcome.state = CredentialState.FAILED
        outcome.error = e.with_context(
            issuer=outcome.issuer, credential=outcome.credential, search_key=outcome.search_key
        )
        return outcome


def update_credentials(
    manifest: Manifest,
    vault: str,
    client: VaultClient,
    *,
    dry_run: bool = False,
    keep_going: bool = False,
    on_issuer: Callable[[Issuer], None] | None = None,
    on_outcome: Callable[[CredentialOutcome], None] | None = None,
) -> RunReport:
    """Update every credential in the manifest, sequentially.

    Without ``keep_going`` the first OpCredsError is re-raised; outcomes
    processed so far are lost along with it. ``on_issuer`` and ``on_outcome``
    are progress callbacks for the CLI.
    """
    report = RunReport(vault=vault, dry_run=dry_run)
    for issuer in manifest.issuers:
        if on_issuer:
            on_issuer(issuer)
        for cred in issuer.credentials:
            outcome = update_credential(client, vault, issuer, cred, dry_run=dry_run)
            if outcome.error is not None:
                if not keep_going:
                    raise outcome.error
                logger.info("Continuing after failure: %s", outcome.error)
            report.outcomes.append(outcome)
            if on_outcome:
                on_outcome(outcome)

    logger.info(
        "Run complete: %d updated, %d failed, %d total",
        len(report.updated),
        len(report.failed),
        len(report.outcomes),
    )
    return report

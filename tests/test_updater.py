"""Tests for opcreds.updater — end-to-end runs against an in-memory vault."""

from __future__ import annotations

import pytest

from opcreds.errors import (
    AuthenticationError,
    ItemNotFoundError,
    NoUpdatableFieldError,
    UpdateError,
    VaultNotFoundError,
)
from opcreds.manifest import parse_manifest
from opcreds.updater import CredentialState, update_credential, update_credentials
from opcreds.vault import InMemoryVault, VaultItem


def _manifest(*issuers):
    return parse_manifest(
        {
            "issuers": [
                {"issuer": name, "credentials": [{"name": n, "value": v} for n, v in creds]}
                for name, creds in issuers
            ]
        }
    )


def _text_only_item(id="zzz", title="Jira API token"):
    return VaultItem.model_validate(
        {"id": id, "title": title, "fields": [{"id": "username", "type": "STRING"}]}
    )


class TestUpdateCredential:
    def test_gitlab_scenario(self, memory_vault):
        manifest = _manifest(("GitLab", [("cli PAT", "XYZ")]))
        issuer, cred = next(manifest.pairs())

        outcome = update_credential(memory_vault, "Work", issuer, cred)

        assert outcome.state is CredentialState.UPDATED
        assert outcome.search_key == "gitlab cli pat"
        assert outcome.item.title == "GitLab CLI PAT"
        assert outcome.field_name == "credential"
        assert memory_vault.lookups == [("Work", "gitlab cli pat")]
        assert [(u.item_id, u.field_id, u.value) for u in memory_vault.updates] == [
            ("abc123", "credential", "XYZ")
        ]

    def test_failure_is_recorded_with_context(self, memory_vault):
        manifest = _manifest(("GitLab", [("nothing here", "v")]))
        issuer, cred = next(manifest.pairs())

        outcome = update_credential(memory_vault, "Work", issuer, cred)

        assert outcome.state is CredentialState.FAILED
        assert isinstance(outcome.error, ItemNotFoundError)
        assert outcome.error.issuer == "GitLab"
        assert outcome.error.credential == "nothing here"
        assert outcome.error.search_key == "gitlab nothing here"
        assert "gitlab nothing here" in str(outcome.error)

    def test_dry_run_stops_after_selection(self, memory_vault):
        manifest = _manifest(("GitLab", [("cli PAT", "XYZ")]))
        issuer, cred = next(manifest.pairs())

        outcome = update_credential(memory_vault, "Work", issuer, cred, dry_run=True)

        assert outcome.state is CredentialState.FIELD_SELECTED
        assert outcome.field.id == "credential"
        assert memory_vault.updates == []


class TestUpdateCredentials:
    def test_updates_every_credential_in_order(self, memory_vault):
        manifest = _manifest(
            ("GitLab", [("cli PAT", "XYZ")]),
            ("AWS", [("Console root", "hunter2")]),
        )

        report = update_credentials(manifest, "Work", memory_vault)

        assert report.ok
        assert len(report.updated) == 2
        assert [(u.item_id, u.field_id) for u in memory_vault.updates] == [
            ("abc123", "credential"),
            ("def456", "otp"),
        ]

    def test_selected_field_gets_new_value(self, memory_vault):
        update_credentials(_manifest(("AWS", [("console root", "hunter2")])), "Work", memory_vault)
        item = memory_vault.find_item("Work", "aws console root")
        values = {f.id: f.value for f in item.fields}
        assert values["otp"] == "hunter2"
        assert values["password"] is None

    def test_zero_issuers(self, memory_vault):
        report = update_credentials(_manifest(), "Work", memory_vault)
        assert report.ok
        assert report.outcomes == []
        assert memory_vault.lookups == []

    def test_issuer_without_credentials(self, memory_vault):
        report = update_credentials(_manifest(("GitLab", [])), "Work", memory_vault)
        assert report.ok
        assert report.outcomes == []

    def test_halts_on_first_failure(self, memory_vault):
        manifest = _manifest(
            ("GitLab", [("missing", "v"), ("cli PAT", "XYZ")]),
        )
        with pytest.raises(ItemNotFoundError) as exc:
            update_credentials(manifest, "Work", memory_vault)
        assert exc.value.credential == "missing"
        assert memory_vault.updates == []

    def test_keep_going_records_failures(self, memory_vault):
        manifest = _manifest(
            ("GitLab", [("missing", "v"), ("cli PAT", "XYZ")]),
        )
        report = update_credentials(manifest, "Work", memory_vault, keep_going=True)

        assert not report.ok
        assert [o.state for o in report.outcomes] == [
            CredentialState.FAILED,
            CredentialState.UPDATED,
        ]
        assert len(memory_vault.updates) == 1

    def test_no_concealed_field_makes_no_update(self, memory_vault):
        memory_vault.add_item("Work", _text_only_item())
        with pytest.raises(NoUpdatableFieldError):
            update_credentials(_manifest(("Jira", [("API token", "t")])), "Work", memory_vault)
        assert memory_vault.updates == []

    def test_vault_not_found_before_field_selection(self, memory_vault, monkeypatch):
        calls = []
        monkeypatch.setattr(
            "opcreds.updater.select_field", lambda fields: calls.append(fields)
        )
        with pytest.raises(VaultNotFoundError) as exc:
            update_credentials(_manifest(("GitLab", [("cli PAT", "X")])), "Nope", memory_vault)
        assert calls == []
        assert exc.value.search_key == "gitlab cli pat"

    def test_not_signed_in(self, api_credential_item):
        vault = InMemoryVault({"Work": [api_credential_item]}, signed_in=False)
        with pytest.raises(AuthenticationError):
            update_credentials(_manifest(("GitLab", [("cli PAT", "X")])), "Work", vault)

    def test_update_error_carries_cause(self, memory_vault):
        memory_vault.update_failures["abc123"] = "item is locked"
        with pytest.raises(UpdateError) as exc:
            update_credentials(_manifest(("GitLab", [("cli PAT", "X")])), "Work", memory_vault)
        assert exc.value.cause == "item is locked"
        assert "item is locked" in str(exc.value)

    def test_rerun_is_idempotent(self, memory_vault):
        manifest = _manifest(("GitLab", [("cli PAT", "XYZ")]))
        update_credentials(manifest, "Work", memory_vault)
        update_credentials(manifest, "Work", memory_vault)
        item = memory_vault.find_item("Work", "gitlab cli pat")
        assert next(f for f in item.fields if f.id == "credential").value == "XYZ"

    def test_duplicate_issuers_processed_independently(self, memory_vault):
        manifest = _manifest(
            ("GitLab", [("cli PAT", "one")]),
            ("GitLab", [("cli PAT", "two")]),
        )
        report = update_credentials(manifest, "Work", memory_vault)
        assert [u.value for u in memory_vault.updates] == ["one", "two"]
        assert len(report.outcomes) == 2

    def test_progress_callbacks(self, memory_vault):
        issuers, outcomes = [], []
        update_credentials(
            _manifest(("GitLab", [("cli PAT", "XYZ")])),
            "Work",
            memory_vault,
            on_issuer=lambda i: issuers.append(i.issuer),
            on_outcome=lambda o: outcomes.append(o.state),
        )
        assert issuers == ["GitLab"]
        assert outcomes == [CredentialState.UPDATED]

    def test_sectioned_field_with_shared_id(self, memory_vault):
        memory_vault.add_item(
            "Work",
            VaultItem.model_validate(
                {
                    "id": "npm1",
                    "title": "npm publish token",
                    "fields": [
                        {"id": "token", "type": "STRING", "label": "token name", "value": "ci"},
                        {"id": "token", "type": "CONCEALED", "section": {"id": "s1"}},
                    ],
                }
            ),
        )

        update_credentials(_manifest(("npm", [("publish token", "npm_abc")])), "Work", memory_vault)

        assert [(u.field_id, u.section_id) for u in memory_vault.updates] == [("token", "s1")]
        item = memory_vault.find_item("Work", "npm publish token")
        assert [f.value for f in item.fields] == ["ci", "npm_abc"]

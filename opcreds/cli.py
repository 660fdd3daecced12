"""
update_op_creds CLI — overwrite secrets in a 1Password vault from a manifest.

Usage:
    update_op_creds creds.toml Work           # update every credential in vault "Work"
    update_op_creds creds.toml Work --dry-run # locate items and fields, write nothing
    update_op_creds creds.toml Work --keep-going

Exit codes: 0 when every credential was updated (or there was nothing to do),
1 on any failure.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from opcreds import __version__
from opcreds.config import Config, get_config
from opcreds.errors import ManifestParseError, OpCredsError
from opcreds.manifest import Issuer, load_manifest
from opcreds.prerequisites import check_op
from opcreds.updater import CredentialOutcome, CredentialState, update_credentials
from opcreds.vault.client import OpCli


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="update_op_creds",
        description="Overwrite secrets in a 1Password vault from a credential manifest.",
    )
    parser.add_argument("credentials", type=Path, help="Path to the updated credentials")
    parser.add_argument("vault", help="1Password vault to update credentials in")
    parser.add_argument(
        "-n", "--dry-run", action="store_true", help="Locate items and fields without uploading edits"
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Report a failing credential and continue with the rest",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)"
    )
    parser.add_argument(
        "--version", action="version", version=f"update_op_creds {__version__}"
    )

    args = parser.parse_args(argv)
    cfg = get_config()
    _setup_logging(cfg, args.verbose)

    try:
        manifest = load_manifest(args.credentials)
    except ManifestParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if len(manifest) == 0:
        print("No credentials in manifest, nothing to update.")
        return 0

    prereq = check_op(cfg.op_path)
    if not prereq.ok:
        print(f"Error: {prereq.name} not available: {prereq.hint}", file=sys.stderr)
        return 1

    client = OpCli(op_path=cfg.op_path, account=cfg.account)
    try:
        report = update_credentials(
            manifest,
            args.vault,
            client,
            dry_run=args.dry_run,
            keep_going=args.keep_going,
            on_issuer=_print_issuer,
            on_outcome=_print_outcome,
        )
    except OpCredsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    verb = "located" if args.dry_run else "updated"
    done = len(report.outcomes) - len(report.failed)
    print(f"{done}/{len(report.outcomes)} credential(s) {verb} in vault {args.vault}")
    if report.failed:
        print(f"{len(report.failed)} credential(s) failed", file=sys.stderr)
        return 1
    return 0


def _setup_logging(cfg: Config, verbose: int) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = cfg.log_level_number
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _print_issuer(issuer: Issuer) -> None:
    print(f"Issuer: {issuer.issuer.lower()}")


def _print_outcome(outcome: CredentialOutcome) -> None:
    if outcome.state is CredentialState.UPDATED:
        print(
            f'placed credential "{outcome.credential}" into field '
            f'"{outcome.field_name}" of vault item {outcome.item}'
        )
    elif outcome.state is CredentialState.FIELD_SELECTED:
        print(
            f'would place credential "{outcome.credential}" into field '
            f'"{outcome.field_name}" of vault item {outcome.item}'
        )
    elif outcome.state is CredentialState.FAILED:
        print(f"Error: {outcome.error}", file=sys.stderr)


if __name__ == "__main__":
    sys.exit(main())

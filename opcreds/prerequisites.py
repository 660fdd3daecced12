"""Check that the 1Password CLI is installed."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass

from opcreds.vault.client import OP_INSTALL_HINT

# `op item edit` reading a JSON template from stdin needs op 2.x
REQUIRED_MIN = "2.0.0"


@dataclass
class PrereqResult:
    name: str
    found: bool
    version: str
    required_min: str
    hint: str

    @property
    def ok(self) -> bool:
        return self.found


def check_op(op_path: str = "op") -> PrereqResult:
    """Check that op >= 2 is on PATH (or at ``op_path``)."""
    path = shutil.which(op_path)
    if not path:
        return PrereqResult(
            name="1Password CLI",
            found=False,
            version="",
            required_min=REQUIRED_MIN,
            hint=OP_INSTALL_HINT,
        )

    try:
        result = subprocess.run([path, "--version"], capture_output=True, text=True, timeout=5)
        version = result.stdout.strip().lstrip("v")
        major = int(version.split(".")[0])
        return PrereqResult(
            name="1Password CLI",
            found=major >= 2,
            version=version,
            required_min=REQUIRED_MIN,
            hint=f"op {version} found but >= 2 required" if major < 2 else "",
        )
    except (OSError, ValueError, subprocess.SubprocessError):
        return PrereqResult(
            name="1Password CLI",
            found=False,
            version="",
            required_min=REQUIRED_MIN,
            hint="Failed to detect op version",
        )

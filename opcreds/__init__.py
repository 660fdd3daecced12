"""update-op-creds: rotate secrets stored in a 1Password vault from a manifest."""

__version__ = "0.1.0"

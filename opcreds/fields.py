"""
Field selection — which field of a located item receives the new secret.

Tiers are evaluated in order; within a tier the item's own field order
decides. The first field satisfying the earliest tier wins:

    1. concealed, top-level, id "credential" (API Credential items)
    2. concealed, top-level
    3. concealed, any section
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from opcreds.errors import NoUpdatableFieldError
from opcreds.vault.models import ItemField

logger = logging.getLogger(__name__)

PRIMARY_FIELD_ID = "credential"

FieldPredicate = Callable[[ItemField], bool]

TIERS: list[tuple[str, FieldPredicate]] = [
    (
        "top-level concealed 'credential'",
        lambda f: f.concealed and f.top_level and f.id == PRIMARY_FIELD_ID,
    ),
    ("top-level concealed", lambda f: f.concealed and f.top_level),
    ("concealed", lambda f: f.concealed),
]


def select_field(fields: Sequence[ItemField]) -> ItemField:
    """Pick the field to overwrite. Raises NoUpdatableFieldError if nothing is concealed."""
    for name, predicate in TIERS:
        for field in fields:
            if predicate(field):
                logger.debug("Selected field %r (%s)", field.id, name)
                return field
    raise NoUpdatableFieldError(
        "Item has no concealed field to update",
        cause=f"fields: {', '.join(f.id for f in fields) or 'none'}",
    )

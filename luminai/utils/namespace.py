"""Isolation-key derivation for per-client, per-document vector data.

Every vector-index operation for a document is scoped to exactly one
namespace, ``{client_id}_{document_base_name}``.  Two different
``(client_id, file_name)`` pairs only collide when the inputs themselves
collide (e.g. ``("a_b", "c.pdf")`` and ``("a", "b_c.pdf")``); callers must
pick distinct names.
"""

from __future__ import annotations

import os


def document_base_name(file_name: str) -> str:
    """Return *file_name* with its final extension stripped.

    ``"report.v2.pdf"`` -> ``"report.v2"``; ``"notes"`` -> ``"notes"``.
    """
    base, _ext = os.path.splitext(file_name)
    return base


def build_namespace(client_id: str, file_name: str) -> str:
    """Derive the isolation key for a client's document."""
    return f"{client_id}_{document_base_name(file_name)}"

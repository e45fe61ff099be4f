from __future__ import annotations

import uuid


def new_id(prefix: str) -> str:
    """Server-generated string id, e.g. 'task-3f2a...'."""
    return f"{prefix}-{uuid.uuid4().hex}"

"""
Deterministic attention identifiers.

An attention_id is content-addressed: the same logical event always hashes
to the same id, which is what lets per-user overlay state be stored without
persisting the items themselves.
"""

import hashlib

ATTENTION_ID_LENGTH = 32


def _frame(field: str) -> bytes:
    # <byte length>:<bytes> so no field value can be mistaken for a boundary
    data = field.encode("utf-8")
    return str(len(data)).encode("ascii") + b":" + data


def generate_attention_id(
    source_type: str,
    source_id: str,
    attention_type: str,
    reason_code: str
) -> str:
    """
    Hash the four identity fields into a 32 character lowercase hex id.

    Args:
        source_type: Kind of source object ("project", "notification", ...)
        source_id: Id of the source object
        attention_type: Classification ("action_required", ...)
        reason_code: Short machine key for why the item exists

    Returns:
        First 32 hex characters of the SHA-256 digest of the framed fields
    """
    payload = b"".join(
        _frame(field) for field in (source_type, source_id, attention_type, reason_code)
    )
    return hashlib.sha256(payload).hexdigest()[:ATTENTION_ID_LENGTH]

"""
Content hashing for model SQL.
"""

import hashlib


def compute_sql_hash(sql: str | None) -> str:
    """
    Compute the SHA256 hash of a SQL text.

    Used to fingerprint both the source of a model and the statements that were
    actually executed for it.

    Args:
        sql: SQL text

    Returns:
        SHA256 hash as a hexadecimal string, or an empty string for empty input
    """
    if not sql:
        return ""

    return hashlib.sha256(sql.encode("utf-8")).hexdigest()

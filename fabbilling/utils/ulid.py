"""
ULID (Universally Unique Lexicographically Sortable Identifier) utilities.

Profiles are keyed by prefixed ULIDs: time-ordered, globally unique and
readable in logs ("prof_01ARZ3NDEKTSV4RRFFQ69G5FAV").
"""

from ulid import ULID


def generate_prefixed_ulid(prefix: str) -> str:
  """
  Generate a prefixed ULID for better readability and type identification.

  Args:
      prefix: A short prefix to identify the record type

  Returns:
      A prefixed ULID string.
      Example: "prof_01ARZ3NDEKTSV4RRFFQ69G5FAV"
  """
  return f"{prefix}_{ULID()}"

"""Favorites domain components split by responsibility.

``codec`` converts between the stored string and handle lists, ``algorithm``
plans merges and removals, and ``errors`` holds the exception taxonomy plus
the store error classifier. None of them perform I/O.
"""

from .algorithm import (
    MergeOutcome,
    RemovalOutcome,
    WriteAction,
    WritePlan,
    plan_add,
    plan_remove,
)
from .codec import decode, decode_incoming, dedupe, encode

__all__ = [
    "MergeOutcome",
    "RemovalOutcome",
    "WriteAction",
    "WritePlan",
    "decode",
    "decode_incoming",
    "dedupe",
    "encode",
    "plan_add",
    "plan_remove",
]

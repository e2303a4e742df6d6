from typing import AbstractSet


def next_uid(existing_uids: AbstractSet[int]) -> int:
    """
    Returns the smallest non-negative integer not present in existing_uids.
    The set must be rebuilt from the live entries right before each call.
    """
    uid = 0
    while uid in existing_uids:
        uid += 1
    return uid

# -*- coding: utf-8 -*-

from typing import Iterable, List, Sequence, Union

from .records import Destination


# Google Analytics limits the number of destinations an audience can be
# linked to: https://support.google.com/analytics/answer/2611404
DESTINATION_BATCH_SIZE = 10
LINKED_FOREIGN_ACCOUNT_KIND = 'analytics#linkedForeignAccount'

DestinationLike = Union[Destination, Sequence]


def chunk(items: Sequence, size: int) -> List[list]:
    """
    Split a sequence into consecutive chunks of `size` items.

    The last chunk holds the remainder. The input sequence is left untouched.

    Raises:
        ValueError: If size is not a positive integer.
    """
    if size <= 0:
        raise ValueError(f"Chunk size must be a positive integer, got {size}.")
    items = list(items)
    return [items[i:i + size] for i in range(0, len(items), size)]


def _as_destination(destination: DestinationLike) -> Destination:
    if isinstance(destination, Destination):
        return destination
    return Destination(linked_account_id=destination[0], type=destination[1])


def to_wire_format(batch: Iterable[DestinationLike]) -> List[dict]:
    """Turn destinations into the linkedAdAccounts payload expected by the API."""
    wire = []
    for destination in map(_as_destination, batch):
        wire.append({
            'kind': LINKED_FOREIGN_ACCOUNT_KIND,
            'type': destination.type,
            'linkedAccountId': destination.linked_account_id,
        })
    return wire


def to_display_string(batch: Iterable[DestinationLike]) -> str:
    """Comma separated list of the linked account IDs, for logging."""
    return ', '.join(str(_as_destination(d).linked_account_id) for d in batch)


def read_destinations(rows: Iterable[Sequence]) -> List[Destination]:
    """Build destinations from tabular rows, skipping rows without an account ID."""
    destinations = []
    for row in rows:
        destination = Destination.from_row(row)
        if destination is not None:
            destinations.append(destination)
    return destinations

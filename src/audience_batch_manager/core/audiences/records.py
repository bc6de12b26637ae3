# -*- coding: utf-8 -*-

"""
Records exchanged between the Analytics API and the tabular store.

Each record knows its own row layout so that callers never index
spreadsheet columns by position.
"""

import re
from dataclasses import dataclass, astuple
from typing import Optional, Sequence

from .urls import build_audience_url


HYPERLINK_TEMPLATE = '=HYPERLINK("{url}", "Link")'
_HYPERLINK_PATTERN = re.compile(r'^=HYPERLINK\("((?:[^"]|"")*)"', re.IGNORECASE)


def _cell(row: Sequence, index: int) -> str:
    """Get a cell of a row as a stripped string, '' when out of range."""
    if index >= len(row) or row[index] is None:
        return ''
    return str(row[index]).strip()


def _hyperlink_target(cell: str) -> str:
    """URL of a '=HYPERLINK(...)' formula cell, the cell itself otherwise."""
    match = _HYPERLINK_PATTERN.match(cell)
    return match.group(1).replace('""', '"') if match else cell


def _is_blank(row: Sequence) -> bool:
    return all(_cell(row, i) == '' for i in range(len(row)))


@dataclass(frozen=True)
class Destination:
    """An ad account an audience can be exported to."""
    linked_account_id: str
    type: str

    @classmethod
    def from_row(cls, row: Sequence) -> Optional['Destination']:
        """Build a destination from a ``[linkedAccountId, type]`` row, None for blank ids."""
        linked_account_id = _cell(row, 0)
        if not linked_account_id:
            return None
        return cls(linked_account_id=linked_account_id, type=_cell(row, 1))

    def to_row(self) -> list:
        return [self.linked_account_id, self.type]


@dataclass(frozen=True)
class LogRecord:
    """One audience created by the tool, as logged to the log sheet."""
    audience_id: str
    account_id: str
    property_id: str
    name: str
    segment: str
    destinations: str
    link: str

    @classmethod
    def from_response(cls, response: dict, destinations: str, source_url: str) -> 'LogRecord':
        """
        Build the log record of a created audience.

        Args:
            response (dict): The audience resource returned by the create call.
            destinations (str): Display string of the destinations linked.
            source_url (str): UI url of the source audience, used to build
                a link to the created one.
        """
        return cls(
            audience_id=str(response['id']),
            account_id=str(response['accountId']),
            property_id=str(response['webPropertyId']),
            name=response.get('name', ''),
            segment=extract_segment(response),
            destinations=destinations,
            link=build_audience_url(source_url, response['id']),
        )

    @classmethod
    def from_row(cls, row: Sequence) -> Optional['LogRecord']:
        """
        Parse a log sheet row, None for blank rows.

        The link cell may hold the hyperlink formula written by `to_row`
        (stores reading formulas) or the bare url.
        """
        if _is_blank(row):
            return None
        return cls(
            audience_id=_cell(row, 0),
            account_id=_cell(row, 1),
            property_id=_cell(row, 2),
            name=_cell(row, 3),
            segment=_cell(row, 4),
            destinations=_cell(row, 5),
            link=_hyperlink_target(_cell(row, 6)),
        )

    def to_row(self) -> list:
        row = list(astuple(self))
        if self.link and not self.link.startswith('='):
            row[-1] = HYPERLINK_TEMPLATE.format(url=self.link.replace('"', '""'))
        return row


@dataclass(frozen=True)
class CatalogRow:
    """A linked ad account discovered for a web property."""
    customer_id: str
    kind: str
    property_name: str
    property_id: str

    def to_row(self) -> list:
        return list(astuple(self))


def extract_segment(audience: dict) -> str:
    """Get the segment definition of an audience, '' if it has none."""
    for definition_key in ('audienceDefinition', 'stateBasedAudienceDefinition'):
        definition = audience.get(definition_key) or {}
        segment = (definition.get('includeConditions') or {}).get('segment')
        if segment:
            return segment
    return ''

# -*- coding: utf-8 -*-

"""
Helpers to read identifiers out of Google Analytics UI urls.

An audience edit page in the Analytics UI looks like:

    https://analytics.google.com/analytics/web/#/a<account>w<property>p<view>/
        admin/audience-lists/m-content.mode=EDIT&m-content.key=<audience>&...

The account id and the *internal* web property id live in the
``a<digits>w<digits>p<digits>`` token, the audience id is the value of the
``m-content.key`` parameter.
"""

import re
from typing import NamedTuple, Optional


ACCOUNT_ID_PATTERN = re.compile(r'a(\d*)w\d*p\d*')
INTERNAL_PROPERTY_ID_PATTERN = re.compile(r'a\d*w(\d*)p\d*')
AUDIENCE_ID_PATTERN = re.compile(r'm-content\.key=([^&]+)')
AUDIENCE_KEY_PATTERN = re.compile(r'(m-content\.key=)[^&]+')


class AudienceUrl(NamedTuple):
    """Identifiers found in an audience UI url. Missing ones are None."""
    account_id: Optional[str]
    internal_property_id: Optional[str]
    audience_id: Optional[str]

    def missing(self) -> list[str]:
        return [field for field, value in zip(self._fields, self) if value is None]


def _extract_first_group(url, pattern: re.Pattern) -> Optional[str]:
    """Return the first capture group of `pattern` in `url`, or None."""
    if not isinstance(url, str):
        return None
    match = pattern.search(url)
    if match:
        return match.group(1)
    return None


def extract_account_id(url) -> Optional[str]:
    """Extract the account ID from an Analytics UI url, None if not found."""
    return _extract_first_group(url, ACCOUNT_ID_PATTERN)


def extract_internal_property_id(url) -> Optional[str]:
    """Extract the internal web property ID from an Analytics UI url, None if not found."""
    return _extract_first_group(url, INTERNAL_PROPERTY_ID_PATTERN)


def extract_audience_id(url) -> Optional[str]:
    """Extract the audience ID from an Analytics UI url, None if not found."""
    return _extract_first_group(url, AUDIENCE_ID_PATTERN)


def parse_audience_url(url) -> AudienceUrl:
    """Extract all the identifiers of an audience UI url at once."""
    return AudienceUrl(
        account_id=extract_account_id(url),
        internal_property_id=extract_internal_property_id(url),
        audience_id=extract_audience_id(url),
    )


def build_audience_url(url: str, audience_id: str) -> str:
    """
    Build the UI url of another audience from an example url.

    Only the value of the ``m-content.key`` parameter is replaced, the rest
    of the url is kept as is.

    Args:
        url (str): An audience UI url.
        audience_id (str): The ID of the audience the new url should point to.

    Returns:
        str: The new url.
    """
    return AUDIENCE_KEY_PATTERN.sub(
        lambda match: match.group(1) + str(audience_id), url, count=1
    )

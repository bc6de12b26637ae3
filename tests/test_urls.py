from audience_batch_manager.core.audiences.urls import (
    build_audience_url,
    extract_account_id,
    extract_audience_id,
    extract_internal_property_id,
    parse_audience_url,
)

from conftest import build_url


def test_extract_audience_id():
    assert extract_audience_id(build_url(key='aBcDe12345')) == 'aBcDe12345'


def test_extract_audience_id_missing_parameter():
    url = ('https://analytics.google.com/analytics/web/#/'
           'a111111111w11111111p111111111/admin/audience-lists/'
           '&m-content-audienceListsTabContainer.rowShow=10')
    assert extract_audience_id(url) is None


def test_extract_account_id():
    assert extract_account_id(build_url(account_id='111222333')) == '111222333'


def test_extract_internal_property_id():
    assert extract_internal_property_id(build_url(property_id='444555666')) == '444555666'


def test_non_matching_input_yields_none():
    for value in ['', 'https://example.com/', None, 42]:
        ids = parse_audience_url(value)
        assert ids == (None, None, None)
        assert ids.missing() == ['account_id', 'internal_property_id', 'audience_id']


def test_parse_audience_url():
    ids = parse_audience_url(build_url(key='k1', account_id='1', property_id='2'))
    assert ids.account_id == '1'
    assert ids.internal_property_id == '2'
    assert ids.audience_id == 'k1'
    assert ids.missing() == []


def test_build_audience_url():
    old_key, new_key = 'aBcDe12345', 'ZzZzZzYyXx111'
    url = build_audience_url(build_url(key=old_key), new_key)
    assert url == build_url(key=new_key)
    assert old_key not in url
    assert extract_audience_id(url) == new_key


def test_build_audience_url_round_trips():
    original = build_url(key='aBcDe12345')
    changed = build_audience_url(original, 'other')
    assert build_audience_url(changed, 'aBcDe12345') == original


def test_build_audience_url_without_parameter_is_unchanged():
    url = 'https://analytics.google.com/analytics/web/#/a1w2p3/admin/'
    assert build_audience_url(url, 'new') == url


def test_build_audience_url_keeps_backslashes_literal():
    url = build_audience_url(build_url(key='old'), r'a\1b')
    assert extract_audience_id(url) == r'a\1b'

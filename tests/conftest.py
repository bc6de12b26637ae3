import pytest

from audience_batch_manager.core.audiences.manager import SHEET_HEADERS
from audience_batch_manager.core.utils import registry as registry_module
from audience_batch_manager.core.utils.registry import ProfileRegistry
from audience_batch_manager.core.utils.stores import InMemoryStore


def build_url(key='12345', account_id='111111111', property_id='222222222'):
    return ('https://analytics.google.com/analytics/web/#/'
            f'a{account_id}w{property_id}p333333333/admin/audience-lists/'
            f'm-content.mode=EDIT&m-content.key={key}'
            '&m-content-audienceListsTabContainer.rowShow=10'
            '&m-content-audienceListsTabContainer.rowStart=0'
            '&m-content-audienceListsTabContainer.sortColumnId=name'
            '&m-content-audienceListsTabContainer.sortDescending=false')


class FakeAudienceService:
    """Stands in for AudienceServiceClient, recording every call."""

    def __init__(self, properties=None, audiences=None, accounts=None, ad_links=None):
        self.properties = properties or {}  # account_id -> [web property]
        self.audiences = audiences or {}    # (account, property, audience) -> audience
        self.accounts = accounts or []
        self.ad_links = ad_links or {}      # (account, property) -> [link]
        self.created = []
        self.deleted = []
        self.fail_create_on = set()         # 1-based create call numbers that fail
        self.fail_delete_ids = set()

    def list_accounts(self):
        return list(self.accounts)

    def list_properties(self, account_id):
        return list(self.properties.get(account_id, []))

    def find_property(self, account_id, internal_property_id):
        for web_property in self.list_properties(account_id):
            if str(web_property['internalWebPropertyId']) == str(internal_property_id):
                return web_property
        return None

    def get_audience(self, account_id, property_id, audience_id):
        return self.audiences[(account_id, property_id, audience_id)]

    def create_audience(self, account_id, property_id, audience):
        if len(self.created) + 1 in self.fail_create_on:
            raise RuntimeError("quota exceeded")
        self.created.append((account_id, property_id, audience))
        response = dict(audience)
        response['id'] = f"new{len(self.created)}"
        return response

    def delete_audience(self, account_id, property_id, audience_id):
        self.deleted.append((account_id, property_id, audience_id))
        if audience_id in self.fail_delete_ids:
            raise RuntimeError("not found")

    def list_ad_links(self, account_id, property_id):
        return list(self.ad_links.get((account_id, property_id), []))


@pytest.fixture
def source_url():
    return build_url(key='srcAudience', account_id='111', property_id='222')


@pytest.fixture
def base_audience():
    return {
        'id': 'srcAudience',
        'kind': 'analytics#remarketingAudience',
        'accountId': '111',
        'webPropertyId': 'UA-111-1',
        'internalWebPropertyId': '222',
        'name': 'Base',
        'audienceType': 'SIMPLE',
        'linkedViews': ['333'],
        'linkedAdAccounts': [],
        'audienceDefinition': {
            'includeConditions': {
                'daysToLookBack': 7,
                'segment': 'users::condition::ga:browser==Chrome',
                'membershipDurationDays': 30,
                'isSmartList': False,
            }
        },
    }


@pytest.fixture
def fake_service(base_audience):
    return FakeAudienceService(
        properties={'111': [
            {'id': 'UA-111-2', 'internalWebPropertyId': '999'},
            {'id': 'UA-111-1', 'internalWebPropertyId': '222'},
        ]},
        audiences={('111', 'UA-111-1', 'srcAudience'): base_audience},
    )


def make_store(source_url, n_destinations=0):
    config_rows = [SHEET_HEADERS['Config']]
    for i in range(n_destinations):
        config_rows.append(['', f"{100 + i}-000-0000", 'ADWORDS_LINKS'])
    return InMemoryStore(
        sheets={
            'Config': config_rows,
            'Log': [SHEET_HEADERS['Log']],
            'Destinations': [SHEET_HEADERS['Destinations']],
        },
        named_ranges={'gaAudienceURL': source_url},
    )


@pytest.fixture
def registry(tmp_path, monkeypatch):
    registry = ProfileRegistry(tmp_path / "registry" / "profiles_registry.yaml")
    monkeypatch.setattr(registry_module, '_registry', registry)
    return registry

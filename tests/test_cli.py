import importlib
import json
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from audience_batch_manager.cli import cli
from audience_batch_manager.core.audiences.manager import AudienceBatchManager
from audience_batch_manager.core.utils.misc import read_yaml
from audience_batch_manager.core.utils.stores import CsvWorkbookStore

from conftest import build_url

cli_module = importlib.import_module('audience_batch_manager.cli.cli')


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def csv_profile(runner, registry, tmp_path, source_url):
    workbook = tmp_path / 'workbook'
    result = runner.invoke(cli, [
        '-p', 'shop', 'setup',
        '--store', 'csv',
        '--workbook-folder', str(workbook),
        '--base-folder', str(tmp_path / 'profile'),
        '--audience-url', source_url,
    ])
    assert result.exit_code == 0, result.output
    return workbook


@pytest.fixture
def patched_manager(monkeypatch, fake_service, csv_profile):
    monkeypatch.setenv('GOOGLE_APPLICATION_CREDENTIALS', '/tmp/key.json')
    created = {}

    def create_manager(config):
        store = CsvWorkbookStore(config['workbook_folder'])
        created['manager'] = AudienceBatchManager(
            fake_service, store, batch_size=config['batch_size']
        )
        return created['manager']

    monkeypatch.setattr(cli_module, '_create_manager', create_manager)
    return created


def test_parse_url(runner):
    result = runner.invoke(cli, ['parse-url', build_url(key='k1', account_id='1', property_id='2')])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        'account_id': '1', 'internal_property_id': '2', 'audience_id': 'k1'
    }


def test_parse_url_missing_ids(runner):
    result = runner.invoke(cli, ['parse-url', 'https://analytics.google.com/'])
    assert result.exit_code == 1


def test_setup_csv_profile(registry, csv_profile, tmp_path, source_url):
    config = registry.get_profile_config('shop')
    assert config['store'] == 'csv'
    assert config['batch_size'] == 10
    assert config['max_attempts'] == 1
    assert config['workbook_folder'] == str(csv_profile.resolve())
    assert read_yaml(tmp_path / 'profile' / 'AudienceProfile.yaml')['profile'] == 'shop'

    store = CsvWorkbookStore(csv_profile)
    assert store.get_named_value('gaAudienceURL') == source_url
    assert store.read('Log', 'A1:G1')[0][0] == 'Audience ID'


def test_setup_updates_existing_profile(runner, registry, csv_profile):
    result = runner.invoke(cli, ['-p', 'shop', 'setup', '--batch-size', '5', '--force'])
    assert result.exit_code == 0, result.output
    assert registry.get_profile_config('shop')['batch_size'] == 5


def test_setup_sheets_profile_requires_spreadsheet_id(runner, registry, tmp_path):
    result = runner.invoke(cli, ['-p', 'shop', 'setup', '--base-folder', str(tmp_path)])
    assert result.exit_code == 1
    assert registry.get_profile_config('shop') is None


def test_command_requires_profile_name(runner, registry):
    result = runner.invoke(cli, ['create-audiences'])
    assert result.exit_code == 2


def test_unknown_profile(runner, registry):
    result = runner.invoke(cli, ['-p', 'nope', 'create-audiences'])
    assert result.exit_code == 1


def test_missing_credentials(runner, monkeypatch, csv_profile):
    monkeypatch.delenv('GOOGLE_APPLICATION_CREDENTIALS', raising=False)
    result = runner.invoke(cli, ['-p', 'shop', 'create-audiences'])
    assert result.exit_code == 1


def test_create_and_delete_audiences(runner, fake_service, csv_profile, patched_manager):
    store = CsvWorkbookStore(csv_profile)
    store.write('Config', 'B2', [[f"{i}-000", 'ADWORDS_LINKS'] for i in range(12)])

    result = runner.invoke(cli, ['-p', 'shop', 'create-audiences'])
    assert result.exit_code == 0, result.output
    assert [a['name'] for _, _, a in fake_service.created] == ['Base: v1', 'Base: v2']
    assert [row[0] for row in store.read('Log', 'A2:Z')] == ['new1', 'new2']

    result = runner.invoke(cli, ['-p', 'shop', 'delete-audiences', '--yes'])
    assert result.exit_code == 0, result.output
    assert [call[2] for call in fake_service.deleted] == ['new1', 'new2']
    assert store.read('Log', 'A2:Z') == []


def test_delete_asks_for_confirmation(runner, fake_service, csv_profile, patched_manager):
    store = CsvWorkbookStore(csv_profile)
    store.append_row('Log', ['a1', '111', 'UA-111-1', 'Base: v1'])

    result = runner.invoke(cli, ['-p', 'shop', 'delete-audiences'], input='n\n')
    assert result.exit_code == 1
    assert fake_service.deleted == []
    assert store.read('Log', 'A2:Z') == [['a1', '111', 'UA-111-1', 'Base: v1']]


def test_delete_failures_exit_with_error(runner, fake_service, csv_profile, patched_manager):
    store = CsvWorkbookStore(csv_profile)
    store.append_row('Log', ['a1', '111', 'UA-111-1', 'Base: v1'])
    store.append_row('Log', ['a2', '111', 'UA-111-1', 'Base: v2'])
    fake_service.fail_delete_ids = {'a1'}

    result = runner.invoke(cli, ['-p', 'shop', 'delete-audiences', '-y'])
    assert result.exit_code == 1
    assert [call[2] for call in fake_service.deleted] == ['a1', 'a2']


def test_create_failure_exits_with_error(runner, fake_service, csv_profile, patched_manager):
    store = CsvWorkbookStore(csv_profile)
    store.write('Config', 'B2', [[f"{i}-000", 'ADWORDS_LINKS'] for i in range(15)])
    fake_service.fail_create_on = {2}

    result = runner.invoke(cli, ['-p', 'shop', 'create-audiences'])
    assert result.exit_code == 1
    assert [row[0] for row in store.read('Log', 'A2:Z')] == ['new1']


def test_fetch_destinations(runner, fake_service, csv_profile, patched_manager):
    fake_service.accounts = [{'id': '111'}]
    fake_service.ad_links = {('111', 'UA-111-1'): [{
        'entity': {'webPropertyRef': {'id': 'UA-111-1', 'name': 'Shop'}},
        'adWordsAccounts': [{'customerId': '123-456-7890', 'kind': 'analytics#adWordsAccount'}],
    }]}

    result = runner.invoke(cli, ['-p', 'shop', 'fetch-destinations'])
    assert result.exit_code == 0, result.output
    assert CsvWorkbookStore(csv_profile).read('Destinations', 'A2:Z') == [
        ['123-456-7890', 'analytics#adWordsAccount', 'Shop', 'UA-111-1']
    ]


def test_list_and_unregister_profiles(runner, registry, csv_profile):
    result = runner.invoke(cli, ['list-profiles'])
    assert result.exit_code == 0

    result = runner.invoke(cli, ['unregister-profile', 'shop'])
    assert result.exit_code == 0
    assert registry.get_profile_config('shop') is None

    result = runner.invoke(cli, ['unregister-profile', 'shop'])
    assert result.exit_code == 1


def test_adc_profile_does_not_use_key_files(monkeypatch, tmp_path):
    cli_utils = importlib.import_module('audience_batch_manager.cli.utils')
    load_credentials = MagicMock(return_value='credentials')
    monkeypatch.setattr(cli_utils, 'load_credentials', load_credentials)
    monkeypatch.setattr(cli_utils, 'create_analytics_service', MagicMock())
    monkeypatch.setenv('GOOGLE_APPLICATION_CREDENTIALS', '/tmp/key.json')

    cli_utils._create_manager({
        'store': 'csv', 'workbook_folder': str(tmp_path),
        'credentials': 'adc', 'credentials_file': '/tmp/other.json',
    })

    load_credentials.assert_called_once_with('/tmp/other.json', adc=True)


def test_setup_adc_profile_needs_no_credentials(runner, registry, tmp_path, monkeypatch):
    monkeypatch.delenv('GOOGLE_APPLICATION_CREDENTIALS', raising=False)
    result = runner.invoke(cli, [
        '-p', 'shop', 'setup', '--store', 'csv', '--adc',
        '--base-folder', str(tmp_path / 'profile'),
    ])
    assert result.exit_code == 0, result.output
    assert registry.get_profile_config('shop')['credentials'] == 'adc'
    assert registry.list_profiles()[0].store == 'csv'

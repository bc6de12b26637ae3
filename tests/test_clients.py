from unittest.mock import MagicMock

import pytest

from audience_batch_manager.core.utils import clients


@pytest.fixture
def google_auth(monkeypatch):
    default = MagicMock(return_value=('adc-credentials', 'project'))
    from_file = MagicMock(return_value='key-credentials')
    monkeypatch.setattr(clients.google.auth, 'default', default)
    monkeypatch.setattr(clients.service_account.Credentials,
                        'from_service_account_file', from_file)
    return default, from_file


def test_adc_ignores_key_files(google_auth, monkeypatch, tmp_path):
    default, from_file = google_auth
    key = tmp_path / 'key.json'
    key.write_text('{}')
    monkeypatch.setenv('GOOGLE_APPLICATION_CREDENTIALS', str(key))

    assert clients.load_credentials(str(key), adc=True) == 'adc-credentials'
    from_file.assert_not_called()
    default.assert_called_once_with(scopes=clients.ANALYTICS_SCOPES + clients.SHEETS_SCOPES)


def test_key_file_from_environment(google_auth, monkeypatch, tmp_path):
    default, from_file = google_auth
    key = tmp_path / 'key.json'
    key.write_text('{}')
    monkeypatch.setenv('GOOGLE_APPLICATION_CREDENTIALS', str(key))

    assert clients.load_credentials() == 'key-credentials'
    assert from_file.call_args.args == (str(key),)
    default.assert_not_called()


def test_missing_key_file(google_auth, tmp_path):
    with pytest.raises(ValueError):
        clients.load_credentials(str(tmp_path / 'missing.json'))


def test_falls_back_to_application_default(google_auth, monkeypatch):
    default, _ = google_auth
    monkeypatch.delenv('GOOGLE_APPLICATION_CREDENTIALS', raising=False)
    assert clients.load_credentials() == 'adc-credentials'
    default.assert_called_once()

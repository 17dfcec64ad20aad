"""Tests for the wagmi CLI client."""

from unittest.mock import MagicMock, patch

import pytest
import requests
from click.testing import CliRunner

from cli.wagmi_client import WagmiServiceClient, cli


def make_response(status_code, body):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def runner():
    return CliRunner()


def test_client_normalizes_base_url(session):
    client = WagmiServiceClient('http://wagmi:3000', session=session)
    assert client.base_url == 'http://wagmi:3000/'


def test_check_health(session):
    session.get.return_value = make_response(200, {'status': 'healthy'})
    client = WagmiServiceClient('http://wagmi:3000', session=session)
    assert client.check_health()
    session.get.assert_called_once_with('http://wagmi:3000/health', timeout=5)


def test_check_health_unreachable(session):
    session.get.side_effect = requests.exceptions.ConnectionError("refused")
    client = WagmiServiceClient('http://wagmi:3000', session=session)
    assert not client.check_health()


def test_post_wagmi_without_body_sends_empty_string(session):
    client = WagmiServiceClient('http://wagmi:3000', session=session)
    client.post_wagmi()
    _, kwargs = session.post.call_args
    assert kwargs['data'] == ''
    assert kwargs['headers'] == {'Content-Type': 'application/json'}


def test_add_returns_result(session):
    session.post.return_value = make_response(200, {'result': 12, 'a': 5, 'b': 7, 'status': 'success'})
    client = WagmiServiceClient('http://wagmi:3000', session=session)
    assert client.add(5, 7) == 12
    args, kwargs = session.post.call_args
    assert args[0] == 'http://wagmi:3000/wagmi'
    assert kwargs['data'] == '{"a": 5, "b": 7}'


def test_add_api_error(session):
    session.post.return_value = make_response(400, {'error': 'Invalid input'})
    client = WagmiServiceClient('http://wagmi:3000', session=session)
    with pytest.raises(ValueError, match='Invalid input'):
        client.add(60, 50)


def test_add_connection_error(session):
    session.post.side_effect = requests.exceptions.ConnectionError("refused")
    client = WagmiServiceClient('http://wagmi:3000', session=session)
    with pytest.raises(ConnectionError):
        client.add(1, 2)


def test_ping_returns_greeting(session):
    greeting = {'message': 'wagmi', 'timestamp': '2026-10-17T00:00:00.000Z', 'lang': 'Python'}
    session.post.return_value = make_response(200, greeting)
    client = WagmiServiceClient('http://wagmi:3000', session=session)
    assert client.ping() == greeting


def test_health_command(runner):
    with patch.object(WagmiServiceClient, 'check_health', return_value=True):
        result = runner.invoke(cli, ['health', '--url', 'http://wagmi:3000'])
    assert result.exit_code == 0
    assert 'healthy' in result.output


def test_health_command_unhealthy(runner):
    with patch.object(WagmiServiceClient, 'check_health', return_value=False):
        result = runner.invoke(cli, ['health'])
    assert result.exit_code == 1


def test_ping_command(runner):
    greeting = {'message': 'wagmi', 'timestamp': '2026-10-17T00:00:00.000Z', 'lang': 'Python'}
    with patch.object(WagmiServiceClient, 'ping', return_value=greeting):
        result = runner.invoke(cli, ['ping'])
    assert result.exit_code == 0
    assert 'wagmi from Python' in result.output


def test_add_command_local(runner):
    result = runner.invoke(cli, ['add', '--local', '-a', '2', '-b', '3'])
    assert result.exit_code == 0
    assert 'Result (local): 5.0' in result.output


def test_add_command_local_over_limit(runner):
    result = runner.invoke(cli, ['add', '--local', '-a', '60', '-b', '50'])
    assert result.exit_code == 1
    assert 'Sum must not exceed 100' in result.output


def test_add_command_api(runner):
    with patch.object(WagmiServiceClient, 'check_health', return_value=True), \
            patch.object(WagmiServiceClient, 'add', return_value=12.0) as mock_add:
        result = runner.invoke(cli, ['add', '-u', 'http://wagmi:3000', '-a', '5', '-b', '7'])
    assert result.exit_code == 0
    assert 'Result (API): 12.0' in result.output
    mock_add.assert_called_once_with(5.0, 7.0)


def test_add_command_api_error(runner):
    with patch.object(WagmiServiceClient, 'check_health', return_value=True), \
            patch.object(WagmiServiceClient, 'add', side_effect=ValueError('API Error: Invalid input')):
        result = runner.invoke(cli, ['add', '-a', '60', '-b', '50'])
    assert result.exit_code == 1
    assert 'Invalid input' in result.output


def test_smoke_command(runner):
    with patch('cli.wagmi_client.run_smoke_tests', return_value=(7, 0)), \
            patch('cli.wagmi_client.run_burst',
                  return_value={'successful': 100, 'count': 100, 'duration_ms': 250.0}):
        result = runner.invoke(cli, ['smoke'])
    assert result.exit_code == 0
    assert '7 passed, 0 failed' in result.output
    assert '100/100 successful' in result.output


def test_smoke_command_failure(runner):
    with patch('cli.wagmi_client.run_smoke_tests', return_value=(6, 1)), \
            patch('cli.wagmi_client.run_burst') as mock_burst:
        result = runner.invoke(cli, ['smoke'])
    assert result.exit_code == 1
    mock_burst.assert_not_called()


def test_loadtest_command_unreachable(runner):
    with patch('cli.wagmi_client.LoadGenerator') as mock_generator:
        mock_generator.return_value.check_server.return_value = False
        result = runner.invoke(cli, ['loadtest'])
    assert result.exit_code == 1
    assert 'Server not reachable' in result.output


def test_loadtest_command_json(runner):
    summary = {'total': 10, 'assessment': 'EXCELLENT'}
    with patch('cli.wagmi_client.LoadGenerator') as mock_generator:
        mock_generator.return_value.check_server.return_value = True
        mock_generator.return_value.run.return_value = summary
        result = runner.invoke(cli, ['loadtest', '--rps', '10', '--duration', '1', '--json'])
    assert result.exit_code == 0
    assert '"assessment": "EXCELLENT"' in result.output
    mock_generator.assert_called_once_with('http://localhost:3000', rps=10, duration=1,
                                           batch_size=100, workers=200)

"""
Unit tests for WebhookNotifier

requests.post is patched; no network access.
"""

import pytest
from unittest.mock import Mock, patch

import requests

import sys
from pathlib import Path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from txwatch.live.transaction import Transaction
from txwatch.monitoring.webhook_notifier import WebhookNotifier


WEBHOOK_URL = "https://hooks.example.test/services/abc"


@pytest.fixture
def notifier():
    return WebhookNotifier(WEBHOOK_URL, timeout=5)


@pytest.fixture
def tx():
    return Transaction(txid='tx1', amount=0.5, risk='HIGH RISK')


def ok_response(status=200):
    response = Mock(status_code=status)
    response.raise_for_status = Mock()
    return response


def error_response(status=500):
    response = Mock(status_code=status)
    response.raise_for_status = Mock(
        side_effect=requests.HTTPError(f"{status} Server Error")
    )
    return response


class TestFormatMessage:

    def test_message_contains_transaction_fields(self, notifier, tx):
        message = notifier.format_message(tx)

        assert 'tx1' in message
        assert '0.5 BTC' in message
        assert 'HIGH RISK' in message

    def test_integer_amount(self, notifier):
        message = notifier.format_message(Transaction(txid='tx2', amount=3, risk='HIGH RISK'))

        assert '3 BTC' in message


class TestSendText:

    def test_posts_json_text(self, notifier):
        with patch('txwatch.monitoring.webhook_notifier.requests.post', return_value=ok_response()) as mock_post:
            delivered = notifier.send_text("hello")

        assert delivered is True
        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        assert args[0] == WEBHOOK_URL
        assert kwargs['json'] == {'text': 'hello'}
        assert kwargs['headers']['Content-Type'] == 'application/json'
        assert kwargs['timeout'] == 5
        assert notifier.sent_count == 1

    def test_server_error_logged_not_raised(self, notifier, caplog):
        with patch('txwatch.monitoring.webhook_notifier.requests.post', return_value=error_response(500)) as mock_post:
            with caplog.at_level('ERROR'):
                delivered = notifier.send_text("hello")

        assert delivered is False
        mock_post.assert_called_once()
        assert notifier.failed_count == 1
        assert '500' in notifier.last_error
        assert any('Failed to send webhook notification' in r.getMessage() for r in caplog.records)

    def test_transport_error_logged_not_raised(self, notifier):
        with patch(
            'txwatch.monitoring.webhook_notifier.requests.post',
            side_effect=requests.ConnectionError("connection refused")
        ):
            delivered = notifier.send_text("hello")

        assert delivered is False
        assert notifier.failed_count == 1

    def test_timeout_logged_not_raised(self, notifier):
        with patch(
            'txwatch.monitoring.webhook_notifier.requests.post',
            side_effect=requests.Timeout("timed out")
        ):
            assert notifier.send_text("hello") is False


class TestNotify:

    @pytest.mark.asyncio
    async def test_notify_posts_formatted_message(self, notifier, tx):
        with patch('txwatch.monitoring.webhook_notifier.requests.post', return_value=ok_response()) as mock_post:
            delivered = await notifier.notify(tx)

        assert delivered is True
        body = mock_post.call_args.kwargs['json']
        assert 'tx1' in body['text']
        assert '0.5 BTC' in body['text']

    @pytest.mark.asyncio
    async def test_notify_failure_returns_false_once(self, notifier, tx):
        """Test a failed delivery is attempted once only."""
        with patch('txwatch.monitoring.webhook_notifier.requests.post', return_value=error_response(500)) as mock_post:
            delivered = await notifier.notify(tx)

        assert delivered is False
        assert mock_post.call_count == 1

    def test_get_stats(self, notifier):
        assert notifier.get_stats() == {
            'sent_count': 0,
            'failed_count': 0,
            'last_error': None
        }


if __name__ == '__main__':
    pytest.main([__file__, '-v'])

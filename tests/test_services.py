"""
Unit tests for the notifier and Gmail delivery service.

Run with: pytest tests/test_services.py -v
"""

import base64
import pytest
from unittest.mock import AsyncMock, MagicMock

import aiohttp

from models.charge import ChargeFailureEvent
from services.gmail_service import GMAIL_API_URL, TOKEN_URL, GmailError, GmailService
from services.log_buffer import LogBuffer
from services.notifier import FailureNotifier


def make_event(**overrides):
    charge = {
        'id': 'ch_123',
        'amount': 2500,
        'currency': 'usd',
        'created': 1706400000,
        'billing_details': {'email': 'jane@example.com'},
        'failure_message': 'Your card was declined.'
    }
    charge.update(overrides)
    return ChargeFailureEvent.from_charge(charge)


def mock_response(status, data):
    """Build an async context manager yielding a fake aiohttp response."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=data)

    context = MagicMock()
    context.__aenter__.return_value = response
    context.__aexit__.return_value = False
    return context


def decode_raw(raw):
    return base64.urlsafe_b64decode(raw + '=' * (-len(raw) % 4)).decode('utf-8')


class TestFailureNotifier:
    """Tests for FailureNotifier."""

    @pytest.mark.asyncio
    async def test_notify_success(self):
        """Test a successful send logs the customer and returns success."""
        gmail = MagicMock()
        gmail.send_raw = AsyncMock(return_value={'id': 'msg_1'})
        buffer = LogBuffer()

        notifier = FailureNotifier(gmail, buffer, recipient='alerts@example.com')
        result = await notifier.notify(make_event())

        assert result.success
        assert result.error is None
        gmail.send_raw.assert_awaited_once()
        assert buffer.recent(1)[0].endswith(
            '✅ Failure notification sent for customer: jane@example.com'
        )

    @pytest.mark.asyncio
    async def test_notify_sends_formatted_message(self):
        gmail = MagicMock()
        gmail.send_raw = AsyncMock(return_value={'id': 'msg_1'})

        notifier = FailureNotifier(gmail, LogBuffer(), recipient='alerts@example.com')
        await notifier.notify(make_event())

        message = decode_raw(gmail.send_raw.await_args.args[0])

        assert 'To: alerts@example.com' in message
        assert 'Subject: ⚠️ Stripe Payment Failed - jane@example.com' in message
        assert 'Amount: 25.00 USD' in message
        assert 'Charge ID: ch_123' in message

    @pytest.mark.asyncio
    async def test_notify_failure_is_not_raised(self):
        """Test that transport errors become a failed result."""
        gmail = MagicMock()
        gmail.send_raw = AsyncMock(side_effect=GmailError('Quota exceeded', 429))
        buffer = LogBuffer()

        notifier = FailureNotifier(gmail, buffer, recipient='alerts@example.com')
        result = await notifier.notify(make_event())

        assert not result.success
        assert result.error == 'Quota exceeded'
        assert gmail.send_raw.await_count == 1
        assert buffer.recent(1)[0].endswith('❌ Failed to send notification: Quota exceeded')

    @pytest.mark.asyncio
    async def test_notify_network_error(self):
        gmail = MagicMock()
        gmail.send_raw = AsyncMock(side_effect=aiohttp.ClientConnectionError('connection reset'))

        notifier = FailureNotifier(gmail, LogBuffer(), recipient='alerts@example.com')
        result = await notifier.notify(make_event())

        assert not result.success
        assert 'connection reset' in result.error


class TestGmailService:
    """Tests for GmailService."""

    def make_service(self, session):
        service = GmailService(
            refresh_token='refresh',
            client_id='client',
            client_secret='secret',
            user_id='me'
        )
        service._session = session
        return service

    @pytest.mark.asyncio
    async def test_send_raw(self):
        """Test token refresh followed by a send."""
        session = MagicMock()
        session.post.side_effect = [
            mock_response(200, {'access_token': 'token_1', 'expires_in': 3600}),
            mock_response(200, {'id': 'msg_1', 'threadId': 'thr_1'})
        ]
        service = self.make_service(session)

        result = await service.send_raw('cmF3')

        assert result['id'] == 'msg_1'

        token_call, send_call = session.post.call_args_list
        assert token_call.args[0] == TOKEN_URL
        assert token_call.kwargs['data']['grant_type'] == 'refresh_token'
        assert token_call.kwargs['data']['refresh_token'] == 'refresh'

        assert send_call.args[0] == f"{GMAIL_API_URL}/users/me/messages/send"
        assert send_call.kwargs['json'] == {'raw': 'cmF3'}
        assert send_call.kwargs['headers']['Authorization'] == 'Bearer token_1'

    @pytest.mark.asyncio
    async def test_access_token_is_cached(self):
        session = MagicMock()
        session.post.side_effect = [
            mock_response(200, {'access_token': 'token_1', 'expires_in': 3600}),
            mock_response(200, {'id': 'msg_1'}),
            mock_response(200, {'id': 'msg_2'})
        ]
        service = self.make_service(session)

        await service.send_raw('a')
        await service.send_raw('b')

        assert session.post.call_count == 3

    @pytest.mark.asyncio
    async def test_token_refresh_failure(self):
        session = MagicMock()
        session.post.side_effect = [
            mock_response(400, {'error': 'invalid_grant', 'error_description': 'Token has been expired or revoked.'})
        ]
        service = self.make_service(session)

        with pytest.raises(GmailError, match='Token has been expired or revoked'):
            await service.send_raw('a')

    @pytest.mark.asyncio
    async def test_send_rejected(self):
        """Test that an API error response raises GmailError."""
        session = MagicMock()
        session.post.side_effect = [
            mock_response(200, {'access_token': 'token_1', 'expires_in': 3600}),
            mock_response(400, {'error': {'code': 400, 'message': 'Invalid To header'}})
        ]
        service = self.make_service(session)

        with pytest.raises(GmailError, match='Invalid To header') as exc_info:
            await service.send_raw('a')

        assert exc_info.value.status == 400

    @pytest.mark.asyncio
    async def test_unauthorized_clears_token(self):
        session = MagicMock()
        session.post.side_effect = [
            mock_response(200, {'access_token': 'token_1', 'expires_in': 3600}),
            mock_response(401, {'error': {'code': 401, 'message': 'Invalid Credentials'}}),
            mock_response(200, {'access_token': 'token_2', 'expires_in': 3600}),
            mock_response(200, {'id': 'msg_1'})
        ]
        service = self.make_service(session)

        with pytest.raises(GmailError):
            await service.send_raw('a')

        await service.send_raw('a')

        assert session.post.call_args_list[3].kwargs['headers']['Authorization'] == 'Bearer token_2'

    @pytest.mark.asyncio
    async def test_send_without_session(self):
        service = GmailService(refresh_token='r', client_id='c', client_secret='s')

        with pytest.raises(GmailError, match='not initialized'):
            await service.send_raw('a')

    @pytest.mark.asyncio
    async def test_send_without_refresh_token(self):
        service = self.make_service(MagicMock())
        service.refresh_token = ''

        with pytest.raises(GmailError, match='refresh token is not configured'):
            await service.send_raw('a')

"""
Tests for EmailService.
"""

import pytest
from unittest.mock import patch, Mock

import requests

from novaplayer.services.email_service import EmailService, SENDGRID_URL


@pytest.fixture
def sendgrid_app(app):
    app.config['SENDGRID_API_KEY'] = 'SG.test'
    app.config['MAIL_FROM'] = 'noreply@novaplayer.test'
    with app.app_context():
        yield app


class TestWithoutApiKey:

    @patch('novaplayer.services.email_service.requests.post')
    def test_logs_instead_of_sending(self, mock_post, app_context, caplog):
        with caplog.at_level('INFO'):
            sent = EmailService.send_email('a@example.com', 'Hi', '<b>x</b>')

        assert sent is False
        mock_post.assert_not_called()
        assert 'EMAIL NOT SENT' in caplog.text


class TestWithSendGrid:

    @patch('novaplayer.services.email_service.requests.post')
    def test_posts_message(self, mock_post, sendgrid_app):
        mock_post.return_value = Mock(status_code=202, text='')

        assert EmailService.send_email('a@example.com', 'Hi', '<b>x</b>') is True

        args, kwargs = mock_post.call_args
        assert args[0] == SENDGRID_URL
        assert kwargs['headers']['Authorization'] == 'Bearer SG.test'
        assert kwargs['json']['from'] == {'email': 'noreply@novaplayer.test'}
        assert kwargs['json']['personalizations'][0]['to'] == [
            {'email': 'a@example.com'}
        ]

    @patch('novaplayer.services.email_service.requests.post')
    def test_rejected_returns_false(self, mock_post, sendgrid_app):
        mock_post.return_value = Mock(status_code=400, text='bad')
        assert EmailService.send_email('a@example.com', 'Hi', 'x') is False

    @patch('novaplayer.services.email_service.requests.post')
    def test_network_error_returns_false(self, mock_post, sendgrid_app):
        mock_post.side_effect = requests.ConnectionError('down')
        assert EmailService.send_email('a@example.com', 'Hi', 'x') is False

    @patch('novaplayer.services.email_service.requests.post')
    def test_verification_email_contains_code(self, mock_post, sendgrid_app):
        mock_post.return_value = Mock(status_code=202, text='')

        EmailService.send_verification_email('a@example.com', 'Ann', '123456')

        html = mock_post.call_args.kwargs['json']['content'][0]['value']
        assert '123456' in html
        assert 'Ann' in html

    @patch('novaplayer.services.email_service.requests.post')
    def test_verification_email_escapes_name(self, mock_post, sendgrid_app):
        mock_post.return_value = Mock(status_code=202, text='')

        EmailService.send_verification_email(
            'a@example.com', '<script>x</script>', '123456'
        )

        html = mock_post.call_args.kwargs['json']['content'][0]['value']
        assert '<script>' not in html
        assert '&lt;script&gt;x&lt;/script&gt;' in html

    @patch('novaplayer.services.email_service.requests.post')
    def test_reset_email_links_to_frontend(self, mock_post, sendgrid_app):
        mock_post.return_value = Mock(status_code=202, text='')

        EmailService.send_password_reset_email('a@example.com', 'tok123')

        html = mock_post.call_args.kwargs['json']['content'][0]['value']
        assert 'http://localhost:3001/reset-password?token=tok123' in html

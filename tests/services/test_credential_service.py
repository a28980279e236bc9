"""
Tests for CredentialService, the database-backed credential store.
"""

import pytest
from unittest.mock import MagicMock, Mock

from novaplayer.models.db import db, User
from novaplayer.services.credential_service import (
    CredentialService,
    CredentialStoreError,
)
from novaplayer.services.token_service import TokenService
from novaplayer.spotify.exceptions import SpotifySessionExpiredError
from novaplayer.spotify.http_client import SpotifyGateway


class TestReadTokens:

    def test_access_token(self, connected_user):
        assert CredentialService.get_access_token(connected_user.id) == 'stored-access'

    def test_unknown_user(self, app_context):
        assert CredentialService.get_access_token(999) is None
        assert CredentialService.get_refresh_token(999) is None

    def test_refresh_token_is_decrypted(self, connected_user):
        assert connected_user.spotify_refresh_token != 'stored-refresh'
        assert CredentialService.get_refresh_token(connected_user.id) == 'stored-refresh'

    def test_legacy_plaintext_refresh_token(self, make_user):
        user = make_user(spotify_id='sp1', access_token='a')
        user.spotify_refresh_token = 'plain-legacy'
        db.session.commit()

        assert CredentialService.get_refresh_token(user.id) == 'plain-legacy'

    def test_unreadable_refresh_token_expires_session(self, make_user):
        user = make_user(spotify_id='sp1', access_token='a')
        user.spotify_refresh_token = 'nothex:garbage'
        db.session.commit()

        with pytest.raises(SpotifySessionExpiredError):
            CredentialService.get_refresh_token(user.id)


class TestSaveTokens:

    def test_saves_access_keeps_refresh(self, connected_user):
        stored_before = connected_user.spotify_refresh_token

        CredentialService.save_tokens(connected_user.id, 'new-access')

        user = db.session.get(User, connected_user.id)
        assert user.spotify_access_token == 'new-access'
        assert user.spotify_refresh_token == stored_before

    def test_rotated_refresh_token_encrypted(self, connected_user):
        CredentialService.save_tokens(connected_user.id, 'new-access', 'new-refresh')

        user = db.session.get(User, connected_user.id)
        assert user.spotify_refresh_token != 'new-refresh'
        assert TokenService.decrypt_token(user.spotify_refresh_token) == 'new-refresh'

    def test_unknown_user_raises(self, app_context):
        with pytest.raises(CredentialStoreError):
            CredentialService.save_tokens(999, 'a')


class TestConcurrentUpdates:

    def test_reads_tokens_committed_by_another_request(self, app, connected_user):
        user_id = connected_user.id
        held = db.session.get(User, user_id)
        assert held.spotify_access_token == 'stored-access'

        with app.app_context():
            CredentialService.save_tokens(user_id, 'other-access', 'other-refresh')

        assert CredentialService.get_access_token(user_id) == 'other-access'
        assert CredentialService.get_refresh_token(user_id) == 'other-refresh'
        assert held.spotify_access_token == 'other-access'

    def test_gateway_reuses_token_from_another_request(
        self, app, connected_user, mock_auth_manager
    ):
        user_id = connected_user.id
        session = MagicMock()

        def respond(method, url, **kwargs):
            if kwargs['headers']['Authorization'] == 'Bearer stored-access':
                with app.app_context():
                    CredentialService.save_tokens(
                        user_id, 'other-access', 'other-refresh'
                    )
                return Mock(status_code=401, ok=False, headers={}, content=b'', text='')
            resp = Mock(status_code=200, ok=True, headers={}, content=b'{}', text='{}')
            resp.json.return_value = {'id': 'spotify_user_1'}
            return resp

        session.request.side_effect = respond
        gateway = SpotifyGateway(
            CredentialService,
            mock_auth_manager,
            session=session,
            sleep=MagicMock(),
            rng=lambda: 0.0,
        )

        assert gateway.request(user_id, 'GET', '/me') == {'id': 'spotify_user_1'}
        mock_auth_manager.refresh_access_token.assert_not_called()
        assert CredentialService.get_refresh_token(user_id) == 'other-refresh'

"""
Pytest configuration and shared fixtures for NovaPlayer tests.

Provides sample Spotify payloads, an in-memory credential store and
Flask app fixtures built from TestingConfig.
"""

import pytest
from unittest.mock import MagicMock
import time


# =============================================================================
# Helpers
# =============================================================================


class FakeCredentialStore:
    """In-memory credential store for gateway tests."""

    def __init__(self, tokens=None):
        # user_id -> {"access": str, "refresh": str}
        self.tokens = tokens or {}
        self.saved = []

    def get_access_token(self, user_id):
        return self.tokens.get(user_id, {}).get("access")

    def get_refresh_token(self, user_id):
        return self.tokens.get(user_id, {}).get("refresh")

    def save_tokens(self, user_id, access_token, refresh_token=None):
        entry = self.tokens.setdefault(user_id, {})
        entry["access"] = access_token
        if refresh_token:
            entry["refresh"] = refresh_token
        self.saved.append((user_id, access_token, refresh_token))


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def sample_token():
    """A Spotify token endpoint response."""
    return {
        'access_token': 'test_access_token_12345',
        'token_type': 'Bearer',
        'expires_in': 3600,
        'refresh_token': 'test_refresh_token_67890',
        'scope': 'streaming user-read-email',
    }


@pytest.fixture
def sample_profile():
    """Sample Spotify /me payload."""
    return {
        'id': 'spotify_user_1',
        'display_name': 'Test User',
        'email': 'test@example.com',
        'images': [{'url': 'https://example.com/avatar.jpg'}],
        'country': 'MX',
    }


@pytest.fixture
def sample_tracks():
    """Sample track payloads."""
    return [
        {
            'id': f'track{i}',
            'name': f'Track {i}',
            'uri': f'spotify:track:track{i}',
            'duration_ms': 180000 + (i * 1000),
            'artists': [{'id': f'artist{i}', 'name': f'Artist {i}', 'uri': f'spotify:artist:artist{i}'}],
            'album': {
                'name': f'Album {i}',
                'images': [{'url': f'https://example.com/album{i}.jpg'}]
            },
            'external_urls': {'spotify': f'https://open.spotify.com/track/track{i}'}
        }
        for i in range(1, 6)
    ]


@pytest.fixture
def sample_playlists():
    """Sample /me/playlists items."""
    return [
        {
            'id': 'playlist1',
            'name': 'Playlist One',
            'uri': 'spotify:playlist:playlist1',
            'owner': {'id': 'spotify_user_1', 'display_name': 'Test User'},
            'tracks': {'total': 25},
            'images': [{'url': 'https://example.com/p1.jpg'}],
        },
        {
            'id': 'playlist2',
            'name': 'Playlist Two',
            'uri': 'spotify:playlist:playlist2',
            'owner': {'id': 'other_user'},
            'tracks': {'total': 50},
            'images': [],
        },
    ]


@pytest.fixture
def sample_artist():
    return {
        'id': 'artist1',
        'name': 'Artist 1',
        'uri': 'spotify:artist:artist1',
        'genres': ['rock'],
        'followers': {'total': 1234},
        'popularity': 70,
        'images': [{'url': 'https://example.com/artist1.jpg'}],
    }


@pytest.fixture
def credential_store():
    """Store holding tokens for user 1."""
    return FakeCredentialStore(
        {1: {"access": "access-1", "refresh": "refresh-1"}}
    )


@pytest.fixture
def mock_auth_manager():
    """A mock SpotifyAuthManager whose refresh returns a new token."""
    from novaplayer.spotify.auth import TokenInfo

    mock = MagicMock()
    mock.refresh_access_token.return_value = TokenInfo.from_dict({
        'access_token': 'access-2',
        'token_type': 'Bearer',
        'expires_in': 3600,
        'expires_at': time.time() + 3600,
    })
    return mock


# =============================================================================
# Flask App Fixtures
# =============================================================================

@pytest.fixture
def app():
    """Create a Flask application for testing."""
    from novaplayer import create_app
    from novaplayer.models.db import db

    app = create_app('testing')

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_context(app):
    """Provide Flask application context."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    """Provide Flask test client."""
    return app.test_client()


@pytest.fixture
def make_user(app_context):
    """Factory creating users directly in the database."""
    from novaplayer.models.db import db, User
    from novaplayer.security import hash_password
    from novaplayer.services.token_service import TokenService

    def _make_user(
        email='user@example.com',
        password='password123',
        is_verified=True,
        spotify_id=None,
        access_token=None,
        refresh_token=None,
        name='Test User',
    ):
        user = User(
            email=email,
            name=name,
            password_hash=hash_password(password, 4) if password else None,
            is_verified=is_verified,
            spotify_id=spotify_id,
            spotify_access_token=access_token,
            spotify_refresh_token=(
                TokenService.encrypt_token(refresh_token)
                if refresh_token else None
            ),
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def connected_user(make_user):
    """A verified local user linked to Spotify."""
    return make_user(
        spotify_id='spotify_user_1',
        access_token='stored-access',
        refresh_token='stored-refresh',
    )


@pytest.fixture
def auth_headers(app_context):
    """Factory returning Authorization headers for a user."""
    from novaplayer.services import AuthService

    def _headers(user):
        token = AuthService.generate_session_token(user)['access_token']
        return {'Authorization': f'Bearer {token}'}

    return _headers

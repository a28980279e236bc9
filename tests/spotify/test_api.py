"""
Tests for SpotifyAPI.

The gateway is mocked: these tests cover which calls each operation
makes, how results are reshaped, and which failures degrade.
"""

import pytest
from unittest.mock import MagicMock

from novaplayer.models.music import PlaybackState, PlaylistSummary, Track
from novaplayer.spotify.api import SpotifyAPI, DEFAULT_REGION, FEATURED_QUERY
from novaplayer.spotify.cache import MemoryCacheBackend, ResponseCache
from novaplayer.spotify.exceptions import (
    SpotifyAPIError,
    SpotifyNotConnectedError,
    SpotifyNotFoundError,
    SpotifyRateLimitError,
    SpotifySessionExpiredError,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def gateway():
    mock = MagicMock()
    mock.require_access_token.return_value = 'access-1'
    mock.request.return_value = {}
    return mock


@pytest.fixture
def cache():
    return ResponseCache(MemoryCacheBackend())


@pytest.fixture
def api(gateway, cache):
    return SpotifyAPI(gateway, 1, 'spotify_user_1', cache=cache)


def _route(responses):
    """side_effect answering gateway.request by (method, path)."""
    def _handler(user_id, method, path, **kwargs):
        result = responses[(method, path)]
        if isinstance(result, Exception):
            raise result
        return result
    return _handler


# =============================================================================
# User & Library
# =============================================================================

class TestUserRegion:

    def test_region_from_profile(self, api, gateway, sample_profile):
        gateway.request.return_value = sample_profile
        assert api.get_user_region() == 'MX'

    def test_region_is_cached(self, api, gateway, sample_profile):
        gateway.request.return_value = sample_profile
        api.get_user_region()
        api.get_user_region()
        assert gateway.request.call_count == 1

    def test_defaults_on_upstream_error(self, api, gateway):
        gateway.request.side_effect = SpotifyAPIError('boom', status_code=500)
        assert api.get_user_region() == DEFAULT_REGION

    def test_defaults_when_country_missing(self, api, gateway):
        gateway.request.return_value = {'id': 'u'}
        assert api.get_user_region() == 'US'

    def test_not_connected_propagates(self, api, gateway):
        gateway.require_access_token.side_effect = SpotifyNotConnectedError('no')
        with pytest.raises(SpotifyNotConnectedError):
            api.get_user_region()


class TestLibrary:

    def test_get_user_playlists(self, api, gateway, sample_playlists):
        gateway.request.return_value = {'items': sample_playlists}

        playlists = api.get_user_playlists()

        assert [p.id for p in playlists] == ['playlist1', 'playlist2']
        assert isinstance(playlists[0], PlaylistSummary)
        gateway.request.assert_called_once_with(1, 'GET', '/me/playlists')

    def test_playlists_error_propagates(self, api, gateway):
        gateway.request.side_effect = SpotifyAPIError('boom', status_code=500)
        with pytest.raises(SpotifyAPIError):
            api.get_user_playlists()

    def test_search_params(self, api, gateway):
        gateway.request.return_value = {'tracks': {'items': []}}

        result = api.search('radiohead')

        assert result == {'tracks': {'items': []}}
        gateway.request.assert_called_once_with(
            1, 'GET', '/search',
            params={'q': 'radiohead', 'type': 'track,artist', 'limit': 10},
        )

    def test_top_tracks_degrade_to_empty(self, api, gateway):
        gateway.request.side_effect = SpotifyRateLimitError('slow down')
        assert api.get_top_tracks() == []

    def test_top_tracks_session_expired_propagates(self, api, gateway):
        gateway.request.side_effect = SpotifySessionExpiredError('expired')
        with pytest.raises(SpotifySessionExpiredError):
            api.get_top_tracks()

    def test_saved_tracks_page(self, api, gateway):
        api.get_saved_tracks(offset=100)
        gateway.request.assert_called_once_with(
            1, 'GET', '/me/tracks', params={'limit': 50, 'offset': 100}
        )

    def test_saved_tracks_negative_offset_clamped(self, api, gateway):
        api.get_saved_tracks(offset=-5)
        assert gateway.request.call_args.kwargs['params']['offset'] == 0

    def test_is_track_saved(self, api, gateway):
        gateway.request.return_value = [True]

        assert api.is_track_saved('spotify:track:abc') is True
        assert gateway.request.call_args.kwargs['params'] == {'ids': 'abc'}

    def test_is_track_saved_false_on_error(self, api, gateway):
        gateway.request.side_effect = SpotifyAPIError('boom', status_code=502)
        assert api.is_track_saved('abc') is False

    def test_save_and_remove_track(self, api, gateway):
        api.save_track('abc')
        api.remove_track('abc')

        calls = gateway.request.call_args_list
        assert calls[0].args[1:] == ('PUT', '/me/tracks')
        assert calls[1].args[1:] == ('DELETE', '/me/tracks')

    def test_save_track_error_propagates(self, api, gateway):
        gateway.request.side_effect = SpotifyAPIError('boom', status_code=403)
        with pytest.raises(SpotifyAPIError):
            api.save_track('abc')


class TestRecentlyPlayed:

    def test_dedupes_keeping_most_recent(self, api, gateway, sample_tracks):
        t1, t2, t3 = sample_tracks[:3]
        gateway.request.return_value = {
            'items': [
                {'track': t1}, {'track': t2}, {'track': t1},
                {'track': t3}, {'track': t2},
            ]
        }

        tracks = api.get_recently_played()

        assert [t.id for t in tracks] == ['track1', 'track2', 'track3']
        assert gateway.request.call_args.kwargs['params'] == {'limit': 50}

    def test_respects_limit(self, api, gateway, sample_tracks):
        gateway.request.return_value = {
            'items': [{'track': t} for t in sample_tracks]
        }
        assert len(api.get_recently_played(limit=2)) == 2

    def test_skips_items_without_track(self, api, gateway, sample_tracks):
        gateway.request.return_value = {
            'items': [{'track': None}, {}, {'track': sample_tracks[0]}]
        }
        assert [t.id for t in api.get_recently_played()] == ['track1']


# =============================================================================
# Playlists
# =============================================================================

class TestPlaylists:

    def test_create_playlist_is_private(self, api, gateway):
        gateway.request.return_value = {'id': 'new1'}

        playlist = api.create_playlist('Road Trip', 'songs')

        assert playlist == {'id': 'new1'}
        gateway.request.assert_called_once_with(
            1, 'POST', '/users/spotify_user_1/playlists',
            json={'name': 'Road Trip', 'description': 'songs', 'public': False},
        )

    def test_create_looks_up_spotify_id_when_unknown(self, gateway, cache):
        api = SpotifyAPI(gateway, 1, cache=cache)
        gateway.request.side_effect = _route({
            ('GET', '/me'): {'id': 'looked_up'},
            ('POST', '/users/looked_up/playlists'): {'id': 'new1'},
        })

        assert api.create_playlist('x')['id'] == 'new1'

    def test_create_with_cover_uploads_image(self, api, gateway):
        gateway.request.side_effect = _route({
            ('POST', '/users/spotify_user_1/playlists'): {'id': 'new1'},
            ('PUT', '/playlists/new1/images'): None,
        })

        api.create_playlist('x', image_base64='aGVsbG8=')

        upload = gateway.request.call_args_list[1]
        assert upload.kwargs['data'] == 'aGVsbG8='
        assert upload.kwargs['headers'] == {'Content-Type': 'image/jpeg'}

    def test_cover_failure_keeps_playlist(self, api, gateway, caplog):
        gateway.request.side_effect = _route({
            ('POST', '/users/spotify_user_1/playlists'): {'id': 'new1'},
            ('PUT', '/playlists/new1/images'): SpotifyAPIError(
                'too large', status_code=413
            ),
        })

        with caplog.at_level('ERROR'):
            playlist = api.create_playlist('x', image_base64='aGVsbG8=')

        assert playlist == {'id': 'new1'}
        assert 'Cover upload failed' in caplog.text

    def test_edit_only_sends_given_fields(self, api, gateway):
        api.edit_playlist('p1', name='New name')

        gateway.request.assert_called_once_with(
            1, 'PUT', '/playlists/p1', json={'name': 'New name'}
        )

    def test_edit_image_only(self, api, gateway):
        api.edit_playlist('p1', image_base64='aGVsbG8=')

        gateway.request.assert_called_once()
        assert gateway.request.call_args.args[2] == '/playlists/p1/images'

    def test_delete_unfollows(self, api, gateway):
        api.delete_playlist('p1')
        gateway.request.assert_called_once_with(
            1, 'DELETE', '/playlists/p1/followers'
        )

    def test_get_playlist_not_found(self, api, gateway):
        gateway.request.side_effect = SpotifyNotFoundError('gone', status_code=404)
        with pytest.raises(SpotifyNotFoundError):
            api.get_playlist('missing')


# =============================================================================
# Artists
# =============================================================================

class TestArtists:

    def test_get_artist_cached(self, api, gateway, sample_artist):
        gateway.request.return_value = sample_artist

        first = api.get_artist('artist1')
        second = api.get_artist('artist1')

        assert first.name == 'Artist 1'
        assert second.followers == 1234
        assert gateway.request.call_count == 1

    def test_artist_top_tracks_use_region(self, api, gateway, sample_profile, sample_tracks):
        gateway.request.side_effect = _route({
            ('GET', '/me'): sample_profile,
            ('GET', '/artists/artist1/top-tracks'): {'tracks': sample_tracks},
        })

        tracks = api.get_artist_top_tracks('artist1')

        assert len(tracks) == 5
        assert gateway.request.call_args.kwargs['params'] == {'market': 'MX'}

    def test_is_following_degrades_to_false(self, api, gateway):
        gateway.request.side_effect = SpotifyAPIError('boom', status_code=500)
        assert api.is_following_artist('artist1') is False

    def test_follow_overwrites_cached_status(self, api, gateway):
        gateway.request.return_value = [False]
        assert api.is_following_artist('artist1') is False

        gateway.request.return_value = None
        api.follow_artist('artist1')

        gateway.request.reset_mock()
        assert api.is_following_artist('artist1') is True
        gateway.request.assert_not_called()

    def test_unfollow_overwrites_cached_status(self, api, gateway):
        gateway.request.return_value = None
        api.follow_artist('artist1')
        api.unfollow_artist('artist1')

        gateway.request.reset_mock()
        assert api.is_following_artist('artist1') is False
        gateway.request.assert_not_called()


# =============================================================================
# Player
# =============================================================================

class TestPlayer:

    def test_play_context_with_offset(self, api, gateway):
        api.play(
            device_id='dev1',
            context_uri='spotify:playlist:p1',
            uris=['spotify:track:t1'],
        )

        gateway.request.assert_called_once_with(
            1, 'PUT', '/me/player/play',
            params={'device_id': 'dev1'},
            json={
                'context_uri': 'spotify:playlist:p1',
                'offset': {'uri': 'spotify:track:t1'},
            },
        )

    def test_play_uris_without_device(self, api, gateway):
        api.play(uris=['spotify:track:t1', 'spotify:track:t2'])

        kwargs = gateway.request.call_args.kwargs
        assert kwargs['params'] == {}
        assert kwargs['json'] == {'uris': ['spotify:track:t1', 'spotify:track:t2']}

    def test_pause_returns_false_on_error(self, api, gateway):
        gateway.request.side_effect = SpotifyAPIError('already paused', status_code=403)
        assert api.pause() is False

    def test_pause_returns_true(self, api, gateway):
        assert api.pause('dev1') is True

    def test_set_volume_degrades(self, api, gateway):
        gateway.request.side_effect = SpotifyAPIError('unsupported', status_code=403)
        assert api.set_volume(50) is False

    def test_seek_params(self, api, gateway):
        api.seek(42000, device_id='dev1')
        assert gateway.request.call_args.kwargs['params'] == {
            'position_ms': 42000, 'device_id': 'dev1'
        }

    def test_next_error_propagates(self, api, gateway):
        gateway.request.side_effect = SpotifyNotFoundError('no device', status_code=404)
        with pytest.raises(SpotifyNotFoundError):
            api.next_track()

    def test_transfer(self, api, gateway):
        api.transfer('dev1')
        gateway.request.assert_called_once_with(
            1, 'PUT', '/me/player', json={'device_ids': ['dev1'], 'play': True}
        )

    def test_get_devices(self, api, gateway):
        gateway.request.return_value = {
            'devices': [{'id': 'dev1', 'name': 'Laptop', 'is_active': True}]
        }
        devices = api.get_devices()
        assert devices[0].id == 'dev1'
        assert devices[0].is_active is True

    def test_currently_playing_fails_fast(self, api, gateway, sample_tracks):
        gateway.request.return_value = {
            'item': sample_tracks[0], 'is_playing': True, 'progress_ms': 10
        }

        state = api.get_currently_playing()

        assert isinstance(state, PlaybackState)
        assert state.is_playing is True
        assert gateway.request.call_args.kwargs['retry_budget'] == 0

    def test_currently_playing_nothing(self, api, gateway):
        gateway.request.return_value = None
        assert api.get_currently_playing() is None

    def test_currently_playing_rate_limited_returns_none(self, api, gateway):
        gateway.request.side_effect = SpotifyRateLimitError('slow')
        assert api.get_currently_playing() is None

    def test_queue_reshaped(self, api, gateway, sample_tracks):
        gateway.request.return_value = {
            'currently_playing': sample_tracks[0],
            'queue': sample_tracks[1:3],
        }

        queue = api.get_queue()

        assert isinstance(queue['currently_playing'], Track)
        assert [t.id for t in queue['queue']] == ['track2', 'track3']

    def test_add_to_queue(self, api, gateway):
        api.add_to_queue('spotify:track:t1', device_id='dev1')
        assert gateway.request.call_args.kwargs['params'] == {
            'uri': 'spotify:track:t1', 'device_id': 'dev1'
        }


# =============================================================================
# Browse
# =============================================================================

class TestBrowse:

    def test_featured_filters_null_entries(self, api, gateway, sample_profile, sample_playlists):
        gateway.request.side_effect = _route({
            ('GET', '/me'): sample_profile,
            ('GET', '/search'): {
                'playlists': {'items': [None, sample_playlists[0], None]}
            },
        })

        featured = api.get_featured_playlists()

        assert [p.id for p in featured] == ['playlist1']
        params = gateway.request.call_args.kwargs['params']
        assert params['q'] == FEATURED_QUERY
        assert params['market'] == 'MX'
        assert params['limit'] == 15

    def test_featured_degrades_to_empty(self, api, gateway):
        gateway.request.side_effect = SpotifyAPIError('boom', status_code=500)
        assert api.get_featured_playlists() == []

    def test_categories_cached_per_country(self, api, gateway, sample_profile):
        gateway.request.side_effect = _route({
            ('GET', '/me'): sample_profile,
            ('GET', '/browse/categories'): {
                'categories': {'items': [
                    {'id': 'pop', 'name': 'Pop', 'icons': [{'url': 'i'}]}
                ]}
            },
        })

        first = api.get_categories()
        second = api.get_categories()

        assert first[0].id == 'pop'
        assert second[0].icon_url == 'i'
        # One /me and one /browse/categories call in total
        assert gateway.request.call_count == 2

    def test_public_playlists_degrade(self, api, gateway):
        gateway.request.side_effect = SpotifyNotFoundError('no user', status_code=404)
        assert api.get_public_playlists('someone') == []

    def test_public_profile_not_found_propagates(self, api, gateway):
        gateway.request.side_effect = SpotifyNotFoundError('no user', status_code=404)
        with pytest.raises(SpotifyNotFoundError):
            api.get_public_profile('someone')


class TestWithoutCache:

    def test_reads_go_straight_to_gateway(self, gateway, sample_artist):
        api = SpotifyAPI(gateway, 1)
        gateway.request.return_value = sample_artist

        api.get_artist('artist1')
        api.get_artist('artist1')

        assert gateway.request.call_count == 2

    def test_access_token(self, gateway):
        assert SpotifyAPI(gateway, 1).get_access_token() == 'access-1'

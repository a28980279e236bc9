"""
Library routes: the user's playlists, saved tracks, search and history.
"""

import logging

from flask import jsonify, request

from novaplayer.routes import (
    main,
    get_spotify_api,
    json_error,
    json_success,
    require_session,
    validate_json,
)
from novaplayer.schemas import CreatePlaylistRequest, EditPlaylistRequest

logger = logging.getLogger(__name__)


# =============================================================================
# Playlists
# =============================================================================


@main.route("/spotify/playlists")
@require_session
def get_playlists(user=None):
    playlists = get_spotify_api(user).get_user_playlists()
    return jsonify([p.to_dict() for p in playlists])


@main.route("/spotify/playlist/<playlist_id>")
@require_session
def get_playlist(playlist_id, user=None):
    """Playlist details as returned by Spotify."""
    return jsonify(get_spotify_api(user).get_playlist(playlist_id))


@main.route("/spotify/playlist", methods=["POST"])
@require_session
def create_playlist(user=None):
    parsed, err = validate_json(CreatePlaylistRequest)
    if err:
        return err

    playlist = get_spotify_api(user).create_playlist(
        parsed.name, parsed.description, parsed.image
    )
    return jsonify(playlist), 201


@main.route("/spotify/playlist/<playlist_id>", methods=["PUT"])
@require_session
def edit_playlist(playlist_id, user=None):
    parsed, err = validate_json(EditPlaylistRequest)
    if err:
        return err

    get_spotify_api(user).edit_playlist(
        playlist_id,
        name=parsed.name,
        description=parsed.description,
        image_base64=parsed.image,
    )
    return json_success("Playlist updated.")


@main.route("/spotify/playlist/<playlist_id>", methods=["DELETE"])
@require_session
def delete_playlist(playlist_id, user=None):
    get_spotify_api(user).delete_playlist(playlist_id)
    return json_success("Playlist removed from your library.")


# =============================================================================
# Tracks
# =============================================================================


@main.route("/spotify/search")
@require_session
def search(user=None):
    query = request.args.get("q", "").strip()
    if not query:
        return json_error("Query parameter 'q' is required.", 400)
    return jsonify(get_spotify_api(user).search(query))


@main.route("/spotify/top-tracks")
@require_session
def top_tracks(user=None):
    tracks = get_spotify_api(user).get_top_tracks()
    return jsonify([t.to_dict() for t in tracks])


@main.route("/spotify/saved-tracks")
@require_session
def saved_tracks(user=None):
    """One page of liked songs; ``?offset=`` pages through them."""
    offset = request.args.get("offset", 0, type=int)
    return jsonify(get_spotify_api(user).get_saved_tracks(offset=offset))


@main.route("/spotify/check-saved/<track_id>")
@require_session
def check_saved(track_id, user=None):
    return jsonify({"saved": get_spotify_api(user).is_track_saved(track_id)})


@main.route("/spotify/save-track/<track_id>", methods=["PUT"])
@require_session
def save_track(track_id, user=None):
    get_spotify_api(user).save_track(track_id)
    return json_success("Track saved.")


@main.route("/spotify/remove-track/<track_id>", methods=["DELETE"])
@require_session
def remove_track(track_id, user=None):
    get_spotify_api(user).remove_track(track_id)
    return json_success("Track removed.")


@main.route("/spotify/recently-played")
@require_session
def recently_played(user=None):
    limit = request.args.get("limit", 20, type=int)
    limit = max(1, min(limit, 50))
    tracks = get_spotify_api(user).get_recently_played(limit=limit)
    return jsonify([t.to_dict() for t in tracks])

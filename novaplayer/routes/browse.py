"""
Browse routes: artists, featured playlists, categories, public profiles
and music video lookup.
"""

import logging

from flask import jsonify, request

from novaplayer.routes import (
    main,
    get_spotify_api,
    json_error,
    json_success,
    require_session,
)
from novaplayer.services import VideoService

logger = logging.getLogger(__name__)


# =============================================================================
# Artists
# =============================================================================


@main.route("/spotify/artist/<artist_id>")
@require_session
def get_artist(artist_id, user=None):
    return jsonify(get_spotify_api(user).get_artist(artist_id).to_dict())


@main.route("/spotify/artist/<artist_id>/top-tracks")
@require_session
def artist_top_tracks(artist_id, user=None):
    tracks = get_spotify_api(user).get_artist_top_tracks(artist_id)
    return jsonify([t.to_dict() for t in tracks])


@main.route("/spotify/artist/<artist_id>/is-following")
@require_session
def is_following_artist(artist_id, user=None):
    following = get_spotify_api(user).is_following_artist(artist_id)
    return jsonify({"following": following})


@main.route("/spotify/artist/<artist_id>/follow", methods=["PUT"])
@require_session
def follow_artist(artist_id, user=None):
    get_spotify_api(user).follow_artist(artist_id)
    return json_success("Artist followed.", following=True)


@main.route("/spotify/artist/<artist_id>/follow", methods=["DELETE"])
@require_session
def unfollow_artist(artist_id, user=None):
    get_spotify_api(user).unfollow_artist(artist_id)
    return json_success("Artist unfollowed.", following=False)


# =============================================================================
# Discovery
# =============================================================================


@main.route("/spotify/featured")
@require_session
def featured_playlists(user=None):
    playlists = get_spotify_api(user).get_featured_playlists()
    return jsonify([p.to_dict() for p in playlists])


@main.route("/spotify/categories")
@require_session
def categories(user=None):
    return jsonify([c.to_dict() for c in get_spotify_api(user).get_categories()])


@main.route("/spotify/categories/<category_id>/playlists")
@require_session
def category_playlists(category_id, user=None):
    playlists = get_spotify_api(user).get_category_playlists(category_id)
    return jsonify([p.to_dict() for p in playlists])


@main.route("/spotify/user-profile/<spotify_user_id>")
@require_session
def public_profile(spotify_user_id, user=None):
    return jsonify(get_spotify_api(user).get_public_profile(spotify_user_id))


@main.route("/spotify/user-profile/<spotify_user_id>/playlists")
@require_session
def public_playlists(spotify_user_id, user=None):
    playlists = get_spotify_api(user).get_public_playlists(spotify_user_id)
    return jsonify([p.to_dict() for p in playlists])


@main.route("/spotify/video")
@require_session
def find_video(user=None):
    """Official music video for ``?q=<track> <artist>``, or null."""
    query = request.args.get("q", "").strip()
    if not query:
        return json_error("Query parameter 'q' is required.", 400)

    video = VideoService.find_official_video(query)
    return jsonify(video.to_dict() if video else None)

"""
Player routes: Web Playback SDK token, playback control, devices, queue.
"""

import logging

from flask import jsonify

from novaplayer.routes import (
    main,
    get_spotify_api,
    json_success,
    require_session,
    validate_json,
)
from novaplayer.schemas import (
    DeviceRequest,
    PlayRequest,
    TransferRequest,
    SeekRequest,
    VolumeRequest,
    QueueRequest,
)

logger = logging.getLogger(__name__)


@main.route("/spotify/token")
@require_session
def playback_token(user=None):
    """Access token for the frontend Web Playback SDK."""
    return jsonify({"access_token": get_spotify_api(user).get_access_token()})


# =============================================================================
# Playback Control
# =============================================================================


@main.route("/spotify/play", methods=["PUT"])
@require_session
def play(user=None):
    parsed, err = validate_json(PlayRequest, required=False)
    if err:
        return err

    get_spotify_api(user).play(
        device_id=parsed.device_id,
        context_uri=parsed.context_uri,
        uris=parsed.uris,
    )
    return json_success("Playback started.")


@main.route("/spotify/transfer", methods=["PUT"])
@require_session
def transfer(user=None):
    parsed, err = validate_json(TransferRequest)
    if err:
        return err

    get_spotify_api(user).transfer(parsed.device_id, play=parsed.play)
    return json_success("Playback transferred.")


@main.route("/spotify/currently-playing")
@require_session
def currently_playing(user=None):
    """Polled by the frontend. Returns null when nothing is playing."""
    state = get_spotify_api(user).get_currently_playing()
    return jsonify(state.to_dict() if state else None)


@main.route("/spotify/seek", methods=["PUT"])
@require_session
def seek(user=None):
    parsed, err = validate_json(SeekRequest)
    if err:
        return err

    get_spotify_api(user).seek(parsed.position_ms, device_id=parsed.device_id)
    return json_success("Seeked.")


@main.route("/spotify/pause", methods=["PUT"])
@require_session
def pause(user=None):
    parsed, err = validate_json(DeviceRequest, required=False)
    if err:
        return err

    paused = get_spotify_api(user).pause(device_id=parsed.device_id)
    return jsonify({"success": paused})


@main.route("/spotify/resume", methods=["PUT"])
@require_session
def resume(user=None):
    parsed, err = validate_json(DeviceRequest, required=False)
    if err:
        return err

    get_spotify_api(user).resume(device_id=parsed.device_id)
    return json_success("Playback resumed.")


@main.route("/spotify/next", methods=["POST"])
@require_session
def next_track(user=None):
    parsed, err = validate_json(DeviceRequest, required=False)
    if err:
        return err

    get_spotify_api(user).next_track(device_id=parsed.device_id)
    return json_success("Skipped to next track.")


@main.route("/spotify/previous", methods=["POST"])
@require_session
def previous_track(user=None):
    parsed, err = validate_json(DeviceRequest, required=False)
    if err:
        return err

    get_spotify_api(user).previous_track(device_id=parsed.device_id)
    return json_success("Skipped to previous track.")


@main.route("/spotify/volume", methods=["PUT"])
@require_session
def volume(user=None):
    parsed, err = validate_json(VolumeRequest)
    if err:
        return err

    changed = get_spotify_api(user).set_volume(
        parsed.volume_percent, device_id=parsed.device_id
    )
    return jsonify({"success": changed})


# =============================================================================
# Devices & Queue
# =============================================================================


@main.route("/spotify/devices")
@require_session
def devices(user=None):
    return jsonify([d.to_dict() for d in get_spotify_api(user).get_devices()])


@main.route("/spotify/queue")
@require_session
def get_queue(user=None):
    queue = get_spotify_api(user).get_queue()
    current = queue["currently_playing"]
    return jsonify({
        "currently_playing": current.to_dict() if current else None,
        "queue": [t.to_dict() for t in queue["queue"]],
    })


@main.route("/spotify/queue", methods=["POST"])
@require_session
def add_to_queue(user=None):
    parsed, err = validate_json(QueueRequest)
    if err:
        return err

    get_spotify_api(user).add_to_queue(parsed.uri, device_id=parsed.device_id)
    return json_success("Added to queue.")

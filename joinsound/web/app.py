import logging
import sqlite3
from typing import Optional

from flask import Flask, jsonify, request, send_file

from joinsound.config import MAX_PAYLOAD_SIZE, Config
from joinsound.database import Database
from joinsound.errors import JoinSoundError, SoundFileRemovalError, ValidationError
from joinsound.models.settings import SettingsPatch
from joinsound.services.sound import SoundService
from joinsound.services.upload import CandidateFile
from joinsound.web.auth import CallerVerifier, reject_all

logger = logging.getLogger(__name__)


def parse_member_pair(guild_id: str, member_id: str):
    try:
        guild = int(guild_id)
    except ValueError:
        raise ValidationError(f"invalid guild ID: {guild_id}")
    try:
        member = int(member_id)
    except ValueError:
        raise ValidationError(f"invalid user ID: {member_id}")
    return guild, member


def create_app(config=Config, verify_caller: Optional[CallerVerifier] = None,
               service: Optional[SoundService] = None) -> Flask:
    """
    Build the Flask app.

    Args:
        config: Object with DB_PATH, SOUNDS_PATH, MAX_BATCH_SIZE and
            MAX_FILES_PER_USER attributes
        verify_caller: Turns a request into a verified member ID; private
            routes reject everything when omitted
        service: Prebuilt SoundService (tests); built from config otherwise
    """
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = MAX_PAYLOAD_SIZE

    if service is None:
        Database(config.DB_PATH).initialize().close()
        service = SoundService.create(
            db_path=config.DB_PATH,
            sounds_path=config.SOUNDS_PATH,
            max_batch_size=config.MAX_BATCH_SIZE,
            max_files_per_user=config.MAX_FILES_PER_USER,
        )
    verify = verify_caller or reject_all

    app.extensions["joinsound"] = service

    @app.errorhandler(JoinSoundError)
    def handle_join_sound_error(error: JoinSoundError):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(sqlite3.Error)
    def handle_database_error(error: sqlite3.Error):
        logger.exception("Database error while handling %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500

    @app.errorhandler(413)
    def handle_too_large(error):
        return jsonify({"error": f"Request body exceeds {MAX_PAYLOAD_SIZE} bytes"}), 413

    # Public routes

    @app.route("/api/v1/ping")
    def ping():
        return jsonify({"message": "pong"})

    @app.route("/api/v1/sound/<sound_id>", methods=["GET"])
    def get_sound(sound_id):
        sound, path = service.get_sound_file(sound_id)
        response = send_file(
            path,
            mimetype=sound.mime_type,
            as_attachment=False,
            download_name=sound.original_name,
        )
        response.headers["X-Content-Type-Options"] = "nosniff"
        return response

    @app.route("/api/v1/sounds/<guild_id>/<member_id>", methods=["GET"])
    def get_member_sounds(guild_id, member_id):
        guild, member = parse_member_pair(guild_id, member_id)
        sounds = service.list_sounds(guild, member)
        return jsonify({"sounds": [s.to_dict() for s in sounds]})

    @app.route("/api/v1/settings/<guild_id>/<member_id>", methods=["GET"])
    def get_member_settings(guild_id, member_id):
        guild, member = parse_member_pair(guild_id, member_id)
        settings = service.get_settings(guild, member)
        return jsonify({"setting": settings.to_dict()})

    # Private routes

    @app.route("/api/v1/sound/<sound_id>", methods=["DELETE"])
    def delete_sound(sound_id):
        caller = verify(request)
        service.ownership.ensure_sound_owner(caller, sound_id)
        try:
            deleted, replacement = service.delete_sound(sound_id)
        except SoundFileRemovalError as e:
            return jsonify({
                "error": e.message,
                "deleted_sound": e.deleted_sound.to_dict() if e.deleted_sound else None,
            }), e.status_code

        return jsonify({
            "message": "Sound deleted successfully",
            "deleted_sound": deleted.to_dict(),
            "new_sound": replacement.to_dict() if replacement else None,
        })

    @app.route("/api/v1/sounds/<guild_id>/<member_id>", methods=["POST"])
    def upload_member_sounds(guild_id, member_id):
        caller = verify(request)
        guild, member = parse_member_pair(guild_id, member_id)
        service.ownership.ensure_member(caller, member)

        files = [CandidateFile.from_storage(f) for f in request.files.getlist("files")]
        report = service.upload_sounds(guild, member, files)

        if report.success_count > 0:
            status = 207 if report.failure_count > 0 else 200
        else:
            status = 400
        return jsonify(report.to_dict()), status

    @app.route("/api/v1/settings/<guild_id>/<member_id>", methods=["PATCH"])
    def update_member_settings(guild_id, member_id):
        caller = verify(request)
        guild, member = parse_member_pair(guild_id, member_id)
        service.ownership.ensure_member(caller, member)

        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")

        settings = service.update_settings(guild, member, SettingsPatch.from_dict(body))
        return jsonify({"setting": settings.to_dict()})

    return app

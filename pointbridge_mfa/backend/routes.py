"""
MFA API ROUTES - FLASK BLUEPRINT

Each endpoint wraps one MFAService operation for a user id in the URL.
Authentication of the caller (session / first factor) belongs to the
surrounding app, not to this blueprint.

EXAMPLES:
curl -X POST http://localhost:5000/api/mfa/alice/enroll -H "Content-Type: application/json" -d '{"account_label": "alice@example.com"}'
curl -X POST http://localhost:5000/api/mfa/alice/confirm -H "Content-Type: application/json" -d '{"code": "123456"}'
curl -X POST http://localhost:5000/api/mfa/alice/verify -H "Content-Type: application/json" -d '{"code": "123456"}'
curl http://localhost:5000/api/mfa/alice/status
"""

import logging

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import BadRequest

from ..core.errors import MFAError
from ..core.uri import qr_code_data_url

logger = logging.getLogger(__name__)

mfa_bp = Blueprint("mfa", __name__, url_prefix="/api/mfa")


def _service():
    return current_app.extensions["mfa"]


def _code_from_body() -> str:
    data = request.get_json(silent=True) or {}
    code = data.get("code")
    if not isinstance(code, str) or not code.strip():
        raise BadRequest("Field 'code' is required in JSON body")
    return code


@mfa_bp.errorhandler(MFAError)
def handle_mfa_error(error: MFAError):
    return jsonify({"error": error.code, "message": error.message}), error.http_status


@mfa_bp.route("/<string:user_id>/enroll", methods=["POST"])
def enroll(user_id):
    """
    START ENROLLMENT

    Body (optional): {"account_label": "alice@example.com"}
    Output: {"secret", "otpauth_uri", "qr_code"}
    """
    data = request.get_json(silent=True) or {}
    start = _service().begin_enrollment(user_id, account_label=data.get("account_label"))
    return jsonify({
        "secret": start.secret,
        "otpauth_uri": start.otpauth_uri,
        "qr_code": qr_code_data_url(start.otpauth_uri),
    }), 201


@mfa_bp.route("/<string:user_id>/confirm", methods=["POST"])
def confirm(user_id):
    """
    CONFIRM ENROLLMENT WITH THE FIRST CODE

    Body: {"code": "123456"}
    Output: {"backup_codes": [...]}  (shown once)
    """
    backup_codes = _service().confirm_enrollment(user_id, _code_from_body())
    return jsonify({"message": "MFA enabled", "backup_codes": backup_codes})


@mfa_bp.route("/<string:user_id>/verify", methods=["POST"])
def verify(user_id):
    """
    LOGIN CHECK (TOTP or backup code)

    Body: {"code": "123456"} or {"code": "ABCDE-FGHJK"}
    Output: {"valid": true} or {"valid": false, "message": "Invalid code"}
    """
    valid = _service().verify_for_login(user_id, _code_from_body())
    if valid:
        return jsonify({"valid": True})
    return jsonify({"valid": False, "message": "Invalid code"}), 401


@mfa_bp.route("/<string:user_id>/disable", methods=["POST"])
def disable(user_id):
    _service().disable(user_id)
    return jsonify({"disabled": True})


@mfa_bp.route("/<string:user_id>/backup_codes", methods=["POST"])
def regenerate_backup_codes(user_id):
    """Replace all backup codes. Output: {"backup_codes": [...]}"""
    backup_codes = _service().regenerate_backup_codes(user_id)
    return jsonify({"backup_codes": backup_codes})


@mfa_bp.route("/<string:user_id>/status", methods=["GET"])
def status(user_id):
    return jsonify(_service().get_status(user_id).to_dict())

from flask import jsonify
from flask_jwt_extended import JWTManager
from flask_marshmallow import Marshmallow


ma = Marshmallow()
jwt = JWTManager()


@jwt.unauthorized_loader
def _missing_token(reason):
    return jsonify({"error": "Unauthorized"}), 401


@jwt.invalid_token_loader
def _invalid_token(reason):
    return jsonify({"error": "Unauthorized"}), 401


@jwt.expired_token_loader
def _expired_token(jwt_header, jwt_payload):
    return jsonify({"error": "Unauthorized"}), 401

from flask import request
from werkzeug.security import check_password_hash
from flask_jwt_extended import create_access_token

from . import bp
from ..model import AdminUser
from ..utils.api import ok, err


@bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    if not email or not password:
        return err("Email and password are required", 400)

    admin = AdminUser.query.filter_by(email=email).first()
    if not admin or not check_password_hash(admin.password_hash, password):
        return err("Invalid credentials", 401)

    access_token = create_access_token(identity=str(admin.id), additional_claims={"email": admin.email})
    return ok("You've logged in successfully", {"admin": admin.as_dict(), "access_token": access_token})

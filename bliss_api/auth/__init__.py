from flask import Blueprint

bp = Blueprint("auth", __name__, url_prefix="/admin/auth")

from . import routes  # noqa: E402,F401

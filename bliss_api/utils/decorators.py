# ------- bliss_api/utils/decorators.py -------
from functools import wraps
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from ..extensions import db
from ..utils.api import err
from ..model import AdminUser

def _current_admin():
    verify_jwt_in_request()
    uid = get_jwt_identity()
    try:
        uid = int(uid)
    except (TypeError, ValueError):
        uid = None
    return db.session.get(AdminUser, uid) if uid else None

def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not _current_admin():
            return err("Unauthorized", 401)
        return fn(*args, **kwargs)
    return wrapper

# --- catalog/routes.py ---
from ..services.catalog_service import get_catalog
from ..utils.api import ok
from . import bp

@bp.get("")
def catalog():
    return ok("catalog", get_catalog())

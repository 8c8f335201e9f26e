from flask import Blueprint

bp = Blueprint("complaints", __name__)

# Importing registers the @bp.route handlers
from . import routes  # noqa: E402,F401

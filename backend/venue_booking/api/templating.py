"""
Jinja2 template environment shared by the HTML routes.
"""

from pathlib import Path
from urllib.parse import urlencode

from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from venue_booking.core.config import get_settings

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals["app_name"] = get_settings().APP_NAME
templates.env.globals["organization"] = get_settings().ORGANIZATION_NAME


def url_with_query(path: str, **params) -> str:
    """Append the non-empty params to `path` as a query string."""
    query = {key: value for key, value in params.items() if value not in (None, "")}
    return f"{path}?{urlencode(query)}" if query else path


def redirect_to(url: str) -> RedirectResponse:
    """303 so that a POST form submission is followed by a GET."""
    return RedirectResponse(url, status_code=303)

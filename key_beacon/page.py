"""Jinja2 rendering for the configuration-helper page."""
from __future__ import annotations

from jinja2 import Environment, PackageLoader, select_autoescape

from .config import PARTNER_SCOPE, TESLA_AUTH_URL
from .domain.regions import DEFAULT_AUDIENCE
from .logging_conf import get_logger

__all__ = ["REDIRECT_PATH", "curl_token_command", "render_index_html"]

logger = get_logger("page")

REDIRECT_PATH = "/api/tesla/fleet/auth/callback"
INDEX_TEMPLATE = "index.html.j2"

_env = Environment(
    loader=PackageLoader("key_beacon", "templates"),
    autoescape=select_autoescape(["html", "xml", "html.j2"]),
)


def curl_token_command() -> str:
    """Shell equivalent of the token exchange done by POST /get-token."""
    lines = [
        f'curl -X POST "{TESLA_AUTH_URL}"',
        '-H "Content-Type: application/x-www-form-urlencoded"',
        '-d "grant_type=client_credentials"',
        '-d "client_id=YOUR_CLIENT_ID"',
        '-d "client_secret=YOUR_CLIENT_SECRET"',
        f'-d "scope={PARTNER_SCOPE}"',
        f'-d "audience={DEFAULT_AUDIENCE}"',
    ]
    return " \\\n".join(lines)


def render_index_html(public_key: str | None) -> str:
    """Render the index page, embedding `public_key` if there is one."""
    logger.debug(
        "page.render", extra={"event": "page_render", "has_key": bool(public_key)}
    )
    return _env.get_template(INDEX_TEMPLATE).render(
        public_key=public_key,
        curl_command=curl_token_command(),
        redirect_path=REDIRECT_PATH,
    )

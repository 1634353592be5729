import logging
from pathlib import Path

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import RedirectResponse
from starlette.routing import Route
from starlette.templating import Jinja2Templates

from . import settings
from .csrf import CSRFMiddleware
from .errors import ConfigurationError
from .views import csrf_context

log = logging.getLogger(__name__)

templates = Jinja2Templates(directory=Path(__file__).parent / "templates", context_processors=[csrf_context])

MAX_ENTRIES = 20


async def get_index(request):
    entries = request.session.get("entries", [])
    flash = request.session.pop("flash", None)
    return templates.TemplateResponse(request, "index.html", {"entries": entries, "flash": flash})


async def post_entry(request):
    async with request.form() as form:
        text = str(form.get("text") or "").strip()

    if not text:
        request.session["flash"] = "Entry text is required."
        return RedirectResponse("/", 303)

    entries = request.session.get("entries", [])
    request.session["entries"] = [text, *entries][:MAX_ENTRIES]
    log.info("Added entry (%d stored)", len(request.session["entries"]))
    return RedirectResponse("/", 303)


async def post_clear(request):
    request.session["entries"] = []
    return RedirectResponse("/", 303)


def rejected_form(request, call_next):
    request.session["flash"] = "Failed. Please try again."
    return RedirectResponse("/", 303)


def create_app(secret_key=None, https_only=None, debug=None):
    secret_key = secret_key or settings.SESSION_SECRET_KEY
    if not secret_key:
        raise ConfigurationError("SESSION_SECRET_KEY is not set")

    return Starlette(
        debug=settings.DEBUG if debug is None else debug,
        middleware=[
            Middleware(
                SessionMiddleware,
                secret_key=str(secret_key),
                https_only=settings.SESSION_HTTPS_ONLY if https_only is None else https_only,
            ),
            Middleware(CSRFMiddleware, error_handler=rejected_form),
        ],
        routes=[
            Route("/", get_index),
            Route("/entries", post_entry, methods=["POST"]),
            Route("/entries/clear", post_clear, methods=["POST"]),
        ],
    )

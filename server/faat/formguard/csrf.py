import inspect
import logging
import secrets

from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import PlainTextResponse

from . import settings
from .errors import ConfigurationError, SessionNotActiveError
from .session import StarletteSession
from .views import VIEW_VARIABLE

log = logging.getLogger(__name__)

TOKEN_KEY = "csrf_token"
MUTATING_METHODS = frozenset(["POST", "PUT", "DELETE", "PATCH"])
MIN_TOKEN_BYTES = 16
MAX_TOKEN_BYTES = 20

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class CSRFMiddleware(BaseHTTPMiddleware):
    """Issues a session-bound token on every request and checks it on mutating ones.

    The token is regenerated on every request, whether or not it validated.
    The new value is stored in the session, exposed as ``request.state.csrf_token``
    and, rendered as a hidden form field, handed to ``view`` as the ``csrf``
    global. Requests with a missing or wrong token are answered by the error
    handler instead of the rest of the chain.
    """

    def __init__(
        self,
        app,
        view=None,
        error_handler=None,
        error_message=None,
        token_bytes=None,
        session_factory=StarletteSession,
    ):
        super().__init__(app)
        if token_bytes is None:
            token_bytes = settings.CSRF_TOKEN_BYTES
        if not MIN_TOKEN_BYTES <= token_bytes <= MAX_TOKEN_BYTES:
            raise ConfigurationError(
                f"token_bytes must be between {MIN_TOKEN_BYTES} and {MAX_TOKEN_BYTES}, got {token_bytes}"
            )
        self.view = view
        self.token_bytes = token_bytes
        self.session_factory = session_factory
        self.error_handler = error_handler
        self.error_message = settings.CSRF_ERROR_MESSAGE if error_message is None else error_message

    async def dispatch(self, request, call_next):
        session = self.session_factory(request)
        if not session.is_active():
            raise SessionNotActiveError()

        if request.method in MUTATING_METHODS:
            body = await parse_body(request)
            token = body.get(TOKEN_KEY)
            reason = self.check_token(session, token)
            if reason is not None:
                log.info("Rejected %s %s: token %s", request.method, request.url.path, reason)
                self.generate_token(request, session)
                handler = self.get_error_handler()
                response = handler(request, call_next)
                if inspect.isawaitable(response):
                    response = await response
                return response

        self.generate_token(request, session)
        if self.view is not None:
            self.view.add_global(VIEW_VARIABLE, request.state.csrf_form)

        return await call_next(request)

    def check_token(self, session, token):
        if token is None or token == "":
            return "missing"
        if not isinstance(token, str):
            return "not a string"
        stored = session.get(TOKEN_KEY, None)
        if not isinstance(stored, str) or not secrets.compare_digest(token.encode(), stored.encode()):
            return "mismatch"
        return None

    def validate_token(self, request, token):
        return self.check_token(self.session_factory(request), token) is None

    def generate_token(self, request, session=None):
        if session is None:
            session = self.session_factory(request)
        token = secrets.token_hex(self.token_bytes)
        session.set(TOKEN_KEY, token)
        request.state.csrf_token = token
        request.state.csrf_form = render_form_field(token)
        log.debug("Issued new CSRF token for %s %s", request.method, request.url.path)
        return token

    def generate_form(self, request):
        return render_form_field(self.session_factory(request).get(TOKEN_KEY, ""))

    def get_error_handler(self):
        if self.error_handler is None:
            return self.default_error_handler
        return self.error_handler

    def set_error_handler(self, error_handler):
        self.error_handler = error_handler

    def set_error_message(self, error_message):
        self.error_message = error_message

    def default_error_handler(self, request, call_next):
        return PlainTextResponse(self.error_message, 400)


def render_form_field(token):
    return f'<input type="hidden" name="{TOKEN_KEY}" value="{token}">'


async def parse_body(request):
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    # Cache the raw body so it is replayed to the downstream app.
    await request.body()
    try:
        if content_type == "application/json":
            payload = await request.json()
            return payload if isinstance(payload, dict) else {}
        if content_type in FORM_CONTENT_TYPES:
            async with request.form() as form:
                return {k: v for k, v in form.items()}
    except (ValueError, MultiPartException, HTTPException):
        log.debug("Could not parse %s body of %s %s", content_type, request.method, request.url.path)
    return {}

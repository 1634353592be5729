from .csrf import CSRFMiddleware, TOKEN_KEY, render_form_field
from .errors import ConfigurationError, FormGuardError, SessionNotActiveError
from .session import StarletteSession
from .views import AttributeView, Jinja2View, TemplateGlobals, csrf_context

__version__ = "0.1.0"


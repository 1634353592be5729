from typing import Protocol

from markupsafe import Markup

VIEW_VARIABLE = "csrf"


class TemplateGlobals(Protocol):
    def add_global(self, name, value): ...


class Jinja2View:
    """Exposes values as globals of a ``Jinja2Templates`` environment.

    Values are marked safe so that the hidden form field survives
    autoescaping when rendered with ``{{ csrf }}``.

    The environment is shared by every request, so the global only matches
    the current request's token when requests are handled one at a time.
    Concurrent applications should render with ``csrf_context`` instead.
    """

    def __init__(self, templates):
        self.templates = templates

    def add_global(self, name, value):
        self.templates.env.globals[name] = Markup(value)


class AttributeView:
    def __init__(self, attributes=None):
        self.attributes = {} if attributes is None else attributes

    def add_global(self, name, value):
        self.attributes[name] = value


def csrf_context(request):
    """Jinja2 context processor exposing the field rendered for this request."""
    form = getattr(request.state, "csrf_form", None)
    if form is None:
        return {}
    return {VIEW_VARIABLE: Markup(form)}

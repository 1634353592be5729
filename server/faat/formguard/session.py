class StarletteSession:
    """Reads and writes the session installed by Starlette's SessionMiddleware."""

    def __init__(self, request):
        self.request = request

    def is_active(self):
        return isinstance(self.request.scope.get("session"), dict)

    def get(self, key, default=None):
        return self.request.session.get(key, default)

    def set(self, key, value):
        self.request.session[key] = value

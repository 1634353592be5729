class FormGuardError(Exception):
    pass


class ConfigurationError(FormGuardError, RuntimeError):
    pass


class SessionNotActiveError(ConfigurationError):
    def __init__(self, message="CSRF middleware failed. Session is not started."):
        super().__init__(message)

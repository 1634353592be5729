from starlette.config import Config
from starlette.datastructures import Secret

config = Config(".env")

DEBUG = config("DEBUG", cast=bool, default=False)

SESSION_SECRET_KEY = config("SESSION_SECRET_KEY", cast=Secret, default=None)
SESSION_HTTPS_ONLY = config("SESSION_HTTPS_ONLY", cast=bool, default=True)

CSRF_TOKEN_BYTES = config("CSRF_TOKEN_BYTES", cast=int, default=20)
CSRF_ERROR_MESSAGE = config("CSRF_ERROR_MESSAGE", default="Invalid security token.")

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route

from faat.formguard import CSRFMiddleware

SECRET_KEY = "test-session-secret"
ALL_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH"]


def build_routes(calls):
    async def echo(request):
        calls.append(request.method)
        payload = {
            "token": request.state.csrf_token,
            "session_token": request.session.get("csrf_token"),
        }
        if request.headers.get("content-type", "").startswith("application/x-www-form-urlencoded"):
            async with request.form() as form:
                payload["text"] = form.get("text")
        return JSONResponse(payload)

    return [Route("/", echo, methods=ALL_METHODS)]


def make_app(calls, **csrf_options):
    return Starlette(
        middleware=[
            Middleware(SessionMiddleware, secret_key=SECRET_KEY),
            Middleware(CSRFMiddleware, **csrf_options),
        ],
        routes=build_routes(calls),
    )


def fetch_token(client):
    r = client.get("/")
    assert r.status_code == 200
    return r.json()["token"]

import pytest
from starlette.testclient import TestClient

from .helpers import make_app


@pytest.fixture
def calls():
    return []


@pytest.fixture
def client(calls):
    with TestClient(make_app(calls)) as c:
        yield c

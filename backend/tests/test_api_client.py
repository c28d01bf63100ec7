import httpx
import pytest

from club_activity.client import (
    ApiClient,
    MemoryStorage,
    Navigator,
    SessionStore,
    get_error_message,
    resolve_base_url,
)


class Recorder:
    """Mock transport handler that records requests and replays a response."""

    def __init__(self, status_code=200, json=None):
        self.status_code = status_code
        self.json = json if json is not None else {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.json)


class CountingNavigator(Navigator):
    def __init__(self, path="/"):
        super().__init__(path)
        self.visits = []

    def go(self, path):
        self.visits.append(path)
        super().go(path)


@pytest.fixture()
def store():
    return SessionStore(MemoryStorage())


def make_client(store, handler, navigator=None):
    return ApiClient(
        store=store,
        base_url="http://testserver",
        navigator=navigator or CountingNavigator(),
        transport=httpx.MockTransport(handler),
    )


def test_request_hook_attaches_session_headers(store):
    store.save({"username": "testuser", "sessionId": "abc123"})
    handler = Recorder(json={"ok": True})
    with make_client(store, handler) as client:
        client.get("/api/clubs")

    sent = handler.requests[0]
    assert sent.headers["x-username"] == "testuser"
    assert sent.headers["x-session-id"] == "abc123"


def test_request_hook_sends_no_headers_without_session(store):
    handler = Recorder()
    with make_client(store, handler) as client:
        client.get("/api/events")

    sent = handler.requests[0]
    assert "x-username" not in sent.headers
    assert "x-session-id" not in sent.headers


def test_session_update_is_merged(store):
    store.save({"username": "testuser", "sessionId": "abc123", "role": "STU", "club": None})
    seen = []
    store.subscribe(seen.append)
    handler = Recorder(json={"club": {}, "sessionUpdate": {"role": "CL", "club": "Chess Club"}})
    with make_client(store, handler) as client:
        client.post("/api/clubs", json={})

    assert store.get() == {
        "username": "testuser",
        "sessionId": "abc123",
        "role": "CL",
        "club": "Chess Club",
    }
    assert len(seen) == 1


def test_session_update_ignored_without_session(store):
    handler = Recorder(json={"sessionUpdate": {"role": "CL"}})
    with make_client(store, handler) as client:
        client.post("/api/clubs", json={})
    assert store.get() is None


def test_non_json_response_passes_through(store):
    store.save({"username": "testuser", "sessionId": "abc123"})

    def handler(request):
        return httpx.Response(200, text="plain")

    with make_client(store, handler) as client:
        response = client.get("/health")
    assert response.text == "plain"
    assert store.get() == {"username": "testuser", "sessionId": "abc123"}


def test_unauthorized_clears_session_and_navigates_once(store):
    store.save({"username": "testuser", "sessionId": "stale"})
    handler = Recorder(status_code=401, json={"detail": "Session is invalid or expired"})
    navigator = CountingNavigator("/Notifications")

    with make_client(store, handler, navigator) as client:
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            client.get("/api/notifications")

    assert store.get() is None
    assert navigator.visits == ["/LogIn"]
    assert navigator.path == "/LogIn"
    assert len(handler.requests) == 1
    assert exc_info.value.response.status_code == 401
    assert get_error_message(exc_info.value) == "Session is invalid or expired"


def test_unauthorized_on_login_view_does_not_navigate(store):
    handler = Recorder(status_code=401, json={"detail": "Invalid credentials"})
    navigator = CountingNavigator("/LogIn")

    with make_client(store, handler, navigator) as client:
        with pytest.raises(httpx.HTTPStatusError):
            client.post("/api/auth/login", json={})

    assert navigator.visits == []


def test_other_errors_propagate_without_touching_session(store):
    store.save({"username": "testuser", "sessionId": "abc123"})
    handler = Recorder(status_code=403, json={"detail": "Only club leaders can do this"})
    navigator = CountingNavigator()

    with make_client(store, handler, navigator) as client:
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            client.post("/api/events", json={})

    assert exc_info.value.response.status_code == 403
    assert store.get() == {"username": "testuser", "sessionId": "abc123"}
    assert navigator.visits == []


def test_login_saves_session_and_logout_clears_it(store):
    def handler(request):
        if request.url.path == "/api/auth/login":
            return httpx.Response(200, json={"username": "testuser", "sessionId": "abc123", "role": "STU"})
        return httpx.Response(200, json={"status": "logged_out"})

    with make_client(store, handler) as client:
        session = client.login("testuser", "password123")
        assert session["sessionId"] == "abc123"
        assert store.get() == session

        client.logout()
    assert store.get() is None


def test_resolve_base_url(monkeypatch):
    monkeypatch.delenv("API_URL", raising=False)
    assert resolve_base_url() == "http://localhost:8000"
    assert resolve_base_url("http://api.school.edu") == "http://api.school.edu"

    monkeypatch.setenv("API_URL", "http://override:9000")
    assert resolve_base_url() == "http://override:9000"


def test_get_error_message_shapes():
    assert get_error_message({"response": {"data": {"message": "User not found"}}}) == "User not found"
    assert get_error_message({"message": "Network Error"}) == "Network Error"
    assert get_error_message({}) == "Something went wrong"
    assert get_error_message(None) == "Something went wrong"
    assert (
        get_error_message({"response": {"data": {"message": "API Error"}}, "message": "Generic Error"})
        == "API Error"
    )
    assert get_error_message(RuntimeError("Network Error")) == "Network Error"
    assert get_error_message(RuntimeError()) == "Something went wrong"


def test_get_error_message_from_http_error():
    request = httpx.Request("GET", "http://testserver/api/clubs")
    response = httpx.Response(400, json={"message": "Club already exists"}, request=request)
    error = httpx.HTTPStatusError("bad request", request=request, response=response)
    assert get_error_message(error) == "Club already exists"

    no_body = httpx.Response(500, content=b"oops", request=request)
    error = httpx.HTTPStatusError("server error", request=request, response=no_body)
    assert get_error_message(error) == "server error"

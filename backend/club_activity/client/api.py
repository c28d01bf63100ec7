import logging
import os
from typing import Any, Mapping

import httpx

from ..config import DEFAULT_API_URL, SESSION_STORAGE_PATH
from .session_store import SessionStore
from .storage import FileStorage

logger = logging.getLogger(__name__)

LOGIN_PATH = "/LogIn"
FALLBACK_ERROR_MESSAGE = "Something went wrong"


def resolve_base_url(base_url: str | None = None) -> str:
    return base_url or os.getenv("API_URL") or DEFAULT_API_URL


def default_store() -> SessionStore:
    return SessionStore(FileStorage(SESSION_STORAGE_PATH))


class Navigator:
    """Where the user currently is; stands in for the browser location."""

    def __init__(self, path: str = "/") -> None:
        self.path = path

    def go(self, path: str) -> None:
        logger.info("Navigating to %s", path)
        self.path = path


class ApiClient:
    """HTTP client that authenticates every request from the session store.

    Request hook: attach ``x-username``/``x-session-id``.
    Response hook: merge a ``sessionUpdate`` payload into the stored session,
    and on 401 clear the session and send the user to the login view. Error
    statuses are raised to the caller as ``httpx.HTTPStatusError``; nothing is
    retried.
    """

    def __init__(
        self,
        store: SessionStore | None = None,
        base_url: str | None = None,
        navigator: Navigator | None = None,
        login_path: str = LOGIN_PATH,
        **client_kwargs: Any,
    ) -> None:
        self.store = store if store is not None else default_store()
        self.navigator = navigator if navigator is not None else Navigator()
        self.login_path = login_path
        self.http = httpx.Client(
            base_url=resolve_base_url(base_url),
            event_hooks={"request": [self._attach_auth], "response": [self._on_response]},
            **client_kwargs,
        )

    def _attach_auth(self, request: httpx.Request) -> None:
        headers = self.store.auth_headers()
        if headers:
            request.headers.update(headers)

    def _on_response(self, response: httpx.Response) -> None:
        response.read()
        if response.is_error:
            if response.status_code == 401:
                self._invalidate_session()
            response.raise_for_status()
            return
        self._apply_session_update(response)

    def _apply_session_update(self, response: httpx.Response) -> None:
        try:
            payload = response.json()
        except ValueError:
            return
        if not isinstance(payload, dict):
            return
        update = payload.get("sessionUpdate")
        if not isinstance(update, dict) or not update:
            return
        current = self.store.get()
        if current:
            self.store.save({**current, **update})

    def _invalidate_session(self) -> None:
        logger.info("Session rejected by server; clearing local session")
        self.store.clear()
        if self.navigator.path != self.login_path:
            self.navigator.go(self.login_path)

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        return self.http.request(method, url, **kwargs)

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.http.get(url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.http.post(url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.http.put(url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.http.delete(url, **kwargs)

    def login(self, username_or_email: str, password: str) -> dict[str, Any]:
        response = self.post(
            "/api/auth/login",
            json={"usernameOrEmail": username_or_email, "password": password},
        )
        session = response.json()
        self.store.save(session)
        return session

    def logout(self) -> None:
        try:
            self.post("/api/auth/logout")
        finally:
            if self.store.get() is not None:
                self.store.clear()

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _response_message(err: Any) -> str | None:
    if isinstance(err, Mapping):
        response = err.get("response")
        data = response.get("data") if isinstance(response, Mapping) else None
    else:
        response = getattr(err, "response", None)
        if not isinstance(response, httpx.Response):
            return None
        try:
            data = response.json()
        except (ValueError, httpx.ResponseNotRead):
            return None
    if not isinstance(data, Mapping):
        return None
    for field in ("message", "detail"):
        value = data.get(field)
        if isinstance(value, str) and value:
            return value
    return None


def get_error_message(err: Any) -> str:
    """Human-readable message for any error shape; never raises."""
    message = _response_message(err)
    if message:
        return message
    if isinstance(err, Mapping):
        own = err.get("message")
    elif isinstance(err, BaseException):
        own = str(err)
    else:
        own = None
    if isinstance(own, str) and own:
        return own
    return FALLBACK_ERROR_MESSAGE

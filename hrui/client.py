"""HTTP session with the web interface of an HRUI managed switch."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable, Mapping
from typing import Optional, Union

import requests
from bs4 import BeautifulSoup

FormData = Union[Mapping[str, str], Iterable[tuple[str, str]]]

DEFAULT_TIMEOUT = 30.0
LOGIN_REDIRECT = 'window.top.location.replace("/login.cgi")'
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class HRUIError(Exception):
    """Raised when the switch cannot be reached or answers unexpectedly."""


class AuthenticationError(HRUIError):
    """Raised when the switch rejects the supplied credentials."""


class HRUIClient:
    """Talks to the CGI endpoints of one switch.

    URLs given to :meth:`get` and :meth:`post_form` may be absolute or a path
    starting with ``/``, which is resolved against the switch's base URL.
    """

    def __init__(
        self,
        url: str,
        username: str = "",
        password: str = "",
        autosave: bool = False,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.username = username
        self.password = password
        self.autosave = autosave
        self.session = session if session is not None else requests.Session()
        self.timeout = DEFAULT_TIMEOUT

    def __enter__(self) -> "HRUIClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _resolve(self, url: str) -> str:
        return self.url + url if url.startswith("/") else url

    def authenticate(self) -> None:
        """Set the login cookie and check that the switch accepts it."""
        digest = hashlib.md5(
            (self.username + self.password).encode(), usedforsecurity=False
        ).hexdigest()
        self.session.cookies.set("admin", digest, path="/")
        self._validate_auth()

    def _validate_auth(self) -> None:
        try:
            response = self.get("/index.cgi")
        except HRUIError as exc:
            raise HRUIError(f"authentication validation request failed: {exc}") from exc

        if response.status_code == 200:
            scripts = BeautifulSoup(response.text, "html.parser").find_all("script")
            script = scripts[-1].get_text() if scripts else ""
            if LOGIN_REDIRECT in script:
                raise AuthenticationError("authentication failed: redirected to login page")
            return

        raise HRUIError(f"unexpected status code: {response.status_code}")

    def get(self, url: str) -> requests.Response:
        """Perform a GET request and return the response, whatever its status."""
        try:
            return self.session.get(self._resolve(url), timeout=self.timeout)
        except requests.RequestException as exc:
            raise HRUIError(f"error making GET request: {exc}") from exc

    def post_form(self, url: str, form: FormData) -> requests.Response:
        """Submit an url-encoded form; any status other than 200 is an error."""
        data = dict(form) if isinstance(form, Mapping) else list(form)
        try:
            response = self.session.post(self._resolve(url), data=data, timeout=self.timeout)
        except requests.RequestException as exc:
            raise HRUIError(f"failed to submit form: {exc}") from exc
        if response.status_code != 200:
            raise HRUIError(
                f"form submission failed, received status code: {response.status_code}"
            )
        return response

    def save_configuration(self) -> None:
        """Persist the running configuration of the switch."""
        try:
            response = self.session.post(
                self._resolve("/save.cgi"),
                data="cmd=save",
                headers={"Content-Type": FORM_CONTENT_TYPE},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise HRUIError(f"failed to save HRUI configuration: {exc}") from exc
        if response.status_code != 200:
            raise HRUIError(
                f"failed to save HRUI configuration, status code: {response.status_code}"
            )

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self.session.close()


def new_client(url: str, username: str, password: str, autosave: bool = False) -> HRUIClient:
    """Create a client and authenticate it against the switch."""
    client = HRUIClient(url, username, password, autosave)
    try:
        client.authenticate()
    except HRUIError as exc:
        client.close()
        raise AuthenticationError(f"failed to authenticate HRUIClient: {exc}") from exc
    return client
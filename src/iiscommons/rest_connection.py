"""REST connection details for the Information Server domain tier."""

from typing import Any, Dict, Optional, Union

import requests
from requests.adapters import HTTPAdapter

from .errors import (
    IncompleteAuthenticationError,
    IncompleteConnectionError,
    RestConnectionError,
)
from .errors_catalog import actionable_error


class RestConnection:
    """Bundles credentials and the domain tier address for HTTPS calls.

    Example::

        conn = RestConnection("isadmin", "isadmin-password", "localhost", "9445")
        response = conn.request("GET", "/ibm/iis/igc-rest/v1/types")
    """

    DEFAULT_MAX_SOCKETS = 100

    def __init__(
        self,
        username: str,
        password: str,
        host: str,
        port: Union[int, str],
        max_sockets: Optional[int] = None,
        verify: Union[bool, str] = False,
        requests_module=requests,
    ):
        if not username or not password:
            raise IncompleteAuthenticationError(actionable_error("incomplete_auth"))
        if not host or port is None or str(port) == "":
            raise IncompleteConnectionError(actionable_error("incomplete_connection"))

        self._username = username
        self._password = password
        self._host = host
        self._port = str(port)
        self.max_sockets = max_sockets or self.DEFAULT_MAX_SOCKETS
        self.requests = requests_module

        self.session = self.requests.Session()
        self.session.auth = (username, password)
        self.session.verify = verify
        self.session.mount(
            "https://",
            HTTPAdapter(pool_connections=1, pool_maxsize=self.max_sockets),
        )

    @property
    def auth(self) -> Dict[str, str]:
        return {"user": self._username, "pass": self._password}

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> str:
        return self._port

    @property
    def connection(self) -> str:
        return f"{self._host}:{self._port}"

    @property
    def base_url(self) -> str:
        return f"https://{self.connection}"

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, timeout: float = 60, **kwargs: Any):
        try:
            response = self.session.request(method, self.url(path), timeout=timeout, **kwargs)
            response.raise_for_status()
        except self.requests.RequestException as exc:
            raise RestConnectionError(f"{method} {self.url(path)} failed: {exc}") from exc
        return response

    def close(self):
        self.session.close()

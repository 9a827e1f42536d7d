"""
Base class for API clients.

Every request goes through one requests.Session rooted at ``apiBaseUrl``
with a JSON content type; requests and responses are written to the
standard logger.
"""

import logging
from typing import Optional

import requests

from ..config import ConfigKey, ConfigReader, get_config

logger = logging.getLogger(__name__)
logger.propagate = True

DEFAULT_API_TIMEOUT = 30


class BaseAPI:
    def __init__(
        self,
        config: Optional[ConfigReader] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or get_config()
        self.base_url = self.config.require(ConfigKey.APIBASEURL).rstrip("/")
        self.timeout = self.config.get_int(ConfigKey.TIMEOUT, DEFAULT_API_TIMEOUT)
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = self.url_for(path)
        kwargs.setdefault("timeout", self.timeout)
        logger.info(f"Request: {method.upper()} {url}")
        if kwargs.get("params"):
            logger.debug(f"Request params: {kwargs['params']}")
        if kwargs.get("json") is not None:
            logger.debug(f"Request body: {kwargs['json']}")

        response = self.session.request(method.upper(), url, **kwargs)

        logger.info(
            f"Response: {response.status_code} {method.upper()} {url} "
            f"({response.elapsed.total_seconds():.3f}s)"
        )
        logger.debug(f"Response body: {response.text}")
        return response

    def get(self, path: str, **kwargs) -> requests.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> requests.Response:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> requests.Response:
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs) -> requests.Response:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs) -> requests.Response:
        return self.request("DELETE", path, **kwargs)

    def close(self):
        self.session.close()

"""
This module contains a definition for a document store-adapter that
operates based on a document store that is reachable via HTTP.
"""

from typing import Optional, Mapping, Any
from json import dumps
from urllib.parse import quote

import requests

from docstore.errors import DocumentStoreError
from docstore.models import NOT_FOUND, NO_TTL, as_path
from docstore.operations import decode_result
from .interface import DocumentStoreAdapter


class HTTPDocumentStoreAdapter(DocumentStoreAdapter):
    """
    Implementation of a `DocumentStoreAdapter` for interacting with a
    document store over network via HTTP. The server is expected to
    implement the 'docstore - DocumentStore-API' in version v0 (see
    `docstore.middleware.flask`).

    Typed errors returned by the server are re-raised as the
    corresponding `DocumentStoreError`. Note that keys containing '/'
    are not supported.

    Keyword arguments:
    url -- base url for document store
    timeout -- timeout duration for requests
               (default 1)
    proxies -- network proxy-configuration (see documentation of
               `requests` for details)
               (default None)
    """

    def __init__(
        self,
        url: str,
        timeout: float = 1.0,
        proxies: Optional[Mapping[str, str]] = None
    ) -> None:
        self._url = url.rstrip("/")
        self._timeout = timeout
        self._proxies = proxies
        self._default_kwargs = {
            "timeout": timeout, "proxies": proxies
        }

    @staticmethod
    def _path(path) -> str:
        return str(as_path(path))

    def _doc_url(self, key: str, suffix: str = "") -> str:
        return f"{self._url}/doc/{quote(key, safe='')}{suffix}"

    def _ranking_url(self, member: str, suffix: str = "") -> str:
        return f"{self._url}/ranking/{quote(member, safe='')}{suffix}"

    @staticmethod
    def _check(response: requests.Response) -> requests.Response:
        """
        Raises `DocumentStoreError` for typed error-responses and
        `requests.HTTPError` for other unexpected responses.
        """
        if response.status_code in (400, 409, 422):
            try:
                json = response.json()
            except requests.JSONDecodeError:
                json = None
            if isinstance(json, dict) and "error" in json:
                raise DocumentStoreError.from_json(json)
        response.raise_for_status()
        return response

    def _post(self, url: str, json: Any) -> requests.Response:
        return requests.post(
            url, data=dumps(json), **self._default_kwargs,
            headers={"Content-Type": "application/json"}
        )

    def set(self, key, path, value):
        self._check(
            requests.put(
                self._doc_url(key), params={"path": self._path(path)},
                data=dumps(value), **self._default_kwargs,
                headers={"Content-Type": "application/json"}
            )
        )

    def get(self, key, path=None):
        response = requests.get(
            self._doc_url(key), params={"path": self._path(path)},
            **self._default_kwargs
        )
        if response.status_code == 404:
            return NOT_FOUND
        return self._check(response).json()

    def delete(self, key, path=None):
        return self._check(
            requests.delete(
                self._doc_url(key), params={"path": self._path(path)},
                **self._default_kwargs
            )
        ).json()["deleted"]

    def _verb(self, key: str, verb: str, body: Mapping, field: str):
        response = self._post(self._doc_url(key, f"/{verb}"), body)
        if response.status_code == 404:
            return NOT_FOUND
        return self._check(response).json()[field]

    def numincrby(self, key, path, delta):
        return self._verb(
            key, "numincrby", {"path": self._path(path), "delta": delta},
            "value",
        )

    def arrappend(self, key, path, *values):
        return self._verb(
            key, "arrappend",
            {"path": self._path(path), "values": list(values)},
            "length",
        )

    def arrinsert(self, key, path, index, *values):
        return self._verb(
            key, "arrinsert",
            {"path": self._path(path), "index": index, "values": list(values)},
            "length",
        )

    def arrpop(self, key, path, index=-1):
        return self._verb(
            key, "arrpop", {"path": self._path(path), "index": index},
            "value",
        )

    def expire(self, key, ttl):
        response = self._post(self._doc_url(key, "/expire"), {"ttl": ttl})
        if response.status_code == 404:
            return NOT_FOUND
        self._check(response)
        return True

    def persist(self, key):
        response = self._post(self._doc_url(key, "/persist"), {})
        if response.status_code == 404:
            return NOT_FOUND
        self._check(response)
        return True

    def ttl(self, key):
        response = requests.get(
            self._doc_url(key, "/ttl"), **self._default_kwargs
        )
        if response.status_code == 404:
            return NOT_FOUND
        ttl = self._check(response).json()["ttl"]
        if ttl is None:
            return NO_TTL
        return ttl

    def version(self, key):
        return self._check(
            requests.get(
                self._doc_url(key, "/version"), **self._default_kwargs
            )
        ).json()["version"]

    def keys(self):
        response = requests.options(
            f"{self._url}/doc", **self._default_kwargs
        )
        return tuple(self._check(response).json())

    def commit(self, watched, operations):
        response = self._post(
            f"{self._url}/transaction",
            {"watch": dict(watched), "operations": list(operations)},
        )
        return [
            decode_result(result)
            for result in self._check(response).json()["results"]
        ]

    def zincrby(self, member, delta):
        return self._check(
            self._post(self._ranking_url(member), {"delta": delta})
        ).json()["score"]

    def zscore(self, member):
        response = requests.get(
            self._ranking_url(member), **self._default_kwargs
        )
        if response.status_code == 404:
            return NOT_FOUND
        return self._check(response).json()["score"]

    def zrank(self, member, descending=True):
        response = requests.get(
            self._ranking_url(member, "/rank"),
            params={"descending": "1" if descending else "0"},
            **self._default_kwargs
        )
        if response.status_code == 404:
            return NOT_FOUND
        return self._check(response).json()["rank"]

    def zrange(self, start, end, descending=True):
        response = requests.get(
            f"{self._url}/ranking",
            params={
                "start": start,
                "end": end,
                "descending": "1" if descending else "0",
            },
            **self._default_kwargs
        )
        return [
            (entry["member"], entry["score"])
            for entry in self._check(response).json()
        ]

    def zrem(self, member):
        return self._check(
            requests.delete(
                self._ranking_url(member), **self._default_kwargs
            )
        ).json()["removed"]

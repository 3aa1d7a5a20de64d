# OWSYNC Remote Gateway
# OpenWhisk REST client for package and action CRUD

from __future__ import annotations

import base64
from typing import Any, Optional
from urllib.parse import quote

import httpx

from owsync.config.defaults import DEFAULT_KIND, DEFAULT_NAMESPACE
from owsync.config.schema import PlatformConfig
from owsync.exceptions import RemoteCallError, RemoteNotFoundError

# OpenWhisk caps list pages at 200 entries
LIST_PAGE_SIZE = 200


def get_annotation(annotations: list[dict[str, Any]] | None, key: str, default: Any = None) -> Any:
    """Return the value of the first annotation with ``key``."""
    for annotation in annotations or []:
        if annotation.get("key") == key:
            return annotation.get("value", default)
    return default


def merge_annotations(*groups: list[dict[str, Any]] | None) -> list[dict[str, Any]]:
    """
    Merge annotation lists; a later entry replaces an earlier one with the same key.

    Order of first appearance is preserved so repeated uploads produce
    identical annotation lists.
    """
    merged: dict[str, dict[str, Any]] = {}
    for group in groups:
        for annotation in group or []:
            key = annotation.get("key")
            if key is None:
                continue
            merged[key] = {"key": key, "value": annotation.get("value")}
    return list(merged.values())


class OpenWhiskGateway:
    """
    Remote state gateway backed by the OpenWhisk REST API.

    All calls are blocking and performed one at a time. HTTP 404 raises
    RemoteNotFoundError; every other failure raises RemoteCallError.
    """

    def __init__(
        self,
        platform: PlatformConfig,
        *,
        default_kind: str = DEFAULT_KIND,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize gateway.

        Args:
            platform: Resolved platform settings.
            default_kind: Runtime kind used when an action configuration has none.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.platform = platform
        self.default_kind = default_kind
        self._client = httpx.Client(
            base_url=platform.base_url,
            auth=platform.credentials,
            timeout=timeout,
            verify=not platform.insecure,
            transport=transport,
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> OpenWhiskGateway:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _path(self, collection: str, *names: str) -> str:
        namespace = quote(self.platform.namespace, safe="")
        parts = "/".join(quote(name, safe="") for name in names)
        path = f"/namespaces/{namespace}/{collection}"
        return f"{path}/{parts}" if parts else path

    def _request(self, method: str, path: str, *, operation: str, **kwargs: Any) -> httpx.Response:
        """Send a request, translating failures into gateway exceptions."""
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteCallError(f"{operation} failed: {e}", operation=operation) from e

        if response.status_code == 404:
            raise RemoteNotFoundError(
                f"{operation}: not found",
                operation=operation,
                status_code=404,
                body=response.text,
            )

        if response.is_error:
            raise RemoteCallError(
                f"{operation} failed with HTTP {response.status_code}: {_error_text(response)}",
                operation=operation,
                status_code=response.status_code,
                body=response.text,
            )

        return response

    def _request_json(
        self, method: str, path: str, *, operation: str, expected: type = dict, **kwargs: Any
    ) -> Any:
        """
        Send a request and decode its JSON reply.

        Raises:
            RemoteCallError: If the body is not JSON or its top level is not ``expected``.
        """
        response = self._request(method, path, operation=operation, **kwargs)
        try:
            data = response.json()
        except ValueError as e:
            raise RemoteCallError(
                f"{operation}: response is not valid JSON",
                operation=operation,
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not isinstance(data, expected):
            raise RemoteCallError(
                f"{operation}: expected a JSON {expected.__name__}, got {type(data).__name__}",
                operation=operation,
                status_code=response.status_code,
                body=response.text,
            )
        return data

    def create_or_update_package(self, name: str, configuration: dict[str, Any]) -> dict[str, Any]:
        """Create the package or overwrite its configuration."""
        return self._request_json(
            "PUT",
            self._path("packages", name),
            operation=f"create package '{name}'",
            params={"overwrite": "true"},
            json=dict(configuration),
        )

    def get_action(self, package: str, name: str) -> dict[str, Any]:
        """
        Fetch action metadata without its code.

        Raises:
            RemoteNotFoundError: If the action doesn't exist.
        """
        return self._request_json(
            "GET",
            self._path("actions", package, name),
            operation=f"get action '{package}/{name}'",
            params={"code": "false"},
        )

    def create_or_update_action(
        self,
        package: str,
        name: str,
        archive: bytes,
        configuration: dict[str, Any],
        annotations: list[dict[str, Any]],
    ) -> dict[str, Any]:
        """
        Upload action content together with its configuration and annotations.

        Content and annotations travel in one request, so a recorded
        fingerprint can never describe content other than what was stored.
        """
        body = dict(configuration)
        body.pop("name", None)
        kind = body.pop("kind", None) or self.default_kind
        main = body.pop("main", None)

        exec_spec: dict[str, Any] = {
            "kind": kind,
            "code": base64.b64encode(archive).decode("ascii"),
            "binary": True,
        }
        if main:
            exec_spec["main"] = main

        body["exec"] = exec_spec
        body["annotations"] = annotations

        return self._request_json(
            "PUT",
            self._path("actions", package, name),
            operation=f"upload action '{package}/{name}'",
            params={"overwrite": "true"},
            json=body,
        )

    def list_actions(self, package: str) -> list[dict[str, Any]]:
        """List actions that belong to a package."""
        entries: list[dict[str, Any]] = []
        skip = 0
        operation = f"list actions of '{package}'"

        while True:
            page = self._request_json(
                "GET",
                self._path("actions"),
                operation=operation,
                expected=list,
                params={"limit": LIST_PAGE_SIZE, "skip": skip},
            )
            for entry in page:
                if not isinstance(entry, dict):
                    raise RemoteCallError(
                        f"{operation}: expected JSON objects in the list, got {type(entry).__name__}",
                        operation=operation,
                    )
            entries.extend(page)
            if len(page) < LIST_PAGE_SIZE:
                break
            skip += LIST_PAGE_SIZE

        return [
            {"name": entry.get("name"), "namespace": entry.get("namespace")}
            for entry in entries
            if self._in_package(entry.get("namespace") or "", package)
        ]

    def _in_package(self, namespace: str, package: str) -> bool:
        """
        Check an entity namespace like 'guest/mypackage' against the target package.

        The namespace part must equal the configured namespace, unless that
        is the '_' shorthand for the caller's default namespace, whose
        resolved name is not known locally.
        """
        owner, sep, entity_package = namespace.partition("/")
        if not sep or entity_package != package:
            return False
        return self.platform.namespace == DEFAULT_NAMESPACE or owner == self.platform.namespace

    def delete_action(self, package: str, name: str) -> None:
        """
        Delete an action.

        Raises:
            RemoteNotFoundError: If the action doesn't exist.
        """
        self._request(
            "DELETE",
            self._path("actions", package, name),
            operation=f"delete action '{package}/{name}'",
        )


def _error_text(response: httpx.Response) -> str:
    """Best-effort error message from an OpenWhisk error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict) and "error" in data:
        return str(data["error"])
    return response.text

"""List/watch client for custom resources, built on ``kubernetes_asyncio``."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from kubernetes_asyncio import client, config, watch
from kubernetes_asyncio.client.exceptions import ApiException
from pydantic import ValidationError

from vsdns.config.cluster import ClusterConfig, get_cluster_config
from vsdns.config.errors import MissingConfigurationError
from vsdns.domain.ports.cluster import (
    EventType,
    ListWatchClient,
    ObjectList,
    WatchEvent,
    WatchExpiredError,
)

from .schema import ObjectListPayload, StatusPayload, WatchEventPayload

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Mapping

log = getLogger(__name__)

_DEFAULT_WATCH_TIMEOUT_SECONDS = 300
_HTTP_GONE: Final[int] = 410


@dataclass(frozen=True, slots=True)
class ResourceKind:
    group: str
    version: str
    plural: str
    kind: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}"


F5_VIRTUAL_SERVER: Final[ResourceKind] = ResourceKind(
    group="cis.f5.com", version="v1", plural="virtualservers", kind="VirtualServer"
)


class KubernetesAPIError(RuntimeError):
    """Raised when the API server answers with an error status."""

    def __init__(self, message: str, *, code: int | None = None, reason: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.reason = reason


async def load_client_configuration(cluster: ClusterConfig) -> client.Configuration:
    """Resolve credentials the way ``kubectl`` and in-cluster controllers do.

    Without an explicit kubeconfig or context the pod's service account is tried
    first; otherwise (or when that fails) the kubeconfig file is loaded.
    """

    configuration = client.Configuration()
    loaded = False
    if not cluster.explicit_kubeconfig:
        try:
            config.load_incluster_config(client_configuration=configuration)
        except config.ConfigException as exc:
            log.debug("Not running in a cluster (%s), falling back to kubeconfig", exc)
        else:
            log.debug("Using in-cluster service account credentials")
            loaded = True

    if not loaded:
        try:
            await config.load_kube_config(
                config_file=cluster.kubeconfig,
                context=cluster.context,
                client_configuration=configuration,
            )
        except (config.ConfigException, OSError) as exc:
            raise MissingConfigurationError(
                f"No in-cluster service account and no usable kubeconfig: {exc}"
            ) from exc

    if cluster.insecure_skip_tls_verify:
        configuration.verify_ssl = False
    return configuration


async def _default_api_factory(cluster: ClusterConfig) -> client.CustomObjectsApi:
    configuration = await load_client_configuration(cluster)
    return client.CustomObjectsApi(client.ApiClient(configuration))


def _api_error(exc: ApiException, operation: str) -> Exception:
    message = exc.reason or "request failed"
    reason = ""
    if exc.body:
        try:
            status = StatusPayload.model_validate_json(exc.body)
        except ValidationError:
            pass
        else:
            message = status.message or message
            reason = status.reason

    if exc.status == _HTTP_GONE:
        return WatchExpiredError(message)
    return KubernetesAPIError(f"{operation}: {message}", code=exc.status, reason=reason)


@dataclass(slots=True)
class KubernetesClient:
    """Implements :class:`ListWatchClient` with ``CustomObjectsApi`` and ``watch.Watch``.

    The API client is created on first use; call :meth:`aclose` when done.
    """

    config: ClusterConfig = field(default_factory=get_cluster_config)
    resource: ResourceKind = F5_VIRTUAL_SERVER
    watch_timeout_seconds: int = _DEFAULT_WATCH_TIMEOUT_SECONDS
    api_factory: Callable[[ClusterConfig], Awaitable[client.CustomObjectsApi]] = field(
        default=_default_api_factory
    )
    watch_factory: Callable[[], watch.Watch] = field(default=watch.Watch)
    _api: client.CustomObjectsApi | None = field(default=None, init=False, repr=False)

    async def _get_api(self) -> client.CustomObjectsApi:
        if self._api is None:
            self._api = await self.api_factory(self.config)
        return self._api

    async def connect(self) -> None:
        """Resolve credentials now so a missing kubeconfig fails here, not in the reflector."""

        await self._get_api()

    async def aclose(self) -> None:
        if self._api is not None:
            await self._api.api_client.close()
            self._api = None

    def _describe(self, namespace: str) -> str:
        return f"{self.resource.plural}.{self.resource.group} in {namespace or 'all namespaces'}"

    def _list_call(
        self, api: client.CustomObjectsApi, namespace: str
    ) -> tuple[Callable[..., Awaitable[object]], tuple[str, ...]]:
        kind = self.resource
        if namespace:
            return api.list_namespaced_custom_object, (
                kind.group,
                kind.version,
                namespace,
                kind.plural,
            )
        return api.list_cluster_custom_object, (kind.group, kind.version, kind.plural)

    async def list_objects(self, namespace: str) -> ObjectList:
        api = await self._get_api()
        func, args = self._list_call(api, namespace)
        operation = f"list {self._describe(namespace)}"
        try:
            payload = await func(*args)
        except ApiException as exc:
            raise _api_error(exc, operation) from exc

        try:
            listing = ObjectListPayload.model_validate(payload)
        except ValidationError as exc:
            raise KubernetesAPIError(f"{operation}: unexpected list payload: {exc}") from exc

        items = tuple(self._with_type_meta(item) for item in listing.items)
        log.debug(
            "Listed %s %s at resourceVersion %s",
            len(items),
            self.resource.plural,
            listing.metadata.resource_version,
        )
        return ObjectList(items=items, resource_version=listing.metadata.resource_version)

    async def watch(self, namespace: str, *, resource_version: str) -> AsyncIterator[WatchEvent]:
        """Stream watch events until the server ends the watch.

        Raises :class:`WatchExpiredError` when ``resource_version`` is too old.
        """

        api = await self._get_api()
        func, args = self._list_call(api, namespace)
        options: dict[str, object] = {
            "allow_watch_bookmarks": True,
            "timeout_seconds": self.watch_timeout_seconds,
        }
        if resource_version:
            options["resource_version"] = resource_version

        try:
            async with self.watch_factory().stream(func, *args, **options) as stream:
                async for event in stream:
                    yield self._decode_event(event)
        except ApiException as exc:
            raise _api_error(exc, f"watch {self._describe(namespace)}") from exc

    def _decode_event(self, event: Mapping[str, object]) -> WatchEvent:
        raw = event.get("raw_object") or event.get("object")
        try:
            payload = WatchEventPayload.model_validate({"type": event.get("type"), "object": raw})
        except ValidationError as exc:
            raise KubernetesAPIError(f"malformed watch event: {exc}") from exc

        if payload.type is EventType.ERROR:
            try:
                status = StatusPayload.model_validate(payload.object)
            except ValidationError as exc:
                raise KubernetesAPIError(f"malformed watch error: {exc}") from exc
            if status.code == _HTTP_GONE:
                raise WatchExpiredError(status.message)
            raise KubernetesAPIError(status.message, code=status.code, reason=status.reason)

        obj = payload.object
        if payload.type is not EventType.BOOKMARK:
            obj = self._with_type_meta(obj)
        return WatchEvent(type=payload.type, object=obj)

    def _with_type_meta(self, item: Mapping[str, object]) -> dict[str, object]:
        # list responses may omit apiVersion/kind on their items
        filled = dict(item)
        filled.setdefault("apiVersion", self.resource.api_version)
        filled.setdefault("kind", self.resource.kind)
        return filled


if TYPE_CHECKING:
    _client_check: ListWatchClient = KubernetesClient()

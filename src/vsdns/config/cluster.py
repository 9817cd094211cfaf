"""Which cluster to talk to.

Credentials themselves are resolved by ``kubernetes_asyncio.config`` when the client
connects: the in-cluster service account first, then the kubeconfig file.
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, optional_env_var


@dataclass(frozen=True)
class ClusterConfig:
    """Kubeconfig selection; all fields empty means "in-cluster, else default kubeconfig"."""

    kubeconfig: str | None = None
    context: str | None = None
    insecure_skip_tls_verify: bool = False

    @property
    def explicit_kubeconfig(self) -> bool:
        return self.kubeconfig is not None or self.context is not None


def get_cluster_config() -> ClusterConfig:
    """Read ``VSDNS_KUBECONFIG``, ``VSDNS_CONTEXT`` and ``VSDNS_INSECURE_SKIP_TLS_VERIFY``.

    ``KUBECONFIG`` keeps working as usual because the client library reads it whenever
    no explicit path is given.
    """

    return ClusterConfig(
        kubeconfig=optional_env_var("VSDNS_KUBECONFIG"),
        context=optional_env_var("VSDNS_CONTEXT"),
        insecure_skip_tls_verify=env_bool("VSDNS_INSECURE_SKIP_TLS_VERIFY"),
    )

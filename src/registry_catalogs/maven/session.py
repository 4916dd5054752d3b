"""Ambient repository session: credentials, proxies and the distribution repository."""
from __future__ import annotations

import fnmatch
import logging
import os
import urllib.parse
from typing import Any, Dict, List, Mapping, Optional

from registry_catalogs.constants import Constants
from registry_catalogs.maven.artifacts import Authentication, Proxy, RemoteRepository

logger = logging.getLogger(__name__)


class Session:
    """Selectors for authentication and proxies, plus the distribution repository.

    Mirrors the ``servers`` and ``proxies`` sections of Maven settings:
    credentials are looked up by repository id and the first active proxy
    whose protocol matches the repository URL and whose non-proxy hosts do
    not match its host is selected.
    """

    def __init__(
        self,
        distribution_repository: Optional[RemoteRepository] = None,
        servers: Optional[Mapping[str, Authentication]] = None,
        proxies: Optional[List[Proxy]] = None,
    ):
        self.distribution_repository = distribution_repository
        self.servers: Dict[str, Authentication] = dict(servers or {})
        self.proxies: List[Proxy] = list(proxies or [])

    def authentication_for(self, repository: RemoteRepository) -> Optional[Authentication]:
        """Credentials configured for the repository id, if any."""
        return self.servers.get(repository.id)

    def proxy_for(self, repository: RemoteRepository) -> Optional[Proxy]:
        """The proxy to use for the repository URL, if any."""
        parts = urllib.parse.urlsplit(repository.url)
        host = (parts.hostname or "").lower()
        for proxy in self.proxies:
            if proxy.protocol.lower() != (parts.scheme or "").lower():
                continue
            if any(fnmatch.fnmatch(host, pattern.lower()) for pattern in proxy.non_proxy_hosts):
                continue
            return proxy
        return None

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        repository_id: Optional[str] = None,
        repository_url: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Session":
        """Build a session from the configuration file, CLI overrides and environment.

        Args:
            config: Parsed configuration (``distribution``, ``servers``, ``proxies``).
            repository_id: CLI override of the distribution repository id.
            repository_url: CLI override of the distribution repository URL.
            environ: Environment, defaults to ``os.environ``.
        """
        environ = os.environ if environ is None else environ

        distribution = dict(config.get("distribution") or {})
        dist_id = repository_id or distribution.get("id")
        dist_url = repository_url or distribution.get("url")
        repository = None
        if dist_url:
            repository = RemoteRepository(id=dist_id or "remote-repository", url=str(dist_url))

        servers: Dict[str, Authentication] = {}
        for server in config.get("servers") or []:
            if server.get("id") and server.get("username"):
                servers[str(server["id"])] = Authentication(
                    str(server["username"]), str(server.get("password") or "")
                )

        username = environ.get(Constants.ENV_DEPLOY_USERNAME)
        if repository is not None and username and repository.id not in servers:
            servers[repository.id] = Authentication(username, environ.get(Constants.ENV_DEPLOY_PASSWORD, ""))

        proxies: List[Proxy] = []
        for entry in config.get("proxies") or []:
            if entry.get("active") is False or not entry.get("host"):
                continue
            auth = None
            if entry.get("username"):
                auth = Authentication(str(entry["username"]), str(entry.get("password") or ""))
            non_proxy = entry.get("non-proxy-hosts") or ""
            if isinstance(non_proxy, str):
                non_proxy = [h.strip() for h in non_proxy.split("|") if h.strip()]
            proxies.append(Proxy(
                protocol=str(entry.get("protocol") or "http"),
                host=str(entry["host"]),
                port=int(entry.get("port") or 8080),
                authentication=auth,
                non_proxy_hosts=tuple(non_proxy),
            ))

        logger.debug(
            "Session: distribution=%s, %d server credential(s), %d proxy(ies)",
            repository.id if repository else None,
            len(servers),
            len(proxies),
        )
        return cls(repository, servers, proxies)

"""Authenticated API context shared by every command."""

import logging

from googleapiclient.discovery import build

logger = logging.getLogger(__name__)


class ApiContext:
    """Holds credentials and lazily built Google API service objects.

    One context is created per CLI invocation and passed explicitly to the
    API wrapper functions. Credentials are loaded on first use, so commands
    that never touch the network never require authentication. Call
    ``close()`` (or use the context as a ``with`` block) to release the
    HTTP connections held by the built services.
    """

    def __init__(self, credentials=None, credentials_loader=None):
        self._credentials = credentials
        self._credentials_loader = credentials_loader
        self._services: dict[tuple[str, str], object] = {}

    @property
    def credentials(self):
        if self._credentials is None:
            loader = self._credentials_loader
            if loader is None:
                # Lazy import keeps `gdrive --help` free of auth imports.
                from gdrive.auth import get_credentials

                loader = get_credentials
            self._credentials = loader()
        return self._credentials

    def service(self, name: str, version: str):
        """Build (once) and return the service object for an API."""
        key = (name, version)
        if key not in self._services:
            logger.debug("building %s %s service", name, version)
            self._services[key] = build(
                name, version,
                credentials=self.credentials,
                cache_discovery=False,
            )
        return self._services[key]

    @property
    def drive(self):
        return self.service("drive", "v3")

    @property
    def docs(self):
        return self.service("docs", "v1")

    @property
    def sheets(self):
        return self.service("sheets", "v4")

    def authorized_session(self):
        """Return a requests session that signs calls with our credentials."""
        from google.auth.transport.requests import AuthorizedSession

        return AuthorizedSession(self.credentials)

    def close(self) -> None:
        """Close every service built so far."""
        services = list(self._services.values())
        self._services.clear()
        for svc in services:
            svc.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()

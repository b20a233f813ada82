"""Global HTTP client."""

import requests
from requests import adapters

from topology_tests.utils import configuration

_session = None


def get_session() -> requests.Session:
    """Get a session object, with connection pool shared by all nodes."""
    global _session  # noqa: PLW0603

    if _session is None:
        _session = requests.Session()
        adapter = adapters.HTTPAdapter(
            pool_connections=configuration.HTTP_POOL_CONNECTIONS,
            pool_maxsize=configuration.HTTP_POOL_MAXSIZE,
        )
        _session.mount("http://", adapter)
        _session.mount("https://", adapter)
    return _session


def set_session(session: requests.Session | None) -> None:
    """Replace the global session, e.g. with a custom configured one."""
    global _session  # noqa: PLW0603

    _session = session

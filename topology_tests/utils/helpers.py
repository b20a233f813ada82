import typing as tp
import urllib.parse

DEFAULT_DOCKER_HOST_NAME = "localhost"


def get_docker_host_name(docker_host: str) -> str:
    """Return name or IP of the host where ports of containers are published.

    >>> get_docker_host_name("tcp://192.168.99.100:2376")
    '192.168.99.100'
    >>> get_docker_host_name("unix:///var/run/docker.sock")
    'localhost'
    """
    if not docker_host:
        return DEFAULT_DOCKER_HOST_NAME

    parsed = urllib.parse.urlsplit(docker_host)
    if parsed.scheme in ("unix", "npipe"):
        return DEFAULT_DOCKER_HOST_NAME

    # Accept also "host:port" without a scheme
    if not parsed.netloc:
        parsed = urllib.parse.urlsplit(f"//{docker_host}")

    return parsed.hostname or DEFAULT_DOCKER_HOST_NAME


def join_endpoints(endpoints: tp.Iterable[tuple[str, int]]) -> str:
    """Join `(host, port)` pairs into a comma separated connection string.

    >>> join_endpoints([("node-0", 9000), ("node-1", 9000)])
    'node-0:9000,node-1:9000'
    """
    return ",".join(f"{host}:{port}" for host, port in endpoints)

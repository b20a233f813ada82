"""HTTP calls to cluster nodes, wrapped in deferred executions."""

import dataclasses
import logging
import typing as tp

from topology_tests.utils import configuration
from topology_tests.utils import execution
from topology_tests.utils import http_client

LOGGER = logging.getLogger(__name__)


class HttpError(RuntimeError):
    pass


@dataclasses.dataclass(frozen=True)
class HttpResponse:
    entity: str
    headers: dict[str, str]
    response_code: int

    def header(self, name: str) -> str:
        """Return value of the header, the name is case-insensitive."""
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        msg = f"Header '{name}' not found in {list(self.headers)}"
        raise KeyError(msg)


def execute(method: str, url: str, **kwargs: tp.Any) -> execution.Execution[HttpResponse]:
    """Return execution that sends the request every time it is evaluated."""
    method = method.upper()
    kwargs.setdefault(
        "timeout", (configuration.HTTP_CONNECT_TIMEOUT, configuration.HTTP_READ_TIMEOUT)
    )

    def _request() -> HttpResponse:
        LOGGER.debug(f"Calling {method} {url}")
        with http_client.get_session().request(method, url, **kwargs) as response:
            result = HttpResponse(
                entity=response.text,
                headers=dict(response.headers),
                response_code=response.status_code,
            )
        LOGGER.debug(f"Got response {result.response_code} from {method} {url}")
        return result

    return execution.Execution(_request).labeled(f"{method} {url}")


def get(url: str) -> execution.Execution[HttpResponse]:
    return execute("GET", url)


def put(url: str, data: str, content_type: str) -> execution.Execution[HttpResponse]:
    return execute("PUT", url, data=data.encode("utf-8"), headers={"Content-Type": content_type})


def post(url: str, data: str, content_type: str) -> execution.Execution[HttpResponse]:
    return execute("POST", url, data=data.encode("utf-8"), headers={"Content-Type": content_type})


class HttpEnabled:
    """Mixin for container nodes serving HTTP on their mapped port.

    To be combined with `DockerClusterNode`, which provides `external_ip` and `mapped_port`.
    """

    external_ip: str
    mapped_port: int | None

    @property
    def base_url(self) -> str:
        if self.mapped_port is None:
            msg = (
                "No port found on container, check it is correctly started "
                "and that the mapped port is correctly declared."
            )
            raise HttpError(msg)
        return f"http://{self.external_ip}:{self.mapped_port}"

    def http_get(self, path: str) -> execution.Execution[HttpResponse]:
        return get(f"{self.base_url}{path}")

    def http_post(
        self, path: str, data: str, content_type: str
    ) -> execution.Execution[HttpResponse]:
        return post(f"{self.base_url}{path}", data, content_type)

    def http_put(
        self, path: str, data: str, content_type: str
    ) -> execution.Execution[HttpResponse]:
        return put(f"{self.base_url}{path}", data, content_type)

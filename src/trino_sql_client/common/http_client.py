import logging
import ssl
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

import urllib3
from urllib3 import HTTPHeaderDict, PoolManager, ProxyManager
from urllib3.exceptions import HTTPError
from urllib3.util import make_headers

from trino_sql_client.common.http import HttpMethod, HttpResponse
from trino_sql_client.exc import TransportError
from trino_sql_client.types import SSLOptions

logger = logging.getLogger(__name__)

DEFAULT_SOCKET_TIMEOUT = 900.0

RequestHeaders = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


@dataclass
class HttpClientConfig:
    """Transport settings, built from the underscore-prefixed ``connect`` kwargs."""

    ssl_options: SSLOptions = field(default_factory=SSLOptions)
    socket_timeout: Optional[float] = DEFAULT_SOCKET_TIMEOUT
    pool_maxsize: int = 10
    proxy_auth_method: Optional[str] = None
    user_agent: Optional[str] = None

    @classmethod
    def from_kwargs(
        cls, user_agent: Optional[str] = None, **kwargs
    ) -> "HttpClientConfig":
        ssl_options = SSLOptions(
            # by default - verify cert and host
            tls_verify=not kwargs.get("_tls_no_verify", False),
            tls_verify_hostname=kwargs.get("_tls_verify_hostname", True),
            tls_trusted_ca_file=kwargs.get("_tls_trusted_ca_file"),
            tls_client_cert_file=kwargs.get("_tls_client_cert_file"),
            tls_client_cert_key_file=kwargs.get("_tls_client_cert_key_file"),
            tls_client_cert_key_password=kwargs.get("_tls_client_cert_key_password"),
        )
        return cls(
            ssl_options=ssl_options,
            socket_timeout=kwargs.get("_socket_timeout", DEFAULT_SOCKET_TIMEOUT),
            pool_maxsize=kwargs.get("_pool_maxsize") or 10,
            proxy_auth_method=kwargs.get("_proxy_auth_method"),
            user_agent=user_agent,
        )


def _system_proxy(
    scheme: str, proxy_auth_method: Optional[str]
) -> Tuple[Optional[str], Optional[Dict[str, str]]]:
    """
    Look up the proxy configured in the environment for ``scheme``.

    Returns:
        Tuple of (proxy_uri, proxy_headers) or (None, None) if no proxy is configured
    """
    # https://docs.python.org/3/library/urllib.request.html#urllib.request.getproxies
    proxy = urllib.request.getproxies().get(scheme)
    if not proxy:
        return None, None

    if proxy_auth_method not in (None, "basic"):
        raise ValueError(f"Unsupported proxy_auth_method: {proxy_auth_method}")

    parsed_proxy = urllib.parse.urlparse(proxy)
    if not parsed_proxy.username:
        return proxy, None
    credentials = "{}:{}".format(
        urllib.parse.unquote(parsed_proxy.username),
        urllib.parse.unquote(parsed_proxy.password or ""),
    )
    return proxy, make_headers(proxy_basic_auth=credentials)


class HttpClient:
    """
    Blocking HTTP transport for the statement protocol.

    This client uses urllib3 connection pooling with TLS and system proxy support.
    Every call performs exactly one exchange: retries are disabled, and a response
    with any status code is returned to the caller. Only failures that leave no
    response at all (connection errors, timeouts, TLS failures) raise
    ``TransportError``.
    """

    def __init__(self, config: Optional[HttpClientConfig] = None):
        self.config = config or HttpClientConfig()
        self._direct_pool_manager: Optional[PoolManager] = None
        self._proxy_pool_manager: Optional[ProxyManager] = None
        self._proxy_uri: Optional[str] = None
        self._setup_pool_managers()

    def _create_ssl_context(self) -> ssl.SSLContext:
        ssl_options = self.config.ssl_options
        ssl_context = ssl.create_default_context()

        if not ssl_options.tls_verify:
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE
        elif not ssl_options.tls_verify_hostname:
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_REQUIRED

        if ssl_options.tls_trusted_ca_file:
            ssl_context.load_verify_locations(ssl_options.tls_trusted_ca_file)

        if ssl_options.tls_client_cert_file and ssl_options.tls_client_cert_key_file:
            ssl_context.load_cert_chain(
                ssl_options.tls_client_cert_file,
                ssl_options.tls_client_cert_key_file,
                ssl_options.tls_client_cert_key_password,
            )
        return ssl_context

    def _setup_pool_managers(self):
        timeout = (
            urllib3.Timeout(
                connect=self.config.socket_timeout, read=self.config.socket_timeout
            )
            if self.config.socket_timeout
            else None
        )
        pool_kwargs = {
            "maxsize": self.config.pool_maxsize,
            "retries": False,
            "timeout": timeout,
            "ssl_context": self._create_ssl_context(),
        }

        self._direct_pool_manager = PoolManager(**pool_kwargs)

        # one proxy manager covers both schemes; bypass rules are applied per request
        proxy_uri, proxy_headers = _system_proxy("https", self.config.proxy_auth_method)
        if proxy_uri is None:
            proxy_uri, proxy_headers = _system_proxy(
                "http", self.config.proxy_auth_method
            )
        if proxy_uri:
            self._proxy_uri = proxy_uri
            self._proxy_pool_manager = ProxyManager(
                proxy_uri, proxy_headers=proxy_headers, **pool_kwargs
            )
            logger.debug("Initialized with proxy support: %s", proxy_uri)

    def _get_pool_manager_for_url(self, url: str) -> PoolManager:
        if self._direct_pool_manager is None:
            raise TransportError("HTTP client is closed", {"url": url})

        target_host = urllib.parse.urlparse(url).hostname
        if (
            self._proxy_pool_manager is not None
            and target_host
            and not urllib.request.proxy_bypass(target_host)
        ):
            logger.debug("Using proxy for request to %s", target_host)
            return self._proxy_pool_manager
        return self._direct_pool_manager

    def _prepare_headers(self, headers: Optional[RequestHeaders]) -> HTTPHeaderDict:
        request_headers = HTTPHeaderDict()
        if self.config.user_agent:
            request_headers["User-Agent"] = self.config.user_agent
        if headers:
            pairs = headers.items() if isinstance(headers, Mapping) else headers
            # repeated names (e.g. one header per session property) stay separate lines
            for name, value in pairs:
                request_headers.add(name, value)
        return request_headers

    def request(
        self,
        method: HttpMethod,
        url: str,
        headers: Optional[RequestHeaders] = None,
        body: Optional[bytes] = None,
    ) -> HttpResponse:
        """
        Perform one HTTP exchange and read the whole response body.

        Args:
            method: HTTP method
            url: Absolute URL to request
            headers: Request headers, as a mapping or as (name, value) pairs
            body: Optional request body

        Returns:
            HttpResponse: status, reason phrase and body, whatever the status code

        Raises:
            TransportError: If no response could be obtained
        """
        parsed_url = urllib.parse.urlparse(url)
        logger.debug(
            "Making %s request to %s%s",
            method.value,
            parsed_url.netloc,
            parsed_url.path,
        )

        pool_manager = self._get_pool_manager_for_url(url)
        try:
            response = pool_manager.request(
                method=method.value,
                url=url,
                headers=self._prepare_headers(headers),
                body=body,
                preload_content=True,
            )
        except HTTPError as e:
            logger.error("HTTP request error: %s", e)
            raise TransportError(
                f"HTTP request error: {e}",
                {"method": method.value, "original-exception": repr(e)},
            ) from e

        return HttpResponse(
            status=response.status,
            reason=response.reason or "",
            data=response.data or b"",
        )

    def close(self):
        """Close the underlying connection pools."""
        if self._direct_pool_manager is not None:
            self._direct_pool_manager.clear()
            self._direct_pool_manager = None
        if self._proxy_pool_manager is not None:
            self._proxy_pool_manager.clear()
            self._proxy_pool_manager = None

    @property
    def closed(self) -> bool:
        return self._direct_pool_manager is None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

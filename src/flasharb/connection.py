from pathlib import Path

import aiohttp
import tenacity
from pydantic import HttpUrl
from requests.exceptions import RequestException
from web3 import AsyncBaseProvider, AsyncHTTPProvider, AsyncWeb3, HTTPProvider, IPCProvider, Web3
from web3.exceptions import ProviderConnectionError, TimeExhausted

from flasharb.exceptions import ConnectionTimeout, FlashArbValueError
from flasharb.logging import logger

# Transport-level failures, all of them recoverable by the caller
RPC_CONNECTION_ERRORS = (
    OSError,
    RequestException,
    aiohttp.ClientError,
    ProviderConnectionError,
    TimeExhausted,
)


def connect_web3(
    endpoint: HttpUrl | Path | str,
    *,
    request_timeout: float = 10,
    connect_timeout: float = 10,
) -> Web3:
    """
    Build a `Web3` instance for an HTTP URL or an IPC socket path, and wait for it to connect.
    Provider-level retries are disabled, a failed request is reported to the caller at once.

    Raises `ConnectionTimeout` if the endpoint does not respond within `connect_timeout` seconds.
    """

    match endpoint:
        case Path():
            w3 = Web3(IPCProvider(endpoint, timeout=request_timeout))
        case _:
            w3 = Web3(
                HTTPProvider(
                    str(endpoint),
                    request_kwargs={"timeout": request_timeout},
                    exception_retry_configuration=None,
                )
            )

    w3_connected_check_with_retry = tenacity.Retrying(
        stop=tenacity.stop_after_delay(connect_timeout),
        wait=tenacity.wait_exponential_jitter(),
        retry=tenacity.retry_if_result(lambda result: result is False),
    )
    try:
        w3_connected_check_with_retry(fn=w3.is_connected)
    except tenacity.RetryError as exc:
        raise ConnectionTimeout(resource="Web3", timeout_seconds=connect_timeout) from exc

    logger.debug(f"Connected to {endpoint}")
    return w3


async def connect_async_web3(
    endpoint: HttpUrl | Path | str,
    *,
    request_timeout: float = 10,
    connect_timeout: float = 10,
) -> AsyncWeb3[AsyncBaseProvider]:
    """
    Async version of connect_web3. Only HTTP endpoints are supported.
    """

    if isinstance(endpoint, Path):
        raise FlashArbValueError(message="Async connections require an HTTP endpoint.")

    w3: AsyncWeb3[AsyncBaseProvider] = AsyncWeb3(
        AsyncHTTPProvider(
            str(endpoint),
            request_kwargs={"timeout": aiohttp.ClientTimeout(total=request_timeout)},
            exception_retry_configuration=None,
        )
    )

    async_w3_connected_check_with_retry = tenacity.AsyncRetrying(
        stop=tenacity.stop_after_delay(connect_timeout),
        wait=tenacity.wait_exponential_jitter(),
        retry=tenacity.retry_if_result(lambda result: result is False),
    )
    try:
        await async_w3_connected_check_with_retry(w3.is_connected)
    except tenacity.RetryError as exc:
        await w3.provider.disconnect()
        raise ConnectionTimeout(resource="AsyncWeb3", timeout_seconds=connect_timeout) from exc

    logger.debug(f"Connected to {endpoint}")
    return w3

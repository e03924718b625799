from typing import Callable, Optional

import asyncio
import logging
import os

import aiohttp

from . import config
from .errors import FetchFailedError, StorageIOError

log = logging.getLogger(__name__)

# Called with (bytes written so far, total bytes announced by the server).
ProgressCallback = Callable[[int, int], None]


def build_archive_url(server: str, lookup_key: str) -> str:
    # Example:
    # http://symbolserver.unity3d.com/example.pdb/EFBEADDE0201040305060708090A0B0C1/example.pd_

    # Remove trailing slash
    if server.endswith('/'):
        server = server[:-1]

    return f'{server}/{lookup_key.lstrip("/")}'


def _remove_partial(destination) -> None:
    try:
        os.remove(destination)
    except FileNotFoundError:
        pass


async def _stream_to_file(response: aiohttp.ClientResponse,
                          destination,
                          total: int,
                          progress: Optional[ProgressCallback],
                          chunk_size: int) -> int:
    try:
        f = open(destination, 'wb')
    except OSError as e:
        raise StorageIOError(f'could not create {destination}: {e.strerror or e}') from e

    written = 0
    complete = False
    try:
        with f:
            async for chunk in response.content.iter_chunked(chunk_size):
                f.write(chunk)
                written += len(chunk)
                if progress is not None:
                    progress(written, total)
        complete = True
    except (aiohttp.ClientError, asyncio.TimeoutError):
        # Both can be OSError subclasses; they are transport failures, not storage ones.
        raise
    except OSError as e:
        raise StorageIOError(f'could not write {destination}: {e.strerror or e}') from e
    finally:
        # Also covers cancellation and Ctrl-C.
        if not complete:
            _remove_partial(destination)

    return written


async def fetch_archive(lookup_key: str,
                        destination,
                        *,
                        server: Optional[str] = None,
                        progress: Optional[ProgressCallback] = None,
                        chunk_size: Optional[int] = None,
                        timeout: Optional[float] = None) -> int:
    """Download the archive addressed by ``lookup_key`` into ``destination``.

    The destination is only opened once the server has answered with a
    successful status and a non-zero Content-Length, so a failed lookup
    leaves any existing file alone. Returns the number of bytes written.
    """
    if server is None:
        server = config.SYMBOL_SERVER
    if chunk_size is None:
        chunk_size = config.CHUNK_SIZE
    if timeout is None:
        timeout = config.TIMEOUT

    url = build_archive_url(server, lookup_key)
    log.debug('fetching %s into %s', url, destination)

    session_timeout = aiohttp.ClientTimeout(total=timeout)
    headers = {'User-Agent': config.USER_AGENT}

    try:
        async with aiohttp.ClientSession(timeout=session_timeout, headers=headers) as session:
            async with session.get(url) as response:
                if response.status == 404:
                    raise FetchFailedError(
                            f'symbol server returned 404, archive not found: {url}',
                            reason='status', status=response.status)
                elif not 200 <= response.status < 300:
                    raise FetchFailedError(
                            f'symbol server returned unexpected status code {response.status}: {url}',
                            reason='status', status=response.status)

                total = response.content_length
                if total is None:
                    raise FetchFailedError(
                            'symbol server did not report a content length',
                            reason='missing-length', status=response.status)
                if total == 0:
                    raise FetchFailedError(
                            'symbol server reported an empty archive',
                            reason='zero-length', status=response.status)

                log.debug('archive size is %d bytes', total)
                return await _stream_to_file(response, destination, total, progress, chunk_size)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise FetchFailedError(f'request to {url} failed: {e!r}', reason='transport') from e

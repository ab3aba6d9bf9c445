"""
Now-playing transports for the client sync engine.

A transport issues one fetch per call and reports exactly one outcome through
the supplied callbacks, unless the returned handle is cancelled first.
"""

from __future__ import annotations

import logging
from threading import Event, Thread
from typing import Callable, Protocol

import pydantic
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from linearcast.infra.exceptions import NetworkFailure
from linearcast.player.scheduler import Scheduler
from linearcast.shared.schemas import NowPlayingResponse

logger = logging.getLogger(__name__)

OnSuccess = Callable[[NowPlayingResponse], None]
OnFailure = Callable[[Exception], None]


class FetchHandle:
    """Cancellation token for an in-flight fetch."""

    def __init__(self) -> None:
        self._cancelled = Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


class NowPlayingTransport(Protocol):
    """Protocol implemented by now-playing transports."""

    def fetch(self, channel_id: str, on_success: OnSuccess, on_failure: OnFailure) -> FetchHandle:
        """Start fetching the now-playing envelope for ``channel_id``."""
        ...


class HttpNowPlayingTransport:
    """Fetch ``/api/now-playing`` with requests on a helper thread.

    The blocking request runs off the engine's thread; its outcome is posted
    back through ``scheduler`` so every engine event is handled on one thread.
    """

    def __init__(
        self,
        base_url: str,
        scheduler: Scheduler,
        *,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.strip().rstrip("/")
        self.timeout = timeout
        self._scheduler = scheduler
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with a small retry budget for connect errors."""
        session = requests.Session()
        retry_strategy = Retry(total=2, backoff_factor=0.2, status_forcelist=[502, 503, 504])
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({"Accept": "application/json", "Cache-Control": "no-store"})
        return session

    def get_now_playing(self, channel_id: str) -> NowPlayingResponse:
        """
        Blocking fetch of the now-playing envelope.

        Raises:
            NetworkFailure: If the request fails or the body is not a valid envelope
        """
        try:
            response = self.session.get(
                f"{self.base_url}/api/now-playing",
                params={"channel": channel_id},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return NowPlayingResponse.model_validate(response.json())
        except requests.RequestException as e:
            raise NetworkFailure(f"Failed to fetch now-playing for {channel_id}: {e}") from e
        except (ValueError, pydantic.ValidationError) as e:
            raise NetworkFailure(f"Malformed now-playing response for {channel_id}: {e}") from e

    def fetch(self, channel_id: str, on_success: OnSuccess, on_failure: OnFailure) -> FetchHandle:
        handle = FetchHandle()

        def _post(callback: Callable[[], None]) -> None:
            if not handle.cancelled:
                self._scheduler.call_later(0, lambda: None if handle.cancelled else callback())

        def _worker() -> None:
            try:
                result = self.get_now_playing(channel_id)
            except NetworkFailure as e:
                logger.warning("now-playing fetch failed channel=%s error=%s", channel_id, e)
                _post(lambda: on_failure(e))
                return
            _post(lambda: on_success(result))

        Thread(target=_worker, name=f"linearcast-fetch-{channel_id}", daemon=True).start()
        return handle

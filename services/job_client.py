"""Client for queue-based hosted inference spaces.

A job is submitted with POST {base_url}/jobs/call/{endpoint} and its result is
read from GET {base_url}/jobs/call/{endpoint}/{event_id} as an event stream.
The backend owns the wait; this client only bounds it with a deadline.
"""
import logging
import time
from typing import Any, Dict, List, Optional

import requests

from services.event_stream import extract_complete_event_data
from services.exceptions import BackendTimeout, ProtocolError, UpstreamError

logger = logging.getLogger(__name__)

CALL_PATH = "jobs/call"
ERROR_BODY_LIMIT = 100


class JobClient:
    def __init__(self, timeout: float = 120.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, auth_token: Optional[str]) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if auth_token:
            headers["Authorization"] = f"Bearer {auth_token}"
        return headers

    def submit(self, base_url: str, endpoint: str, data: List[Any], auth_token: Optional[str] = None) -> str:
        """Queue a job and return its event id"""
        url = f"{base_url.rstrip('/')}/{CALL_PATH}/{endpoint}"
        try:
            response = self.session.post(
                url,
                json={"data": data},
                headers=self._headers(auth_token),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            raise BackendTimeout(f"Queue request timed out after {self.timeout:g}s")
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"Queue request failed: {e}")

        if not response.ok:
            body = response.text or ""
            raise UpstreamError(
                f"Queue request failed: {response.status_code} - {body[:ERROR_BODY_LIMIT]}",
                upstream_status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError:
            raise ProtocolError("Queue response is not valid JSON")

        event_id = payload.get("event_id") if isinstance(payload, dict) else None
        if not event_id:
            raise ProtocolError("No event_id returned")

        logger.info(f"Queued job {event_id} on {endpoint}")
        return event_id

    def fetch_result(self, base_url: str, endpoint: str, event_id: str, auth_token: Optional[str] = None) -> Any:
        """Read the job's event stream to the end and decode its terminal event"""
        url = f"{base_url.rstrip('/')}/{CALL_PATH}/{endpoint}/{event_id}"
        deadline = time.monotonic() + self.timeout
        try:
            response = self.session.get(
                url,
                headers=self._headers(auth_token),
                timeout=self.timeout,
                stream=True,
            )
        except requests.exceptions.Timeout:
            raise BackendTimeout(f"Result request timed out after {self.timeout:g}s")
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"Result request failed: {e}")

        try:
            if not response.ok:
                raise UpstreamError(
                    f"Result request failed: {response.status_code}",
                    upstream_status=response.status_code,
                )

            chunks = []
            for chunk in response.iter_content(chunk_size=None):
                chunks.append(chunk)
                if time.monotonic() > deadline:
                    raise BackendTimeout(f"Result stream exceeded {self.timeout:g}s")
        except requests.exceptions.Timeout:
            raise BackendTimeout(f"Result stream stalled for {self.timeout:g}s")
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"Result stream interrupted: {e}")
        finally:
            response.close()

        text = b"".join(chunks).decode("utf-8", errors="replace")
        logger.debug(f"Job {event_id} stream length: {len(text)}")
        return extract_complete_event_data(text)

    def submit_and_await(self, base_url: str, endpoint: str, data: List[Any], auth_token: Optional[str] = None) -> List[Any]:
        """Submit a job and block until the backend closes its result stream"""
        event_id = self.submit(base_url, endpoint, data, auth_token)
        result = self.fetch_result(base_url, endpoint, event_id, auth_token)
        if not isinstance(result, list):
            raise ProtocolError(f"Expected a list of results, got {type(result).__name__}")
        return result

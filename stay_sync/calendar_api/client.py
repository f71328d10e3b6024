"""
Client for the Google Calendar API, the remote side of the ledger sync.

Every request goes through an httplib2 transport with a socket timeout, so a
hung call fails after REMOTE_TIMEOUT_SECONDS instead of stalling the sync
cycle. Errors are raised to the caller; the sync pushers decide per item what
a failure means.
"""

import threading
import time
from datetime import date, timedelta
from typing import Any, Dict, Optional

import google_auth_httplib2
import httplib2
import structlog
from googleapiclient.discovery import build

from stay_sync.calendar_api.auth import load_credentials
from stay_sync.config import GOOGLE_OAUTH_PORT, GOOGLE_TOKEN_PATH, REMOTE_TIMEOUT_SECONDS
from stay_sync.metrics import remote_latency, remote_requests

logger = structlog.get_logger(__name__)


def build_event_body(day: date, title: str, description: str, color_id: str) -> Dict[str, Any]:
    """
    Build the all-day event resource for one ledger date.

    All-day events end on the following date (the end date is exclusive).
    "status": "confirmed" revives events that were cancelled remotely.
    """
    return {
        "summary": title,
        "description": description,
        "colorId": color_id,
        "status": "confirmed",
        "start": {"date": day.isoformat()},
        "end": {"date": (day + timedelta(days=1)).isoformat()},
    }


class GoogleCalendarClient:
    """
    Thin wrapper over the googleapiclient Calendar v3 service.

    The client starts disconnected; authenticate() loads credentials and builds
    the service. A single instance is shared by the sync worker and the API
    request threads for the lifetime of the application; one lock serializes
    authentication and every request on the shared httplib2 transport.

    Example:
        >>> client = GoogleCalendarClient()
        >>> if client.authenticate("credentials.json"):
        ...     event_id = client.create_event("primary", date(2025, 6, 1), "[FREE] - 80€", "", "6")
    """

    def __init__(
        self,
        token_path: str = GOOGLE_TOKEN_PATH,
        timeout: float = REMOTE_TIMEOUT_SECONDS,
        oauth_port: int = GOOGLE_OAUTH_PORT,
    ):
        self.token_path = token_path
        self.timeout = timeout
        self.oauth_port = oauth_port
        self._service: Optional[Any] = None
        self._credentials_path: Optional[str] = None
        self._lock = threading.Lock()

    def authenticate(self, credentials_path: str) -> bool:
        """
        Load credentials and build the Calendar service.

        Args:
            credentials_path: OAuth client secrets JSON

        Returns:
            bool: True if the service is ready, False on any auth failure
        """
        with self._lock:
            try:
                creds = load_credentials(credentials_path, self.token_path, self.oauth_port)
                http = google_auth_httplib2.AuthorizedHttp(
                    creds, http=httplib2.Http(timeout=self.timeout)
                )
                self._service = build("calendar", "v3", http=http, cache_discovery=False)
            except Exception as e:
                logger.exception(
                    "google_auth_failed", credentials_path=credentials_path, error=str(e)
                )
                self._service = None
                self._credentials_path = None
                return False

            self._credentials_path = credentials_path

        logger.info("google_auth_succeeded", credentials_path=credentials_path)
        return True

    def is_connected(self, credentials_path: Optional[str] = None) -> bool:
        """
        Check whether a service is ready, optionally for specific credentials.

        Args:
            credentials_path: If given, the session must have been built from it
        """
        if self._service is None:
            return False
        return credentials_path is None or credentials_path == self._credentials_path

    def _require_service(self) -> Any:
        if self._service is None:
            raise RuntimeError("Google Calendar client is not authenticated")
        return self._service

    def _execute(self, operation: str, request: Any) -> Any:
        start_time = time.time()
        try:
            with self._lock:
                response = request.execute()
        except Exception:
            remote_requests.labels(operation=operation, status="failure").inc()
            raise
        finally:
            remote_latency.labels(operation=operation).observe(time.time() - start_time)
        remote_requests.labels(operation=operation, status="success").inc()
        return response

    def create_event(
        self, calendar_id: str, day: date, title: str, description: str, color_id: str
    ) -> str:
        """
        Insert a new all-day event.

        Returns:
            str: Id of the created event

        Raises:
            googleapiclient.errors.HttpError: On API errors
            RuntimeError: If the response has no event id
        """
        service = self._require_service()
        body = build_event_body(day, title, description, color_id)
        created = self._execute(
            "create", service.events().insert(calendarId=calendar_id, body=body)
        )

        event_id = created.get("id") if created else None
        if not isinstance(event_id, str) or not event_id:
            raise RuntimeError("No event id in Google Calendar response.")

        logger.debug("remote_event_created", day=day.isoformat(), event_id=event_id)
        return event_id

    def update_event(
        self,
        calendar_id: str,
        event_id: str,
        day: date,
        title: str,
        description: str,
        color_id: str,
    ) -> None:
        """
        Replace an existing event.

        Raises:
            googleapiclient.errors.HttpError: If the event no longer exists or on API errors
        """
        service = self._require_service()
        body = build_event_body(day, title, description, color_id)
        self._execute(
            "update",
            service.events().update(calendarId=calendar_id, eventId=event_id, body=body),
        )
        logger.debug("remote_event_updated", day=day.isoformat(), event_id=event_id)

    def list_calendars(self) -> Dict[str, str]:
        """
        List the calendars of the connected account.

        Follows nextPageToken until all pages are read. The user's own name for
        a calendar (summaryOverride) wins over its original summary.

        Returns:
            Dict[str, str]: Calendar display name -> calendar id
        """
        service = self._require_service()
        calendars: Dict[str, str] = {}
        page_token: Optional[str] = None

        while True:
            page = self._execute(
                "list_calendars", service.calendarList().list(pageToken=page_token)
            )
            for entry in page.get("items", []):
                name = entry.get("summaryOverride") or entry.get("summary") or entry["id"]
                calendars[name] = entry["id"]

            page_token = page.get("nextPageToken")
            if not page_token:
                break

        return calendars

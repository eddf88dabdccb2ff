"""
Synchronous client for the Terraform Cloud / Enterprise v2 API.

Covers the handful of endpoints a configuration push needs: workspace lookup,
configuration-version creation and upload, run listing and run/workspace
status reads.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from tfe_push.core.api.models import ConfigurationVersion, Run, WorkspaceLock
from tfe_push.core.exceptions import (
    ApiRequestError,
    MalformedResponseError,
    UploadError,
)
from tfe_push.core.utils.http import get_authenticated_requests_session

log = logging.getLogger(__name__)

CONFIGURATION_VERSION_BODY = {"data": {"type": "configuration-version"}}


def _error_titles(body: Any) -> str:
    if not isinstance(body, dict):
        return ""
    titles = []
    for error in body.get("errors") or []:
        if isinstance(error, dict):
            titles.append(error.get("detail") or error.get("title") or str(error))
        else:
            titles.append(str(error))
    return "; ".join(titles)


class TFEClient:
    """
    Terraform Cloud / Enterprise API client.

    Requests carry no timeout: a hung call blocks until the process is
    interrupted.
    """

    def __init__(
        self,
        api_url: str,
        hostname: str,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.hostname = hostname
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = get_authenticated_requests_session(self.hostname)
        return self._session

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _request(
        self, method: str, path: str, body: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Issue an authenticated API call and return the decoded JSON body."""
        url = f"{self.api_url}{path}"
        log.debug(f"{method} {url}")
        if body is not None:
            log.debug(f"Request body: {json.dumps(body)}")

        try:
            response = self.session.request(method, url, json=body)
        except requests.RequestException as e:
            raise ApiRequestError(f"{method} {path} failed: {e}") from e

        log.debug(f"{method} {path} -> {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            detail = _error_titles(payload) or response.reason or "request failed"
            raise ApiRequestError(
                f"{method} {path} returned {response.status_code}: {detail}",
                status_code=response.status_code,
            )

        if not isinstance(payload, dict):
            raise MalformedResponseError(
                f"{method} {path} did not return a JSON object",
                status_code=response.status_code,
            )
        return payload

    def get_workspace_id(self, organization: str, workspace: str) -> str:
        path = f"/organizations/{organization}/workspaces/{workspace}"
        document = self._request("GET", path)
        try:
            workspace_id = document["data"]["id"]
        except (KeyError, TypeError) as e:
            raise MalformedResponseError(
                f"workspace {organization}/{workspace} response has no id"
            ) from e
        log.debug(f"Workspace {organization}/{workspace} is {workspace_id}")
        return workspace_id

    def create_configuration_version(self, workspace_id: str) -> ConfigurationVersion:
        """
        Create a configuration version to upload into.

        Raises:
            ApiRequestError: On transport or authorization failure
            MalformedResponseError: If the id or upload URL is missing
        """
        document = self._request(
            "POST",
            f"/workspaces/{workspace_id}/configuration-versions",
            CONFIGURATION_VERSION_BODY,
        )
        try:
            version = ConfigurationVersion.from_document(document)
        except (KeyError, TypeError, ValidationError) as e:
            raise MalformedResponseError(
                "configuration version response is missing its id or upload-url"
            ) from e
        log.debug(f"Created configuration version {version.id}")
        return version

    def upload_archive(self, upload_url: str, archive_path: Path) -> None:
        """
        PUT the archive bytes to the configuration version's upload URL.

        The URL is pre-authorized, so the plain ``requests.put`` is used
        instead of the authenticated session.

        Raises:
            UploadError: On any transport error or non-success status
        """
        size = archive_path.stat().st_size
        log.debug(f"Uploading {archive_path.name} ({size} bytes)")
        headers = {"Content-Type": "application/octet-stream"}
        try:
            with archive_path.open("rb") as fh:
                resp = requests.put(upload_url, data=fh, headers=headers)
            resp.raise_for_status()
        except (requests.RequestException, OSError) as e:
            raise UploadError(f"archive upload failed: {e}") from e
        log.debug(f"Upload finished with status {resp.status_code}")

    def list_runs(self, workspace_id: str) -> List[Run]:
        document = self._request("GET", f"/workspaces/{workspace_id}/runs")
        try:
            return [Run.from_resource(resource) for resource in document["data"]]
        except (KeyError, TypeError, ValidationError) as e:
            raise MalformedResponseError("run listing has an unexpected shape") from e

    def get_run(self, run_id: str) -> Run:
        document = self._request("GET", f"/runs/{run_id}")
        try:
            return Run.from_resource(document["data"])
        except (KeyError, TypeError, ValidationError) as e:
            raise MalformedResponseError(f"run {run_id} response has no status") from e

    def get_workspace_lock(self, workspace_id: str) -> WorkspaceLock:
        document = self._request("GET", f"/workspaces/{workspace_id}")
        try:
            return WorkspaceLock.from_document(document)
        except (KeyError, TypeError, ValidationError) as e:
            raise MalformedResponseError(
                f"workspace {workspace_id} response has no lock state"
            ) from e

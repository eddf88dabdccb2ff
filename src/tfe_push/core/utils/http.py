"""HTTP utilities for Terraform Cloud / Enterprise API communication."""

import requests

from tfe_push.core.credentials import get_api_token
from tfe_push.core.exceptions import CredentialsError

JSONAPI_CONTENT_TYPE = "application/vnd.api+json"


def get_authenticated_requests_session(hostname: str) -> requests.Session:
    """Create requests Session with API authentication.

    Includes the bearer token for ``hostname`` and the JSON:API content
    type on every request. Authentication itself is not negotiated; the
    token is read from the environment or the Terraform CLI credentials
    file and sent as is.

    Args:
        hostname: Service host the token is looked up for

    Returns:
        Configured requests.Session with Authorization header

    Raises:
        CredentialsError: If no token is available for ``hostname``

    Example:
        import contextlib
        with contextlib.closing(get_authenticated_requests_session(host)) as session:
            response = session.get(url)
    """
    token = get_api_token(hostname)
    if not token:
        raise CredentialsError(hostname)

    session = requests.Session()
    session.headers["Authorization"] = f"Bearer {token}"
    session.headers["Content-Type"] = JSONAPI_CONTENT_TYPE
    session.headers["Accept"] = JSONAPI_CONTENT_TYPE

    return session

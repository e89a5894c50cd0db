"""Authentication helpers for Gmail API."""

import logging

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build, Resource
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt

from gmail_subscription_manager import constants
from gmail_subscription_manager.exceptions import AuthError

logger = logging.getLogger(__name__)


def _invalidate_cached_token(retry_state: RetryCallState) -> None:
    """Drop the cached token so the next attempt starts from scratch."""
    logger.warning(
        "Cached credential was rejected (%s); discarding %s and retrying once",
        retry_state.outcome.exception() if retry_state.outcome else "unknown error",
        constants.TOKEN_PATH,
    )
    constants.TOKEN_PATH.unlink(missing_ok=True)


@retry(
    retry=retry_if_exception_type(RefreshError),
    stop=stop_after_attempt(2),
    before_sleep=_invalidate_cached_token,
    reraise=True,
)
def _acquire_credentials() -> Credentials:
    creds: Credentials | None = None

    if constants.TOKEN_PATH.exists():
        creds = Credentials.from_authorized_user_file(str(constants.TOKEN_PATH), constants.SCOPES)

    if creds and creds.expired and creds.refresh_token:
        creds.refresh(Request())
    elif not creds or not creds.valid:
        if not constants.CREDENTIALS_PATH.exists():
            raise AuthError(
                f"Credentials file not found at {constants.CREDENTIALS_PATH}.\n"
                "Download your OAuth client credentials from the Google Cloud Console "
                "and save them as:\n"
                f"  {constants.CREDENTIALS_PATH}"
            )
        flow = InstalledAppFlow.from_client_secrets_file(
            str(constants.CREDENTIALS_PATH), constants.SCOPES
        )
        creds = flow.run_local_server(port=0)

    constants.TOKEN_PATH.write_text(creds.to_json())
    return creds


def get_credentials() -> Credentials:
    """Return valid Gmail credentials.

    Loads the cached token from TOKEN_PATH if available and refreshes it
    when expired. If no token exists an OAuth browser flow is launched
    (requires credentials.json at CREDENTIALS_PATH). A rejected cached
    token is discarded and acquisition is retried exactly once.

    Raises AuthError when no usable credential can be obtained.
    """
    constants.CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    try:
        return _acquire_credentials()
    except RefreshError as exc:
        raise AuthError(f"Could not refresh Gmail credentials: {exc}") from exc


def get_gmail_service() -> Resource:
    """Return an authenticated Gmail API service object."""
    return build("gmail", "v1", credentials=get_credentials())


def check_auth() -> bool:
    """Test whether Gmail authentication is working.

    Returns True when the service can reach the Gmail API, False otherwise.
    Prints human-readable status messages.
    """
    try:
        service = get_gmail_service()
        profile = service.users().getProfile(userId="me").execute()
        print(f"Authenticated as {profile['emailAddress']}")
        return True
    except Exception as exc:  # noqa: BLE001
        print(f"Authentication failed: {exc}")
        return False

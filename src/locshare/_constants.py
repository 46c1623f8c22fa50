"""Internal constants shared across the library."""

BASE_URL = "http://localhost:5000"
PAGE_URL = "http://localhost:3000/"
USER_AGENT = "locshare/0"

LOCATION_ID_PARAM = "locationId"
NEW_LOCATION_EVENT = "newLocation"
LOCATIONS_ENDPOINT = "/api/locations"

# ------------------------------------------------------------------
# Map viewport
# ------------------------------------------------------------------

DEFAULT_CENTER: tuple[float, float] = (51.505, -0.09)
DEFAULT_ZOOM = 13

# ------------------------------------------------------------------
# Placeholder substituted when the snapshot cannot be fetched
# ------------------------------------------------------------------

FALLBACK_ID = "fallback"
FALLBACK_NAME = "Fallback User"

# ------------------------------------------------------------------
# User-visible messages
# ------------------------------------------------------------------

MSG_SNAPSHOT_UNREACHABLE = "Failed to fetch locations. Is the backend running at {base_url}?"
MSG_STREAM_UNREACHABLE = "Cannot connect to backend. Please ensure the server is running on {base_url}"
MSG_NAME_REQUIRED = "Please enter a username"
MSG_NO_GEOLOCATION = "Geolocation is not supported by this browser."
MSG_CAPTURE_FAILED = "Error getting location: {reason}"
MSG_SHARE_UNREACHABLE = "Error sharing location. Is the backend running?"

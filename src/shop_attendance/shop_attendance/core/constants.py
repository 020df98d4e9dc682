"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import timedelta

DEFAULT_SHOP_RADIUS_METERS = 50
GPS_MIN_RADIUS_METERS = 10_000
REMOTE_REVIEW_THRESHOLD_METERS = 100

EARTH_RADIUS_METERS = 6_371_000

LOCATION_TIMEOUT_SECONDS = 15
GEOCODER_TIMEOUT_SECONDS = 5
LOCATION_UNAVAILABLE = "Location unavailable"

MAX_PIN_ATTEMPTS = 5
PIN_LOCKOUT = timedelta(minutes=15)
OWNER_UNLOCK_DURATION = timedelta(minutes=30)
DEFAULT_OWNER_PIN = "000000"

CONSENT_POLICY_VERSION = "1.0"

DEFAULT_HISTORY_LIMIT = 30

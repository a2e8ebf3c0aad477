"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

ACTIVE_COURSE_STATUSES = ("Active", "Published", "Running", "Live", "Open")
ACTIVE_COHORT_STATUSES = ("Active", "Published", "Running", "Open", "Enrolled")

DEFAULT_SESSION_START = "09:00"
DEFAULT_SESSION_END = "10:00"
DEFAULT_SESSION_LOCATION = "TBA"
DEFAULT_SESSION_CAPACITY = 20
DEFAULT_INSTRUCTOR_NAME = "Unknown Instructor"
DEFAULT_HORIZON_DAYS = 90

DEFAULT_COHORT_DAYS = (1, 2, 3, 4, 5)
DEFAULT_COHORT_CAPACITY = 30

ACADEMY_ID_PREFIX = "AC"
USER_CODE_PREFIX = "AD"
CODE_DIGITS = 6
COURSE_ID_PREFIX = "COURSE"
COHORT_ID_PREFIX = "COH"
ENTITY_ID_DIGITS = 4

MAX_UPLOAD_BYTES = 2 * 1024 * 1024
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/jpg", "image/svg+xml")
UPLOAD_KEY_PREFIX = "business-registration"

MIN_PASSWORD_LENGTH = 6
VERIFICATION_CODE_DIGITS = 6

PLANNED_LEAVE_NOTE = "Planned leave"
DEFAULT_MODIFIED_BY = "System"

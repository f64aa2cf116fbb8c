"""
Application-wide constants.

Values here are part of the API contract with the browser front end and
are not meant to be tuned per deployment (tunables live in ``config``).
"""

PROJECT_NAME = "Thinky"
BRAND_NAME = "Thinky"
API_PREFIX = "/api"

# Roles
ROLE_STUDENT = "student"
ROLE_MODERATOR = "moderator"
ROLE_ADMIN = "admin"
ASSIGNABLE_ROLES = (ROLE_ADMIN, ROLE_MODERATOR, ROLE_STUDENT)

# Token lifetimes (minutes)
EMAIL_VERIFICATION_TTL_MINUTES = 60 * 24
PASSWORD_RESET_TTL_MINUTES = 60

# Passwords
MIN_PASSWORD_LENGTH = 6

# Pagination
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 200
DEFAULT_MESSAGE_LIMIT = 100
DEFAULT_INBOX_LIMIT = 200
MAX_MESSAGE_LIMIT = 1000

# Chat
MAX_MESSAGE_LENGTH = 1000
MAX_CHAT_WARNINGS = 3
CHAT_MUTE_MINUTES = 60
MESSAGE_BLACKLIST = ("badword1", "badword2", "slur")
PRIVATE_CHAT = "private"
GENERAL_CHAT = "general"

# Presence
ONLINE_WINDOW_MINUTES = 5

# Moderation
PERMANENT_YEARS = 100
PERMANENT_THRESHOLD_YEARS = 50

DEFAULT_REACTION = "heart"
EPOCH_ISO = "1970-01-01T00:00:00Z"

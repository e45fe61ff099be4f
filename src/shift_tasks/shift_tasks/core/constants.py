"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOKEN_HOURS = 24
MIN_PASSWORD_LENGTH = 6
DEFAULT_RANKING_PERIOD = "week"

# Static station list seeded on first start (id, name).
DEFAULT_POSITIONS = (
    ("pos-1", "San Matias"),
    ("pos-2", "Alconera"),
    ("pos-3", "Moraleja"),
    ("pos-4", "Nava I"),
    ("pos-5", "Nava II"),
)

BOOTSTRAP_ADMIN_ID = "admin-1"
BOOTSTRAP_ADMIN_NAME = "Administrador"
BOOTSTRAP_ADMIN_POSITION = "pos-4"

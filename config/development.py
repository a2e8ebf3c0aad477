import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "academy_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Local disk storage for onboarding images, served back under /uploads/
UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(os.getcwd(), "uploads"))
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:5000")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(2 * 1024 * 1024)))

# Used when a course has no start/end date
SCHEDULE_HORIZON_DAYS = int(os.getenv("SCHEDULE_HORIZON_DAYS", "90"))

# Create the academy tables on startup; schema.sql only uses CREATE ... IF NOT EXISTS
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Load seed.sql plus the demo logins
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

import os
from urllib.parse import quote_plus

from dotenv import load_dotenv

# Load .env
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# JWT
JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

# Database: explicit URL first, then Azure SQL settings, then a local SQLite file
DB_SERVER = os.getenv("DB_SERVER")
DB_PORT = os.getenv("DB_PORT", "1433")
DB_USER = os.getenv("DB_USER")
DB_PASS = os.getenv("DB_PASS")
DB_NAME = os.getenv("DB_NAME")

if os.getenv("DATABASE_URL"):
    DATABASE_URL = os.getenv("DATABASE_URL")
elif DB_SERVER:
    DATABASE_URL = (
        f"mssql+pymssql://{quote_plus(DB_USER or '')}:{quote_plus(DB_PASS or '')}"
        f"@{DB_SERVER}:{DB_PORT}/{DB_NAME}"
    )
else:
    DATABASE_URL = "sqlite:///./todre.db"

SQL_ECHO = _env_bool("SQL_ECHO")
AUTO_CREATE_TABLES = _env_bool("AUTO_CREATE_TABLES", "true")

# HTTP
CORS_ORIGINS = [o for o in os.getenv("CORS_ORIGINS", "").split(",") if o]
PORT = int(os.getenv("PORT", 10000))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Lifecycle behaviour
RESTORE_END_DATE_ON_TERMINATION_REJECT = _env_bool("RESTORE_END_DATE_ON_TERMINATION_REJECT")

# Ministry rent map
MINISTRY_AREAS = [
    a.strip() for a in os.getenv("MINISTRY_AREAS", "Mirpur,Gulshan,Dhanmondi").split(",") if a.strip()
]

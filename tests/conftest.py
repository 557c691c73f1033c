import os
import tempfile

# Settings are read at import time, so point them at throwaway locations first
_TMP_DIR = tempfile.mkdtemp(prefix="salon-booking-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP_DIR}/app.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_TMP_DIR, "uploads"))
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")
for _name in ("R2_ACCOUNT_ID", "R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY", "ADMIN_EMAIL", "ADMIN_PASSWORD"):
    os.environ.pop(_name, None)

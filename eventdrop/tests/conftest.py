import os
import tempfile

# Settings are read once at import time, so pin them before any eventdrop import.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["POSTER_STORAGE_DIR"] = tempfile.mkdtemp(prefix="eventdrop-posters-")
os.environ["JWT_SECRET"] = "test-secret"
os.environ["INTERNAL_API_KEY"] = "internal-test-key"
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("RESEND_API_KEY", None)

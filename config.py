import os
from dotenv import load_dotenv

load_dotenv()

FLASK_HOST = os.environ.get("FLASK_HOST", "localhost")
FLASK_PORT = int(os.environ.get("FLASK_PORT", 5000))
DEBUG = os.environ.get("DEBUG", "").lower() in ("1", "true", "yes")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
CORS_ALLOW = os.environ.get("CORS_ALLOW", "http://localhost:3000")

# Ledger
LEDGER_PATH = os.environ.get("LEDGER_PATH", "./data/changes.json")

# Upstream descriptor tree
MONITOR_REPO_URL = os.environ.get("MONITOR_REPO_URL", "")
MONITOR_REPO_PATH = os.environ.get("MONITOR_REPO_PATH", "./ai-provider-monitor")
MONITOR_CHANGES_DIR = os.environ.get("MONITOR_CHANGES_DIR", "changes")

REQUEST_TIMEOUT = float(os.environ.get("REQUEST_TIMEOUT", 30))

import os

# ----------------------------
# Retrieval
# ----------------------------
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
LOG_BUCKET = os.getenv("LOGSTATS_BUCKET", "blueapron-data-challenge-logs")

# Fetch logs over HTTP(S) or from a local directory instead of S3:
#   LOGSTATS_BASE_URL=https://logs.example.com/access
#   LOGSTATS_LOG_DIR=/var/log/archive
LOG_BASE_URL = os.getenv("LOGSTATS_BASE_URL", "").strip()
LOG_DIR = os.getenv("LOGSTATS_LOG_DIR", "").strip()
HTTP_TIMEOUT = float(os.getenv("LOGSTATS_HTTP_TIMEOUT", "30"))

# ----------------------------
# Processing
# ----------------------------
STRICT = os.getenv("LOGSTATS_STRICT", "0") == "1"
LOG_LEVEL = os.getenv("LOGSTATS_LOG_LEVEL", "info")

# ----------------------------
# HTTP service
# ----------------------------
HOST = os.getenv("LOGSTATS_HOST", "127.0.0.1")
PORT = int(os.getenv("LOGSTATS_PORT", "7000"))
RELOAD = os.getenv("LOGSTATS_RELOAD", "0") == "1"
TOKEN = os.getenv("LOGSTATS_TOKEN", "")
ACCESS_LOG_PATH = os.getenv("LOGSTATS_ACCESS_LOG", "").strip()

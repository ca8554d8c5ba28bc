import os
from dotenv import load_dotenv

load_dotenv()

OUTPUT_DIR = os.getenv("OUTPUT_DIR", "/tmp/payout_reports")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
MAX_SUBMISSIONS_PER_CREATOR = int(os.getenv("MAX_SUBMISSIONS_PER_CREATOR", "10"))

import logging
import os

from dotenv import load_dotenv
from pymongo import MongoClient

load_dotenv()

logger = logging.getLogger(__name__)

MONGO_URI = os.getenv("MONGODB_URI")
DB_NAME = os.getenv("DB_NAME", "dietapp")
ASSESSMENTS_COLLECTION = "assessments"

# Initialize database connection with error handling
try:
    if not MONGO_URI:
        raise ValueError("MONGODB_URI environment variable not set")

    client = MongoClient(MONGO_URI, serverSelectionTimeoutMS=5000, tz_aware=True)
    db = client[DB_NAME]

    # Test connection
    client.admin.command("ping")
    logger.info(f"Database connection successful: {DB_NAME}")
except Exception as e:
    logger.warning(f"Database connection failed: {e}")
    client = None
    db = None

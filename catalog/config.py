from dotenv import load_dotenv
import os

load_dotenv()

# API Keys
FIRESTORE_PROJECT_ID = os.getenv("FIRESTORE_PROJECT_ID", "")
FIRESTORE_API_KEY = os.getenv("FIRESTORE_API_KEY")

# Runtime parameters
REMOTE_PAGE_SIZE = int(os.getenv("REMOTE_PAGE_SIZE", "1000"))
CONCURRENCY = int(os.getenv("CONCURRENCY", "20"))
REMOTE_TIMEOUT = float(os.getenv("REMOTE_TIMEOUT", "60"))
REACHABILITY_TIMEOUT = float(os.getenv("REACHABILITY_TIMEOUT", "3"))
SEARCH_THRESHOLD = 80
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# URLs
FIRESTORE_BASE_URL = os.getenv("FIRESTORE_BASE_URL", "https://firestore.googleapis.com/v1")
REACHABILITY_HOSTS = [
    ("8.8.8.8", 53),
    ("1.1.1.1", 53),
    ("208.67.222.222", 53),
]

# File names
DEVICE_STORE_PATH = os.getenv("DEVICE_STORE_PATH", "catalog_store.sqlite3")

# Remote collections
DATE_IDEAS_COLLECTION = "date_ideas"
GIFT_IDEAS_COLLECTION = "gift_ideas"
BUSINESSES_COLLECTION = "businesses"
PRODUCTS_COLLECTION = "products"

# Device store keys
DATE_IDEAS_CACHE_KEY = "date_ideas_cache"
GIFT_IDEAS_CACHE_KEY = "gift_ideas_cache"
BUSINESSES_CACHE_KEY = "businesses_cache"
PRODUCTS_CACHE_KEY = "products_cache"
FAVORITES_KEY = "favorites"
COMPLETED_IDEAS_KEY = "completedIdeas"
COMPLETED_BUSINESSES_KEY = "completedBusinesses"
META_SUFFIX = "_meta"

"""
Centralized constants for the social corpus normalizer.
All magic numbers live here.
"""

# ===========================================
# LANGUAGES
# ===========================================
DEFAULT_TARGET_LANGUAGE = "en"
UNKNOWN_LANGUAGE = "unknown"
NATIVE_PROVIDER = "native"

# ===========================================
# TRANSLATION PROVIDERS
# ===========================================
DEFAULT_PROVIDERS = ["deepl", "google"]

DEEPL_API_URL = "https://api.deepl.com"
DEEPL_FREE_API_URL = "https://api-free.deepl.com"
DEEPL_BATCH_SIZE = 50                 # texts per /v2/translate request
DEEPL_MAX_TEXT_LENGTH = 30000         # characters per text

GOOGLE_API_URL = "https://translation.googleapis.com"
GOOGLE_BATCH_SIZE = 128               # segments per v2 request
GOOGLE_MAX_TEXT_LENGTH = 30000

# ===========================================
# RETRY / CONCURRENCY
# ===========================================
TRANSLATION_MAX_ATTEMPTS = 3          # total attempts per batch
TRANSLATION_RETRY_BASE_DELAY = 1.0    # seconds, doubled per attempt
TRANSLATION_RETRY_MAX_DELAY = 30.0
TRANSLATION_RETRY_JITTER = 0.1        # fraction of the delay
REQUEST_TIMEOUT_SECONDS = 30.0
PIPELINE_MAX_CONCURRENCY = 4

# ===========================================
# RECONCILIATION
# ===========================================
LOW_AGREEMENT_THRESHOLD = 0.5

# ===========================================
# INGESTION
# ===========================================
CSV_DEFAULT_ENCODING = "utf-8"
CSV_DEFAULT_DELIMITER = ","

# ===========================================
# LOGGING
# ===========================================
LOG_LEVEL = 'INFO'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = 'logs/corpus_normalizer.log'
LOG_MAX_SIZE_MB = 10
LOG_BACKUP_COUNT = 5

import os

# Logs
LOG_STDOUT = os.getenv("LOG_STDOUT", "").lower() == "true"
LOG_FILE = os.getenv("LOG_FILE", "logs/denomscope.log")
MIN_LOG_LEVEL = os.getenv("MIN_LOG_LEVEL", "DEBUG")

# Chain REST (LCD) endpoint
CHAIN_REST_URI = os.getenv("CHAIN_REST_URI", "http://localhost:1317")
CHAIN_REST_N_TRIES = int(os.getenv("CHAIN_REST_N_TRIES", "1"))
# Known chain whose REST endpoint is used instead of CHAIN_REST_URI
CHAIN_ID = os.getenv("CHAIN_ID")

# PostgREST indexer API
POSTGREST_URI = os.getenv("POSTGREST_URI", "https://yaci-explorer-apis.fly.dev")

# HTTP
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "5.0"))
MAX_CONCURRENT_REQUESTS = int(os.getenv("MAX_CONCURRENT_REQUESTS", "50"))

# Denom resolution
DENOM_CACHE_PATH = os.getenv("DENOM_CACHE_PATH", "resources/cache/ibc_denom_traces.json")
ENRICH_IBC_CHANNELS = os.getenv("ENRICH_IBC_CHANNELS", "true").lower() == "true"

# Cache
DEFAULT_CACHE_TTL = float(os.getenv("DEFAULT_CACHE_TTL", "5.0"))
CHANNEL_CACHE_TTL = float(os.getenv("CHANNEL_CACHE_TTL", "3600"))  # Channels can be updated; 1h ttl
CHANNEL_CACHE_SIZE = int(os.getenv("CHANNEL_CACHE_SIZE", "1000"))
INDEXER_CACHE_TTL = float(os.getenv("INDEXER_CACHE_TTL", "300"))

# Debug / optimization
CACHE_STATS = os.getenv("CACHE_STATS", "").lower() == "true"
CACHE_LOG_LEVEL = os.getenv("CACHE_LOG_LEVEL", "INFO")

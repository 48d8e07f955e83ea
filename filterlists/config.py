"""
Centralized configuration — all env vars and constants.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Redis (metrics sink) ──────────────────────────────────────────────────────
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
METRICS_PREFIX = os.getenv('METRICS_PREFIX', 'filterlists')

# ── PostgreSQL ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')

# ── Filter definitions ────────────────────────────────────────────────────────
FILTERS_DIR = os.getenv(
    'FILTERS_DIR',
    os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'filters'),
)

# ── Sessions ─────────────────────────────────────────────────────────────────
SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-change-me')

# ── Serving domain ───────────────────────────────────────────────────────────
# The official instance always advertises MAIN_DOMAIN in the install prompt
# snippet; self-hosted instances use the request host.
OFFICIAL_INSTANCE = os.getenv('OFFICIAL_INSTANCE', '').lower() in ('1', 'true', 'yes')
MAIN_DOMAIN = os.getenv('MAIN_DOMAIN', 'filterlists.example')

# ── Lists ────────────────────────────────────────────────────────────────────
DEFAULT_LIST_TITLE = 'My filters'
CUSTOM_RULES_FILTER_NAME = 'custom-rules'
LIST_EXPIRES = '12 hours'

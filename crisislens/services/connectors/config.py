"""
Connector configuration for CrisisLens.

Contains endpoints, per-source deadlines, query terms and rate limiting for
the shipped source connectors.
"""
import os

# Per-source deadlines (seconds); the aggregator races each fetch against these
REDDIT_TIMEOUT_SECONDS = float(os.getenv("CRISISLENS_REDDIT_TIMEOUT", "6"))
NEWSAPI_TIMEOUT_SECONDS = float(os.getenv("CRISISLENS_NEWSAPI_TIMEOUT", "8"))
RELIEFWEB_TIMEOUT_SECONDS = float(os.getenv("CRISISLENS_RELIEFWEB_TIMEOUT", "10"))
STATIC_TIMEOUT_SECONDS = 5.0

USER_AGENT = os.getenv("CRISISLENS_USER_AGENT", "CrisisLens/1.0")

# Reddit settings
REDDIT_BASE_URL = "https://www.reddit.com/r"
REDDIT_SUBREDDITS = [
    "worldnews",
    "news",
    "disasters",
    "EmergencyManagement",
]
REDDIT_SEARCH_TERMS = ["earthquake", "flood", "wildfire"]
REDDIT_POSTS_PER_SUB = 8
REDDIT_SELFTEXT_CHARS = 300

# NewsAPI settings
NEWS_API_KEY = os.getenv("NEWS_API_KEY", "")
NEWSAPI_BASE_URL = "https://newsapi.org/v2"
NEWSAPI_KEYWORDS = ["earthquake", "flood", "hurricane", "wildfire", "tsunami"]
NEWSAPI_PAGE_SIZE = 15

# ReliefWeb settings
RELIEFWEB_API_BASE = "https://api.reliefweb.int/v1"
RELIEFWEB_APPNAME = os.getenv("RELIEFWEB_APPNAME", "crisislens")
RELIEFWEB_MAX_REPORTS = 20
RELIEFWEB_DAYS_BACK = 3
RELIEFWEB_REPORT_TYPES = [
    "Situation Report",
    "Flash Update",
    "News and Press Release",
]

# Max characters of text kept per raw event
MAX_TEXT_CHARS = 500

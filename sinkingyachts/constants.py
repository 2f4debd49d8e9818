"""Centralized constants for sinkingyachts.

Service endpoints, default intervals and the platform allow-list used across
the client, the refresher and the live feed.
"""

API_URL = "https://phish.sinking.yachts"
API_VERSION = 2
FEED_URL = "wss://phish.sinking.yachts/feed"

IDENTITY_PREFIX = "sinkingyachts-python"
USER_AGENT = "sinkingyachts-python/1.0"

# Seconds
REFRESH_INTERVAL = 15 * 60
RECONNECT_DELAY = 10
REQUEST_TIMEOUT = 30.0
CONNECT_TIMEOUT = 30.0
FEED_HEARTBEAT = 30.0  # Ping interval; a missed pong drops a half-open feed connection

DEFAULT_CACHE_PERIOD_HOURS = 3

# Recent-changes lookback accepted by the API (7 days)
MAX_RECENT_SECONDS = 604800

# Official Discord, Steam, Roblox and GitHub domains. Exact host match only,
# subdomains are not covered.
OFFICIAL_DOMAINS: frozenset[str] = frozenset(
    {
        "discord.com",
        "discord.gg",
        "discordapp.com",
        "discordapp.net",
        "discord.media",
        "discordstatus.com",
        "steamcommunity.com",
        "steamgames.com",
        "steampowered.com",
        "valve.net",
        "valvesoftware.com",
        "roblox.com",
        "www.roblox.com",
        "github.com",
        "githubusercontent.com",
        "raw.githubusercontent.com",
    }
)


def is_official_domain(domain: str) -> bool:
    """Return True if the host is one of the always-safe platform domains."""
    return domain in OFFICIAL_DOMAINS

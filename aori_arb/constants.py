"""
Aori protocol constants.
Endpoints, Seaport domain values and order defaults.
"""

# Websocket endpoints
REQUEST_URL = "wss://api.beta.order.aori.io"
MARKET_FEED_URL = "wss://beta.feed.aori.io"

# JSON-RPC
JSONRPC_VERSION = "2.0"
METHOD_PREFIX = "aori_"

# Seaport settlement contract
SEAPORT_NAME = "Seaport"
CURRENT_SEAPORT_VERSION = "1.5"
CURRENT_SEAPORT_ADDRESS = "0x00000000000000ADc04C56Bf30aC9d3c0aAF14dC"

# Order defaults
DEFAULT_ORDER_ADDRESS = "0xeA2b4e7F02b859305093f9F4778a19D66CA176d5"  # Aori zone
DEFAULT_ZONE_HASH = "0x" + "00" * 32
DEFAULT_CONDUIT_KEY = "0x" + "00" * 32
DEFAULT_DURATION_MS = 86_400_000  # 24 hours
DEFAULT_SEAT_ID = "0"

# Free-text acknowledgement sent on the feed after subscribeOrderbook
SUBSCRIBED_SENTINEL = "Subscribed to orderbook updates"
SUBSCRIBED_MESSAGE = "Subscribed to the Aori orderbook feed."

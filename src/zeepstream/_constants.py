"""Internal constants shared across the library."""

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080

# Wire discriminator values for the ``cmd`` field.
CMD_ACTION = "ACTION"
CMD_STATE_REQUEST = "STATE_REQUEST"

# Analog value above which a momentary button counts as held.
PRESS_THRESHOLD = 0.5

DEFAULT_BROADCAST_INTERVAL = 1.0
DEFAULT_QUEUE_MAXLEN = 256
DEFAULT_TICK_RATE = 50.0

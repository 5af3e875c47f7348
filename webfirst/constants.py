"""webfirst constants."""

# Default assertion timeout when neither the call nor expect() sets one.
DEFAULT_EXPECT_TIMEOUT_MS = 5_000

# Pauses between observations; the last entry repeats.
DEFAULT_POLL_INTERVALS_MS = (0, 100, 250, 500, 1_000)

# Upper bound for a single engine round-trip while polling.
DEFAULT_PROBE_TIMEOUT_MS = 1_000

ZERO_WIDTH_SPACE = "\u200b"

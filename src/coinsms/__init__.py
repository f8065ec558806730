"""CoinSMS: prepaid SMS sending backed by a coin balance."""

__version__ = "1.0.0"

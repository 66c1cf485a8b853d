from streetsafety.client.feed_client import CrimeFeedCache, CrimeFeedClient  # noqa

__all__ = ["CrimeFeedCache", "CrimeFeedClient"]

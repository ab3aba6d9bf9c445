"""Infrastructure: settings, logging, exceptions and caching."""

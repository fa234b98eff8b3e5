"""Finance tracker REST API."""

"""Application layer: ports and the services that compose them."""

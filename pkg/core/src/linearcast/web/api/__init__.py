"""API routers mounted by :func:`linearcast.web.server.create_app`."""

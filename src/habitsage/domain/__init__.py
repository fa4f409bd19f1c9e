"""Domain layer: storage contracts the services depend on."""

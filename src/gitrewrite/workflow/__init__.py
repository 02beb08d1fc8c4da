"""Operation lifecycle: controller, transition graph and refresh."""

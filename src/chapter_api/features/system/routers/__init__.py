"""System routers."""

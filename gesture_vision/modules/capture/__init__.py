"""Camera capture and frame preparation."""

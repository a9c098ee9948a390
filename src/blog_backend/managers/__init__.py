"""Resource managers: logging and image uploads."""

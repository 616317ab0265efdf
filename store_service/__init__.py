"""Products and shopping carts over flat JSON collections."""

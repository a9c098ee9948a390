"""Business logic of the blog."""

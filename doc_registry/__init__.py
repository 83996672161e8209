"""Document registry service for collaborative editing rooms."""

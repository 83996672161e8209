"""Core infrastructure: database, authentication, security and errors."""

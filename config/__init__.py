"""Configuration for the DuoDebate client."""

"""Configuration, logging and time helpers shared across inkbase."""

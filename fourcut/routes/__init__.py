"""HTTP routes exposing the album services."""

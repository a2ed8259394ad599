"""HTTP API exposing the reconcilers."""

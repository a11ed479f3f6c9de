"""Command line interface for backpropnets."""

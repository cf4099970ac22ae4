"""Utilities package for the restaurant-costing application."""

"""Airframe data generators and recordings."""

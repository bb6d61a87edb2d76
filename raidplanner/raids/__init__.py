"""Raid lifecycle, attendance and composition engine."""

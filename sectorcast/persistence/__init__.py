"""Atomic batch persistence of forecasts and the alerts derived from them."""

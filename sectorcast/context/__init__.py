"""
Contextual signal gathering for demand forecasts.

registry   -- regions a forecast may target, with coordinates and baselines
providers  -- the labelled async provider abstraction shared by all tiers
live       -- live external API tier (Open-Meteo weather, NewsAPI headlines)
synthesized-- model-estimated tier
static     -- deterministic seeded fallback tier
resolver   -- first-success-wins walk over a signal's tier chain
aggregator -- concurrent fan-out over all signals a sector needs
"""

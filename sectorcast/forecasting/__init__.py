"""Sector demand forecasting: prompt construction, inference, normalization, orchestration."""

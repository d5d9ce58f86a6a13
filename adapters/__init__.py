"""Provider adapters normalizing native results into canonical records."""

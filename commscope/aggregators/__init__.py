"""commscope/aggregators - per-partner and per-platform aggregation."""

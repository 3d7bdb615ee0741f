"""commscope/exporters - record shaping and xlsx output."""

"""commscope/models - shared record types."""

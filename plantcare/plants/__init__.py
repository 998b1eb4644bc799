"""Plants module - care steps, plant aggregate and due-date engine."""

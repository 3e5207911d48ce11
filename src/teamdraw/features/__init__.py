"""Feature slices exposed by the web and terminal surfaces."""

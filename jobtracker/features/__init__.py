"""Feature packages built on the jobtracker core."""

"""Domain logic for metrics buckets, series reconstruction and reports."""

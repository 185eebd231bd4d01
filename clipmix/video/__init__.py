"""Video segmentation, deduplication, sampling and concatenation."""

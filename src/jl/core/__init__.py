"""Record normalization and rendering pipeline."""

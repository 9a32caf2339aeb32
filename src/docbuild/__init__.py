"""Per-document page build pipeline."""

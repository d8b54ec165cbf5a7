"""Smart-reply generation pipeline."""

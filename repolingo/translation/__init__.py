"""Translation engines and language detection."""

"""Configuration models and loaders for jsl10n."""

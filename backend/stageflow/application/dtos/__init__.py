"""Request and response models for the scheduling API."""

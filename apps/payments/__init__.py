"""Payment gateway integration: verifies webhook callbacks and confirms booking payments."""

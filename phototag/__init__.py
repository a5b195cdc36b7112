"""Photo tagging service: links enrolled identities to the photos they appear in."""

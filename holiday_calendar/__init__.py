"""Company holiday calendar backend with external holiday provider sync."""

"""HTTP adapter serving the EV dashboard views as JSON."""

"""HTTP routes exposed by the web application."""

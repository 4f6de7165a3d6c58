"""Service layer: notifier implementations and the command-line front end."""

"""SwitchBot Bridge services."""

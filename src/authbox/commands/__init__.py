"""Built-in ``authbox`` sub-commands."""

"""Services package - data access and view-model assembly."""

from .connection import Storage, metadata, create_tables, row_to_dict

__all__ = ["Storage", "metadata", "create_tables", "row_to_dict"]

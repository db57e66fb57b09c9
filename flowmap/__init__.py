"""flowmap - layered fund-flow hierarchy builder and diagram layout."""

__version__ = "0.1.0"

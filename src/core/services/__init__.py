"""Services orchestrating the domain (dispatch, resolution)."""

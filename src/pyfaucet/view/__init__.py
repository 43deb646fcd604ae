from .projection import FaucetView, ViewState, project

__all__ = ["FaucetView", "ViewState", "project"]
